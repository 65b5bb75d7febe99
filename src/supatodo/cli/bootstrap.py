# src/supatodo/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- picks the Backend Service implementation (Supabase, or offline demo),
- wires it into AppState and the controllers (TodoApp).
"""

from __future__ import annotations

import logging

from ..backend.offline import OfflineBackend
from ..backend.supabase_client import SupabaseBackend
from ..config import get_settings
from ..core.app import TodoApp
from ..core.ports import Backend
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.session_path.parent.mkdir(parents=True, exist_ok=True)


def create_backend(settings) -> Backend:
    """
    Supabase client when a project URL and key are configured, offline demo otherwise.
    """
    if not getattr(settings, "backend_configured", False):
        logger.warning(
            "Backend is not configured (SUPATODO_SUPABASE_URL / SUPATODO_SUPABASE_ANON_KEY); "
            "using the offline demo backend, nothing will be saved."
        )
        return OfflineBackend()

    try:
        return SupabaseBackend(settings)
    except RuntimeError:
        logger.exception("Failed to create the Supabase client; using the offline demo backend.")
        return OfflineBackend()


def create_app(*, settings=None, backend: Backend | None = None) -> TodoApp:
    """
    Create TodoApp from the provided settings.

    Keeping settings/backend injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    if backend is None:
        backend = create_backend(settings)

    return TodoApp.wire(AppState(settings=settings, backend=backend))
