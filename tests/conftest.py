# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from supatodo.core.app import TodoApp
from supatodo.core.state import AppState

from .fakes import FakeBackend


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the backend client.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment and any local .env.
    """
    return SimpleNamespace(
        app_name="Todo App",
        log_level="WARNING",
        supabase_url="https://project.supabase.co",
        supabase_anon_key="anon-key",
        todos_table="todos",
        http_timeout_seconds=0.0,
        persist_session=False,
        refresh_interval_seconds=30.0,
        refresh_margin_seconds=60.0,
        data_dir=tmp_path,
        session_path=tmp_path / "session.json",
        backend_configured=True,
    )


@pytest.fixture()
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture()
def app(settings: SimpleNamespace, backend: FakeBackend) -> TodoApp:
    """TodoApp wired with the fake backend (signed out until a test signs in)."""
    return TodoApp.wire(AppState(settings=settings, backend=backend))
