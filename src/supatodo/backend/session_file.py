# src/supatodo/backend/session_file.py

from __future__ import annotations

import contextlib
import json
import logging
import os
from pathlib import Path
from typing import Any

from ..auth.auth_models import Session

logger = logging.getLogger(__name__)


def _load_json(path: Path) -> dict[str, Any]:
    raw = path.read_text("utf-8")
    val = json.loads(raw)
    if isinstance(val, dict):
        return val
    raise ValueError("Expected JSON object")


def _atomic_write_json(path: Path, data: dict[str, Any]) -> None:
    tmp = path.with_suffix(".tmp")
    tmp.write_text(json.dumps(data, ensure_ascii=False), "utf-8")
    os.replace(tmp, path)
    with contextlib.suppress(OSError):
        # Best-effort: not critical on Windows or restricted FS.
        os.chmod(path, 0o600)


class SessionFile:
    """
    session.json persistence, so a restart does not require signing in again.

    The file holds a refresh token and must never be committed
    (keep it under a gitignored dir).
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Session | None:
        if not self._path.exists():
            return None
        try:
            session = Session.from_payload(_load_json(self._path))
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning("Failed to restore %s, starting signed out: %r", self._path, e)
            return None
        logger.info("Session restored for user=%s", session.user.id)
        return session

    def save(self, session: Session) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            _atomic_write_json(self._path, session.to_payload())
            logger.debug("Session saved to %s", self._path)
        except OSError as e:
            logger.error("Failed to write %s: %r", self._path, e)

    def clear(self) -> None:
        try:
            self._path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Failed to remove %s: %r", self._path, e)
