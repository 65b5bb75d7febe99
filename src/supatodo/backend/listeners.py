# src/supatodo/backend/listeners.py

from __future__ import annotations

import logging

from ..auth.auth_models import AuthEvent, Session
from ..core.ports import SessionListener, Unsubscribe

logger = logging.getLogger(__name__)


class SessionListeners:
    """Subscriber list for session-change notifications."""

    def __init__(self) -> None:
        self._listeners: list[SessionListener] = []

    def add(self, callback: SessionListener) -> Unsubscribe:
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def emit(self, event: AuthEvent, session: Session | None) -> None:
        for cb in list(self._listeners):
            try:
                cb(event, session)
            except Exception:
                # One broken subscriber must not keep the others from seeing the change.
                logger.exception("Session listener failed on %s", event)

    def __len__(self) -> int:
        return len(self._listeners)
