# src/supatodo/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from ..auth.auth_models import AuthMode, Session
from ..todos.todo_models import Todo, TodoDraft
from .notify import Notifier
from .ports import Backend


class Screen(StrEnum):
    UNAUTHENTICATED = "unauthenticated"
    LOADING = "loading"
    READY = "ready"


@dataclass
class AppState:
    """
    The single view state.

    Only ever written from the event loop thread, so no locking.
    `todos` is a snapshot of the last successful fetch, not a source of truth.
    """

    # Store Settings on the state for easy access in other modules.
    settings: object
    backend: Backend
    notifier: Notifier = field(default_factory=Notifier)

    session: Session | None = None
    todos: list[Todo] = field(default_factory=list)
    loading: bool = True

    # Unauthenticated screen (auth forms)
    auth_mode: AuthMode = AuthMode.SIGN_IN
    password: str = ""
    password_error: str = ""

    # Authenticated screen ("add todo" form)
    draft: TodoDraft = field(default_factory=TodoDraft)

    @property
    def screen(self) -> Screen:
        if self.session is None:
            return Screen.UNAUTHENTICATED
        return Screen.LOADING if self.loading else Screen.READY

    @property
    def user_id(self) -> str | None:
        return self.session.user.id if self.session is not None else None
