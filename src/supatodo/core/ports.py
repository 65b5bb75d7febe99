# src/supatodo/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the Backend Service swappable (Supabase over HTTPS, offline demo,
test fakes) and makes testing easier.
"""

from collections.abc import Callable
from typing import Any, Awaitable, Protocol

from ..auth.auth_models import AuthEvent, Session

SessionListener = Callable[[AuthEvent, Session | None], None]
Unsubscribe = Callable[[], None]

TodoRow = dict[str, Any]
# Raw row of the todos collection, exactly as the data API returns it.


class BackendError(Exception):
    """
    Any failure reported by (or while talking to) the Backend Service.

    The taxonomy is flat on purpose: the UI only ever shows `message`.
    """

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status

    def __str__(self) -> str:
        return self.message


class AuthBackend(Protocol):
    """Auth sub-interface of the Backend Service."""

    def get_session(self) -> Awaitable[Session | None]: ...

    def on_session_change(self, callback: SessionListener) -> Unsubscribe: ...

    def sign_in_with_password(self, email: str, password: str) -> Awaitable[Session]: ...

    def sign_up(self, email: str, password: str) -> Awaitable[Session | None]: ...

    def sign_out(self) -> Awaitable[None]: ...


class TodoRepo(Protocol):
    """
    Data sub-interface over the todos collection.

    Rows are scoped to the signed-in user by the service, never by the client.
    """

    def list_todos(self) -> Awaitable[list[TodoRow]]: ...
    # all visible rows, ordered by created_at descending

    def insert_todo(self, record: dict[str, Any]) -> Awaitable[None]: ...

    def update_todo(self, todo_id: str, fields: dict[str, Any]) -> Awaitable[None]: ...

    def delete_todo(self, todo_id: str) -> Awaitable[None]: ...


class Backend(AuthBackend, TodoRepo, Protocol):
    async def aclose(self) -> None: ...
