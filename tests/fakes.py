# tests/fakes.py

from __future__ import annotations

import itertools
import time
import uuid
from typing import Any

from supatodo.auth.auth_models import AuthEvent, Session, User
from supatodo.backend.listeners import SessionListeners
from supatodo.core.ports import BackendError, SessionListener, TodoRow, Unsubscribe

ALICE = User(id="user-alice", email="alice@example.com")
BOB = User(id="user-bob", email="bob@example.com")


def make_session(user: User = ALICE, *, expires_in: float = 3600.0) -> Session:
    return Session(
        access_token=f"access-{user.id}",
        refresh_token=f"refresh-{user.id}",
        expires_at=time.time() + expires_in,
        user=user,
    )


class FakeBackend:
    """
    Deterministic Backend Service for unit tests.

    - Captures every call (op name + args) for assertions
    - Any op can be told to fail with a given message
    - Rows are scoped to the signed-in user and returned newest first
    """

    def __init__(self, *, session: Session | None = None) -> None:
        self.session = session
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.failures: dict[str, BackendError] = {}
        self.rows: list[dict[str, Any]] = []
        self.accounts: dict[str, tuple[str, User]] = {
            ALICE.email or "": ("secret1", ALICE),
            BOB.email or "": ("secret2", BOB),
        }
        self._listeners = SessionListeners()
        self._clock = itertools.count(1)

    # ---- test helpers ----

    def fail(self, op: str, message: str, status: int | None = 400) -> None:
        self.failures[op] = BackendError(message, status=status)

    def recover(self, op: str) -> None:
        self.failures.pop(op, None)

    def ops(self) -> list[str]:
        return [name for name, _ in self.calls]

    def add_row(self, user: User, title: str, **fields: Any) -> dict[str, Any]:
        row = {
            "id": str(uuid.uuid4()),
            "user_id": user.id,
            "title": title,
            "description": "",
            "is_completed": False,
            "due_date": None,
            "priority": "medium",
            "created_at": f"2025-01-01T00:00:{next(self._clock):02d}+00:00",
        }
        row.update(fields)
        self.rows.append(row)
        return row

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def _enter(self, op: str, *args: Any) -> None:
        self.calls.append((op, args))
        err = self.failures.get(op)
        if err is not None:
            raise err

    # ---- auth ----

    async def get_session(self) -> Session | None:
        self._enter("get_session")
        return self.session

    def on_session_change(self, callback: SessionListener) -> Unsubscribe:
        return self._listeners.add(callback)

    async def sign_in_with_password(self, email: str, password: str) -> Session:
        self._enter("sign_in_with_password", email)
        account = self.accounts.get(email)
        if account is None or account[0] != password:
            raise BackendError("Invalid login credentials", status=400)
        self.session = make_session(account[1])
        self._listeners.emit(AuthEvent.SIGNED_IN, self.session)
        return self.session

    async def sign_up(self, email: str, password: str) -> Session | None:
        self._enter("sign_up", email)
        if email in self.accounts:
            raise BackendError("User already registered", status=422)
        self.accounts[email] = (password, User(id=f"user-{len(self.accounts)}", email=email))
        return None

    async def sign_out(self) -> None:
        self._enter("sign_out")
        self.session = None
        self._listeners.emit(AuthEvent.SIGNED_OUT, None)

    def push_event(self, event: AuthEvent, session: Session | None) -> None:
        """Simulate a change pushed by the service (e.g. token refresh, expiry)."""
        self.session = session
        self._listeners.emit(event, session)

    # ---- data ----

    def _owner(self) -> str | None:
        return self.session.user.id if self.session is not None else None

    async def list_todos(self) -> list[TodoRow]:
        self._enter("list_todos")
        mine = [dict(r) for r in self.rows if r["user_id"] == self._owner()]
        mine.sort(key=lambda r: r["created_at"], reverse=True)
        return mine

    async def insert_todo(self, record: dict[str, Any]) -> None:
        self._enter("insert_todo", record)
        fields = {k: v for k, v in record.items() if k not in ("user_id", "title")}
        self.add_row(User(id=record["user_id"]), record["title"], **fields)

    async def update_todo(self, todo_id: str, fields: dict[str, Any]) -> None:
        self._enter("update_todo", todo_id, fields)
        for row in self.rows:
            if row["id"] == todo_id and row["user_id"] == self._owner():
                row.update(fields)

    async def delete_todo(self, todo_id: str) -> None:
        self._enter("delete_todo", todo_id)
        self.rows = [r for r in self.rows if not (r["id"] == todo_id and r["user_id"] == self._owner())]

    async def aclose(self) -> None:
        return


def notice_texts(app: Any) -> list[str]:
    """Drain the app's notifications and return their texts."""
    return [n.text for n in app.state.notifier.drain()]
