# src/supatodo/backend/offline.py

from __future__ import annotations

import itertools
import time
import uuid
from datetime import UTC, datetime
from typing import Any

from ..auth.auth_models import AuthEvent, Session, User
from ..core.ports import BackendError, SessionListener, TodoRow, Unsubscribe
from ..todos.todo_models import Priority
from .listeners import SessionListeners

_PRIORITIES = {p.value for p in Priority}


class OfflineBackend:
    """
    In-memory Backend Service used for demos when no project is configured.

    Behavior mirrors the hosted service closely enough for the UI:
    - accounts are confirmed immediately (sign-up returns no session, sign-in works)
    - rows are scoped to the signed-in user, newest first
    - error texts match what the real service says for the same mistakes
    Nothing survives a restart.
    """

    def __init__(self) -> None:
        self._accounts: dict[str, tuple[str, User]] = {}
        self._rows: list[dict[str, Any]] = []
        self._seq = itertools.count(1)
        self._session: Session | None = None
        self._listeners = SessionListeners()

    async def aclose(self) -> None:
        return

    # ---- auth ----

    async def get_session(self) -> Session | None:
        return self._session

    def on_session_change(self, callback: SessionListener) -> Unsubscribe:
        return self._listeners.add(callback)

    async def sign_in_with_password(self, email: str, password: str) -> Session:
        account = self._accounts.get(email.strip().lower())
        if account is None or account[0] != password:
            raise BackendError("Invalid login credentials", status=400)

        session = Session(
            access_token=uuid.uuid4().hex,
            refresh_token=uuid.uuid4().hex,
            expires_at=time.time() + 3600,
            user=account[1],
        )
        self._session = session
        self._listeners.emit(AuthEvent.SIGNED_IN, session)
        return session

    async def sign_up(self, email: str, password: str) -> Session | None:
        key = email.strip().lower()
        if not key or "@" not in key:
            raise BackendError("Unable to validate email address: invalid format", status=400)
        if key in self._accounts:
            raise BackendError("User already registered", status=422)
        self._accounts[key] = (password, User(id=str(uuid.uuid4()), email=key))
        return None

    async def sign_out(self) -> None:
        if self._session is None:
            return
        self._session = None
        self._listeners.emit(AuthEvent.SIGNED_OUT, None)

    # ---- data ----

    def _owner(self) -> str | None:
        return self._session.user.id if self._session is not None else None

    async def list_todos(self) -> list[TodoRow]:
        owner = self._owner()
        mine = [r for r in self._rows if r["user_id"] == owner]
        mine.sort(key=lambda r: (r["created_at"], r["_seq"]), reverse=True)
        return [{k: v for k, v in r.items() if k != "_seq"} for r in mine]

    async def insert_todo(self, record: dict[str, Any]) -> None:
        owner = self._owner()
        if owner is None or record.get("user_id") != owner:
            raise BackendError('new row violates row-level security policy for table "todos"', status=403)
        if not record.get("title"):
            raise BackendError('null value in column "title" of relation "todos" violates not-null constraint', status=400)

        priority = record.get("priority") or Priority.MEDIUM.value
        if priority not in _PRIORITIES:
            raise BackendError('new row for relation "todos" violates check constraint "todos_priority_check"', status=400)

        self._rows.append(
            {
                "id": str(uuid.uuid4()),
                "user_id": owner,
                "title": record["title"],
                "description": record.get("description") or "",
                "is_completed": bool(record.get("is_completed", False)),
                "due_date": record.get("due_date") or None,
                "priority": priority,
                "created_at": datetime.now(UTC).isoformat(),
                "_seq": next(self._seq),
            }
        )

    async def update_todo(self, todo_id: str, fields: dict[str, Any]) -> None:
        owner = self._owner()
        for row in self._rows:
            if row["id"] == todo_id and row["user_id"] == owner:
                row.update({k: v for k, v in fields.items() if k not in ("id", "user_id", "created_at")})

    async def delete_todo(self, todo_id: str) -> None:
        owner = self._owner()
        self._rows = [r for r in self._rows if not (r["id"] == todo_id and r["user_id"] == owner)]
