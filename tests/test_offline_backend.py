# tests/test_offline_backend.py

from __future__ import annotations

import pytest

from supatodo.auth.auth_models import AuthEvent
from supatodo.backend.offline import OfflineBackend
from supatodo.core.ports import BackendError


@pytest.mark.asyncio
async def test_sign_up_then_sign_in() -> None:
    backend = OfflineBackend()
    events: list[AuthEvent] = []
    backend.on_session_change(lambda ev, s: events.append(ev))

    assert await backend.sign_up("Ann@Example.com", "secret1") is None
    with pytest.raises(BackendError, match="User already registered"):
        await backend.sign_up("ann@example.com", "other12")
    with pytest.raises(BackendError, match="Invalid login credentials"):
        await backend.sign_in_with_password("ann@example.com", "wrong")

    session = await backend.sign_in_with_password("ann@example.com", "secret1")

    assert session.user.email == "ann@example.com"
    assert await backend.get_session() == session
    assert events == [AuthEvent.SIGNED_IN]

    await backend.sign_out()
    assert await backend.get_session() is None
    assert events == [AuthEvent.SIGNED_IN, AuthEvent.SIGNED_OUT]


@pytest.mark.asyncio
async def test_rows_are_scoped_and_newest_first() -> None:
    backend = OfflineBackend()
    await backend.sign_up("ann@example.com", "secret1")
    await backend.sign_up("ben@example.com", "secret2")

    ann = await backend.sign_in_with_password("ann@example.com", "secret1")
    await backend.insert_todo({"title": "first", "user_id": ann.user.id, "priority": "low"})
    await backend.insert_todo({"title": "second", "user_id": ann.user.id, "due_date": ""})
    await backend.sign_out()

    ben = await backend.sign_in_with_password("ben@example.com", "secret2")
    assert await backend.list_todos() == []
    with pytest.raises(BackendError, match="row-level security"):
        await backend.insert_todo({"title": "sneaky", "user_id": ann.user.id})
    await backend.sign_out()

    await backend.sign_in_with_password("ann@example.com", "secret1")
    rows = await backend.list_todos()
    assert [r["title"] for r in rows] == ["second", "first"]
    assert rows[0]["priority"] == "medium"
    assert rows[0]["due_date"] is None
    assert rows[0]["is_completed"] is False
    assert "_seq" not in rows[0]
    assert ben.user.id != ann.user.id


@pytest.mark.asyncio
async def test_priority_outside_the_enum_is_rejected() -> None:
    backend = OfflineBackend()
    await backend.sign_up("ann@example.com", "secret1")
    ann = await backend.sign_in_with_password("ann@example.com", "secret1")

    with pytest.raises(BackendError, match="todos_priority_check"):
        await backend.insert_todo({"title": "x", "user_id": ann.user.id, "priority": "urgent"})


@pytest.mark.asyncio
async def test_update_and_delete_only_touch_own_rows() -> None:
    backend = OfflineBackend()
    await backend.sign_up("ann@example.com", "secret1")
    await backend.sign_up("ben@example.com", "secret2")
    ann = await backend.sign_in_with_password("ann@example.com", "secret1")
    await backend.insert_todo({"title": "mine", "user_id": ann.user.id})
    todo_id = (await backend.list_todos())[0]["id"]
    await backend.sign_out()

    await backend.sign_in_with_password("ben@example.com", "secret2")
    await backend.update_todo(todo_id, {"is_completed": True})
    await backend.delete_todo(todo_id)
    await backend.sign_out()

    await backend.sign_in_with_password("ann@example.com", "secret1")
    rows = await backend.list_todos()
    assert [(r["id"], r["is_completed"]) for r in rows] == [(todo_id, False)]

    await backend.update_todo(todo_id, {"is_completed": True, "user_id": "someone-else"})
    assert (await backend.list_todos())[0]["is_completed"] is True

    await backend.delete_todo(todo_id)
    assert await backend.list_todos() == []
