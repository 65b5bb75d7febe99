# tests/test_supabase_client.py

from __future__ import annotations

import json
import time
from pathlib import Path
from types import SimpleNamespace

import httpx
import pytest

from supatodo.auth.auth_models import AuthEvent
from supatodo.backend.session_file import SessionFile
from supatodo.backend.supabase_client import SupabaseBackend, error_message
from supatodo.core.app import TodoApp
from supatodo.core.ports import BackendError
from supatodo.core.state import AppState

from .fakes import ALICE, make_session, notice_texts


def _token_payload(access: str = "at-1", refresh: str = "rt-1", expires_in: int = 3600) -> dict:
    return {
        "access_token": access,
        "refresh_token": refresh,
        "token_type": "bearer",
        "expires_in": expires_in,
        "user": {"id": ALICE.id, "email": ALICE.email},
    }


class Recorder:
    """MockTransport handler: canned responses keyed by (method, path), every request kept."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.routes: dict[tuple[str, str], httpx.Response | Exception] = {}

    def route(self, method: str, path: str, response: httpx.Response | Exception) -> None:
        self.routes[(method, path)] = response

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        found = self.routes.get((request.method, request.url.path))
        if isinstance(found, Exception):
            raise found
        if found is None:
            return httpx.Response(404, json={"message": f"no route {request.method} {request.url.path}"})
        return found

    def last(self, method: str, path: str) -> httpx.Request:
        for req in reversed(self.requests):
            if req.method == method and req.url.path == path:
                return req
        raise AssertionError(f"no {method} {path} request")


@pytest.fixture()
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture()
def session_file(tmp_path: Path) -> SessionFile:
    return SessionFile(tmp_path / "session.json")


@pytest.fixture()
def client(settings, recorder: Recorder, session_file: SessionFile) -> SupabaseBackend:
    return SupabaseBackend(settings, transport=httpx.MockTransport(recorder), session_file=session_file)


def test_missing_configuration_is_reported() -> None:
    with pytest.raises(RuntimeError):
        SupabaseBackend(SimpleNamespace(supabase_url="", supabase_anon_key="k"))
    with pytest.raises(RuntimeError):
        SupabaseBackend(SimpleNamespace(supabase_url="https://x.supabase.co", supabase_anon_key=None))


def test_error_message_extraction() -> None:
    gotrue_new = httpx.Response(400, json={"code": 400, "msg": "Invalid login credentials"})
    gotrue_old = httpx.Response(400, json={"error": "invalid_grant", "error_description": "Email not confirmed"})
    postgrest = httpx.Response(403, json={"code": "42501", "message": "permission denied", "hint": None})
    opaque = httpx.Response(502, text="<html>bad gateway</html>")

    assert error_message(gotrue_new) == "Invalid login credentials"
    assert error_message(gotrue_old) == "Email not confirmed"
    assert error_message(postgrest) == "permission denied"
    assert error_message(opaque) == "HTTP 502"


@pytest.mark.asyncio
async def test_sign_in_stores_session_and_notifies(client, recorder, session_file) -> None:
    recorder.route("POST", "/auth/v1/token", httpx.Response(200, json=_token_payload()))
    events: list[tuple[AuthEvent, object]] = []
    client.on_session_change(lambda ev, s: events.append((ev, s)))

    session = await client.sign_in_with_password("alice@example.com", "secret1")

    req = recorder.last("POST", "/auth/v1/token")
    assert req.url.params["grant_type"] == "password"
    assert req.headers["apikey"] == "anon-key"
    assert req.headers["authorization"] == "Bearer anon-key"
    assert json.loads(req.content) == {"email": "alice@example.com", "password": "secret1"}

    assert session.user.id == ALICE.id
    assert session.access_token == "at-1"
    assert events == [(AuthEvent.SIGNED_IN, session)]
    assert await client.get_session() == session
    assert session_file.load() == session


@pytest.mark.asyncio
async def test_sign_in_failure_raises_service_message(client, recorder) -> None:
    recorder.route("POST", "/auth/v1/token", httpx.Response(400, json={"msg": "Invalid login credentials"}))

    with pytest.raises(BackendError) as exc:
        await client.sign_in_with_password("alice@example.com", "nope")

    assert exc.value.message == "Invalid login credentials"
    assert exc.value.status == 400
    assert await client.get_session() is None


@pytest.mark.asyncio
async def test_transport_error_becomes_backend_error(client, recorder) -> None:
    recorder.route("POST", "/auth/v1/token", httpx.ConnectError("connection refused"))

    with pytest.raises(BackendError) as exc:
        await client.sign_in_with_password("alice@example.com", "secret1")

    assert "connection refused" in exc.value.message
    assert exc.value.status is None


@pytest.mark.asyncio
async def test_sign_up_with_confirmation_returns_no_session(client, recorder) -> None:
    recorder.route("POST", "/auth/v1/signup", httpx.Response(200, json={"id": "u-9", "email": "n@example.com"}))

    assert await client.sign_up("n@example.com", "longenough") is None
    assert await client.get_session() is None


@pytest.mark.asyncio
async def test_data_calls_use_session_token(client, recorder) -> None:
    recorder.route("POST", "/auth/v1/token", httpx.Response(200, json=_token_payload()))
    rows = [{"id": "t1", "title": "Buy milk", "created_at": "2025-01-01T00:00:00+00:00"}]
    recorder.route("GET", "/rest/v1/todos", httpx.Response(200, json=rows))
    recorder.route("POST", "/rest/v1/todos", httpx.Response(201))
    recorder.route("PATCH", "/rest/v1/todos", httpx.Response(204))
    recorder.route("DELETE", "/rest/v1/todos", httpx.Response(204))

    await client.sign_in_with_password("alice@example.com", "secret1")

    assert await client.list_todos() == rows
    get = recorder.last("GET", "/rest/v1/todos")
    assert get.url.params["select"] == "*"
    assert get.url.params["order"] == "created_at.desc"
    assert get.headers["authorization"] == "Bearer at-1"

    await client.insert_todo({"title": "Buy milk", "user_id": ALICE.id})
    post = recorder.last("POST", "/rest/v1/todos")
    assert json.loads(post.content) == [{"title": "Buy milk", "user_id": ALICE.id}]
    assert post.headers["prefer"] == "return=minimal"

    await client.update_todo("t1", {"is_completed": True})
    patch = recorder.last("PATCH", "/rest/v1/todos")
    assert patch.url.params["id"] == "eq.t1"
    assert json.loads(patch.content) == {"is_completed": True}

    await client.delete_todo("t1")
    assert recorder.last("DELETE", "/rest/v1/todos").url.params["id"] == "eq.t1"


@pytest.mark.asyncio
async def test_data_error_carries_postgrest_message(client, recorder) -> None:
    recorder.route(
        "DELETE",
        "/rest/v1/todos",
        httpx.Response(403, json={"code": "42501", "message": "permission denied for table todos"}),
    )

    with pytest.raises(BackendError) as exc:
        await client.delete_todo("t1")

    assert str(exc.value) == "permission denied for table todos"


@pytest.mark.asyncio
async def test_restored_session_is_refreshed_when_expiring(client, recorder, session_file) -> None:
    session_file.save(make_session(ALICE, expires_in=5))
    recorder.route("POST", "/auth/v1/token", httpx.Response(200, json=_token_payload(access="at-2", refresh="rt-2")))
    events: list[AuthEvent] = []
    client.on_session_change(lambda ev, s: events.append(ev))

    session = await client.get_session()

    assert session is not None
    assert session.access_token == "at-2"
    req = recorder.last("POST", "/auth/v1/token")
    assert req.url.params["grant_type"] == "refresh_token"
    assert json.loads(req.content) == {"refresh_token": f"refresh-{ALICE.id}"}
    assert events == [AuthEvent.TOKEN_REFRESHED]
    assert session_file.load().access_token == "at-2"


@pytest.mark.asyncio
async def test_rejected_refresh_signs_out(client, recorder, session_file) -> None:
    session_file.save(make_session(ALICE, expires_in=-10))
    recorder.route("POST", "/auth/v1/token", httpx.Response(400, json={"msg": "Invalid Refresh Token"}))
    events: list[AuthEvent] = []
    client.on_session_change(lambda ev, s: events.append(ev))

    assert await client.get_session() is None
    assert events == [AuthEvent.SIGNED_OUT]
    assert not session_file.path.exists()


@pytest.mark.asyncio
async def test_refresh_transport_error_keeps_session(client, recorder, session_file) -> None:
    stale = make_session(ALICE, expires_in=5)
    session_file.save(stale)
    recorder.route("POST", "/auth/v1/token", httpx.ConnectError("offline"))

    assert await client.get_session() == stale


@pytest.mark.asyncio
async def test_fresh_session_is_not_refreshed(client, recorder, session_file) -> None:
    session_file.save(make_session(ALICE, expires_in=3600))

    session = await client.get_session()

    assert session is not None and session.expires_at > time.time()
    assert recorder.requests == []


@pytest.mark.asyncio
async def test_sign_out_clears_session_even_if_remote_logout_fails(client, recorder, session_file) -> None:
    recorder.route("POST", "/auth/v1/token", httpx.Response(200, json=_token_payload()))
    recorder.route("POST", "/auth/v1/logout", httpx.Response(401, json={"msg": "JWT expired"}))
    await client.sign_in_with_password("alice@example.com", "secret1")
    events: list[AuthEvent] = []
    client.on_session_change(lambda ev, s: events.append(ev))

    await client.sign_out()

    assert recorder.last("POST", "/auth/v1/logout").headers["authorization"] == "Bearer at-1"
    assert events == [AuthEvent.SIGNED_OUT]
    assert await client.get_session() is None
    assert not session_file.path.exists()
    await client.aclose()


@pytest.mark.asyncio
async def test_sign_in_with_incomplete_token_payload_shows_error(settings, client, recorder) -> None:
    recorder.route("POST", "/auth/v1/token", httpx.Response(200, json={"access_token": "x"}))
    app = TodoApp.wire(AppState(settings=settings, backend=client))

    ok = await app.sessions.sign_in("alice@example.com", "secret1")

    assert ok is False
    assert notice_texts(app) == ["Unexpected response from the auth service."]
    assert app.state.session is None
    assert await client.get_session() is None


@pytest.mark.asyncio
async def test_sign_up_with_incomplete_session_payload_raises_backend_error(client, recorder) -> None:
    recorder.route("POST", "/auth/v1/signup", httpx.Response(200, json={"access_token": "x", "expires_in": 3600}))

    with pytest.raises(BackendError, match="Unexpected response from the auth service."):
        await client.sign_up("alice@example.com", "secret1")


@pytest.mark.asyncio
async def test_unreadable_refresh_response_keeps_session(client, recorder, session_file) -> None:
    stale = make_session(ALICE, expires_in=5)
    session_file.save(stale)
    recorder.route("POST", "/auth/v1/token", httpx.Response(200, json={"access_token": "x"}))

    assert await client.get_session() == stale


@pytest.mark.asyncio
async def test_rows_without_id_are_rejected(client, recorder) -> None:
    recorder.route(
        "GET",
        "/rest/v1/todos",
        httpx.Response(200, json=[{"user_id": ALICE.id, "title": "x", "created_at": "z"}]),
    )

    with pytest.raises(BackendError, match="Unexpected response from the data service."):
        await client.list_todos()
