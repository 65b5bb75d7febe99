# src/supatodo/backend/supabase_client.py

"""
Backend Service client for a Supabase project (GoTrue auth + PostgREST).

Everything goes through one httpx.AsyncClient:
- auth:  /auth/v1/token, /auth/v1/signup, /auth/v1/logout
- data:  /rest/v1/<table> with PostgREST query params (select/order/id=eq.)

Every failure (HTTP error status or transport error) is raised as BackendError
carrying the service's own message text. No retries: a failed call just fails.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from ..auth.auth_models import AuthEvent, Session
from ..core.ports import BackendError, SessionListener, TodoRow, Unsubscribe
from .listeners import SessionListeners
from .session_file import SessionFile

logger = logging.getLogger(__name__)

_ERROR_KEYS = ("msg", "error_description", "message", "error")


def error_message(resp: httpx.Response) -> str:
    """
    Pull the human-readable message out of an error response.

    GoTrue uses {"msg": ...} (or {"error_description": ...} on older
    versions), PostgREST uses {"message": ..., "code": ..., "hint": ...}.
    """
    try:
        data = resp.json()
    except ValueError:
        data = None

    if isinstance(data, dict):
        for key in _ERROR_KEYS:
            val = data.get(key)
            if isinstance(val, str) and val.strip():
                return val.strip()

    return f"HTTP {resp.status_code}"


def _make_timeout(seconds: float) -> httpx.Timeout:
    # 0 means "no local timeout": the service call is the only suspension point.
    if seconds <= 0:
        return httpx.Timeout(None)
    return httpx.Timeout(seconds, connect=min(seconds, 10.0))


class SupabaseBackend:
    def __init__(
        self,
        settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        session_file: SessionFile | None = None,
    ) -> None:
        base_url = (getattr(settings, "supabase_url", "") or "").strip().rstrip("/")
        anon_key = (getattr(settings, "supabase_anon_key", None) or "").strip()

        if not base_url:
            raise RuntimeError("Backend URL is not set. Set SUPATODO_SUPABASE_URL in your .env.")
        if not anon_key:
            raise RuntimeError("Backend key is not set. Set SUPATODO_SUPABASE_ANON_KEY in your .env.")

        if session_file is None and getattr(settings, "persist_session", False):
            session_file = SessionFile(settings.session_path)

        self._anon_key = anon_key
        self._table = str(getattr(settings, "todos_table", "todos") or "todos")
        self._refresh_margin = float(getattr(settings, "refresh_margin_seconds", 60.0))
        self._session_file = session_file

        self._http = httpx.AsyncClient(
            base_url=base_url,
            headers={"apikey": anon_key},
            timeout=_make_timeout(float(getattr(settings, "http_timeout_seconds", 0.0) or 0.0)),
            transport=transport,
        )

        self._session: Session | None = None
        self._restored = False
        self._refresh_lock = asyncio.Lock()
        self._listeners = SessionListeners()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ---- low-level helpers ----

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
        token: str | None = None,
        prefer: str | None = None,
    ) -> httpx.Response:
        headers = {"Authorization": f"Bearer {token or self._anon_key}"}
        if prefer:
            headers["Prefer"] = prefer

        try:
            resp = await self._http.request(method, path, params=params, json=json, headers=headers)
        except httpx.HTTPError as e:
            logger.info("%s %s failed: %r", method, path, e)
            raise BackendError(str(e) or e.__class__.__name__) from e

        if resp.is_error:
            msg = error_message(resp)
            logger.info("%s %s -> %s: %s", method, path, resp.status_code, msg)
            raise BackendError(msg, status=resp.status_code)

        logger.debug("%s %s -> %s", method, path, resp.status_code)
        return resp

    @staticmethod
    def _json_object(resp: httpx.Response) -> dict[str, Any]:
        try:
            data = resp.json()
        except ValueError as e:
            raise BackendError("Unexpected response from the auth service.") from e
        if not isinstance(data, dict):
            raise BackendError("Unexpected response from the auth service.")
        return data

    @classmethod
    def _session_from(cls, resp: httpx.Response) -> Session:
        try:
            return Session.from_payload(cls._json_object(resp))
        except (KeyError, TypeError, ValueError) as e:
            raise BackendError("Unexpected response from the auth service.") from e

    def _set_session(self, session: Session | None, event: AuthEvent) -> None:
        self._session = session
        if self._session_file is not None:
            if session is None:
                self._session_file.clear()
            else:
                self._session_file.save(session)
        self._listeners.emit(event, session)

    def _restore_once(self) -> None:
        if self._restored:
            return
        self._restored = True
        if self._session_file is not None and self._session is None:
            self._session = self._session_file.load()

    async def _access_token(self) -> str | None:
        session = await self.get_session()
        return session.access_token if session is not None else None

    # ---- auth ----

    async def get_session(self) -> Session | None:
        """
        Current session, refreshed first when it is about to expire.

        A refresh rejected by the service destroys the session (SIGNED_OUT);
        a transport failure keeps it, the next call will try again.
        """
        self._restore_once()
        session = self._session
        if session is None:
            return None
        if not session.expires_within(self._refresh_margin):
            return session
        return await self._refresh(session)

    async def _refresh(self, stale: Session) -> Session | None:
        async with self._refresh_lock:
            if self._session is not stale:
                # Someone else refreshed (or signed out) while we waited.
                return self._session

            try:
                resp = await self._request(
                    "POST",
                    "/auth/v1/token",
                    params={"grant_type": "refresh_token"},
                    json={"refresh_token": stale.refresh_token},
                )
                fresh = self._session_from(resp)
            except BackendError as e:
                if e.status is None:
                    logger.info("Session refresh postponed (transport error): %s", e.message)
                    return stale
                logger.info("Session refresh rejected, signing out locally: %s", e.message)
                self._set_session(None, AuthEvent.SIGNED_OUT)
                return None

            logger.info("Session refreshed for user=%s", fresh.user.id)
            self._set_session(fresh, AuthEvent.TOKEN_REFRESHED)
            return fresh

    def on_session_change(self, callback: SessionListener) -> Unsubscribe:
        return self._listeners.add(callback)

    async def sign_in_with_password(self, email: str, password: str) -> Session:
        resp = await self._request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        session = self._session_from(resp)
        self._restored = True
        logger.info("Signed in user=%s", session.user.id)
        self._set_session(session, AuthEvent.SIGNED_IN)
        return session

    async def sign_up(self, email: str, password: str) -> Session | None:
        resp = await self._request(
            "POST",
            "/auth/v1/signup",
            json={"email": email, "password": password},
        )
        data = self._json_object(resp)

        # With email confirmation enabled the service returns only the user.
        if not data.get("access_token"):
            logger.info("Sign-up accepted for %s (confirmation pending)", email)
            return None

        try:
            session = Session.from_payload(data)
        except (KeyError, TypeError, ValueError) as e:
            raise BackendError("Unexpected response from the auth service.") from e
        self._restored = True
        logger.info("Signed up and signed in user=%s", session.user.id)
        self._set_session(session, AuthEvent.SIGNED_IN)
        return session

    async def sign_out(self) -> None:
        self._restore_once()
        session = self._session
        if session is None:
            return

        try:
            await self._request("POST", "/auth/v1/logout", token=session.access_token)
        except BackendError as e:
            # The local session goes away regardless; an already expired token is the usual cause.
            logger.info("Remote logout failed: %s", e.message)

        logger.info("Signed out user=%s", session.user.id)
        self._set_session(None, AuthEvent.SIGNED_OUT)

    # ---- data ----

    @property
    def _table_path(self) -> str:
        return f"/rest/v1/{self._table}"

    async def list_todos(self) -> list[TodoRow]:
        resp = await self._request(
            "GET",
            self._table_path,
            params={"select": "*", "order": "created_at.desc"},
            token=await self._access_token(),
        )
        try:
            data = resp.json()
        except ValueError as e:
            raise BackendError("Unexpected response from the data service.") from e
        if not isinstance(data, list):
            raise BackendError("Unexpected response from the data service.")
        rows = [row for row in data if isinstance(row, dict)]
        if any("id" not in row for row in rows):
            raise BackendError("Unexpected response from the data service.")
        return rows

    async def insert_todo(self, record: dict[str, Any]) -> None:
        await self._request(
            "POST",
            self._table_path,
            json=[record],
            token=await self._access_token(),
            prefer="return=minimal",
        )

    async def update_todo(self, todo_id: str, fields: dict[str, Any]) -> None:
        await self._request(
            "PATCH",
            self._table_path,
            params={"id": f"eq.{todo_id}"},
            json=fields,
            token=await self._access_token(),
            prefer="return=minimal",
        )

    async def delete_todo(self, todo_id: str) -> None:
        await self._request(
            "DELETE",
            self._table_path,
            params={"id": f"eq.{todo_id}"},
            token=await self._access_token(),
        )
