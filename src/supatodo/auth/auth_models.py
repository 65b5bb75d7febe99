# src/supatodo/auth/auth_models.py

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class AuthEvent(StrEnum):
    """Session-change notifications pushed by the backend."""

    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"


class AuthMode(StrEnum):
    SIGN_IN = "signin"
    SIGN_UP = "signup"


@dataclass(slots=True, frozen=True)
class User:
    id: str
    email: str | None = None

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> User:
        return cls(id=str(data["id"]), email=data.get("email"))


@dataclass(slots=True, frozen=True)
class Session:
    """
    Authenticated identity as handed out by the auth service.

    Opaque to the app beyond presence, the user id and the token pair
    the backend client needs to make requests on the user's behalf.
    """

    access_token: str
    refresh_token: str
    expires_at: float
    user: User
    token_type: str = "bearer"

    @classmethod
    def from_payload(cls, data: dict[str, Any], *, now_ts: float | None = None) -> Session:
        """Build from a token-endpoint response (or a persisted session.json)."""
        now_ts = time.time() if now_ts is None else now_ts
        expires_at = data.get("expires_at")
        if expires_at is None:
            expires_at = now_ts + float(data.get("expires_in") or 3600)
        return cls(
            access_token=str(data["access_token"]),
            refresh_token=str(data.get("refresh_token") or ""),
            expires_at=float(expires_at),
            user=User.from_payload(data["user"]),
            token_type=str(data.get("token_type") or "bearer"),
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expires_at": self.expires_at,
            "token_type": self.token_type,
            "user": {"id": self.user.id, "email": self.user.email},
        }

    def expires_within(self, seconds: float, *, now_ts: float | None = None) -> bool:
        now_ts = time.time() if now_ts is None else now_ts
        return self.expires_at - now_ts <= seconds
