# src/supatodo/auth/session_manager.py

"""
Session tracking for the view.

The manager never decides on its own that the user is signed in or out:
it only mirrors what the backend reports, either as the result of
get_session() at startup or through session-change notifications.
Sign-in/sign-up/sign-out are single requests; the resulting notification
is what moves the view between screens.
"""

from __future__ import annotations

import logging

from ..core.ports import BackendError, Unsubscribe
from ..core.state import AppState
from ..todos.todo_list import TodoListController
from .auth_models import AuthEvent, AuthMode, Session

logger = logging.getLogger(__name__)

PASSWORD_MIN_LENGTH = 6
PASSWORD_ERROR_TEXT = f"Password must be at least {PASSWORD_MIN_LENGTH} characters long"


class SessionManager:
    def __init__(self, state: AppState, todo_list: TodoListController) -> None:
        self._state = state
        self._todo_list = todo_list
        self._unsubscribe: Unsubscribe | None = None

    # ---- lifecycle ----

    async def start(self) -> None:
        """
        Subscribe to session changes, then restore the current session.

        Subscribing first means a refresh that happens inside get_session()
        is not lost.
        """
        if self._unsubscribe is None:
            self._unsubscribe = self._state.backend.on_session_change(self._on_session_change)

        try:
            session = await self._state.backend.get_session()
        except BackendError as e:
            logger.info("get_session failed, starting signed out: %s", e.message)
            session = None

        self._apply_session(session)

    def teardown(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    @property
    def subscribed(self) -> bool:
        return self._unsubscribe is not None

    def _on_session_change(self, event: AuthEvent, session: Session | None) -> None:
        logger.info("Auth event %s (signed_in=%s)", event, session is not None)
        self._apply_session(session)

    def _apply_session(self, session: Session | None) -> None:
        state = self._state
        was_signed_in = state.session is not None
        state.session = session

        if session is None:
            # Back to the auth forms; the next sign-in starts from a loading screen.
            state.todos = []
            state.loading = True
            return

        if not was_signed_in:
            state.loading = True
        self._todo_list.schedule_fetch()

    # ---- auth forms ----

    def set_auth_mode(self, mode: AuthMode) -> None:
        state = self._state
        state.auth_mode = mode
        if mode == AuthMode.SIGN_IN:
            state.password = ""
            state.password_error = ""

    def validate_password(self, value: str) -> bool:
        if len(value) < PASSWORD_MIN_LENGTH:
            self._state.password_error = PASSWORD_ERROR_TEXT
            return False
        self._state.password_error = ""
        return True

    def enter_password(self, value: str) -> bool:
        """Password typed into the sign-up form; validated as it is entered."""
        self._state.password = value
        return self.validate_password(value)

    async def sign_in(self, email: str, password: str) -> bool:
        state = self._state
        try:
            await state.backend.sign_in_with_password(email, password)
        except BackendError as e:
            logger.info("Sign-in failed for %s: %s", email, e.message)
            state.notifier.error(e.message)
            return False

        state.notifier.success("Signed in successfully!")
        return True

    async def sign_up(self, email: str, password: str) -> bool:
        state = self._state
        if not self.validate_password(password):
            return False

        try:
            await state.backend.sign_up(email, password)
        except BackendError as e:
            logger.info("Sign-up failed for %s: %s", email, e.message)
            state.notifier.error(e.message)
            return False

        state.notifier.success("Check your email to confirm your account!")
        state.auth_mode = AuthMode.SIGN_IN
        return True

    async def sign_out(self) -> None:
        state = self._state
        try:
            await state.backend.sign_out()
        except BackendError as e:
            logger.info("Sign-out failed: %s", e.message)
            state.notifier.error(e.message)
