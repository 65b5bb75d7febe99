# src/supatodo/backend/refresher.py

from __future__ import annotations

"""
Session refresher.

A small polling loop that asks the backend for the current session every
interval_seconds. The backend refreshes a session that is about to expire
(TOKEN_REFRESHED) or drops one the service no longer accepts (SIGNED_OUT);
either way subscribers hear about it through on_session_change.

To stop the refresher, cancel the coroutine/task.
"""

import asyncio
import logging

from ..core.ports import AuthBackend, BackendError

logger = logging.getLogger(__name__)


async def run_token_refresher(auth: AuthBackend, *, interval_seconds: float = 30.0) -> None:
    sleep_s = max(0.5, float(interval_seconds))

    while True:
        try:
            session = await auth.get_session()
            logger.debug("Session check: signed_in=%s", session is not None)
        except BackendError as e:
            logger.info("Session check failed: %s", e.message)
        except Exception:
            logger.exception("Session check crashed")

        await asyncio.sleep(sleep_s)
