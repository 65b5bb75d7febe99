# src/supatodo/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds the app, then runs on one event loop:
- session restore + subscription (SessionManager.start),
- the session refresher in a background task,
- the console REPL until /exit or EOF.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging

from ..backend.refresher import run_token_refresher
from ..cli.bootstrap import create_app
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.app import TodoApp
from ..logging_setup import level_from_name, setup_logging

logger = logging.getLogger(__name__)


async def _shutdown(app: TodoApp, refresher: asyncio.Task[None] | None) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    app.sessions.teardown()

    if refresher is not None:
        refresher.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await refresher

    try:
        await app.settle()
    except Exception:
        logger.debug("Pending refreshes failed during shutdown.", exc_info=True)

    try:
        await app.state.backend.aclose()
    except Exception:
        logger.debug("Backend close failed.", exc_info=True)


async def run(app: TodoApp) -> None:
    settings = app.state.settings
    refresher: asyncio.Task[None] | None = None
    try:
        await app.sessions.start()
        refresher = asyncio.create_task(
            run_token_refresher(
                app.state.backend,
                interval_seconds=float(getattr(settings, "refresh_interval_seconds", 30.0)),
            )
        )
        await run_console_loop(app)
    finally:
        await _shutdown(app, refresher)


def main() -> None:
    settings = get_settings()

    log_file = setup_logging(
        log_dir=settings.data_dir,
        console_level=level_from_name(getattr(settings, "log_level", None)),
    )

    logger.info("Starting %s (log file: %s)", settings.app_name, log_file)

    app = create_app(settings=settings)

    try:
        asyncio.run(run(app))
    except KeyboardInterrupt:
        logger.info("KeyboardInterrupt, exiting.")
        print()

    logger.info("Bye.")


if __name__ == "__main__":
    main()
