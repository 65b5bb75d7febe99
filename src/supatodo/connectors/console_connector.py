# src/supatodo/connectors/console_connector.py

from __future__ import annotations

import asyncio
import contextlib
import logging
import sys
import threading
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.app import TodoApp
from ..core.notify import NoticeKind
from ..core.view import render

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def _color_enabled() -> bool:
    try:
        return sys.stdout.isatty()
    except Exception:
        return False


def print_notices(app: TodoApp) -> None:
    """Show queued notifications once; they are gone afterwards."""
    for notice in app.state.notifier.drain():
        tag = "OK" if notice.kind == NoticeKind.SUCCESS else "ERROR"
        _print_ts(f"[{tag}] {notice.text}")


async def show_screen(app: TodoApp) -> None:
    # Scheduled re-fetches finish first so the list on screen is their result.
    await app.settle()
    print_notices(app)
    print()
    print(render(app.state, color=_color_enabled()))
    print()


def _start_stdin_reader(loop: asyncio.AbstractEventLoop, queue: asyncio.Queue[str | None]) -> None:
    """
    Read stdin on a daemon thread and hand lines to the event loop.

    None on the queue means EOF. The thread is a daemon so a blocked input()
    never keeps the process alive after the loop is gone.
    """

    def _reader() -> None:
        while True:
            try:
                line: str | None = input()
            except EOFError:
                line = None
            with contextlib.suppress(RuntimeError):
                # Loop already closed: nobody is listening anymore.
                loop.call_soon_threadsafe(queue.put_nowait, line)
            if line is None:
                return

    threading.Thread(target=_reader, name="console-stdin", daemon=True).start()


async def run_console_loop(app: TodoApp) -> None:
    logger.info("Console connector started (backend=%s).", type(app.state.backend).__name__)
    _print_ts("[CONSOLE] Use /help for commands. Use /exit to quit.")

    def emit(text: str) -> None:
        # Immediate user-visible feedback while a request is in flight.
        print(f"[{_ts_local()}] {text}", flush=True)

    lines: asyncio.Queue[str | None] = asyncio.Queue()
    _start_stdin_reader(asyncio.get_running_loop(), lines)

    await show_screen(app)

    while True:
        print("> ", end="", flush=True)
        raw = await lines.get()
        if raw is None:
            logger.info("Console EOF received, exiting.")
            print()
            break

        user_input = raw.strip()
        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            reply = await command_registry.handle(app, user_input, emit=emit)
        except Exception:
            logger.exception("Command handler crashed.")
            reply = "Internal error while handling a command."

        if reply is None:
            _print_ts("Commands start with '/'. Use /help to list available commands.")
            continue

        if reply:
            print_notices(app)
            _print_ts(reply)
            continue

        await show_screen(app)

    logger.info("Console connector finished.")
