# src/supatodo/logging_setup.py

"""
Logging for the terminal app.

stderr shares the terminal with the rendered todo list, so only what the
user should act on reaches it. The file under the data dir gets everything,
including every HTTP request the backend client makes.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "supatodo.log"

# Minimum level a record needs to be printed on the terminal, by logger prefix.
# Longest matching prefix wins; anything not listed falls back to ERROR.
_CONSOLE_THRESHOLDS: dict[str, int] = {
    "supatodo": logging.DEBUG,
    # polls the session every interval; only failures are interesting
    "supatodo.backend.refresher": logging.WARNING,
    "py.warnings": logging.ERROR,
}

# Libraries that log each request at INFO/DEBUG.
_CHATTY_LIBRARIES = ("httpx", "httpcore")


def console_threshold(logger_name: str) -> int:
    best = ""
    for prefix in _CONSOLE_THRESHOLDS:
        if (logger_name == prefix or logger_name.startswith(prefix + ".")) and len(prefix) > len(best):
            best = prefix
    return _CONSOLE_THRESHOLDS[best] if best else logging.ERROR


class _TerminalFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= console_threshold(record.name)


def level_from_name(name: str | None, default: int = logging.WARNING) -> int:
    """'info' -> logging.INFO; unknown names give `default`."""
    level = logging.getLevelName(str(name or "").strip().upper())
    return level if isinstance(level, int) else default


def setup_logging(
    *,
    log_dir: str | Path = ".local/supatodo",
    console_level: int = logging.WARNING,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Replace the root handlers with a filtered stderr handler and a log file.

    Returns the log file path. Call once, before the app is built.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    terminal = logging.StreamHandler(sys.stderr)
    terminal.setLevel(console_level)
    terminal.setFormatter(fmt)
    terminal.addFilter(_TerminalFilter())
    root.addHandler(terminal)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    for name in _CHATTY_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.captureWarnings(True)
    return log_file
