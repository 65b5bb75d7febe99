# src/supatodo/core/notify.py

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import StrEnum

logger = logging.getLogger(__name__)


class NoticeKind(StrEnum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(slots=True, frozen=True)
class Notice:
    kind: NoticeKind
    text: str
    created_at: float


@dataclass(slots=True)
class Notifier:
    """
    Transient notifications ("toasts").

    Notices queue up until the connector drains them; once shown they are gone.
    Errors never change application state, they only end up here.
    """

    pending: list[Notice] = field(default_factory=list)

    def success(self, text: str) -> None:
        self._push(NoticeKind.SUCCESS, text)

    def error(self, text: str) -> None:
        self._push(NoticeKind.ERROR, text)

    def drain(self) -> list[Notice]:
        out, self.pending = self.pending, []
        return out

    def _push(self, kind: NoticeKind, text: str) -> None:
        logger.debug("notice %s: %s", kind.value, text)
        self.pending.append(Notice(kind=kind, text=text, created_at=time.time()))
