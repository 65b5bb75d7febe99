# src/supatodo/todos/todo_models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class Priority(StrEnum):
    """
    Task priority.

    The create path only ever produces these three values; rows coming back
    from the backend with anything else are kept as raw text for display.
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def parse(cls, raw: str | None) -> Priority | None:
        if not raw:
            return None
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return None


def priority_label(priority: str) -> str:
    """'low' -> 'Low Priority'."""
    value = str(priority or "")
    return f"{value[:1].upper()}{value[1:]} Priority"


@dataclass(slots=True)
class Todo:
    id: str
    title: str
    description: str
    is_completed: bool
    due_date: str | None
    priority: str
    created_at: str
    user_id: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Todo:
        return cls(
            id=str(row["id"]),
            title=str(row.get("title") or ""),
            description=str(row.get("description") or ""),
            is_completed=bool(row.get("is_completed", False)),
            due_date=row.get("due_date") or None,
            priority=str(row.get("priority") or Priority.MEDIUM.value),
            created_at=str(row.get("created_at") or ""),
            user_id=row.get("user_id"),
        )

    @property
    def priority_label(self) -> str:
        return priority_label(self.priority)


@dataclass(slots=True)
class TodoDraft:
    """Unsaved input of the "add todo" form."""

    title: str = ""
    description: str = ""
    due_date: str = ""
    priority: str = Priority.MEDIUM.value

    def reset(self) -> None:
        self.title = ""
        self.description = ""
        self.due_date = ""
        self.priority = Priority.MEDIUM.value

    def as_dict(self) -> dict[str, str]:
        return {
            "title": self.title,
            "description": self.description,
            "due_date": self.due_date,
            "priority": self.priority,
        }

    def to_record(self, user_id: str) -> dict[str, Any]:
        # An empty datetime input means "no due date" for a timestamp column.
        return {
            "title": self.title,
            "description": self.description,
            "due_date": self.due_date or None,
            "priority": self.priority,
            "user_id": user_id,
        }
