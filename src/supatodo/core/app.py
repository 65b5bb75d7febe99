# src/supatodo/core/app.py

from __future__ import annotations

from dataclasses import dataclass

from ..auth.session_manager import SessionManager
from ..todos.todo_list import TodoListController
from .state import AppState


@dataclass
class TodoApp:
    """View state plus the two controllers that act on it."""

    state: AppState
    sessions: SessionManager
    todo_list: TodoListController

    @classmethod
    def wire(cls, state: AppState) -> TodoApp:
        todo_list = TodoListController(state)
        return cls(state=state, sessions=SessionManager(state, todo_list), todo_list=todo_list)

    async def settle(self) -> None:
        await self.todo_list.settle()
