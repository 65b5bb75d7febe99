# src/supatodo/todos/todo_list.py

"""
Todo list orchestration against the Backend Service.

Every mutation is a single request followed by a full re-fetch of the list;
nothing is patched locally. Re-fetches are scheduled as independent tasks:
they are neither ordered against each other nor cancelled when a newer one
starts, so a slow response may overwrite a newer snapshot of the same user.
A result that arrives after the signed-in user changed is dropped.

Failure policy (shared by all operations): catch the BackendError, show its
message as a notification, change nothing else. No retry.
"""

from __future__ import annotations

import asyncio
import logging

from ..core.ports import BackendError
from ..core.state import AppState
from .todo_models import Todo

logger = logging.getLogger(__name__)

FETCH_ERROR_TEXT = "Error loading todos"


class TodoListController:
    def __init__(self, state: AppState) -> None:
        self._state = state
        self._pending: set[asyncio.Task[None]] = set()

    # ---- re-fetch scheduling ----

    def schedule_fetch(self) -> None:
        """Fire-and-forget re-fetch (must be called from the running loop)."""
        task = asyncio.get_running_loop().create_task(self.fetch())
        self._pending.add(task)
        task.add_done_callback(self._on_fetch_done)

    def _on_fetch_done(self, task: asyncio.Task[None]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Background fetch crashed", exc_info=exc)

    @property
    def pending_fetches(self) -> int:
        return len(self._pending)

    async def settle(self) -> None:
        """Wait until every scheduled re-fetch has finished (new ones included)."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # ---- operations ----

    async def fetch(self) -> None:
        state = self._state
        owner = state.user_id
        try:
            rows = await state.backend.list_todos()
            todos = [Todo.from_row(r) for r in rows or []]
        except BackendError as e:
            logger.info("Fetch failed: %s", e.message)
            state.notifier.error(FETCH_ERROR_TEXT)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Fetch returned a malformed row: %r", e)
            state.notifier.error(FETCH_ERROR_TEXT)
        else:
            # Rows fetched for a user who has signed out since must not come back.
            if state.user_id != owner:
                logger.debug("Dropping fetch result, session changed meanwhile")
                return
            state.todos = todos
            logger.debug("Fetched %d todos", len(todos))
        state.loading = False

    async def create(self) -> bool:
        state = self._state
        user_id = state.user_id
        if user_id is None:
            logger.warning("create() called without a session; ignoring")
            return False

        record = state.draft.to_record(user_id)
        try:
            await state.backend.insert_todo(record)
        except BackendError as e:
            logger.info("Create failed: %s", e.message)
            state.notifier.error(e.message)
            return False

        state.draft.reset()
        state.notifier.success("Todo added successfully!")
        self.schedule_fetch()
        return True

    async def toggle(self, todo_id: str, is_completed: bool) -> bool:
        state = self._state
        try:
            await state.backend.update_todo(todo_id, {"is_completed": not is_completed})
        except BackendError as e:
            logger.info("Toggle failed id=%s: %s", todo_id, e.message)
            state.notifier.error(e.message)
            return False

        self.schedule_fetch()
        return True

    async def delete(self, todo_id: str) -> bool:
        state = self._state
        try:
            await state.backend.delete_todo(todo_id)
        except BackendError as e:
            logger.info("Delete failed id=%s: %s", todo_id, e.message)
            state.notifier.error(e.message)
            return False

        state.notifier.success("Todo deleted successfully!")
        self.schedule_fetch()
        return True
