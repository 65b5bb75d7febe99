# src/supatodo/core/view.py

"""
Text rendering of the two screens.

- Unauthenticated: sign-in or sign-up form (by auth_mode).
- Authenticated: header, "add todo" form, then the list (or a loading/empty line).

Rendering is a pure function of AppState; connectors decide where it goes.
"""

from __future__ import annotations

from datetime import datetime

from ..auth.auth_models import AuthMode
from ..todos.todo_models import Priority, Todo, TodoDraft, priority_label
from .state import AppState, Screen

LOADING_TEXT = "Loading todos..."
EMPTY_TEXT = "No todos yet. Add one above!"
PASSWORD_HINT = "Password must be at least 6 characters long"

_RESET = "\033[0m"
_BOLD = "\033[1m"
_DIM = "\033[2m"
_STRIKE = "\033[9m"
_RED = "\033[31m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"

_BADGE_COLORS = {
    Priority.HIGH.value: _RED,
    Priority.MEDIUM.value: _YELLOW,
}


def _style(text: str, codes: str, color: bool) -> str:
    if not color or not codes:
        return text
    return f"{codes}{text}{_RESET}"


def format_due_date(raw: str | None) -> str | None:
    """ISO timestamp -> local time for display. Naive values are already local."""
    if not raw:
        return None
    try:
        dt = datetime.fromisoformat(raw)
    except ValueError:
        return raw
    if dt.tzinfo is not None:
        dt = dt.astimezone()
    return dt.strftime("%Y-%m-%d %H:%M")


def priority_badge(priority: str, *, color: bool = False) -> str:
    # Anything that is not high/medium gets the "low" styling.
    return _style(f"[{priority_label(priority)}]", _BADGE_COLORS.get(priority, _GREEN), color)


def render_todo(index: int, todo: Todo, *, color: bool = False) -> str:
    mark = _style("[x]", _GREEN, color) if todo.is_completed else "[ ]"
    title = _style(todo.title, _STRIKE + _DIM, color) if todo.is_completed else _style(todo.title, _BOLD, color)

    lines = [f"{index:>2}. {mark} {title}"]
    if todo.description:
        lines.append(f"       {todo.description}")
    due = format_due_date(todo.due_date)
    if due:
        lines.append(f"       Due: {due}")
    lines.append(f"       {priority_badge(todo.priority, color=color)}")
    return "\n".join(lines)


def render_draft(draft: TodoDraft) -> str:
    due = draft.due_date or "-"
    return (
        "New todo:\n"
        f"  title:       {draft.title or '-'}\n"
        f"  description: {draft.description or '-'}\n"
        f"  due:         {due}\n"
        f"  priority:    {priority_label(draft.priority)}\n"
        "  (/title, /desc, /due, /priority to edit; /add to save)"
    )


def _render_auth(state: AppState, *, color: bool) -> str:
    app_name = str(getattr(state.settings, "app_name", "Todo App"))
    lines = [_style(f"== {app_name} ==", _BOLD, color), ""]

    if state.auth_mode == AuthMode.SIGN_IN:
        lines += [
            "Sign In:  /signin <email> <password>",
            "",
            "Don't have an account?  /mode signup",
        ]
    else:
        lines.append("Sign Up:  /signup <email> <password>")
        if state.password_error:
            lines.append("  " + _style(state.password_error, _RED, color))
        lines += [
            f"  {PASSWORD_HINT}",
            "",
            "Already have an account?  /mode signin",
        ]
    return "\n".join(lines)


def _render_todos(state: AppState, *, color: bool) -> str:
    email = state.session.user.email if state.session is not None else None
    who = f"  ({email})" if email else ""
    lines = [
        _style("== My Todos ==", _BOLD, color) + who + "    /signout",
        "",
        render_draft(state.draft),
        "",
    ]

    if state.screen == Screen.LOADING:
        lines.append(LOADING_TEXT)
    elif not state.todos:
        lines.append(EMPTY_TEXT)
    else:
        lines += [render_todo(i, t, color=color) for i, t in enumerate(state.todos, start=1)]
        lines += ["", "(/done <n> toggles, /rm <n> deletes)"]
    return "\n".join(lines)


def render(state: AppState, *, color: bool = False) -> str:
    if state.screen == Screen.UNAUTHENTICATED:
        return _render_auth(state, color=color)
    return _render_todos(state, color=color)
