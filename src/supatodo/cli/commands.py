# src/supatodo/cli/commands.py

from __future__ import annotations

import contextlib
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime

from ..auth.auth_models import AuthMode
from ..core.app import TodoApp
from ..todos.todo_models import Priority, Todo

CommandEmitter = Callable[[str], None]
CommandHandler = Callable[[TodoApp, list[str], CommandEmitter | None], Awaitable[str]]

logger = logging.getLogger(__name__)

_DUE_FORMATS = ("%Y-%m-%d %H:%M", "%Y-%m-%dT%H:%M", "%Y-%m-%d")


class CommandRegistry:
    """
    Slash-command registry used by the console (/help, /add, ...).

    Handlers return the text to show, or "" when the only visible effect is
    the re-rendered screen (plus any notifications).
    `signed_in` restricts a command to one screen: True -> task list only,
    False -> auth forms only, None -> everywhere.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}
        self._gates: dict[str, bool | None] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
        signed_in: bool | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        self._gates[key] = signed_in
        for alias in aliases:
            self._handlers[alias.lower()] = handler
            self._gates[alias.lower()] = signed_in

    async def handle(
        self,
        app: TodoApp,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        gate = self._gates.get(name)
        signed_in = app.state.session is not None
        if gate is True and not signed_in:
            return "Sign in first: /signin <email> <password>"
        if gate is False and signed_in:
            return "Already signed in. Use /signout first."

        # Never log args: /signin and /signup carry a password.
        logger.debug("command /%s (%d args)", name, len(args))
        return await handler(app, args, emit)

    def build_help(self, app: TodoApp | None = None) -> str:
        signed_in = app is not None and app.state.session is not None
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            gate = self._gates.get(name)
            if app is not None and gate is not None and gate != signed_in:
                continue
            lines.append(f"  /{name} - {help_text}")
        lines.append("  /exit - Quit.")
        return "\n".join(lines)


registry = CommandRegistry()


def parse_due(args: list[str]) -> str | None:
    """'2025-05-01 18:30' -> '2025-05-01T18:30' (datetime-local form). None if unparseable."""
    raw = " ".join(args).strip()
    for fmt in _DUE_FORMATS:
        try:
            dt = datetime.strptime(raw, fmt)
        except ValueError:
            continue
        return dt.strftime("%Y-%m-%dT%H:%M")
    return None


def _pick(app: TodoApp, args: list[str]) -> Todo | None:
    if len(args) != 1:
        return None
    try:
        idx = int(args[0])
    except ValueError:
        return None
    todos = app.state.todos
    if 1 <= idx <= len(todos):
        return todos[idx - 1]
    return None


# ---- general ----


async def cmd_help(app: TodoApp, args: list[str], emit: CommandEmitter | None = None) -> str:
    return registry.build_help(app)


async def cmd_status(app: TodoApp, args: list[str], emit: CommandEmitter | None = None) -> str:
    state = app.state
    backend = type(state.backend).__name__
    if state.session is None:
        who = "signed out"
    else:
        who = f"signed in as {state.session.user.email or state.session.user.id}"
    return (
        "Status:\n"
        f"  Backend: {backend}\n"
        f"  Session: {who}\n"
        f"  Screen: {state.screen.value}\n"
        f"  Todos loaded: {len(state.todos)}\n"
        f"  Pending refreshes: {app.todo_list.pending_fetches}"
    )


# ---- auth screen ----


async def cmd_mode(app: TodoApp, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /mode signin  -> sign-in form
    /mode signup  -> create-account form
    """
    arg = args[0].lower() if args else ""
    if arg in ("signin", "in", "login"):
        app.sessions.set_auth_mode(AuthMode.SIGN_IN)
        return ""
    if arg in ("signup", "up", "register"):
        app.sessions.set_auth_mode(AuthMode.SIGN_UP)
        return ""
    return "Usage: /mode signin | /mode signup"


async def cmd_signin(app: TodoApp, args: list[str], emit: CommandEmitter | None = None) -> str:
    if len(args) != 2:
        return "Usage: /signin <email> <password>"
    email, password = args

    app.sessions.set_auth_mode(AuthMode.SIGN_IN)
    if emit:
        with contextlib.suppress(Exception):
            emit("Signing in...")
    await app.sessions.sign_in(email, password)
    return ""


async def cmd_signup(app: TodoApp, args: list[str], emit: CommandEmitter | None = None) -> str:
    if len(args) != 2:
        return "Usage: /signup <email> <password>"
    email, password = args

    state = app.state
    state.auth_mode = AuthMode.SIGN_UP
    app.sessions.enter_password(password)
    await app.sessions.sign_up(email, password)
    return ""


# ---- task list screen ----


async def cmd_signout(app: TodoApp, args: list[str], emit: CommandEmitter | None = None) -> str:
    await app.sessions.sign_out()
    return ""


async def cmd_title(app: TodoApp, args: list[str], emit: CommandEmitter | None = None) -> str:
    app.state.draft.title = " ".join(args)
    return ""


async def cmd_desc(app: TodoApp, args: list[str], emit: CommandEmitter | None = None) -> str:
    app.state.draft.description = " ".join(args)
    return ""


async def cmd_due(app: TodoApp, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /due 2025-05-01 18:30  -> set due date
    /due clear             -> no due date
    """
    if args and args[0].lower() in ("clear", "none", "-"):
        app.state.draft.due_date = ""
        return ""
    due = parse_due(args)
    if due is None:
        return "Usage: /due YYYY-MM-DD [HH:MM] | /due clear"
    app.state.draft.due_date = due
    return ""


async def cmd_priority(app: TodoApp, args: list[str], emit: CommandEmitter | None = None) -> str:
    priority = Priority.parse(args[0]) if len(args) == 1 else None
    if priority is None:
        return "Usage: /priority low | medium | high"
    app.state.draft.priority = priority.value
    return ""


async def cmd_add(app: TodoApp, args: list[str], emit: CommandEmitter | None = None) -> str:
    draft = app.state.draft
    if args:
        draft.title = " ".join(args)
    if not draft.title.strip():
        # Same as a required input: nothing is sent.
        return "Title is required: /add <title> or /title <text> first."
    await app.todo_list.create()
    return ""


async def cmd_done(app: TodoApp, args: list[str], emit: CommandEmitter | None = None) -> str:
    todo = _pick(app, args)
    if todo is None:
        return "Usage: /done <n> (number from the list)"
    await app.todo_list.toggle(todo.id, todo.is_completed)
    return ""


async def cmd_rm(app: TodoApp, args: list[str], emit: CommandEmitter | None = None) -> str:
    todo = _pick(app, args)
    if todo is None:
        return "Usage: /rm <n> (number from the list)"
    await app.todo_list.delete(todo.id)
    return ""


async def cmd_refresh(app: TodoApp, args: list[str], emit: CommandEmitter | None = None) -> str:
    await app.todo_list.fetch()
    return ""


async def cmd_list(app: TodoApp, args: list[str], emit: CommandEmitter | None = None) -> str:
    return ""


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show backend/session status.")
registry.register(
    "signin", cmd_signin, help_text="Sign in: /signin <email> <password>.", aliases=["login"], signed_in=False
)
registry.register(
    "signup", cmd_signup, help_text="Create an account: /signup <email> <password>.", signed_in=False
)
registry.register("mode", cmd_mode, help_text="Switch form: /mode signin | /mode signup.", signed_in=False)
registry.register("signout", cmd_signout, help_text="Sign out.", aliases=["logout"], signed_in=True)
registry.register("title", cmd_title, help_text="Set the new todo's title.", signed_in=True)
registry.register("desc", cmd_desc, help_text="Set the new todo's description.", signed_in=True)
registry.register("due", cmd_due, help_text="Set the due date: /due YYYY-MM-DD [HH:MM] | clear.", signed_in=True)
registry.register("priority", cmd_priority, help_text="Set priority: low | medium | high.", signed_in=True)
registry.register("add", cmd_add, help_text="Save the new todo: /add [title].", signed_in=True)
registry.register("done", cmd_done, help_text="Toggle completion: /done <n>.", aliases=["toggle"], signed_in=True)
registry.register("rm", cmd_rm, help_text="Delete a todo: /rm <n>.", aliases=["del", "delete"], signed_in=True)
registry.register("refresh", cmd_refresh, help_text="Reload the list from the server.", signed_in=True)
registry.register("list", cmd_list, help_text="Show the list again.", aliases=["ls"], signed_in=True)
