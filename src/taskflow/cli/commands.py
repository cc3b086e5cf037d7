# src/taskflow/cli/commands.py

from __future__ import annotations

import inspect
import logging
import shlex
from collections.abc import Callable
from datetime import datetime
from typing import cast

from ..core.clock import calendar_day, resolve_timezone
from ..core.errors import InvalidInput, PermissionDenied, TaskflowError
from ..core.state import AppState
from ..meetings import meeting_api
from ..tasks import analytics, status_engine, task_api
from ..tasks.task_models import Task, TaskStatus
from ..users import permissions, user_api
from ..users.user_models import User, UserRole

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

SHORT_ID = 8


class CommandRegistry:
    """Slash-command registry used by the console (/help, /tasks, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Application errors (bad input, forbidden, finished task...) become
        the reply; anything else propagates to the caller.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError:
            parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        try:
            if nparams >= 3:
                h3 = cast(CommandHandler3, handler)
                return h3(state, args, emit)
            h2 = cast(CommandHandler2, handler)
            return h2(state, args)
        except TaskflowError as e:
            logger.debug("/%s rejected: %s", name, e)
            return f"[!] {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- helpers ----


def _require_user(state: AppState) -> User:
    if state.current_user is None:
        raise PermissionDenied("Please /login or /register first.")
    return state.current_user


def _split_kv(args: list[str]) -> tuple[list[str], dict[str, str]]:
    positional: list[str] = []
    named: dict[str, str] = {}
    for a in args:
        key, sep, value = a.partition("=")
        if sep and key.isidentifier():
            named[key.lower()] = value
        else:
            positional.append(a)
    return positional, named


def _user_names(state: AppState) -> dict[str, str]:
    return {u.id: u.name for u in state.users.list_users()}


def _format_local(state: AppState, instant: datetime) -> str:
    return instant.astimezone(resolve_timezone(state.timezone)).strftime("%Y-%m-%d %H:%M:%S")


def format_task(task: Task, now: datetime, *, names: dict[str, str], tz: str) -> str:
    shown = status_engine.display_status(task, now, tz)
    assignee = names.get(task.assignee_id or "", "unassigned")
    return f"{task.id[:SHORT_ID]}  [{shown.label}]  {task.title}  (due {task.due_date.isoformat()}, {assignee})"


def _parse_role(raw: str) -> UserRole:
    try:
        return UserRole(raw.strip().upper())
    except ValueError as e:
        raise InvalidInput(f"Unknown role: {raw} (use operator or user)") from e


def _parse_status(raw: str) -> TaskStatus:
    try:
        return TaskStatus.parse(raw)
    except ValueError as e:
        raise InvalidInput(f"Unknown status: {raw} (use not_started, in_progress or done)") from e


# ---- session ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_register(state: AppState, args: list[str]) -> str:
    """/register <name> <password> [job title...]"""
    if len(args) < 2:
        return "Usage: /register <name> <password> [job title]"
    user = state.users.register_user(name=args[0], password=args[1], title=" ".join(args[2:]))
    state.current_user = user
    return f"Welcome, {user.name}! You are registered as {user.role.label} ({user.title})."


def cmd_login(state: AppState, args: list[str]) -> str:
    """/login <name> [password]"""
    if not args:
        return "Usage: /login <name> [password]"
    user = state.users.login_user(args[0], args[1] if len(args) > 1 else None)
    if user is None:
        return "Wrong user name or password."
    state.current_user = user
    return f"Logged in as {user.name} ({user.role.label})."


def cmd_logout(state: AppState, args: list[str]) -> str:
    if state.current_user is None:
        return "Not logged in."
    name = state.current_user.name
    state.current_user = None
    state.pending_suggestions = []
    return f"Logged out {name}."


def cmd_whoami(state: AppState, args: list[str]) -> str:
    user = _require_user(state)
    return f"{user.name} - {user.title} - {user.role.label}"


def cmd_now(state: AppState, args: list[str]) -> str:
    now = state.reference_now()
    return f"Current system time ({state.timezone}): {_format_local(state, now)}"


# ---- tasks ----


def cmd_tasks(state: AppState, args: list[str]) -> str:
    """
    /tasks        -> all tasks, by due date
    /tasks my     -> tasks assigned to me
    """
    user = _require_user(state)
    scope = "my" if args and args[0].lower() in ("my", "mine", "me") else "all"
    tasks = task_api.list_tasks(state, user, scope=scope)
    if not tasks:
        return "No tasks."

    now = state.reference_now()
    names = _user_names(state)
    lines = [f"Tasks ({scope}), now {_format_local(state, now)}:"]
    lines.extend(format_task(t, now, names=names, tz=state.timezone) for t in tasks)
    return "\n".join(lines)


def cmd_show(state: AppState, args: list[str]) -> str:
    _require_user(state)
    if not args:
        return "Usage: /show <task id>"
    task = task_api.resolve_task(state, args[0])
    now = state.reference_now()
    names = _user_names(state)
    lines = [
        format_task(task, now, names=names, tz=state.timezone),
        f"  id: {task.id}",
        f"  created by: {names.get(task.creator_id or '', '-')}",
    ]
    if task.content:
        lines.append(f"  {task.content}")
    if task.completed_at:
        lines.append(f"  completed at: {_format_local(state, task.completed_at)}")
    return "\n".join(lines)


def cmd_add(state: AppState, args: list[str]) -> str:
    """/add title="..." due=YYYY-MM-DD [to=<name>] [content="..."]"""
    user = _require_user(state)
    positional, named = _split_kv(args)
    title = named.get("title") or " ".join(positional)
    if not title or "due" not in named:
        return 'Usage: /add title="..." due=YYYY-MM-DD [to=<name>] [content="..."]'

    task = task_api.create_task(
        state,
        user,
        title=title,
        due_date=named["due"],
        content=named.get("content", ""),
        assignee_name=named.get("to"),
    )
    return f"Task created: {task.id[:SHORT_ID]} {task.title} (due {task.due_date.isoformat()})"


def cmd_status(state: AppState, args: list[str]) -> str:
    """/status <id> <not_started|in_progress|done> [progress]"""
    user = _require_user(state)
    if len(args) < 2:
        return "Usage: /status <task id> <not_started|in_progress|done> [progress]"

    requested = _parse_status(args[1])
    progress = args[2] if len(args) > 2 else None
    now = state.reference_now()
    task = task_api.change_status(state, user, args[0], requested, now=now, progress=progress)

    reply = f"{task.id[:SHORT_ID]} -> {status_engine.display_status(task, now, state.timezone).label}"
    if requested is TaskStatus.COMPLETED and task.status is TaskStatus.COMPLETED_LATE:
        reply += " (the due date had passed, so it is recorded as completed late)"
    return reply


def cmd_progress(state: AppState, args: list[str]) -> str:
    user = _require_user(state)
    if len(args) < 2:
        return "Usage: /progress <task id> <0-100>"
    now = state.reference_now()
    task = task_api.change_progress(state, user, args[0], args[1], now=now)
    return f"{task.id[:SHORT_ID]} -> {status_engine.display_status(task, now, state.timezone).label}"


def cmd_due(state: AppState, args: list[str]) -> str:
    user = _require_user(state)
    if len(args) < 2:
        return "Usage: /due <task id> <YYYY-MM-DD>"
    task = task_api.change_due_date(state, user, args[0], args[1])
    return f"{task.id[:SHORT_ID]} is now due {task.due_date.isoformat()}"


def cmd_delete(state: AppState, args: list[str]) -> str:
    user = _require_user(state)
    if not args:
        return "Usage: /delete <task id>"
    task = task_api.delete_task(state, user, args[0])
    return f"Deleted {task.id[:SHORT_ID]} {task.title}"


# ---- team ----


def cmd_team(state: AppState, args: list[str]) -> str:
    user = _require_user(state)
    permissions.require(permissions.can_view_team(user), "view team performance")

    now = state.reference_now()
    rows = analytics.team_performance(
        state.users.list_users(), state.tasks.list_tasks(), now, tz=state.timezone
    )
    if not rows:
        return "No team members yet."
    lines = ["Team performance (score / on time / late / overdue / total):"]
    for r in rows:
        lines.append(
            f"  {r.name} ({r.title}, {r.role.label}): {r.score} / {r.completed} / {r.late} / {r.overdue} / {r.total}"
        )
    return "\n".join(lines)


def cmd_users(state: AppState, args: list[str]) -> str:
    user = _require_user(state)
    permissions.require(permissions.can_view_team(user), "list users")
    lines = ["Users:"]
    for u in state.users.list_users():
        lines.append(f"  {u.name} - {u.title} - {u.role.label}")
    return "\n".join(lines)


def cmd_role(state: AppState, args: list[str]) -> str:
    """/role <name> <operator|user> (admin only)"""
    user = _require_user(state)
    if len(args) < 2:
        return "Usage: /role <name> <operator|user>"
    updated = user_api.change_role(state, user, args[0], _parse_role(args[1]))
    return f"{updated.name} is now {updated.role.label}."


# ---- meetings ----


def _format_suggestions(state: AppState) -> str:
    if not state.pending_suggestions:
        return "No pending suggestions."
    lines = ["Suggested tasks (/suggestion <n> to edit, /drop <n> to remove, /accept to create them):"]
    for i, s in enumerate(state.pending_suggestions, start=1):
        who = s.assignee_name or "unassigned"
        due = s.due_date or "no date"
        lines.append(f"  {i}. {s.title or '(untitled)'} - {who} - {due}")
    return "\n".join(lines)


def _run_meeting(state: AppState, emit: CommandEmitter | None, **source: object) -> str:
    user = _require_user(state)
    if emit:
        emit("[AI] Analyzing the meeting... this may take a while.")
    now = state.reference_now()
    meeting, result = meeting_api.process_meeting(state, user, now=now, **source)  # type: ignore[arg-type]
    return f"{meeting.title}\n\nMinutes:\n{result.summary}\n\n{_format_suggestions(state)}"


def cmd_meeting(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """/meeting <transcript text>"""
    if not args:
        return "Usage: /meeting <transcript text>"
    return _run_meeting(state, emit, content=" ".join(args))


def cmd_meeting_audio(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """/meeting-audio <path to .wav/.mp3>"""
    if not args:
        return "Usage: /meeting-audio <path to .wav or .mp3>"
    return _run_meeting(state, emit, audio_path=args[0])


def cmd_suggestions(state: AppState, args: list[str]) -> str:
    _require_user(state)
    return _format_suggestions(state)


def _suggestion_number(raw: str) -> int:
    try:
        return int(raw)
    except ValueError as e:
        raise InvalidInput(f"Suggestion number expected, got {raw!r}.") from e


def cmd_suggestion(state: AppState, args: list[str]) -> str:
    """/suggestion <n> [title="..."] [content="..."] [to=<name>] [due=YYYY-MM-DD]"""
    _require_user(state)
    positional, named = _split_kv(args)
    fields = {k: named[k] for k in ("title", "content", "to", "due") if k in named}
    if len(positional) != 1 or not fields:
        return 'Usage: /suggestion <n> [title="..."] [content="..."] [to=<name>] [due=YYYY-MM-DD]'

    meeting_api.edit_suggestion(
        state,
        _suggestion_number(positional[0]),
        title=fields.get("title"),
        content=fields.get("content"),
        assignee_name=fields.get("to"),
        due_date=fields.get("due"),
    )
    return _format_suggestions(state)


def cmd_drop(state: AppState, args: list[str]) -> str:
    _require_user(state)
    if len(args) != 1:
        return "Usage: /drop <n>"
    dropped = meeting_api.drop_suggestion(state, _suggestion_number(args[0]))
    return f"Dropped: {dropped.title or '(untitled)'}\n\n{_format_suggestions(state)}"


def cmd_accept(state: AppState, args: list[str]) -> str:
    user = _require_user(state)
    if not state.pending_suggestions:
        return "No pending suggestions."
    created = meeting_api.accept_suggestions(state, user, now=state.reference_now())
    return f"Created {len(created)} task(s)."


def cmd_meetings(state: AppState, args: list[str]) -> str:
    _require_user(state)
    meetings = state.meetings.list_meetings(limit=10)
    if not meetings:
        return "No meetings recorded."
    lines = ["Recent meetings:"]
    for m in meetings:
        day = calendar_day(m.date, state.timezone).isoformat()
        lines.append(f"  {day} {m.title}: {(m.summary or '').strip()[:120]}")
    return "\n".join(lines)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("register", cmd_register, help_text="Create an account: /register <name> <password> [title].")
registry.register("login", cmd_login, help_text="Log in: /login <name> [password].")
registry.register("logout", cmd_logout, help_text="Log out.")
registry.register("whoami", cmd_whoami, help_text="Show the current user.")
registry.register("now", cmd_now, help_text="Show the network-synchronized system time.")
registry.register("tasks", cmd_tasks, help_text="List tasks: /tasks [my|all].", aliases=["ls"])
registry.register("show", cmd_show, help_text="Show one task: /show <id>.")
registry.register("add", cmd_add, help_text='New task: /add title="..." due=YYYY-MM-DD [to=name] [content="..."].')
registry.register("status", cmd_status, help_text="Change status: /status <id> <not_started|in_progress|done> [progress].")
registry.register("progress", cmd_progress, help_text="Set progress: /progress <id> <0-100>.")
registry.register("due", cmd_due, help_text="Change due date: /due <id> <YYYY-MM-DD>.")
registry.register("delete", cmd_delete, help_text="Delete a task: /delete <id>.", aliases=["rm"])
registry.register("team", cmd_team, help_text="Team performance and efficiency scores.")
registry.register("users", cmd_users, help_text="List users and roles.")
registry.register("role", cmd_role, help_text="Change a role: /role <name> <operator|user>.")
registry.register("meeting", cmd_meeting, help_text="Extract minutes and tasks from text: /meeting <text>.")
registry.register("meeting-audio", cmd_meeting_audio, help_text="Same, from a recording: /meeting-audio <file>.")
registry.register("suggestions", cmd_suggestions, help_text="Show pending AI task suggestions.")
registry.register("suggestion", cmd_suggestion, help_text='Edit a suggestion: /suggestion <n> [title=..] [content=..] [to=name] [due=YYYY-MM-DD].')
registry.register("drop", cmd_drop, help_text="Remove a suggestion: /drop <n>.")
registry.register("accept", cmd_accept, help_text="Create tasks from pending suggestions.")
registry.register("meetings", cmd_meetings, help_text="List recent meetings.")
