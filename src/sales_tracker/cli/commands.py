# src/sales_tracker/cli/commands.py

from __future__ import annotations

import logging
import shlex
from collections.abc import Callable
from typing import Any

from ..core.state import AppState
from ..tasks.task_models import DerivedTask, TaskInput

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)

# key=value aliases accepted by /add and /update.
_FIELD_ALIASES = {
    "title": "title",
    "revenue": "revenue",
    "rev": "revenue",
    "hours": "time_taken",
    "time": "time_taken",
    "timetaken": "time_taken",
    "time_taken": "time_taken",
    "priority": "priority",
    "prio": "priority",
    "status": "status",
    "notes": "notes",
    "note": "notes",
}


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /list, ...)."""

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

    def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError as e:
            return f"Could not parse command: {e}."
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        logger.debug("Command /%s args=%s", name, args)
        return handler(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _parse_fields(args: list[str]) -> tuple[dict[str, Any], list[str]]:
    """Split key=value pairs (known fields only) from positional words."""
    fields: dict[str, Any] = {}
    rest: list[str] = []
    for arg in args:
        key, sep, value = arg.partition("=")
        field = _FIELD_ALIASES.get(key.strip().lower()) if sep else None
        if field is None:
            rest.append(arg)
            continue
        fields[field] = value
    return fields, rest


def _resolve_id(state: AppState, token: str) -> str | None:
    """Accept a full id or a unique id prefix."""
    token = token.strip()
    if not token:
        return None
    ids = [t.id for t in state.store.tasks]
    if token in ids:
        return token
    matches = [i for i in ids if i.startswith(token)]
    return matches[0] if len(matches) == 1 else None


def _format_task_line(pos: int, d: DerivedTask) -> str:
    t = d.task
    flag = " *" if d.is_high_value else ""
    return (
        f"{pos:>3}. [{t.id[:8]}] {t.title} | {t.status.value} | {t.priority.value} | "
        f"rev {t.revenue:,.2f} | {t.time_taken:g}h | ROI {d.roi:,.2f}{flag}"
    )


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    store = state.store
    pending = store.last_deleted
    undo = f"'{pending.title}' (use /undo)" if pending is not None else "none"
    return (
        "Status:\n"
        f"  Store: {store.state.value}\n"
        f"  Tasks: {len(store)}\n"
        f"  Load error: {store.error or 'none'}\n"
        f"  Pending undo: {undo}"
    )


def cmd_list(state: AppState, args: list[str]) -> str:
    """
    /list      -> top 20 ranked tasks
    /list N    -> top N
    /list all  -> everything
    """
    store = state.store
    if store.loading:
        return "Tasks are still loading."

    limit: int | None = 20
    if args:
        if args[0].lower() == "all":
            limit = None
        else:
            try:
                limit = max(1, int(args[0]))
            except ValueError:
                return "Usage: /list [N|all]."

    ranked = store.ranked_derived_tasks
    if not ranked:
        return "No tasks."

    shown = ranked if limit is None else ranked[:limit]
    lines = [f"Tasks by ROI ({len(shown)} of {len(ranked)}, * = high value):"]
    lines.extend(_format_task_line(i, d) for i, d in enumerate(shown, start=1))
    return "\n".join(lines)


def cmd_metrics(state: AppState, args: list[str]) -> str:
    m = state.store.metrics
    return (
        "Metrics:\n"
        f"  Total revenue: {m.total_revenue:,.2f}\n"
        f"  Total time: {m.total_time_taken:,.1f}h\n"
        f"  Time efficiency: {m.time_efficiency_pct:.1f}%\n"
        f"  Revenue per hour: {m.revenue_per_hour:,.2f}\n"
        f"  Average ROI: {m.average_roi:,.2f}\n"
        f"  Grade: {m.performance_grade.value}"
    )


def cmd_add(state: AppState, args: list[str]) -> str:
    """/add <title words...> [revenue=..] [hours=..] [priority=..] [status=..] [notes=..]"""
    fields, rest = _parse_fields(args)
    title = fields.pop("title", None) or " ".join(rest)
    if not title.strip():
        return "Usage: /add <title> [revenue=N] [hours=N] [priority=Low|Medium|High] [status=Todo|InProgress|Done] [notes=...]"

    task_input = TaskInput(title=title, **fields)
    task_id = state.store.add(task_input)
    task = state.store.get(task_id)
    if task is None:
        return "Task was not added."
    return f"Added [{task_id[:8]}] {task.title} ({task.status.value})."


def cmd_update(state: AppState, args: list[str]) -> str:
    """/update <id> key=value ..."""
    if not args:
        return "Usage: /update <id> key=value ..."

    task_id = _resolve_id(state, args[0])
    if task_id is None:
        return f"No task matches id '{args[0]}'."

    fields, rest = _parse_fields(args[1:])
    if rest or not fields:
        return "Usage: /update <id> key=value ... (keys: title, revenue, hours, priority, status, notes)"

    state.store.update(task_id, fields)
    task = state.store.get(task_id)
    if task is None:
        return f"No task matches id '{args[0]}'."
    return f"Updated [{task_id[:8]}] {task.title} ({task.status.value})."


def cmd_done(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /done <id>"
    return cmd_update(state, [args[0], "status=Done"])


def cmd_delete(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /delete <id>"

    task_id = _resolve_id(state, args[0])
    if task_id is None:
        return f"No task matches id '{args[0]}'."

    state.store.delete(task_id)
    deleted = state.store.last_deleted
    title = deleted.title if deleted is not None else task_id
    return f"Deleted '{title}'. Use /undo to restore it."


def cmd_undo(state: AppState, args: list[str]) -> str:
    pending = state.store.last_deleted
    if pending is None:
        return "Nothing to undo."
    state.store.undo_delete()
    return f"Restored '{pending.title}'."


def cmd_dismiss(state: AppState, args: list[str]) -> str:
    state.store.clear_last_deleted()
    return "Undo cleared."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show store state, load error and pending undo.")
registry.register("list", cmd_list, help_text="Ranked tasks: /list [N|all].", aliases=["ls"])
registry.register("metrics", cmd_metrics, help_text="Show aggregate metrics and grade.")
registry.register(
    "add",
    cmd_add,
    help_text="Add a task: /add <title> revenue=N hours=N priority=.. status=.. notes=..",
)
registry.register("update", cmd_update, help_text="Update a task: /update <id> key=value ...")
registry.register("done", cmd_done, help_text="Mark a task Done: /done <id>.")
registry.register("delete", cmd_delete, help_text="Delete a task: /delete <id>.", aliases=["rm"])
registry.register("undo", cmd_undo, help_text="Restore the last deleted task.")
registry.register("dismiss", cmd_dismiss, help_text="Forget the last deleted task.")
