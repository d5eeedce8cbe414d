# src/weekly_status/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from datetime import date
from pathlib import Path

from ..core.dates import week_key
from ..core.errors import InvalidImport
from ..core.models import StorageMode, Task
from ..core.state import AppState

CommandResult = str | Awaitable[str]
CommandHandler = Callable[[AppState, list[str]], CommandResult]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /tile, ...)."""

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

    def handle(self, state: AppState, line: str) -> CommandResult | None:
        """
        Handle a string like "/command args".
        Returns a reply (a string, or an awaitable for async commands)
        or None if the line is not a command.
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

        return handler(state, args)

    async def handle_async(self, state: AppState, line: str) -> str | None:
        reply = self.handle(state, line)
        if inspect.isawaitable(reply):
            return await reply
        return reply

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- argument helpers ----


def _resolve_week(arg: str) -> str:
    if arg.lower() in ("this", "now", "current"):
        return week_key(date.today())
    return arg


def _position(arg: str) -> int | None:
    """1-based position as typed by the user -> 0-based index."""
    try:
        n = int(arg)
    except ValueError:
        return None
    return n - 1


def _parse_fields(args: list[str]) -> dict[str, str]:
    """`status=done name=Write the report` -> {"status": "done", "name": "Write the report"}"""
    fields: dict[str, str] = {}
    current: str | None = None
    for token in args:
        if "=" in token:
            key, _, value = token.partition("=")
            current = key.strip().lower()
            fields[current] = value
        elif current is not None:
            fields[current] = f"{fields[current]} {token}".strip()
    return fields


def _resolve_id(items: list, prefix: str) -> str | None:
    """Accept a full id or any unique prefix of one."""
    matches = [it["id"] for it in items if it["id"].startswith(prefix)]
    if prefix in matches:
        return prefix
    return matches[0] if len(matches) == 1 else None


def _short(item_id: str) -> str:
    return item_id[:8]


def _storage_label(state: AppState) -> str:
    if state.sync.storage_mode is StorageMode.REMOTE:
        return f"Project file via {getattr(state.settings, 'remote_base_url', 'remote store')}"
    return "Local slot (fallback)"


def _format_task(n: int, task: Task) -> str:
    name = task["name"] or "(untitled)"
    return f"{n:>2}. [{_short(task['id'])}] {task['priority']} {task['status']:<11} {name}"


# ---- commands ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    doc = state.sync.document
    return (
        "Status:\n"
        f"  Storage: {_storage_label(state)}\n"
        f"  Weeks: {len(doc['weeks'])}  Tasks: {len(doc['tasks'])}  Skills: {len(doc['skills'])}\n"
        f"  Task sort: {doc['taskSortMode']}"
    )


def cmd_weeks(state: AppState, args: list[str]) -> str:
    keys = state.weeks.week_keys()
    if not keys:
        return "No weeks yet. Use /week next to start one."

    lines: list[str] = []
    for key in keys:
        tiles = state.weeks.tiles(key)
        word = "tile" if len(tiles) == 1 else "tiles"
        lines.append(f"{state.weeks.label(key)} ({len(tiles)} {word})")
        for i, tile in enumerate(tiles, start=1):
            lines.append(f"  {i:>2}. {tile['text']}")
    return "\n".join(lines)


def cmd_week(state: AppState, args: list[str]) -> str:
    """
    /week next            -> add the week after the newest one
    /week prev            -> add the week before the oldest one
    /week add DATE        -> add a specific week
    /week rm DATE [yes]   -> delete a week (asks first)
    """
    if not args:
        return "Usage: /week next | /week prev | /week add DATE | /week rm DATE [yes]"

    sub = args[0].lower()

    if sub == "next":
        return f"Added {state.weeks.label(state.weeks.add_next_week())}."

    if sub in ("prev", "previous"):
        return f"Added {state.weeks.label(state.weeks.add_previous_week())}."

    if sub == "add" and len(args) >= 2:
        key = _resolve_week(args[1])
        try:
            created = state.weeks.ensure_week(key)
        except ValueError as e:
            return str(e)
        return f"Added {state.weeks.label(key)}." if created else f"{state.weeks.label(key)} already exists."

    if sub in ("rm", "delete") and len(args) >= 2:
        key = _resolve_week(args[1])
        week = state.weeks.get(key)
        if week is None:
            return f"No week {key}."
        confirmed = len(args) >= 3 and args[2].lower() in ("yes", "y")
        if not confirmed:
            n = len(week["tiles"])
            word = "tile" if n == 1 else "tiles"
            return f"Delete {state.weeks.label(key)}? This removes {n} {word}. Repeat with 'yes' to confirm."
        state.weeks.delete_week(key)
        return f"Deleted {state.weeks.label(key)}."

    return "Usage: /week next | /week prev | /week add DATE | /week rm DATE [yes]"


def cmd_tile(state: AppState, args: list[str]) -> str:
    """
    /tile add WEEK TEXT...
    /tile edit WEEK N TEXT...
    /tile rm WEEK N
    /tile mv WEEK FROM TO
    /tile up WEEK N | /tile down WEEK N
    """
    usage = "Usage: /tile add|edit|rm|mv|up|down WEEK ... (WEEK is a date or 'this')"
    if len(args) < 2:
        return usage

    sub = args[0].lower()
    key = _resolve_week(args[1])
    rest = args[2:]

    if sub == "add":
        try:
            state.weeks.add_tile(key, " ".join(rest))
        except ValueError as e:
            return str(e)
        return f"Tile added to {key}."

    pos = _position(rest[0]) if rest else None
    if pos is None:
        return usage

    if sub == "edit":
        ok = state.weeks.update_tile(key, pos, " ".join(rest[1:]))
        return "Tile updated." if ok else "No such tile."

    if sub in ("rm", "delete"):
        ok = state.weeks.delete_tile(key, pos)
        return "Tile deleted." if ok else "No such tile."

    if sub in ("mv", "move"):
        target = _position(rest[1]) if len(rest) >= 2 else None
        if target is None:
            return usage
        ok = state.weeks.move_tile(key, pos, target)
        return "Tile moved." if ok else "Cannot move there."

    if sub in ("up", "down"):
        ok = state.weeks.move_tile_relative(key, pos, -1 if sub == "up" else 1)
        return "Tile moved." if ok else "Cannot move there."

    return usage


def cmd_tasks(state: AppState, args: list[str]) -> str:
    """
    /tasks            -> list tasks in the current sort order
    /tasks sort MODE  -> priority | status | created_at
    """
    if len(args) >= 2 and args[0].lower() == "sort":
        if not state.tasks.set_sort_mode(args[1].lower()):
            if args[1].lower() != state.tasks.sort_mode:
                return "Sort mode must be one of: priority, status, created_at."

    tasks = state.tasks.sorted_tasks()
    if not tasks:
        return "No tasks yet. Use /task add NAME."
    lines = [f"Tasks (sorted by {state.tasks.sort_mode}):"]
    lines.extend(_format_task(i, t) for i, t in enumerate(tasks, start=1))
    return "\n".join(lines)


def cmd_task(state: AppState, args: list[str]) -> str:
    """
    /task add NAME...
    /task set ID name=... status=... priority=...
    /task rm ID
    """
    usage = "Usage: /task add NAME | /task set ID field=value ... | /task rm ID"
    if not args:
        return usage

    sub = args[0].lower()

    if sub == "add":
        task_id = state.tasks.add(" ".join(args[1:]))
        return f"Task {_short(task_id)} added."

    if len(args) < 2:
        return usage

    task_id = _resolve_id(state.tasks.tasks(), args[1])
    if task_id is None:
        return f"No task matches {args[1]!r}."

    if sub == "set":
        fields = _parse_fields(args[2:])
        if not fields:
            return usage
        state.tasks.update(task_id, fields)
        task = state.tasks.get(task_id)
        return _format_task(1, task).split(". ", 1)[1] if task else "Task updated."

    if sub in ("rm", "delete"):
        state.tasks.delete(task_id)
        return f"Task {_short(task_id)} deleted."

    return usage


def cmd_columns(state: AppState, args: list[str]) -> str:
    """
    /columns                          -> show stored widths
    /columns name_status DELTA        -> drag the name|status border
    /columns status_priority DELTA    -> drag the status|priority border
    /columns fit WIDTH                -> preview widths for an available width
    """
    if not args:
        cols = state.tasks.columns()
        return f"Columns: name={cols['name']} status={cols['status']} priority={cols['priority']}"

    sub = args[0].lower()
    try:
        amount = float(args[1]) if len(args) >= 2 else None
    except ValueError:
        amount = None
    if amount is None:
        return "Usage: /columns [name_status|status_priority DELTA | fit WIDTH]"

    if sub == "fit":
        cols = state.tasks.fitted_columns(amount)
        return f"Fitted to {amount:g}: name={cols['name']} status={cols['status']} priority={cols['priority']}"

    try:
        cols = state.tasks.resize_columns(sub, amount)
    except ValueError as e:
        return str(e)
    return f"Columns: name={cols['name']} status={cols['status']} priority={cols['priority']}"


def cmd_skills(state: AppState, args: list[str]) -> str:
    skills = state.skills.skills()
    if not skills:
        return "No skills yet. Use /skill add TITLE."
    lines = []
    for i, s in enumerate(skills, start=1):
        lines.append(f"{i:>2}. [{_short(s['id'])}] {s['title'] or '(untitled)'}")
        if s["text"]:
            lines.append(f"      {s['text']}")
    return "\n".join(lines)


def cmd_skill(state: AppState, args: list[str]) -> str:
    """
    /skill add TITLE...
    /skill set ID title=... text=...
    /skill rm ID
    /skill mv FROM TO
    """
    usage = "Usage: /skill add TITLE | /skill set ID title=.. text=.. | /skill rm ID | /skill mv FROM TO"
    if not args:
        return usage

    sub = args[0].lower()

    if sub == "add":
        skill_id = state.skills.add(title=" ".join(args[1:]))
        return f"Skill {_short(skill_id)} added."

    if sub in ("mv", "move") and len(args) >= 3:
        src, dst = _position(args[1]), _position(args[2])
        if src is None or dst is None:
            return usage
        return "Skill moved." if state.skills.move_within(src, dst) else "Cannot move there."

    if len(args) < 2:
        return usage

    skill_id = _resolve_id(state.skills.skills(), args[1])
    if skill_id is None:
        return f"No skill matches {args[1]!r}."

    if sub == "set":
        fields = _parse_fields(args[2:])
        if not fields:
            return usage
        state.skills.update(skill_id, fields)
        return f"Skill {_short(skill_id)} updated."

    if sub in ("rm", "delete"):
        state.skills.delete(skill_id)
        return f"Skill {_short(skill_id)} deleted."

    return usage


def cmd_export(state: AppState, args: list[str]) -> str:
    directory = Path(args[0]) if args else Path(".")
    try:
        path = state.sync.export_file(directory)
    except OSError as e:
        logger.warning("Export failed: %s", e)
        return f"Export failed: {e}"
    return f"Exported to {path}"


def cmd_import(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /import FILE"
    try:
        state.sync.import_file(" ".join(args))
    except InvalidImport as e:
        return f"Import failed: {e}"
    return "Import complete."


async def cmd_sync(state: AppState, args: list[str]) -> str:
    """Explicitly re-check the remote store (the only way back from local-only mode)."""
    ok = await state.sync.refresh()
    if ok:
        return "Reloaded from the state server."
    return "State server unreachable; still using the local slot."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show storage mode and totals.")
registry.register("weeks", cmd_weeks, help_text="List weeks (newest first) with their tiles.")
registry.register("week", cmd_week, help_text="Weeks: /week next | prev | add DATE | rm DATE [yes].")
registry.register("tile", cmd_tile, help_text="Tiles: /tile add|edit|rm|mv|up|down WEEK ...")
registry.register("tasks", cmd_tasks, help_text="List tasks: /tasks [sort priority|status|created_at].")
registry.register("task", cmd_task, help_text="Tasks: /task add NAME | set ID k=v | rm ID.")
registry.register("columns", cmd_columns, help_text="Task column widths: /columns [PAIR DELTA | fit WIDTH].")
registry.register("skills", cmd_skills, help_text="List skills.")
registry.register("skill", cmd_skill, help_text="Skills: /skill add TITLE | set ID k=v | rm ID | mv FROM TO.")
registry.register("export", cmd_export, help_text="Export the document: /export [DIR].")
registry.register("import", cmd_import, help_text="Replace the document from a file: /import FILE.")
registry.register("sync", cmd_sync, help_text="Re-check the state server and reload from it.")
