# src/task_timer/cli/commands.py

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from ..core.errors import PreconditionError, TimerError
from ..core.state import AppState
from ..tasks.task_api import delete_task, save_task
from ..tasks.task_models import Task

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /time, ...)."""

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

        return handler(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def format_duration(seconds: int) -> str:
    seconds = max(0, int(seconds))
    h, rem = divmod(seconds, 3600)
    m, s = divmod(rem, 60)
    return f"{h:d}:{m:02d}:{s:02d}"


def _resolve_task(state: AppState, ref: str) -> Task | None:
    """Accept either a numeric id or a task name."""
    ref = ref.strip()
    if ref.isdigit():
        return state.task_store.get_task(int(ref))
    return state.task_store.find_task_by_name(ref)


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <name>                  -> new task
    /add <name> | <description>  -> new task with a description
    """
    raw = " ".join(args)
    name, _, description = raw.partition("|")
    task = save_task(state.task_store, Task(name=name.strip(), description=description.strip()))
    if not task.is_persisted:
        return "Usage: /add <name> [| description]"
    return f"Added task #{task.id}: {task.name}"


def cmd_list(state: AppState, args: list[str]) -> str:
    tasks = state.task_list.tasks.value
    if not tasks:
        return "No tasks yet. Use /add <name> to create one."

    timing = state.engine.current
    lines = ["Tasks:"]
    for t in tasks:
        marker = "*" if timing is not None and timing.task_id == t.id else " "
        desc = f" - {t.description}" if t.description else ""
        lines.append(f" {marker} #{t.id} {t.name}{desc}")
    return "\n".join(lines)


def cmd_time(state: AppState, args: list[str]) -> str:
    """
    /time <id|name>  -> start timing, stop it (same task) or switch to it
    """
    if not args:
        return "Usage: /time <task id or name>"

    task = _resolve_task(state, " ".join(args))
    if task is None:
        return f"No such task: {' '.join(args)}"

    try:
        timing = state.engine.toggle(task)
    except PreconditionError as e:
        return f"Cannot time this task: {e}"

    if timing is None:
        return f"Stopped timing {task.name}."
    return f"Timing {task.name}."


def cmd_stop(state: AppState, args: list[str]) -> str:
    timing = state.engine.current
    if timing is None:
        return "Nothing is being timed."
    task = state.task_store.get_task(timing.task_id)
    if task is None:
        # Task was deleted while being timed; toggling a stand-in still closes the timing.
        task = Task(name=state.engine.current_task_name or "", id=timing.task_id)
    state.engine.toggle(task)
    return f"Stopped timing {task.name}."


def cmd_delete(state: AppState, args: list[str]) -> str:
    if not args or not args[0].isdigit():
        return "Usage: /delete <task id>"
    task_id = int(args[0])
    task = state.task_store.get_task(task_id)
    if task is None:
        return f"No such task: #{task_id}"
    delete_task(state.task_store, task_id)
    return f"Deleted task #{task_id}: {task.name}"


def cmd_ignore(state: AppState, args: list[str]) -> str:
    """
    /ignore        -> show the threshold
    /ignore <n>    -> ignore timings shorter than n seconds
    """
    if not args:
        return f"Timings shorter than {state.settings_watcher.ignore_threshold}s are discarded."
    try:
        value = int(args[0])
    except ValueError:
        return "Usage: /ignore <seconds>"
    value = state.settings_watcher.set_ignore_threshold(value)
    return f"Now discarding timings shorter than {value}s."


def cmd_report(state: AppState, args: list[str]) -> str:
    """
    /report        -> all-time totals per task
    /report <days> -> totals for the last <days> days
    """
    since = None
    if args:
        if not args[0].isdigit():
            return "Usage: /report [days]"
        since = int(time.time()) - int(args[0]) * 86400

    # Make sure closes issued so far are visible.
    state.writer.flush(timeout=5.0)
    try:
        totals = state.ledger.task_totals(since=since)
    except TimerError:
        logger.exception("task_totals failed")
        return "Report is unavailable right now (storage error)."

    if not totals:
        return "No recorded timings."
    lines = ["Time per task:"]
    for t in totals:
        lines.append(f"  {format_duration(t.total_seconds)}  {t.task_name} ({t.sessions} sessions)")
    return "\n".join(lines)


def cmd_status(state: AppState, args: list[str]) -> str:
    name = state.engine.current_task_name
    elapsed = state.engine.elapsed()
    now = f"{name} ({format_duration(elapsed or 0)})" if name is not None else "nothing"
    backend = str(getattr(state.settings, "storage_backend", "sqlite"))
    return (
        "Status:\n"
        f"  Timing: {now}\n"
        f"  Ignore threshold: {state.engine.ignore_threshold}s\n"
        f"  Storage: {backend}\n"
        f"  Pending writes: {state.writer.pending}, failed writes: {state.writer.failed_writes}"
    )


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("add", cmd_add, help_text="Add a task: /add <name> [| description].")
registry.register("list", cmd_list, help_text="List tasks (* marks the one being timed).", aliases=["ls"])
registry.register("time", cmd_time, help_text="Start/stop/switch timing: /time <id|name>.", aliases=["t"])
registry.register("stop", cmd_stop, help_text="Stop the current timing.")
registry.register("delete", cmd_delete, help_text="Delete a task and its timings: /delete <id>.")
registry.register("ignore", cmd_ignore, help_text="Show/set the ignore threshold: /ignore [seconds].")
registry.register("report", cmd_report, help_text="Time per task: /report [days].")
registry.register("status", cmd_status, help_text="Show what is being timed and storage health.")
