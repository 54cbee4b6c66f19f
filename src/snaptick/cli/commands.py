# src/snaptick/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, time
from typing import Protocol

from ..core import events as ev
from ..core.errors import InvalidTaskError, TaskNotFoundError
from ..core.state import AppState
from ..core.viewmodel import TaskViewModel
from ..tasks.task_analysis import duration_breakdown, format_duration, free_time_seconds
from ..tasks.task_models import Priority, Task
from ..tasks.task_sorting import SortTask
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)

WEEKDAYS = ["mon", "tue", "wed", "thu", "fri", "sat", "sun"]

PRIORITY_NAMES = {
    "low": Priority.LOW,
    "med": Priority.MEDIUM,
    "medium": Priority.MEDIUM,
    "high": Priority.HIGH,
}


class CommandContext(Protocol):
    """What command handlers need from the running session (ViewModelRunner fits)."""

    @property
    def app(self): ...

    def dispatch(self, event: ev.Event, timeout: float | None = ...) -> object: ...

    def call(self, factory, timeout: float | None = ...): ...


CommandHandler = Callable[[CommandContext, list[str]], str]


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

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

    def handle(self, ctx: CommandContext, line: str) -> str | None:
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

        try:
            return handler(ctx, args)
        except InvalidTaskError as e:
            return f"Invalid task: {e}"
        except TaskNotFoundError as e:
            return f"No task with id {e.task_id}."
        except ValueError as e:
            return f"Bad arguments: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- parsing helpers ----


def parse_hhmm(raw: str) -> time:
    try:
        return datetime.strptime(raw, "%H:%M").time()
    except ValueError:
        raise ValueError(f"expected HH:MM, got {raw!r}") from None


def parse_weekdays(raw: str) -> list[int]:
    out: list[int] = []
    for part in raw.lower().split(","):
        part = part.strip()[:3]
        if part not in WEEKDAYS:
            raise ValueError(f"unknown weekday {part!r} (use {','.join(WEEKDAYS)})")
        out.append(WEEKDAYS.index(part))
    return sorted(set(out))


def parse_on_off(raw: str) -> bool:
    v = raw.strip().lower()
    if v in ("on", "yes", "true", "1"):
        return True
    if v in ("off", "no", "false", "0"):
        return False
    raise ValueError(f"expected on/off, got {raw!r}")


def parse_task_id(args: list[str]) -> int:
    if not args or not args[0].isdigit():
        raise ValueError("expected a task id")
    return int(args[0])


def render_task(task: Task) -> str:
    mark = "x" if task.is_completed else " "
    flags = ""
    if task.reminder:
        flags += " (reminder)"
    if task.is_repeat:
        days = ",".join(WEEKDAYS[d] for d in task.repeat_weekdays) or "-"
        flags += f" (repeat {days})"
    return (
        f"#{task.id} [{mark}] {task.start_time:%H:%M}-{task.end_time:%H:%M} "
        f"{task.priority.name.lower():<6} {task.title}{flags}"
    )


def _vm(ctx: CommandContext) -> TaskViewModel:
    return ctx.app.viewmodel


def _store(ctx: CommandContext) -> TaskStore:
    return ctx.app.task_store


# ---- handlers ----


def cmd_help(ctx: CommandContext, args: list[str]) -> str:
    return registry.build_help()


def cmd_list(ctx: CommandContext, args: list[str]) -> str:
    vm = _vm(ctx)
    tasks = ctx.call(vm.snapshot_today)
    if not tasks:
        return "No tasks for today."
    header = f"Today ({vm.today():%a %d %b}, sorted {vm.state.sort_by.name.lower()}):"
    return "\n".join([header, *(render_task(t) for t in tasks)])


def cmd_add(ctx: CommandContext, args: list[str]) -> str:
    """
    /add HH:MM HH:MM title words... [!low|!med|!high] [+remind] [+repeat=mon,wed] [#category]
    """
    if len(args) < 3:
        raise ValueError("usage: /add HH:MM HH:MM title [!high] [+remind] [+repeat=mon,wed] [#category]")

    start, end = parse_hhmm(args[0]), parse_hhmm(args[1])
    title_words: list[str] = []
    priority = Priority.LOW
    reminder = False
    repeat_days: list[int] | None = None
    category = ""

    for token in args[2:]:
        if token.startswith("!") and token[1:].lower() in PRIORITY_NAMES:
            priority = PRIORITY_NAMES[token[1:].lower()]
        elif token == "+remind":
            reminder = True
        elif token.startswith("+repeat"):
            _, _, days = token.partition("=")
            repeat_days = parse_weekdays(days) if days else list(range(7))
        elif token.startswith("#") and len(token) > 1:
            category = token[1:]
        else:
            title_words.append(token)

    vm = _vm(ctx)
    task = Task(
        id=0,
        uuid="",
        title=" ".join(title_words),
        start_time=start,
        end_time=end,
        date=vm.today(),
        reminder=reminder,
        is_repeat=repeat_days is not None,
        repeat_weekdays=repeat_days or [],
        category=category,
        priority=priority,
    )
    stored = ctx.dispatch(ev.Create(task))
    if stored is None:
        return "Task could not be saved (see log)."
    return f"Added {render_task(stored)}"


def _mark(ctx: CommandContext, args: list[str], done: bool) -> str:
    task_id = parse_task_id(args)
    updated = ctx.dispatch(ev.MarkCompleted(task_id, done))
    if updated is None:
        return f"Could not update task #{task_id} (see log)."
    return render_task(updated)


def cmd_done(ctx: CommandContext, args: list[str]) -> str:
    return _mark(ctx, args, True)


def cmd_undo(ctx: CommandContext, args: list[str]) -> str:
    return _mark(ctx, args, False)


def cmd_edit(ctx: CommandContext, args: list[str]) -> str:
    """/edit ID field value...  (fields: title start end priority reminder repeat days category)"""
    task_id = parse_task_id(args)
    if len(args) < 3:
        raise ValueError("usage: /edit ID field value")
    field, value = args[1].lower(), " ".join(args[2:])

    if field == "title":
        change: ev.AddEditScreenEvent = ev.UpdateTitle(value)
    elif field == "start":
        change = ev.UpdateStartTime(parse_hhmm(value))
    elif field == "end":
        change = ev.UpdateEndTime(parse_hhmm(value))
    elif field == "priority":
        if value.lower() not in PRIORITY_NAMES:
            raise ValueError("priority is one of low, med, high")
        change = ev.UpdatePriority(PRIORITY_NAMES[value.lower()])
    elif field == "reminder":
        change = ev.UpdateReminder(parse_on_off(value))
    elif field == "repeat":
        change = ev.UpdateIsRepeated(parse_on_off(value))
    elif field == "days":
        change = ev.UpdateRepeatWeekdays(tuple(parse_weekdays(value)))
    elif field == "category":
        change = ev.UpdateCategory(value)
    else:
        raise ValueError(f"unknown field {field!r}")

    vm = _vm(ctx)
    if ctx.dispatch(ev.RequestEdit(task_id)) is None:
        raise TaskNotFoundError(task_id)
    ctx.dispatch(change)
    ctx.dispatch(ev.Update())
    return f"Updated {render_task(vm.staged_task)}"


def cmd_delete(ctx: CommandContext, args: list[str]) -> str:
    task_id = parse_task_id(args)
    task = _store(ctx).get_by_id(task_id)
    ctx.dispatch(ev.SwipeDelete(task))
    return f"Deleted #{task_id} {task.title}"


def cmd_pomodoro(ctx: CommandContext, args: list[str]) -> str:
    task_id = parse_task_id(args)
    task = ctx.dispatch(ev.RequestPomodoro(task_id))
    if task is None:
        raise TaskNotFoundError(task_id)
    seconds = task.pomodoro_timer or int(task.duration().total_seconds())
    return f"Pomodoro for #{task.id} {task.title}: {format_duration(seconds)}"


def cmd_theme(ctx: CommandContext, args: list[str]) -> str:
    if not args or args[0].lower() not in ("amoled", "dark"):
        return f"Theme: {_vm(ctx).state.theme.name.lower()} (use /theme amoled|dark)"
    ctx.dispatch(ev.ToggleAmoledTheme(args[0].lower() == "amoled"))
    return f"Theme set to {_vm(ctx).state.theme.name.lower()}."


def cmd_sort(ctx: CommandContext, args: list[str]) -> str:
    names = {s.name.lower(): s for s in SortTask}
    if not args or args[0].lower() not in names:
        return "Sort options: " + ", ".join(names)
    ctx.dispatch(ev.UpdateSortByTask(names[args[0].lower()]))
    return f"Sorting by {_vm(ctx).state.sort_by.name.lower()}."


def cmd_freetime(ctx: CommandContext, args: list[str]) -> str:
    vm = _vm(ctx)
    tasks = ctx.call(vm.snapshot_today)
    free = free_time_seconds(tasks)
    ctx.dispatch(ev.UpdateFreeTime(free))

    lines = [f"Free time: {format_duration(free)}"]
    for piece in duration_breakdown(tasks):
        lines.append(f"  {format_duration(piece.seconds):>7} {piece.share:5.0%} {piece.task.title}")
    return "\n".join(lines)


def cmd_streak(ctx: CommandContext, args: list[str]) -> str:
    streak = _vm(ctx).state.streak
    return f"Streak: {streak} day{'s' if streak != 1 else ''}"


def render_about(state: AppState, app_name: str) -> str:
    return (
        f"{app_name} {state.build_version}\n"
        f"  theme: {state.theme.name.lower()}\n"
        f"  sort: {state.sort_by.name.lower()}\n"
        f"  streak: {state.streak}"
    )


def cmd_about(ctx: CommandContext, args: list[str]) -> str:
    return render_about(_vm(ctx).state, str(getattr(ctx.app.settings, "app_name", "snaptick")))


def _nav(item: ev.NavDrawerItem, reply: str) -> CommandHandler:
    def handler(ctx: CommandContext, args: list[str]) -> str:
        ctx.dispatch(ev.NavDrawerAction(item))
        return reply

    return handler


registry.register("help", cmd_help, "Show this help")
registry.register("list", cmd_list, "List today's tasks", aliases=["ls"])
registry.register("add", cmd_add, "Add a task: /add 09:00 10:00 title [!high] [+remind] [+repeat=mon,wed]")
registry.register("done", cmd_done, "Mark a task completed: /done ID")
registry.register("undo", cmd_undo, "Mark a task not completed: /undo ID")
registry.register("edit", cmd_edit, "Edit one field: /edit ID title|start|end|priority|reminder|repeat|days|category VALUE")
registry.register("delete", cmd_delete, "Delete a task: /delete ID", aliases=["rm"])
registry.register("pomodoro", cmd_pomodoro, "Show the pomodoro length of a task: /pomodoro ID")
registry.register("theme", cmd_theme, "Show or set theme: /theme amoled|dark")
registry.register("sort", cmd_sort, "Show or set sort order: /sort by_priority_descending")
registry.register("freetime", cmd_freetime, "Analyse today's free time")
registry.register("streak", cmd_streak, "Show the day streak")
registry.register("about", cmd_about, "Show version and settings")
registry.register("report", _nav(ev.NavDrawerItem.REPORT_BUGS, "Opening bug report mail..."), "Report a bug")
registry.register("suggest", _nav(ev.NavDrawerItem.SUGGESTIONS, "Opening suggestions mail..."), "Send a suggestion")
registry.register("rate", _nav(ev.NavDrawerItem.RATE_US, "Opening store page..."), "Rate the app")
registry.register("share", _nav(ev.NavDrawerItem.SHARE_APP, "Sharing..."), "Share the app")
