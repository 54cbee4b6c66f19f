# src/snaptick/core/events.py

"""
Events accepted by TaskViewModel.on_event().

Three families, one per screen:
- MainEvent: app-wide settings and navigation drawer
- HomeScreenEvent: actions on the task list
- AddEditScreenEvent: the edit form (field updates + commit)

Each family is a union of frozen dataclasses; the class itself is the tag.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from enum import Enum
from typing import Union

from ..tasks.task_models import Priority, Task
from ..tasks.task_sorting import SortTask


class NavDrawerItem(str, Enum):
    REPORT_BUGS = "report_bugs"
    SUGGESTIONS = "suggestions"
    RATE_US = "rate_us"
    SHARE_APP = "share_app"


# ---- Main (app-level) ----


@dataclass(slots=True, frozen=True)
class ToggleAmoledTheme:
    enabled: bool


@dataclass(slots=True, frozen=True)
class UpdateSortByTask:
    sort_task: SortTask


@dataclass(slots=True, frozen=True)
class UpdateFreeTime:
    free_time: int | None


@dataclass(slots=True, frozen=True)
class NavDrawerAction:
    item: NavDrawerItem


MainEvent = Union[ToggleAmoledTheme, UpdateSortByTask, UpdateFreeTime, NavDrawerAction]


# ---- Home screen (task list) ----


@dataclass(slots=True, frozen=True)
class MarkCompleted:
    task_id: int
    is_completed: bool


@dataclass(slots=True, frozen=True)
class RequestEdit:
    task_id: int


@dataclass(slots=True, frozen=True)
class RequestPomodoro:
    task_id: int


@dataclass(slots=True, frozen=True)
class SwipeDelete:
    task: Task


HomeScreenEvent = Union[MarkCompleted, RequestEdit, RequestPomodoro, SwipeDelete]


# ---- Add/Edit screen ----


@dataclass(slots=True, frozen=True)
class UpdateTitle:
    title: str


@dataclass(slots=True, frozen=True)
class UpdateStartTime:
    start_time: time


@dataclass(slots=True, frozen=True)
class UpdateEndTime:
    end_time: time


@dataclass(slots=True, frozen=True)
class UpdatePriority:
    priority: Priority


@dataclass(slots=True, frozen=True)
class UpdateReminder:
    reminder: bool


@dataclass(slots=True, frozen=True)
class UpdateIsRepeated:
    is_repeated: bool


@dataclass(slots=True, frozen=True)
class UpdateRepeatWeekdays:
    weekdays: tuple[int, ...]


@dataclass(slots=True, frozen=True)
class UpdateCategory:
    category: str


@dataclass(slots=True, frozen=True)
class UpdatePomodoroTimer:
    seconds: int


@dataclass(slots=True, frozen=True)
class Create:
    task: Task


@dataclass(slots=True, frozen=True)
class Update:
    pass


@dataclass(slots=True, frozen=True)
class Delete:
    task: Task


AddEditScreenEvent = Union[
    UpdateTitle,
    UpdateStartTime,
    UpdateEndTime,
    UpdatePriority,
    UpdateReminder,
    UpdateIsRepeated,
    UpdateRepeatWeekdays,
    UpdateCategory,
    UpdatePomodoroTimer,
    Create,
    Update,
    Delete,
]

Event = Union[MainEvent, HomeScreenEvent, AddEditScreenEvent]
