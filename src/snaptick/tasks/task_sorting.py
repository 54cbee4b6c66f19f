# src/snaptick/tasks/task_sorting.py

from __future__ import annotations

from collections.abc import Iterable
from enum import IntEnum

from .task_models import Task


class SortTask(IntEnum):
    """Sort order for the task list; the value is the persisted ordinal."""

    BY_CREATE_TIME_ASCENDING = 0
    BY_CREATE_TIME_DESCENDING = 1
    BY_PRIORITY_ASCENDING = 2
    BY_PRIORITY_DESCENDING = 3
    BY_START_TIME_ASCENDING = 4
    BY_START_TIME_DESCENDING = 5

    @classmethod
    def from_ordinal(cls, raw: int, default: SortTask | None = None) -> SortTask:
        try:
            return cls(raw)
        except ValueError:
            return default if default is not None else cls.BY_START_TIME_ASCENDING


def sort_tasks(tasks: Iterable[Task], sort_by: SortTask) -> list[Task]:
    """
    Order tasks for display.

    Creation time is approximated by the store id. Priority and start-time
    orders break ties by start time, then id, so the result is deterministic.
    """
    items = list(tasks)

    if sort_by == SortTask.BY_CREATE_TIME_ASCENDING:
        return sorted(items, key=lambda t: t.id)
    if sort_by == SortTask.BY_CREATE_TIME_DESCENDING:
        return sorted(items, key=lambda t: t.id, reverse=True)
    if sort_by == SortTask.BY_PRIORITY_ASCENDING:
        return sorted(items, key=lambda t: (t.priority, t.start_time, t.id))
    if sort_by == SortTask.BY_PRIORITY_DESCENDING:
        return sorted(items, key=lambda t: (-t.priority, t.start_time, t.id))
    if sort_by == SortTask.BY_START_TIME_DESCENDING:
        return sorted(items, key=lambda t: (t.start_time, t.id), reverse=True)
    return sorted(items, key=lambda t: (t.start_time, t.id))
