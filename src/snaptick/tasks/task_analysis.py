# src/snaptick/tasks/task_analysis.py

"""Free-time analysis over a day's tasks (the data behind the analysis chart)."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .task_models import Task

DAY_SECONDS = 24 * 60 * 60


@dataclass(slots=True, frozen=True)
class DurationSlice:
    task: Task
    seconds: int
    share: float  # fraction of the total planned time, 0..1


def duration_breakdown(tasks: Iterable[Task]) -> list[DurationSlice]:
    """Incomplete tasks, longest first, with their share of the planned time."""
    pending = [t for t in tasks if not t.is_completed]
    pending.sort(key=lambda t: -t.duration().total_seconds())

    seconds = [max(0, int(t.duration().total_seconds())) for t in pending]
    total = sum(seconds)
    return [
        DurationSlice(task=t, seconds=s, share=(s / total) if total else 0.0)
        for t, s in zip(pending, seconds)
    ]


def free_time_seconds(tasks: Iterable[Task], day_seconds: int = DAY_SECONDS) -> int:
    """Seconds of the day not taken by incomplete tasks (never negative)."""
    busy = sum(s.seconds for s in duration_breakdown(tasks))
    return max(0, day_seconds - busy)


def format_duration(seconds: int) -> str:
    hours, rem = divmod(max(0, int(seconds)), 3600)
    minutes = rem // 60
    if hours and minutes:
        return f"{hours}h {minutes}m"
    if hours:
        return f"{hours}h"
    return f"{minutes}m"
