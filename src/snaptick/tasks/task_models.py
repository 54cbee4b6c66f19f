# src/snaptick/tasks/task_models.py

from __future__ import annotations

import uuid as uuid_lib
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time, timedelta
from enum import IntEnum

from ..core.errors import InvalidTaskError


class Priority(IntEnum):
    """Task priority; the value is the persisted ordinal."""

    LOW = 0
    MEDIUM = 1
    HIGH = 2

    @classmethod
    def from_db(cls, raw: int | None) -> Priority:
        if raw is None:
            return cls.LOW
        try:
            return cls(int(raw))
        except (TypeError, ValueError):
            return cls.LOW


def new_task_uuid() -> str:
    return str(uuid_lib.uuid4())


@dataclass(slots=True)
class Task:
    """
    A time-boxed to-do item for a single day.

    `uuid` is the stable identity used to correlate reminders; `id` is the
    store's row id (0 until inserted) and may change if a task is re-created.
    """

    id: int
    uuid: str
    title: str
    start_time: time
    end_time: time
    date: date

    is_completed: bool = False
    reminder: bool = False
    is_repeat: bool = False
    repeat_weekdays: list[int] = field(default_factory=list)
    pomodoro_timer: int = 0  # seconds
    category: str = ""
    priority: Priority = Priority.LOW

    def duration(self) -> timedelta:
        """end_time - start_time on the same day."""
        start = datetime.combine(self.date, self.start_time)
        end = datetime.combine(self.date, self.end_time)
        return end - start

    def repeats_on(self, day: date) -> bool:
        return self.is_repeat and day.weekday() in self.repeat_weekdays

    def validate(self) -> None:
        if self.end_time < self.start_time:
            raise InvalidTaskError(
                f"end time {self.end_time:%H:%M} is before start time {self.start_time:%H:%M}"
            )
        if self.pomodoro_timer < 0:
            raise InvalidTaskError("pomodoro timer must be nonnegative")
        bad_days = [d for d in self.repeat_weekdays if not 0 <= d <= 6]
        if bad_days:
            raise InvalidTaskError(f"repeat weekdays out of range: {bad_days}")

    def copy(self, **changes) -> Task:
        return replace(self, **changes)


def blank_task(now: datetime) -> Task:
    """Empty staged task, as shown by a fresh edit form."""
    current = now.time().replace(second=0, microsecond=0)
    return Task(
        id=0,
        uuid="",
        title="",
        start_time=current,
        end_time=current,
        date=now.date(),
    )
