# tests/test_task_models.py

from __future__ import annotations

from datetime import date, datetime, time, timedelta

import pytest

from snaptick.core.errors import InvalidTaskError
from snaptick.tasks.task_analysis import duration_breakdown, format_duration, free_time_seconds
from snaptick.tasks.task_models import Priority, blank_task
from snaptick.tasks.task_sorting import SortTask, sort_tasks

from .fakes import make_task


def test_duration_and_validation() -> None:
    task = make_task(start=time(9, 0), end=time(10, 30))
    assert task.duration() == timedelta(hours=1, minutes=30)
    task.validate()

    # Zero-length tasks are allowed.
    make_task(start=time(9, 0), end=time(9, 0)).validate()

    with pytest.raises(InvalidTaskError):
        make_task(start=time(23, 0), end=time(1, 0)).validate()
    with pytest.raises(InvalidTaskError):
        make_task(pomodoro_timer=-1).validate()
    with pytest.raises(InvalidTaskError):
        make_task(is_repeat=True, repeat_weekdays=[7]).validate()


def test_repeats_on_uses_python_weekdays() -> None:
    wednesday = date(2024, 5, 15)
    task = make_task(is_repeat=True, repeat_weekdays=[0, 2])
    assert task.repeats_on(wednesday)
    assert not task.repeats_on(wednesday + timedelta(days=1))
    assert not make_task(repeat_weekdays=[2]).repeats_on(wednesday)


def test_blank_task_starts_at_current_minute() -> None:
    task = blank_task(datetime(2024, 5, 15, 8, 41, 13, 500))
    assert task.start_time == time(8, 41)
    assert task.end_time == time(8, 41)
    assert task.date == date(2024, 5, 15)
    assert task.uuid == "" and task.id == 0
    assert task.priority == Priority.LOW


def test_priority_from_db_falls_back_to_low() -> None:
    assert Priority.from_db(2) == Priority.HIGH
    assert Priority.from_db(None) == Priority.LOW
    assert Priority.from_db(42) == Priority.LOW


def test_sort_orders() -> None:
    a = make_task(id=1, title="a", start=time(11, 0), end=time(12, 0), priority=Priority.LOW)
    b = make_task(id=2, title="b", start=time(9, 0), end=time(10, 0), priority=Priority.HIGH)
    c = make_task(id=3, title="c", start=time(10, 0), end=time(10, 30), priority=Priority.MEDIUM)
    tasks = [a, b, c]

    def titles(order: SortTask) -> str:
        return "".join(t.title for t in sort_tasks(tasks, order))

    assert titles(SortTask.BY_CREATE_TIME_ASCENDING) == "abc"
    assert titles(SortTask.BY_CREATE_TIME_DESCENDING) == "cba"
    assert titles(SortTask.BY_PRIORITY_ASCENDING) == "acb"
    assert titles(SortTask.BY_PRIORITY_DESCENDING) == "bca"
    assert titles(SortTask.BY_START_TIME_ASCENDING) == "bca"
    assert titles(SortTask.BY_START_TIME_DESCENDING) == "acb"


def test_sort_from_ordinal_falls_back() -> None:
    assert SortTask.from_ordinal(3) == SortTask.BY_PRIORITY_DESCENDING
    assert SortTask.from_ordinal(99) == SortTask.BY_START_TIME_ASCENDING
    assert SortTask.from_ordinal(-1, SortTask.BY_CREATE_TIME_ASCENDING) == SortTask.BY_CREATE_TIME_ASCENDING


def test_free_time_ignores_completed_tasks() -> None:
    tasks = [
        make_task(title="short", start=time(9, 0), end=time(10, 0)),
        make_task(title="long", start=time(13, 0), end=time(16, 0)),
        make_task(title="done", start=time(6, 0), end=time(8, 0), is_completed=True),
    ]

    breakdown = duration_breakdown(tasks)
    assert [s.task.title for s in breakdown] == ["long", "short"]
    assert [s.seconds for s in breakdown] == [3 * 3600, 3600]
    assert breakdown[0].share == pytest.approx(0.75)

    assert free_time_seconds(tasks) == 20 * 3600
    assert free_time_seconds(tasks, day_seconds=3600) == 0
    assert free_time_seconds([]) == 24 * 3600


def test_format_duration() -> None:
    assert format_duration(0) == "0m"
    assert format_duration(45 * 60) == "45m"
    assert format_duration(2 * 3600) == "2h"
    assert format_duration(2 * 3600 + 5 * 60) == "2h 5m"
