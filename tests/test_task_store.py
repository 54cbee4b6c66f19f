# tests/test_task_store.py

from __future__ import annotations

import asyncio
import sqlite3
from datetime import date, time, timedelta
from pathlib import Path

import pytest

from snaptick.core.errors import TaskNotFoundError
from snaptick.tasks.task_models import Priority
from snaptick.tasks.task_store import TaskStore

from .fakes import make_task

TODAY = date(2024, 5, 15)  # Wednesday


def test_insert_get_update_delete(tmp_path: Path) -> None:
    store = TaskStore(tmp_path / "tasks.sqlite3")

    stored = store.insert(
        make_task(
            title="Drink water",
            reminder=True,
            is_repeat=True,
            repeat_weekdays=[4, 0, 4],
            pomodoro_timer=1500,
            category="health",
            priority=Priority.HIGH,
        )
    )
    assert stored.id > 0
    assert stored.uuid

    loaded = store.get_by_id(stored.id)
    assert loaded == stored.copy(repeat_weekdays=[0, 4])
    assert loaded.start_time == time(9, 0)
    assert loaded.priority == Priority.HIGH

    store.update(loaded.copy(title="Drink more water", is_completed=True))
    updated = store.get_by_id(stored.id)
    assert updated.title == "Drink more water"
    assert updated.is_completed
    assert updated.uuid == stored.uuid

    store.delete(updated)
    assert store.count_tasks() == 0
    with pytest.raises(TaskNotFoundError):
        store.get_by_id(stored.id)


def test_insert_keeps_given_uuid_and_rejects_duplicates(tmp_path: Path) -> None:
    store = TaskStore(tmp_path / "tasks.sqlite3")
    stored = store.insert(make_task(uuid="a1"))
    assert stored.uuid == "a1"

    with pytest.raises(sqlite3.IntegrityError):
        store.insert(make_task(uuid="a1"))


def test_update_of_missing_row_is_ignored(tmp_path: Path) -> None:
    store = TaskStore(tmp_path / "tasks.sqlite3")
    store.update(make_task(id=999, uuid="ghost"))
    assert store.count_tasks() == 0


def test_list_today_includes_repeat_tasks_for_weekday(tmp_path: Path) -> None:
    store = TaskStore(tmp_path / "tasks.sqlite3")
    yesterday = TODAY - timedelta(days=1)

    store.insert(make_task(title="today", day=TODAY, start=time(12, 0), end=time(13, 0)))
    store.insert(make_task(title="old", day=yesterday))
    store.insert(make_task(title="wed-repeat", day=yesterday, is_repeat=True, repeat_weekdays=[2]))
    store.insert(make_task(title="fri-repeat", day=yesterday, is_repeat=True, repeat_weekdays=[4]))

    titles = [t.title for t in store.list_today(TODAY)]
    assert titles == ["wed-repeat", "today"]


def test_schema_is_reopenable(tmp_path: Path) -> None:
    db = tmp_path / "tasks.sqlite3"
    TaskStore(db).insert(make_task(title="persisted"))
    assert [t.title for t in TaskStore(db).list_all()] == ["persisted"]


@pytest.mark.asyncio
async def test_observe_today_pushes_snapshots(tmp_path: Path) -> None:
    store = TaskStore(tmp_path / "tasks.sqlite3")
    stream = store.observe_today(lambda: TODAY)

    first = await asyncio.wait_for(stream.__anext__(), timeout=2)
    assert first == []

    await asyncio.to_thread(store.insert, make_task(title="new", day=TODAY))
    second = await asyncio.wait_for(stream.__anext__(), timeout=2)
    assert [t.title for t in second] == ["new"]

    await stream.aclose()
    assert store.feed.subscriber_count == 0
