# tests/test_rollover.py

from __future__ import annotations

import sqlite3
from datetime import date, timedelta

import pytest

from snaptick.core.rollover import (
    RolloverState,
    classify,
    next_streak,
    parse_last_opened,
    run_rollover,
)
from snaptick.prefs.preference_store import LAST_OPENED_KEY, STREAK_KEY
from snaptick.tasks.task_models import Task

from .fakes import make_task

TODAY = date(2024, 5, 15)  # Wednesday
YESTERDAY = TODAY - timedelta(days=1)


class FlakyTaskStore:
    """TaskStore wrapper whose update() fails for one uuid."""

    def __init__(self, inner, fail_uuid: str) -> None:
        self.inner = inner
        self.fail_uuid = fail_uuid

    def update(self, task: Task) -> None:
        if task.uuid == self.fail_uuid:
            raise sqlite3.OperationalError("disk I/O error")
        self.inner.update(task)

    def __getattr__(self, name: str):
        return getattr(self.inner, name)


def test_classify_and_streak_rules() -> None:
    assert classify(None, TODAY) == RolloverState.NEVER_OPENED
    assert classify(TODAY, TODAY) == RolloverState.OPENED_TODAY
    assert classify(YESTERDAY, TODAY) == RolloverState.OPENED_PRIOR_DAY
    assert classify(TODAY + timedelta(days=1), TODAY) == RolloverState.OPENED_PRIOR_DAY

    assert next_streak(YESTERDAY, TODAY, 4) == 5
    assert next_streak(TODAY - timedelta(days=3), TODAY, 4) == 0

    assert parse_last_opened("") is None
    assert parse_last_opened("not-a-date") is None
    assert parse_last_opened("2024-05-14") == YESTERDAY


@pytest.mark.asyncio
async def test_first_run_only_records_today(task_store, prefs) -> None:
    task_store.insert(make_task(day=YESTERDAY, is_repeat=True, repeat_weekdays=[2], is_completed=True))

    result = await run_rollover(task_store, prefs, TODAY)

    assert result.state == RolloverState.NEVER_OPENED
    assert prefs.get_string(LAST_OPENED_KEY) == TODAY.isoformat()
    assert prefs.get_int(STREAK_KEY, 0) == 0
    assert task_store.list_all()[0].is_completed


@pytest.mark.asyncio
async def test_unparseable_last_opened_is_treated_as_first_run(task_store, prefs) -> None:
    prefs.save(LAST_OPENED_KEY, "yesterday-ish")
    prefs.save(STREAK_KEY, 4)

    result = await run_rollover(task_store, prefs, TODAY)

    assert result.state == RolloverState.NEVER_OPENED
    assert result.last_opened is None
    assert prefs.get_string(LAST_OPENED_KEY) == TODAY.isoformat()
    assert prefs.get_int(STREAK_KEY, 0) == 4


@pytest.mark.asyncio
async def test_opened_today_is_a_no_op(task_store, prefs) -> None:
    prefs.save(LAST_OPENED_KEY, TODAY.isoformat())
    prefs.save(STREAK_KEY, 3)
    task_store.insert(make_task(day=YESTERDAY, is_repeat=True, repeat_weekdays=[2], is_completed=True))

    result = await run_rollover(task_store, prefs, TODAY)

    assert result.state == RolloverState.OPENED_TODAY
    assert prefs.get_int(STREAK_KEY, 0) == 3
    assert task_store.list_all()[0].is_completed


@pytest.mark.asyncio
async def test_yesterday_increments_streak(task_store, prefs) -> None:
    prefs.save(LAST_OPENED_KEY, YESTERDAY.isoformat())
    prefs.save(STREAK_KEY, 6)

    result = await run_rollover(task_store, prefs, TODAY)

    assert result.state == RolloverState.OPENED_PRIOR_DAY
    assert result.streak == 7
    assert prefs.get_int(STREAK_KEY, 0) == 7
    assert prefs.get_string(LAST_OPENED_KEY) == TODAY.isoformat()


@pytest.mark.asyncio
async def test_gap_resets_streak(task_store, prefs) -> None:
    prefs.save(LAST_OPENED_KEY, (TODAY - timedelta(days=3)).isoformat())
    prefs.save(STREAK_KEY, 9)

    result = await run_rollover(task_store, prefs, TODAY)

    assert result.streak == 0
    assert prefs.get_int(STREAK_KEY, 0) == 0
    assert prefs.get_string(LAST_OPENED_KEY) == TODAY.isoformat()


@pytest.mark.asyncio
async def test_resets_only_stale_repeat_tasks(task_store, prefs) -> None:
    prefs.save(LAST_OPENED_KEY, YESTERDAY.isoformat())

    stale = task_store.insert(
        make_task(title="stale", day=YESTERDAY, is_repeat=True, repeat_weekdays=[2], is_completed=True)
    )
    fresh = task_store.insert(
        make_task(title="fresh", day=TODAY, is_repeat=True, repeat_weekdays=[2], is_completed=True)
    )
    plain = task_store.insert(make_task(title="plain", day=YESTERDAY, is_completed=True))
    today_plain = task_store.insert(make_task(title="today", day=TODAY, is_completed=True))

    result = await run_rollover(task_store, prefs, TODAY)

    assert result.reset_count == 1
    reset = task_store.get_by_id(stale.id)
    assert reset.is_completed is False
    assert reset.date == TODAY
    assert reset.uuid == stale.uuid

    assert task_store.get_by_id(fresh.id) == fresh
    assert task_store.get_by_id(plain.id) == plain
    assert task_store.get_by_id(today_plain.id) == today_plain


@pytest.mark.asyncio
async def test_one_failing_repeat_task_does_not_block_others(task_store, prefs) -> None:
    prefs.save(LAST_OPENED_KEY, YESTERDAY.isoformat())
    prefs.save(STREAK_KEY, 1)

    bad = task_store.insert(
        make_task(title="bad", uuid="bad", day=YESTERDAY, is_repeat=True, repeat_weekdays=[2], is_completed=True)
    )
    good = task_store.insert(
        make_task(
            title="good",
            uuid="good",
            day=YESTERDAY,
            start=bad.start_time.replace(hour=11),
            end=bad.end_time.replace(hour=12),
            is_repeat=True,
            repeat_weekdays=[2],
            is_completed=True,
        )
    )

    result = await run_rollover(FlakyTaskStore(task_store, "bad"), prefs, TODAY)

    assert result.reset_count == 1
    assert result.failed_uuids == ["bad"]
    assert task_store.get_by_id(good.id).is_completed is False
    assert task_store.get_by_id(bad.id).is_completed is True
    # The day still rolls over.
    assert prefs.get_int(STREAK_KEY, 0) == 2
    assert prefs.get_string(LAST_OPENED_KEY) == TODAY.isoformat()
