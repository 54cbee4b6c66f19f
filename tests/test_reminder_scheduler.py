# tests/test_reminder_scheduler.py

from __future__ import annotations

import asyncio
from datetime import date, datetime, time, timedelta

import pytest

from snaptick.notifications.notifier import ConsoleNotifier, render_reminder
from snaptick.notifications.reminder_scheduler import ReminderScheduler

from .fakes import FakeClock, RecordingNotifier, make_task


@pytest.mark.asyncio
async def test_past_start_is_not_scheduled() -> None:
    notifier = RecordingNotifier()
    clock = FakeClock(datetime(2024, 5, 15, 10, 0))
    scheduler = ReminderScheduler(notifier, clock=clock)

    assert await scheduler.schedule(make_task(uuid="a1", start=time(9, 0))) is False
    assert await scheduler.schedule(make_task(uuid="a2", start=time(10, 0))) is False
    assert scheduler.pending_uuids() == set()


@pytest.mark.asyncio
async def test_schedule_replaces_and_cancel_is_idempotent() -> None:
    clock = FakeClock(datetime(2024, 5, 15, 8, 0))
    scheduler = ReminderScheduler(RecordingNotifier(), clock=clock)
    task = make_task(uuid="a1", start=time(9, 0))

    assert await scheduler.schedule(task)
    assert await scheduler.schedule(task.copy(title="renamed"))
    assert scheduler.pending_uuids() == {"a1"}

    await scheduler.cancel("a1")
    await scheduler.cancel("a1")
    await scheduler.cancel("never-scheduled")
    assert not scheduler.is_scheduled("a1")

    await scheduler.shutdown()


@pytest.mark.asyncio
async def test_schedule_requires_uuid() -> None:
    scheduler = ReminderScheduler(RecordingNotifier(), clock=FakeClock(datetime(2024, 5, 15, 8, 0)))
    with pytest.raises(ValueError):
        await scheduler.schedule(make_task(uuid=""))


@pytest.mark.asyncio
async def test_reminder_fires_at_start_time() -> None:
    notifier = RecordingNotifier()
    start = datetime(2024, 5, 15, 9, 0)
    clock = FakeClock(start - timedelta(milliseconds=50))
    scheduler = ReminderScheduler(notifier, clock=clock)

    assert await scheduler.schedule(make_task(uuid="a1", title="Standup", start=time(9, 0)))
    await asyncio.sleep(0.3)

    assert [t.uuid for t in notifier.delivered] == ["a1"]
    assert scheduler.pending_uuids() == set()


@pytest.mark.asyncio
async def test_shutdown_disarms_everything() -> None:
    notifier = RecordingNotifier()
    clock = FakeClock(datetime(2024, 5, 15, 8, 0))
    scheduler = ReminderScheduler(notifier, clock=clock)

    await scheduler.schedule(make_task(uuid="a1", start=time(9, 0)))
    await scheduler.schedule(make_task(uuid="a2", start=time(9, 30)))
    await scheduler.shutdown()

    assert scheduler.pending_uuids() == set()
    assert notifier.delivered == []


def test_console_notifier_emits_text() -> None:
    lines: list[str] = []
    task = make_task(title="Standup", start=time(9, 0), end=time(9, 15))

    ConsoleNotifier(lines.append).notify(task)

    assert lines == [render_reminder(task)]
    assert "Standup" in lines[0] and "09:00-09:15" in lines[0]


@pytest.mark.asyncio
async def test_reschedule_into_the_past_disarms_previous_reminder() -> None:
    notifier = RecordingNotifier()
    clock = FakeClock(datetime(2024, 5, 15, 8, 0))
    scheduler = ReminderScheduler(notifier, clock=clock)
    task = make_task(uuid="a1", start=time(9, 0))

    assert await scheduler.schedule(task)
    assert await scheduler.schedule(task.copy(start_time=time(7, 0))) is False

    assert not scheduler.is_scheduled("a1")
    assert scheduler.pending_uuids() == set()


@pytest.mark.asyncio
async def test_reminder_waits_for_task_date() -> None:
    clock = FakeClock(datetime(2024, 5, 15, 8, 0))
    scheduler = ReminderScheduler(RecordingNotifier(), clock=clock)
    tomorrow = make_task(uuid="a1", start=time(7, 0), end=time(8, 0), day=date(2024, 5, 16))

    assert scheduler.seconds_until_start(tomorrow) == 23 * 3600
    assert await scheduler.schedule(tomorrow)
    assert scheduler.is_scheduled("a1")

    await scheduler.shutdown()


@pytest.mark.asyncio
async def test_task_dated_in_the_past_is_not_scheduled() -> None:
    clock = FakeClock(datetime(2024, 5, 15, 8, 0))
    scheduler = ReminderScheduler(RecordingNotifier(), clock=clock)
    old = make_task(uuid="a1", start=time(9, 0), day=date(2024, 5, 14))

    assert await scheduler.schedule(old) is False
    assert scheduler.pending_uuids() == set()


@pytest.mark.asyncio
async def test_repeat_task_due_today_uses_today() -> None:
    clock = FakeClock(datetime(2024, 5, 15, 8, 0))  # Wednesday
    scheduler = ReminderScheduler(RecordingNotifier(), clock=clock)
    repeat = make_task(
        uuid="a1",
        start=time(9, 0),
        day=date(2024, 5, 8),
        is_repeat=True,
        repeat_weekdays=[2],
    )

    assert scheduler.seconds_until_start(repeat) == 3600
    assert await scheduler.schedule(repeat)

    await scheduler.shutdown()
