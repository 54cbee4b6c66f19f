# src/snaptick/notifications/reminder_scheduler.py

from __future__ import annotations

"""
Reminder scheduler.

Keeps at most one pending reminder per task uuid:
- schedule(task) disarms any earlier reminder for the uuid, then arms an
  asyncio timer for the task's next start (its date, or today for a repeat
  task due today) if that moment is still ahead,
- cancel(uuid) disarms it (no-op if nothing is armed),
- when the timer fires, the injected Notifier delivers the reminder.

Delivery (OS notification, console line) belongs to the notifier, not here.
"""

import asyncio
import logging
from datetime import datetime

from ..core.ports import Clock, Notifier, SystemClock
from ..tasks.task_models import Task

logger = logging.getLogger(__name__)


class ReminderScheduler:
    def __init__(self, notifier: Notifier, *, clock: Clock | None = None) -> None:
        self._notifier = notifier
        self._clock = clock or SystemClock()
        self._pending: dict[str, asyncio.Task[None]] = {}

    def seconds_until_start(self, task: Task) -> float:
        now = self._clock.now()
        day = now.date() if task.repeats_on(now.date()) else task.date
        due = datetime.combine(day, task.start_time)
        return (due - now).total_seconds()

    async def schedule(self, task: Task) -> bool:
        if not task.uuid:
            raise ValueError("cannot schedule a reminder for a task without uuid")

        # A reminder for the previous start must not outlive the edit.
        await self.cancel(task.uuid)

        delay = self.seconds_until_start(task)
        if delay <= 0:
            logger.debug(
                "Reminder not scheduled uuid=%s: %s %s already passed",
                task.uuid,
                task.date,
                task.start_time,
            )
            return False

        self._pending[task.uuid] = asyncio.create_task(
            self._fire_after(task, delay), name=f"reminder:{task.uuid}"
        )
        logger.info("Reminder scheduled uuid=%s in %.0fs (%s)", task.uuid, delay, task.title)
        return True

    async def cancel(self, uuid: str) -> None:
        pending = self._pending.pop(uuid, None)
        if pending is None:
            return
        pending.cancel()
        logger.info("Reminder cancelled uuid=%s", uuid)

    def pending_uuids(self) -> set[str]:
        return {u for u, t in self._pending.items() if not t.done()}

    def is_scheduled(self, uuid: str) -> bool:
        return uuid in self.pending_uuids()

    async def shutdown(self) -> None:
        """Disarm every pending reminder (session teardown)."""
        pending = list(self._pending.values())
        self._pending.clear()
        for t in pending:
            t.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        logger.debug("ReminderScheduler stopped (%d disarmed)", len(pending))

    async def _fire_after(self, task: Task, delay: float) -> None:
        await asyncio.sleep(delay)

        if self._pending.get(task.uuid) is asyncio.current_task():
            del self._pending[task.uuid]

        try:
            self._notifier.notify(task)
            logger.info("Reminder delivered uuid=%s", task.uuid)
        except Exception:
            logger.exception("Reminder delivery failed uuid=%s", task.uuid)
