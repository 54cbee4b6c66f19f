# src/snaptick/core/rollover.py

"""
Daily rollover.

Runs once per app activation and compares the stored "last opened" date
with today:

- NEVER_OPENED     -> remember today, nothing else
- OPENED_TODAY     -> nothing to do
- OPENED_PRIOR_DAY -> reset repeat tasks for the new day, advance or reset
                      the streak, remember today

Each repeat task is rewritten on its own; one failing row is logged and
reported in the result, the others are still processed.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum

from ..prefs.preference_store import LAST_OPENED_KEY, STREAK_KEY
from .ports import PreferenceRepo, TaskRepo

logger = logging.getLogger(__name__)


class RolloverState(str, Enum):
    NEVER_OPENED = "never_opened"
    OPENED_TODAY = "opened_today"
    OPENED_PRIOR_DAY = "opened_prior_day"


@dataclass(slots=True)
class RolloverResult:
    state: RolloverState
    last_opened: date | None
    streak: int | None = None  # new streak, only set for OPENED_PRIOR_DAY
    reset_count: int = 0
    failed_uuids: list[str] = field(default_factory=list)


def parse_last_opened(raw: str | None) -> date | None:
    if not raw:
        return None
    try:
        return date.fromisoformat(raw.strip())
    except ValueError:
        logger.warning("Unparseable last-opened date %r; treating as first run", raw)
        return None


def classify(last_opened: date | None, today: date) -> RolloverState:
    if last_opened is None:
        return RolloverState.NEVER_OPENED
    if last_opened == today:
        return RolloverState.OPENED_TODAY
    return RolloverState.OPENED_PRIOR_DAY


def next_streak(last_opened: date, today: date, streak: int) -> int:
    """+1 when the app was last opened exactly yesterday, otherwise 0."""
    if last_opened == today - timedelta(days=1):
        return max(0, streak) + 1
    return 0


async def reset_repeat_tasks(task_store: TaskRepo, today: date) -> tuple[int, list[str]]:
    """
    Clear completion and move to `today` every repeat task in today's list
    that is dated another day. Returns (reset count, uuids that failed).
    """
    tasks = await asyncio.to_thread(task_store.list_today, today)

    reset = 0
    failed: list[str] = []
    for task in tasks:
        if not task.is_repeat or task.date == today:
            continue
        try:
            await asyncio.to_thread(task_store.update, task.copy(is_completed=False, date=today))
            reset += 1
        except Exception:
            logger.exception("Repeat task reset failed uuid=%s id=%s", task.uuid, task.id)
            failed.append(task.uuid)

    if reset or failed:
        logger.info("Repeat tasks reset=%d failed=%d for %s", reset, len(failed), today)
    return reset, failed


async def run_rollover(task_store: TaskRepo, prefs: PreferenceRepo, today: date) -> RolloverResult:
    raw = await asyncio.to_thread(prefs.get_string, LAST_OPENED_KEY, "")
    last_opened = parse_last_opened(raw)
    state = classify(last_opened, today)

    if last_opened is None:
        await asyncio.to_thread(prefs.save, LAST_OPENED_KEY, today.isoformat())
        logger.info("First activation recorded for %s", today)
        return RolloverResult(state=state, last_opened=None)

    if state == RolloverState.OPENED_TODAY:
        logger.debug("Already opened today (%s); rollover skipped", today)
        return RolloverResult(state=state, last_opened=last_opened)

    reset, failed = await reset_repeat_tasks(task_store, today)

    previous = await asyncio.to_thread(prefs.get_int, STREAK_KEY, 0)
    streak = next_streak(last_opened, today, previous)
    await asyncio.to_thread(prefs.save, STREAK_KEY, streak)
    await asyncio.to_thread(prefs.save, LAST_OPENED_KEY, today.isoformat())

    logger.info(
        "Rollover %s -> %s streak %d -> %d (repeat reset=%d)",
        last_opened,
        today,
        previous,
        streak,
        reset,
    )
    return RolloverResult(
        state=state,
        last_opened=last_opened,
        streak=streak,
        reset_count=reset,
        failed_uuids=failed,
    )
