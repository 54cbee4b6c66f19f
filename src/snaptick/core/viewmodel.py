# src/snaptick/core/viewmodel.py

"""
TaskViewModel: the state holder shared by every screen.

- owns the in-memory AppState and the staged (currently edited) task,
  both exposed as LiveValue so a front-end can observe them
- turns events into store / preference / reminder side effects
- runs the daily rollover once in start()

Threading model:
- everything here runs on one asyncio loop (the UI-visible context)
- blocking SQLite calls go through asyncio.to_thread
- side effects run as background jobs (asyncio.Task); on_event() returns the
  job handle so callers can await it. Job failures are logged and kept in
  `failures`, never raised into the front-end.

Lifecycle: construct -> await start() -> on_event(...)* -> await dispose().
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass
from datetime import date
from typing import Any, TypeVar

from ..prefs.preference_store import SORT_TASK_KEY, STREAK_KEY, THEME_KEY
from ..tasks.task_models import Task, blank_task, new_task_uuid
from ..tasks.task_sorting import SortTask, sort_tasks
from . import events as ev
from .live import LiveValue
from .ports import Clock, ExternalActions, NotificationScheduler, PreferenceRepo, SystemClock, TaskRepo
from .rollover import RolloverResult, run_rollover
from .state import DEFAULT_SORT, DEFAULT_THEME, AppState, AppTheme

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAIL_SUBJECTS = {
    ev.NavDrawerItem.REPORT_BUGS: "Report Bug",
    ev.NavDrawerItem.SUGGESTIONS: "Suggestions",
}


@dataclass(slots=True, frozen=True)
class JobFailure:
    name: str
    error: BaseException


class TaskViewModel:
    def __init__(
        self,
        *,
        task_store: TaskRepo,
        prefs: PreferenceRepo,
        scheduler: NotificationScheduler,
        actions: ExternalActions,
        settings: Any,
        clock: Clock | None = None,
    ) -> None:
        self._tasks = task_store
        self._prefs = prefs
        self._scheduler = scheduler
        self._actions = actions
        self._settings = settings
        self._clock = clock or SystemClock()

        self.app_state: LiveValue[AppState] = LiveValue(
            AppState(build_version=str(getattr(settings, "build_version", "") or ""))
        )
        self.task: LiveValue[Task] = LiveValue(blank_task(self._clock.now()))
        self.failures: list[JobFailure] = []

        self._jobs: set[asyncio.Task[Any]] = set()
        self._collectors: list[asyncio.Task[None]] = []
        self._started = False
        self._disposed = False

    # ---- read side ----

    @property
    def state(self) -> AppState:
        return self.app_state.value

    @property
    def staged_task(self) -> Task:
        return self.task.value

    def today(self) -> date:
        return self._clock.now().date()

    def today_tasks(self) -> AsyncIterator[list[Task]]:
        """Live stream of today's tasks (unsorted, as stored)."""
        return self._tasks.observe_today(self.today)

    async def snapshot_today(self) -> list[Task]:
        """Today's tasks once, in the current sort order."""
        tasks = await asyncio.to_thread(self._tasks.list_today, self.today())
        return sort_tasks(tasks, self.state.sort_by)

    def _set_state(self, **changes: Any) -> None:
        self.app_state.set(self.app_state.value.copy(**changes))

    # ---- lifecycle ----

    async def start(self) -> RolloverResult | None:
        """
        Hydrate AppState from preferences, keep it in sync, then run the
        daily rollover. Returns the rollover result (None if it failed).
        """
        if self._started:
            raise RuntimeError("TaskViewModel already started")
        self._started = True

        hydrated = [
            self._collect(
                "theme",
                self._prefs.load_int(THEME_KEY, int(DEFAULT_THEME)),
                lambda v: self._set_state(theme=AppTheme.from_ordinal(v)),
            ),
            self._collect(
                "streak",
                self._prefs.load_int(STREAK_KEY, 0),
                lambda v: self._set_state(streak=max(0, v)),
            ),
            self._collect(
                "sort",
                self._prefs.load_int(SORT_TASK_KEY, int(DEFAULT_SORT)),
                lambda v: self._set_state(sort_by=SortTask.from_ordinal(v, DEFAULT_SORT)),
            ),
        ]
        await asyncio.gather(*(first.wait() for first in hydrated))

        job = self._launch(run_rollover(self._tasks, self._prefs, self.today()), name="rollover")
        await asyncio.wait([job])
        if job.cancelled() or job.exception() is not None:
            return None

        result = job.result()
        if result.streak is not None:
            self._set_state(streak=result.streak)
        return result

    async def join(self) -> None:
        """Wait until every background job issued so far has finished."""
        while self._jobs:
            await asyncio.gather(*list(self._jobs), return_exceptions=True)

    async def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True

        await self.join()
        for c in self._collectors:
            c.cancel()
        await asyncio.gather(*self._collectors, return_exceptions=True)
        self._collectors.clear()
        logger.debug("TaskViewModel disposed (failures=%d)", len(self.failures))

    def _collect(self, name: str, stream: AsyncIterator[int], apply: Callable[[int], None]) -> asyncio.Event:
        first = asyncio.Event()

        async def _run() -> None:
            async for value in stream:
                apply(value)
                first.set()

        task = asyncio.create_task(_run(), name=f"collect:{name}")

        def _done(t: asyncio.Task[None]) -> None:
            # Never leave start() waiting on a collector that died early.
            first.set()
            if not t.cancelled() and t.exception() is not None:
                logger.error("Preference collector %s stopped", name, exc_info=t.exception())
                self.failures.append(JobFailure(f"collect:{name}", t.exception()))

        task.add_done_callback(_done)
        self._collectors.append(task)
        return first

    def _launch(self, coro: Awaitable[T], *, name: str) -> asyncio.Task[T]:
        if self._disposed:
            if asyncio.iscoroutine(coro):
                coro.close()
            raise RuntimeError("TaskViewModel is disposed")

        job = asyncio.ensure_future(coro)
        job.set_name(name)
        self._jobs.add(job)

        def _done(t: asyncio.Task[T]) -> None:
            self._jobs.discard(t)
            if t.cancelled():
                return
            exc = t.exception()
            if exc is not None:
                logger.error("Background job %s failed", name, exc_info=exc)
                self.failures.append(JobFailure(name, exc))

        job.add_done_callback(_done)
        return job

    # ---- dispatch ----

    def on_event(self, event: ev.Event) -> asyncio.Task[Any] | None:
        """
        Apply one event. Must be called on the view-model's event loop.

        Returns the background job handle, or None when the event only
        changed in-memory state. Raises InvalidTaskError for a task that
        fails validation on commit (nothing is persisted in that case).
        """
        if isinstance(event, (ev.ToggleAmoledTheme, ev.UpdateSortByTask, ev.UpdateFreeTime, ev.NavDrawerAction)):
            return self._on_main(event)
        if isinstance(event, (ev.MarkCompleted, ev.RequestEdit, ev.RequestPomodoro, ev.SwipeDelete)):
            return self._on_home(event)
        return self._on_add_edit(event)

    def _on_main(self, event: ev.MainEvent) -> asyncio.Task[Any] | None:
        if isinstance(event, ev.ToggleAmoledTheme):
            theme = AppTheme.AMOLED if event.enabled else AppTheme.DARK
            self._set_state(theme=theme)
            return self._launch(asyncio.to_thread(self._prefs.save, THEME_KEY, int(theme)), name="save-theme")

        if isinstance(event, ev.UpdateSortByTask):
            return self._launch(self._update_sort(event.sort_task), name="save-sort")

        if isinstance(event, ev.UpdateFreeTime):
            self._set_state(free_time=event.free_time)
            return None

        return self._launch(asyncio.to_thread(self._nav_action, event.item), name=f"nav:{event.item.value}")

    def _on_home(self, event: ev.HomeScreenEvent) -> asyncio.Task[Any]:
        if isinstance(event, ev.MarkCompleted):
            return self._launch(
                self._mark_completed(event.task_id, event.is_completed),
                name=f"complete:{event.task_id}",
            )
        if isinstance(event, (ev.RequestEdit, ev.RequestPomodoro)):
            return self._launch(self._load_staged(event.task_id), name=f"load:{event.task_id}")
        return self._launch(self._delete(event.task), name=f"delete:{event.task.uuid}")

    def _on_add_edit(self, event: ev.AddEditScreenEvent) -> asyncio.Task[Any] | None:
        staged = self.task.value

        if isinstance(event, ev.UpdateTitle):
            self.task.set(staged.copy(title=event.title))
        elif isinstance(event, ev.UpdateStartTime):
            self.task.set(staged.copy(start_time=event.start_time))
        elif isinstance(event, ev.UpdateEndTime):
            self.task.set(staged.copy(end_time=event.end_time))
        elif isinstance(event, ev.UpdatePriority):
            self.task.set(staged.copy(priority=event.priority))
        elif isinstance(event, ev.UpdateReminder):
            self.task.set(staged.copy(reminder=event.reminder))
        elif isinstance(event, ev.UpdateIsRepeated):
            self.task.set(staged.copy(is_repeat=event.is_repeated))
        elif isinstance(event, ev.UpdateRepeatWeekdays):
            self.task.set(staged.copy(repeat_weekdays=sorted(set(event.weekdays))))
        elif isinstance(event, ev.UpdateCategory):
            self.task.set(staged.copy(category=event.category))
        elif isinstance(event, ev.UpdatePomodoroTimer):
            self.task.set(staged.copy(pomodoro_timer=event.seconds))
        elif isinstance(event, ev.Create):
            task = event.task
            task.validate()
            if not task.uuid:
                task = task.copy(uuid=new_task_uuid())
            return self._launch(self._create(task), name=f"create:{task.uuid}")
        elif isinstance(event, ev.Update):
            staged.validate()
            return self._launch(self._update(staged), name=f"update:{staged.uuid}")
        elif isinstance(event, ev.Delete):
            return self._launch(self._delete(event.task), name=f"delete:{event.task.uuid}")
        else:
            raise TypeError(f"unsupported event: {event!r}")
        return None

    # ---- background jobs ----

    async def _update_sort(self, sort_task: SortTask) -> None:
        await asyncio.to_thread(self._prefs.save, SORT_TASK_KEY, int(sort_task))
        self._set_state(sort_by=sort_task)

    def _nav_action(self, item: ev.NavDrawerItem) -> None:
        if item in MAIL_SUBJECTS:
            self._actions.open_mail(MAIL_SUBJECTS[item])
        elif item == ev.NavDrawerItem.RATE_US:
            base = getattr(self._settings, "store_base_url", "")
            package = getattr(self._settings, "package_name", "")
            self._actions.open_url(f"{base}{package}")
        else:
            self._actions.share_app()

    async def _mark_completed(self, task_id: int, is_completed: bool) -> Task:
        task = await asyncio.to_thread(self._tasks.get_by_id, task_id)
        task = task.copy(is_completed=is_completed)
        await asyncio.to_thread(self._tasks.update, task)

        if is_completed:
            await self._scheduler.cancel(task.uuid)
        elif task.reminder and task.start_time > self._clock.now().time():
            await self._schedule_reminder(task)
        return task

    async def _load_staged(self, task_id: int) -> Task:
        task = await asyncio.to_thread(self._tasks.get_by_id, task_id)
        self.task.set(task)
        return task

    async def _delete(self, task: Task) -> None:
        # Not transactional: a failed delete leaves the reminder already cancelled.
        await self._scheduler.cancel(task.uuid)
        await asyncio.to_thread(self._tasks.delete, task)

    async def _create(self, task: Task) -> Task:
        stored = await asyncio.to_thread(self._tasks.insert, task)
        if stored.reminder:
            await self._schedule_reminder(stored)
        return stored

    async def _update(self, task: Task) -> None:
        await asyncio.to_thread(self._tasks.update, task)
        if task.reminder and not task.is_completed and await self._schedule_reminder(task):
            return
        await self._scheduler.cancel(task.uuid)

    async def _schedule_reminder(self, task: Task) -> bool:
        attempts = max(1, int(getattr(self._settings, "notify_retry_attempts", 1)))
        for attempt in range(1, attempts + 1):
            try:
                return await self._scheduler.schedule(task)
            except Exception:
                if attempt == attempts:
                    raise
                logger.warning(
                    "Reminder scheduling failed uuid=%s (attempt %d/%d), retrying",
                    task.uuid,
                    attempt,
                    attempts,
                    exc_info=True,
                )
        return False
