# src/snaptick/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete stores / reminder scheduler / platform actions into a
  TaskViewModel.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ..config import get_settings
from ..connectors.system_actions import BrowserActions
from ..core.ports import Clock, SystemClock
from ..core.viewmodel import TaskViewModel
from ..notifications.notifier import ConsoleNotifier
from ..notifications.reminder_scheduler import ReminderScheduler
from ..prefs.preference_store import PreferenceStore
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class App:
    settings: Any
    task_store: TaskStore
    prefs: PreferenceStore
    scheduler: ReminderScheduler
    viewmodel: TaskViewModel


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)
    settings.prefs_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_app(
    *,
    settings=None,
    emit: Callable[[str], None] | None = None,
    clock: Clock | None = None,
) -> App:
    """
    Build the object graph for one session.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()
    clock = clock or SystemClock()

    _ensure_local_dirs(settings)

    task_store = TaskStore(settings.tasks_db_path)
    prefs = PreferenceStore(settings.prefs_db_path)
    scheduler = ReminderScheduler(ConsoleNotifier(emit), clock=clock)
    actions = BrowserActions(
        feedback_email=settings.feedback_email,
        share_url=f"{settings.store_base_url}{settings.package_name}",
        app_name=settings.app_name,
        emit=emit,
    )

    viewmodel = TaskViewModel(
        task_store=task_store,
        prefs=prefs,
        scheduler=scheduler,
        actions=actions,
        settings=settings,
        clock=clock,
    )
    logger.info("App wired (tasks=%s prefs=%s)", settings.tasks_db_path, settings.prefs_db_path)
    return App(
        settings=settings,
        task_store=task_store,
        prefs=prefs,
        scheduler=scheduler,
        viewmodel=viewmodel,
    )
