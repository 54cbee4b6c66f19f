# tests/conftest.py

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from snaptick.core.viewmodel import TaskViewModel
from snaptick.notifications.reminder_scheduler import ReminderScheduler
from snaptick.prefs.preference_store import PreferenceStore
from snaptick.tasks.task_store import TaskStore

from .fakes import FakeActions, FakeClock, FakeScheduler, RecordingNotifier

# Wednesday
NOW = datetime(2024, 5, 15, 8, 0)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with the view-model and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="snaptick",
        build_version="9.9.9-test",
        console_enabled=False,
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "tasks.sqlite3",
        prefs_db_path=tmp_path / "prefs.sqlite3",
        package_name="com.example.snaptick",
        store_base_url="https://store.example/details?id=",
        feedback_email="dev@example.com",
        notify_retry_attempts=2,
    )


@pytest.fixture()
def task_store(settings: SimpleNamespace) -> TaskStore:
    return TaskStore(settings.tasks_db_path)


@pytest.fixture()
def prefs(settings: SimpleNamespace) -> PreferenceStore:
    return PreferenceStore(settings.prefs_db_path)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(NOW)


@pytest.fixture()
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture()
def actions() -> FakeActions:
    return FakeActions()


@pytest.fixture()
def vm(task_store, prefs, scheduler, actions, settings, clock) -> TaskViewModel:
    """
    View-model wired with deterministic fakes.

    NOTE: We keep real SQLite stores here because their correctness is part
    of what we want to test.
    """
    return TaskViewModel(
        task_store=task_store,
        prefs=prefs,
        scheduler=scheduler,
        actions=actions,
        settings=settings,
        clock=clock,
    )


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def reminders(notifier, clock) -> ReminderScheduler:
    """Real asyncio reminder scheduler on the fake clock; tests call shutdown()."""
    return ReminderScheduler(notifier, clock=clock)


@pytest.fixture()
def reminder_vm(task_store, prefs, reminders, actions, settings, clock) -> TaskViewModel:
    """View-model wired to the real reminder scheduler."""
    return TaskViewModel(
        task_store=task_store,
        prefs=prefs,
        scheduler=reminders,
        actions=actions,
        settings=settings,
        clock=clock,
    )
