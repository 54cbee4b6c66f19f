# src/snaptick/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The view-model depends on Protocols instead of concrete implementations.
This keeps storage / reminder delivery / platform actions swappable and
makes testing easier.
"""

from collections.abc import AsyncIterator, Callable
from datetime import date, datetime
from typing import Protocol

from ..tasks.task_models import Task


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Local wall clock."""

    def now(self) -> datetime:
        return datetime.now()


class TaskRepo(Protocol):
    def get_by_id(self, task_id: int) -> Task: ...
    def insert(self, task: Task) -> Task: ...
    def update(self, task: Task) -> None: ...
    def delete(self, task: Task) -> None: ...
    def list_today(self, today: date) -> list[Task]: ...
    def observe_today(self, today: Callable[[], date] = ...) -> AsyncIterator[list[Task]]: ...


class PreferenceRepo(Protocol):
    def save(self, key: str, value: int | str) -> None: ...
    def get_int(self, key: str, default: int) -> int: ...
    def get_string(self, key: str, default: str = "") -> str: ...
    def load_int(self, key: str, default: int) -> AsyncIterator[int]: ...
    def load_string(self, key: str, default: str = "") -> AsyncIterator[str]: ...


class NotificationScheduler(Protocol):
    """
    Arranges a callback at a task's start time, correlated by task uuid.

    - schedule() replaces any prior schedule for the same uuid and returns
      False when nothing was scheduled (e.g. start time already passed)
    - cancel() is a no-op when nothing is scheduled
    """

    async def schedule(self, task: Task) -> bool: ...
    async def cancel(self, uuid: str) -> None: ...


class Notifier(Protocol):
    """Delivery side of reminders (OS notification, console line, ...)."""

    def notify(self, task: Task) -> None: ...


class ExternalActions(Protocol):
    """Platform actions triggered from the navigation drawer."""

    def open_mail(self, subject: str) -> None: ...
    def open_url(self, url: str) -> None: ...
    def share_app(self) -> None: ...
