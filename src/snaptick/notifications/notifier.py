# src/snaptick/notifications/notifier.py

from __future__ import annotations

import logging
from collections.abc import Callable

from ..tasks.task_models import Task

logger = logging.getLogger(__name__)


def render_reminder(task: Task) -> str:
    span = f"{task.start_time:%H:%M}-{task.end_time:%H:%M}"
    title = task.title.strip() or "(untitled)"
    return f"Reminder: {title} starts now ({span})"


class ConsoleNotifier:
    """
    Delivers reminders as text lines.

    `emit` is whatever the front-end uses to show a line (print for the
    console). Without one, reminders only go to the log.
    """

    def __init__(self, emit: Callable[[str], None] | None = None) -> None:
        self._emit = emit

    def notify(self, task: Task) -> None:
        text = render_reminder(task)
        logger.info("%s [uuid=%s]", text, task.uuid)
        if self._emit is not None:
            self._emit(text)
