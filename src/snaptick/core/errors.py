# src/snaptick/core/errors.py

from __future__ import annotations


class SnaptickError(Exception):
    """Base class for errors raised by the snaptick core."""


class InvalidTaskError(SnaptickError, ValueError):
    """A task failed validation and was not committed."""


class TaskNotFoundError(SnaptickError, LookupError):
    def __init__(self, task_id: int) -> None:
        super().__init__(f"task not found: id={task_id}")
        self.task_id = task_id
