# src/snaptick/core/state.py

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum

from ..tasks.task_sorting import SortTask


class AppTheme(IntEnum):
    """UI theme; the value is the persisted ordinal."""

    LIGHT = 0
    DARK = 1
    AMOLED = 2

    @classmethod
    def from_ordinal(cls, raw: int) -> AppTheme:
        try:
            return cls(raw)
        except ValueError:
            return DEFAULT_THEME


DEFAULT_THEME = AppTheme.DARK
DEFAULT_SORT = SortTask.BY_START_TIME_ASCENDING


@dataclass(slots=True, frozen=True)
class AppState:
    """
    In-memory app state for one session.

    Not persisted as a whole: theme, sort order and streak are mirrored from
    the preference store; free_time and build_version live only here.
    """

    theme: AppTheme = DEFAULT_THEME
    sort_by: SortTask = DEFAULT_SORT
    streak: int = 0
    free_time: int | None = None
    build_version: str = ""

    def copy(self, **changes) -> AppState:
        return replace(self, **changes)
