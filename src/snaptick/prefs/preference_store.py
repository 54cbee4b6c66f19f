# src/snaptick/prefs/preference_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import time
from collections.abc import AsyncIterator
from pathlib import Path

from ..core.live import ChangeFeed, watch

logger = logging.getLogger(__name__)

# Keys used by the core.
THEME_KEY = "theme"
SORT_TASK_KEY = "sort_task"
STREAK_KEY = "streak"
LAST_OPENED_KEY = "last_opened"


class PreferenceStore:
    """
    Durable key -> scalar storage (int or str) backed by SQLite.

    Values are stored as text together with a type tag, so `get_int` on a
    key written as a string falls back to the default instead of guessing.

    Every `save` publishes the key on `feed`; `load_int` / `load_string`
    are live streams built on it.
    """

    def __init__(self, db_path: str | Path = "prefs.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self.feed = ChangeFeed()
        self._ensure_schema()
        logger.info("PreferenceStore ready db=%s", self._db_path)

    def close(self) -> None:
        return

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        with contextlib.suppress(sqlite3.DatabaseError):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS preferences (
                    key TEXT PRIMARY KEY,
                    kind TEXT NOT NULL,
                    value TEXT NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    def _read(self, key: str) -> sqlite3.Row | None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT kind, value FROM preferences WHERE key = ?", (key,))
            return cur.fetchone()
        finally:
            conn.close()

    # ---- public API ----

    def save(self, key: str, value: int | str) -> None:
        if isinstance(value, bool) or not isinstance(value, (int, str)):
            raise TypeError(f"preference {key!r} must be int or str, got {type(value).__name__}")
        kind = "int" if isinstance(value, int) else "str"

        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO preferences(key, kind, value, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    kind = excluded.kind,
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, kind, str(value), time.time()),
            )
            conn.commit()
        finally:
            conn.close()

        logger.debug("Preference saved key=%s value=%s", key, value)
        self.feed.publish(key)

    def get_int(self, key: str, default: int) -> int:
        row = self._read(key)
        if row is None or row["kind"] != "int":
            return default
        try:
            return int(row["value"])
        except ValueError:
            logger.warning("Preference %s holds a non-integer value; using default", key)
            return default

    def get_string(self, key: str, default: str = "") -> str:
        row = self._read(key)
        if row is None:
            return default
        return str(row["value"])

    def load_int(self, key: str, default: int) -> AsyncIterator[int]:
        return watch(self.feed, lambda: self.get_int(key, default), matches=lambda k: k == key)

    def load_string(self, key: str, default: str = "") -> AsyncIterator[str]:
        return watch(self.feed, lambda: self.get_string(key, default), matches=lambda k: k == key)
