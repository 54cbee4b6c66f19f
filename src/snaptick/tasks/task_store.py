# src/snaptick/tasks/task_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
from collections.abc import AsyncIterator, Callable
from datetime import date, time
from pathlib import Path

from ..core.errors import TaskNotFoundError
from ..core.live import ChangeFeed, watch
from .task_models import Priority, Task, new_task_uuid

logger = logging.getLogger(__name__)

TOPIC_TASKS = "tasks"


class TaskStore:
    """
    SQLite task store.

    The schema is intentionally simple and migration-safe:
    - create table if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Thread-safety:
    - each method opens its own SQLite connection
    - every committed mutation is published on `feed`, which drives
      `observe_today()` subscribers
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self.feed = ChangeFeed()
        self._ensure_schema()
        logger.info("TaskStore ready db=%s total=%s", self._db_path, self.count_tasks())

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.DatabaseError):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()

            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    uuid TEXT NOT NULL,
                    title TEXT NOT NULL DEFAULT '',
                    is_completed INTEGER NOT NULL DEFAULT 0,
                    start_time TEXT NOT NULL,
                    end_time TEXT NOT NULL,
                    reminder INTEGER NOT NULL DEFAULT 0,
                    is_repeat INTEGER NOT NULL DEFAULT 0,
                    repeat_weekdays TEXT NOT NULL DEFAULT '',
                    pomodoro_timer INTEGER NOT NULL DEFAULT 0,
                    date TEXT NOT NULL,
                    category TEXT NOT NULL DEFAULT '',
                    priority INTEGER NOT NULL DEFAULT 0
                )
                """
            )

            # Migrations (safe): add missing columns.
            cur.execute("PRAGMA table_info(tasks)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE tasks ADD COLUMN {name} {decl}")
                logger.info("TaskStore migration: added column %s", name)

            # Columns added after the first release.
            add_col("repeat_weekdays", "TEXT NOT NULL DEFAULT ''")
            add_col("pomodoro_timer", "INTEGER NOT NULL DEFAULT 0")
            add_col("category", "TEXT NOT NULL DEFAULT ''")
            add_col("priority", "INTEGER NOT NULL DEFAULT 0")

            cur.execute("CREATE UNIQUE INDEX IF NOT EXISTS idx_tasks_uuid ON tasks(uuid)")
            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_date ON tasks(date, is_repeat)")

            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _weekdays_to_str(days: list[int]) -> str:
        return ",".join(str(int(d)) for d in sorted(set(days)))

    @staticmethod
    def _str_to_weekdays(s: str | None) -> list[int]:
        if not s:
            return []
        out: list[int] = []
        for part in s.split(","):
            part = part.strip()
            if part.isdigit():
                out.append(int(part))
        return out

    @staticmethod
    def _time_to_str(t: time) -> str:
        return t.isoformat(timespec="seconds")

    def _row_to_task(self, row: sqlite3.Row) -> Task:
        return Task(
            id=int(row["id"]),
            uuid=str(row["uuid"]),
            title=str(row["title"] or ""),
            is_completed=bool(row["is_completed"]),
            start_time=time.fromisoformat(row["start_time"]),
            end_time=time.fromisoformat(row["end_time"]),
            reminder=bool(row["reminder"]),
            is_repeat=bool(row["is_repeat"]),
            repeat_weekdays=self._str_to_weekdays(row["repeat_weekdays"]),
            pomodoro_timer=int(row["pomodoro_timer"] or 0),
            date=date.fromisoformat(row["date"]),
            category=str(row["category"] or ""),
            priority=Priority.from_db(row["priority"]),
        )

    def _task_params(self, task: Task) -> tuple:
        return (
            task.uuid,
            task.title,
            int(task.is_completed),
            self._time_to_str(task.start_time),
            self._time_to_str(task.end_time),
            int(task.reminder),
            int(task.is_repeat),
            self._weekdays_to_str(task.repeat_weekdays),
            int(task.pomodoro_timer),
            task.date.isoformat(),
            task.category,
            int(task.priority),
        )

    # ---- public API ----

    def count_tasks(self) -> int:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT COUNT(*) FROM tasks")
            (n,) = cur.fetchone()
            return int(n)
        finally:
            conn.close()

    def get_by_id(self, task_id: int) -> Task:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT * FROM tasks WHERE id = ?", (int(task_id),))
            row = cur.fetchone()
        finally:
            conn.close()
        if row is None:
            raise TaskNotFoundError(task_id)
        return self._row_to_task(row)

    def insert(self, task: Task) -> Task:
        """
        Insert a new row and return the stored task (with its assigned id).

        A task without a uuid gets a fresh one; the id on the passed task is ignored.
        """
        stored = task.copy(uuid=task.uuid or new_task_uuid())

        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                INSERT INTO tasks(
                    uuid, title, is_completed, start_time, end_time,
                    reminder, is_repeat, repeat_weekdays, pomodoro_timer,
                    date, category, priority
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                self._task_params(stored),
            )
            conn.commit()
            rowid = cur.lastrowid
            if rowid is None:
                raise RuntimeError("SQLite did not return lastrowid for tasks insert")
            stored.id = int(rowid)
        finally:
            conn.close()

        logger.debug("Task inserted id=%s uuid=%s date=%s", stored.id, stored.uuid, stored.date)
        self.feed.publish(TOPIC_TASKS)
        return stored

    def update(self, task: Task) -> None:
        """Overwrite every column of the row with `task.id`. Missing rows are ignored."""
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                UPDATE tasks
                SET uuid = ?, title = ?, is_completed = ?, start_time = ?, end_time = ?,
                    reminder = ?, is_repeat = ?, repeat_weekdays = ?, pomodoro_timer = ?,
                    date = ?, category = ?, priority = ?
                WHERE id = ?
                """,
                (*self._task_params(task), int(task.id)),
            )
            conn.commit()
            changed = cur.rowcount
        finally:
            conn.close()

        if changed != 1:
            logger.warning("Task update matched no row id=%s uuid=%s", task.id, task.uuid)
            return
        logger.debug("Task updated id=%s completed=%s date=%s", task.id, task.is_completed, task.date)
        self.feed.publish(TOPIC_TASKS)

    def delete(self, task: Task) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("DELETE FROM tasks WHERE id = ?", (int(task.id),))
            conn.commit()
            changed = cur.rowcount
        finally:
            conn.close()

        logger.debug("Task deleted id=%s uuid=%s rows=%s", task.id, task.uuid, changed)
        if changed:
            self.feed.publish(TOPIC_TASKS)

    def list_all(self) -> list[Task]:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT * FROM tasks ORDER BY date ASC, start_time ASC, id ASC")
            return [self._row_to_task(r) for r in cur.fetchall()]
        finally:
            conn.close()

    def list_today(self, today: date) -> list[Task]:
        """
        Today's task list:
        - tasks dated `today`, plus
        - repeat tasks whose repeat weekdays include today's weekday
        """
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                SELECT *
                FROM tasks
                WHERE date = ? OR is_repeat = 1
                ORDER BY start_time ASC, id ASC
                """,
                (today.isoformat(),),
            )
            rows = cur.fetchall()
        finally:
            conn.close()

        tasks = [self._row_to_task(r) for r in rows]
        return [t for t in tasks if t.date == today or t.repeats_on(today)]

    def observe_today(self, today: Callable[[], date] = date.today) -> AsyncIterator[list[Task]]:
        """Live stream of today's task list; `today` is re-evaluated on every snapshot."""
        return watch(self.feed, lambda: self.list_today(today()), matches=lambda t: t == TOPIC_TASKS)
