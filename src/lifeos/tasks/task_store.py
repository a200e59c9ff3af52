# src/lifeos/tasks/task_store.py

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
import time
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from .task_models import DEFAULT_REMINDER_OFFSET, REMINDER_DISABLED, Task, generate_task_id

logger = logging.getLogger(__name__)

_UNSET: Any = object()

# Editing any of these re-arms the reminder.
_SCHEDULE_FIELDS = ("date", "start_time", "reminder_offset")


class TaskStore:
    """
    SQLite store for LifeOS tasks and their reminder state.

    Older databases are upgraded in place: columns added after the first
    release (goal_id, reminder_offset, notified, history, timestamps) are
    created on startup when PRAGMA table_info does not list them.

    Concurrency:
    - one short-lived connection per call, so the scheduler thread and the
      console never share a connection
    - every reminder-state write is a single-row UPDATE, so concurrent API edits
      and scheduler ticks never interleave inside one row
    """

    def __init__(self, db_path: str | Path = "lifeos.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        try:
            total = self.count_tasks()
        except sqlite3.Error:
            total = -1
        logger.info("TaskStore ready db=%s total=%s", self._db_path, total)

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
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()

            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL DEFAULT '',
                    date TEXT NOT NULL DEFAULT '',
                    start_time TEXT NOT NULL DEFAULT '',
                    duration INTEGER NOT NULL DEFAULT 60,
                    category TEXT NOT NULL DEFAULT '',
                    goal_id TEXT,
                    reminder_offset INTEGER,
                    completed INTEGER NOT NULL DEFAULT 0,
                    notified INTEGER NOT NULL DEFAULT 0,
                    history TEXT NOT NULL DEFAULT '[]',
                    created_at REAL NOT NULL DEFAULT 0,
                    updated_at REAL NOT NULL DEFAULT 0
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

            add_col("goal_id", "TEXT")
            add_col("reminder_offset", "INTEGER")
            add_col("notified", "INTEGER NOT NULL DEFAULT 0")
            add_col("history", "TEXT NOT NULL DEFAULT '[]'")
            add_col("created_at", "REAL NOT NULL DEFAULT 0")
            add_col("updated_at", "REAL NOT NULL DEFAULT 0")

            cur.execute(
                "CREATE INDEX IF NOT EXISTS idx_tasks_reminder ON tasks(completed, notified, reminder_offset)"
            )
            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_date ON tasks(date, start_time)")

            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _history_to_str(history: list[Any] | None) -> str:
        if not history:
            return "[]"
        try:
            return json.dumps(history, ensure_ascii=False)
        except (TypeError, ValueError):
            logger.exception("Failed to JSON-encode history; storing [].")
            return "[]"

    @staticmethod
    def _str_to_history(s: str | None) -> list[Any]:
        if not s:
            return []
        try:
            val = json.loads(s)
            return val if isinstance(val, list) else []
        except ValueError:
            return []

    def _row_to_task(self, row: sqlite3.Row) -> Task:
        offset = row["reminder_offset"]
        return Task(
            id=str(row["id"]),
            title=str(row["title"] or ""),
            date=str(row["date"] or ""),
            start_time=str(row["start_time"] or ""),
            duration=int(row["duration"] or 0),
            category=str(row["category"] or ""),
            goal_id=row["goal_id"],
            reminder_offset=int(offset) if offset is not None else None,
            completed=bool(row["completed"]),
            notified=bool(row["notified"]),
            history=self._str_to_history(row["history"]),
            created_at=float(row["created_at"] or 0.0),
            updated_at=float(row["updated_at"] or 0.0),
        )

    def _task_params(self, task: Task, now: float) -> tuple[Any, ...]:
        return (
            task.id,
            task.title,
            task.date,
            task.start_time,
            int(task.duration),
            task.category,
            task.goal_id,
            task.reminder_offset,
            int(bool(task.completed)),
            int(bool(task.notified)),
            self._history_to_str(task.history),
            task.created_at or now,
            now,
        )

    _INSERT_SQL = """
        INSERT INTO tasks(
            id, title, date, start_time, duration, category, goal_id,
            reminder_offset, completed, notified, history, created_at, updated_at
        )
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
    """

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

    def add_task(
        self,
        *,
        title: str,
        date: str,
        start_time: str,
        duration: int = 60,
        category: str = "",
        goal_id: str | None = None,
        reminder_offset: int | None = DEFAULT_REMINDER_OFFSET,
        completed: bool = False,
        notified: bool = False,
        history: list[Any] | None = None,
        task_id: str | None = None,
    ) -> str:
        if not title or not title.strip():
            raise ValueError("title is required")

        now = time.time()
        task = Task(
            id=task_id or generate_task_id(),
            title=title.strip(),
            date=date,
            start_time=start_time,
            duration=int(duration),
            category=category,
            goal_id=goal_id,
            reminder_offset=reminder_offset,
            completed=completed,
            notified=notified,
            history=list(history or []),
            created_at=now,
        )

        conn = self._get_conn()
        try:
            conn.execute(self._INSERT_SQL, self._task_params(task, now))
            conn.commit()
            logger.debug(
                "Task added id=%s date=%s start=%s offset=%s",
                task.id,
                date,
                start_time,
                reminder_offset,
            )
            return task.id
        finally:
            conn.close()

    def get_task(self, task_id: str) -> Task | None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT * FROM tasks WHERE id = ?", (str(task_id),))
            row = cur.fetchone()
            return self._row_to_task(row) if row else None
        finally:
            conn.close()

    def list_tasks(self, *, limit: int | None = None) -> list[Task]:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            if limit is None:
                cur.execute("SELECT * FROM tasks ORDER BY date ASC, start_time ASC, created_at ASC")
            else:
                cur.execute(
                    "SELECT * FROM tasks ORDER BY date ASC, start_time ASC, created_at ASC LIMIT ?",
                    (int(limit),),
                )
            return [self._row_to_task(r) for r in cur.fetchall()]
        finally:
            conn.close()

    def find_candidates(self) -> list[Task]:
        """
        Return notification candidates:
          completed = 0 AND notified = 0 AND reminder_offset != -1

        A NULL reminder_offset counts as enabled (it resolves to the default offset).
        """
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                SELECT *
                FROM tasks
                WHERE completed = 0
                  AND notified = 0
                  AND (reminder_offset IS NULL OR reminder_offset != ?)
                ORDER BY date ASC, start_time ASC
                """,
                (REMINDER_DISABLED,),
            )
            return [self._row_to_task(r) for r in cur.fetchall()]
        finally:
            conn.close()

    def mark_notified(self, task_id: str) -> bool:
        """
        Set notified = 1. Idempotent.

        Returns True if the row flipped from 0 to 1 in this call.
        """
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                "UPDATE tasks SET notified = 1, updated_at = ? WHERE id = ? AND notified = 0",
                (time.time(), str(task_id)),
            )
            conn.commit()
            return cur.rowcount == 1
        finally:
            conn.close()

    def update_task_fields(
        self,
        task_id: str,
        *,
        title: str | None = None,
        date: str | None = None,
        start_time: str | None = None,
        duration: int | None = None,
        category: str | None = None,
        goal_id: Any = _UNSET,
        reminder_offset: Any = _UNSET,
        completed: bool | None = None,
        notified: bool | None = None,
    ) -> None:
        """
        Apply an explicit user edit.

        Changing the schedule (date, start_time or reminder_offset) re-arms the
        reminder by resetting notified, unless notified is passed explicitly.
        """
        fields: list[str] = []
        params: list[Any] = []
        touched: set[str] = set()

        def put(name: str, value: Any) -> None:
            fields.append(f"{name} = ?")
            params.append(value)
            touched.add(name)

        if title is not None:
            put("title", title)
        if date is not None:
            put("date", date)
        if start_time is not None:
            put("start_time", start_time)
        if duration is not None:
            put("duration", int(duration))
        if category is not None:
            put("category", category)
        if goal_id is not _UNSET:
            put("goal_id", goal_id)
        if reminder_offset is not _UNSET:
            put("reminder_offset", None if reminder_offset is None else int(reminder_offset))
        if completed is not None:
            put("completed", int(bool(completed)))

        if notified is not None:
            put("notified", int(bool(notified)))
        elif touched.intersection(_SCHEDULE_FIELDS):
            put("notified", 0)

        if not fields:
            return

        fields.append("updated_at = ?")
        params.append(time.time())
        params.append(str(task_id))

        sql = f"UPDATE tasks SET {', '.join(fields)} WHERE id = ?"

        conn = self._get_conn()
        try:
            conn.execute(sql, params)
            conn.commit()
        finally:
            conn.close()

    def replace_all(self, tasks: Iterable[Task]) -> int:
        """
        Full-overwrite sync: delete every task and insert the given ones.

        Runs in a single transaction, so readers see either the old or the new set.
        """
        now = time.time()
        rows = [self._task_params(t, now) for t in tasks]

        conn = self._get_conn()
        try:
            with conn:
                conn.execute("DELETE FROM tasks")
                if rows:
                    conn.executemany(self._INSERT_SQL, rows)
            logger.info("TaskStore full sync: %d tasks", len(rows))
            return len(rows)
        finally:
            conn.close()
