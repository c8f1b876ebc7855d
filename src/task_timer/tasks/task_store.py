# src/task_timer/tasks/task_store.py

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Callable
from pathlib import Path

from ..core.observer import ChangeNotifier
from ..storage.schema import connect, init_db
from .task_models import Task

logger = logging.getLogger(__name__)


class TaskStore:
    """
    SQLite task catalog.

    Thread-safety:
    - each method opens its own SQLite connection

    Change notification:
    - every successful mutation notifies subscribers; they re-read what they need
    """

    def __init__(self, db_path: str | Path = "tasktimer.sqlite3") -> None:
        self._db_path = init_db(db_path)
        self._changes = ChangeNotifier()
        try:
            total = self.count_tasks()
        except sqlite3.DatabaseError:
            total = -1
        logger.info("TaskStore ready db=%s total=%s", self._db_path, total)

    @property
    def db_path(self) -> Path:
        return self._db_path

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        return connect(self._db_path)

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=int(row["id"]),
            name=str(row["name"] or ""),
            description=str(row["description"] or ""),
            sort_order=int(row["sort_order"] or 0),
        )

    # ---- change notification ----

    def subscribe(self, callback: Callable[[], None]):
        return self._changes.subscribe(callback)

    # ---- public API ----

    def count_tasks(self) -> int:
        conn = self._get_conn()
        try:
            (n,) = conn.execute("SELECT COUNT(*) FROM tasks").fetchone()
            return int(n)
        finally:
            conn.close()

    def add_task(self, *, name: str, description: str = "", sort_order: int = 0) -> int:
        if not name or not name.strip():
            raise ValueError("name is required")

        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                "INSERT INTO tasks(name, description, sort_order) VALUES (?, ?, ?)",
                (name.strip(), (description or "").strip(), int(sort_order or 0)),
            )
            conn.commit()
            rowid = cur.lastrowid
            if rowid is None:
                raise RuntimeError("SQLite did not return lastrowid for tasks insert")
            task_id = int(rowid)
        finally:
            conn.close()

        logger.debug("Task added id=%s name=%r sort_order=%s", task_id, name, sort_order)
        self._changes.notify()
        return task_id

    def update_task(
        self,
        task_id: int,
        *,
        name: str | None = None,
        description: str | None = None,
        sort_order: int | None = None,
    ) -> None:
        fields: list[str] = []
        params: list[object] = []

        if name is not None:
            if not name.strip():
                raise ValueError("name must not be empty")
            fields.append("name = ?")
            params.append(name.strip())

        if description is not None:
            fields.append("description = ?")
            params.append(description.strip())

        if sort_order is not None:
            fields.append("sort_order = ?")
            params.append(int(sort_order))

        if not fields:
            return

        params.append(int(task_id))
        sql = f"UPDATE tasks SET {', '.join(fields)} WHERE id = ?"

        conn = self._get_conn()
        try:
            cur = conn.execute(sql, params)
            conn.commit()
            changed = cur.rowcount
        finally:
            conn.close()

        if changed:
            logger.debug("Task updated id=%s", task_id)
            self._changes.notify()

    def delete_task(self, task_id: int) -> None:
        """Delete a task; its timings go with it (see remove_task_timings trigger)."""
        conn = self._get_conn()
        try:
            cur = conn.execute("DELETE FROM tasks WHERE id = ?", (int(task_id),))
            conn.commit()
            changed = cur.rowcount
        finally:
            conn.close()

        if changed:
            logger.info("Task deleted id=%s", task_id)
            self._changes.notify()

    def get_task(self, task_id: int) -> Task | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (int(task_id),)).fetchone()
            return self._row_to_task(row) if row else None
        finally:
            conn.close()

    def find_task_by_name(self, name: str) -> Task | None:
        """Case-insensitive exact match; the lowest id wins on duplicates."""
        if not name or not name.strip():
            return None

        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM tasks WHERE name = ? COLLATE NOCASE ORDER BY id ASC LIMIT 1",
                (name.strip(),),
            ).fetchone()
            return self._row_to_task(row) if row else None
        finally:
            conn.close()

    def get_task_name(self, task_id: int) -> str | None:
        task = self.get_task(task_id)
        return task.name if task else None

    def list_tasks(self) -> list[Task]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT * FROM tasks ORDER BY sort_order ASC, name COLLATE NOCASE ASC"
            ).fetchall()
            return [self._row_to_task(r) for r in rows]
        finally:
            conn.close()
