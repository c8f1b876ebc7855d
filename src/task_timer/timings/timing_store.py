# src/task_timer/timings/timing_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
from collections.abc import Iterator
from pathlib import Path

from ..core.errors import NotFoundError, StorageUnavailable
from ..storage.schema import connect, init_db
from ..tasks.task_models import OpenTiming, TaskTotal, Timing

logger = logging.getLogger(__name__)


class TimingStore:
    """
    SQLite timing ledger.

    Implements the TimingLedger port used by TimingEngine plus a few read helpers
    for reports. Lives in the same DB file as TaskStore: the open timing is joined
    with its task name through the current_timing view.

    Any sqlite3 failure surfaces as StorageUnavailable; a missing row on update
    surfaces as NotFoundError.
    """

    def __init__(self, db_path: str | Path = "tasktimer.sqlite3") -> None:
        self._db_path = init_db(db_path)
        logger.info("TimingStore ready db=%s", self._db_path)

    def close(self) -> None:
        return

    @contextlib.contextmanager
    def _conn(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = connect(self._db_path)
        except sqlite3.Error as e:
            raise StorageUnavailable(f"cannot open {self._db_path}: {e}") from e
        try:
            yield conn
        except sqlite3.Error as e:
            raise StorageUnavailable(str(e)) from e
        finally:
            conn.close()

    # ---- TimingLedger ----

    def insert_open(self, task_id: int, start_time: int) -> int:
        with self._conn() as conn:
            cur = conn.execute(
                "INSERT INTO timings(task_id, start_time, duration) VALUES (?, ?, 0)",
                (int(task_id), int(start_time)),
            )
            conn.commit()
            rowid = cur.lastrowid
        if rowid is None:
            raise StorageUnavailable("SQLite did not return lastrowid for timings insert")
        logger.debug("Timing opened id=%s task_id=%s start=%s", rowid, task_id, start_time)
        return int(rowid)

    def update_duration(self, timing_id: int, duration: int) -> None:
        with self._conn() as conn:
            cur = conn.execute(
                "UPDATE timings SET duration = ? WHERE id = ?",
                (int(duration), int(timing_id)),
            )
            conn.commit()
            changed = cur.rowcount
        if changed != 1:
            raise NotFoundError("timing", int(timing_id))
        logger.debug("Timing closed id=%s duration=%s", timing_id, duration)

    def delete(self, timing_id: int) -> None:
        with self._conn() as conn:
            cur = conn.execute("DELETE FROM timings WHERE id = ?", (int(timing_id),))
            conn.commit()
            changed = cur.rowcount
        if changed:
            logger.debug("Timing deleted id=%s", timing_id)
        else:
            logger.debug("Timing delete id=%s: already absent", timing_id)

    def query_open(self) -> OpenTiming | None:
        with self._conn() as conn:
            rows = conn.execute("SELECT * FROM current_timing LIMIT 2").fetchall()
        if not rows:
            return None
        if len(rows) > 1:
            logger.warning("More than one open timing in %s; using the newest", self._db_path)
        row = rows[0]
        return OpenTiming(
            timing_id=int(row["timing_id"]),
            task_id=int(row["task_id"]),
            start_time=int(row["start_time"]),
            task_name=str(row["task_name"] or ""),
        )

    # ---- read helpers ----

    def count_timings(self) -> int:
        with self._conn() as conn:
            (n,) = conn.execute("SELECT COUNT(*) FROM timings").fetchone()
        return int(n)

    def list_timings(self, task_id: int) -> list[Timing]:
        with self._conn() as conn:
            rows = conn.execute(
                "SELECT * FROM timings WHERE task_id = ? ORDER BY start_time ASC, id ASC",
                (int(task_id),),
            ).fetchall()
        return [
            Timing(
                id=int(r["id"]),
                task_id=int(r["task_id"]),
                start_time=int(r["start_time"]),
                duration=int(r["duration"]),
            )
            for r in rows
        ]

    def task_totals(self, *, since: int | None = None) -> list[TaskTotal]:
        """
        Closed time per task, largest first.

        since: only count timings that started at or after this epoch second.
        """
        with self._conn() as conn:
            rows = conn.execute(
                """
                SELECT tasks.id AS task_id,
                       tasks.name AS task_name,
                       SUM(timings.duration) AS total_seconds,
                       COUNT(timings.id) AS sessions
                FROM timings
                JOIN tasks ON timings.task_id = tasks.id
                WHERE timings.duration > 0
                  AND timings.start_time >= ?
                GROUP BY tasks.id
                ORDER BY total_seconds DESC, tasks.name COLLATE NOCASE ASC
                """,
                (int(since or 0),),
            ).fetchall()
        return [
            TaskTotal(
                task_id=int(r["task_id"]),
                task_name=str(r["task_name"] or ""),
                total_seconds=int(r["total_seconds"] or 0),
                sessions=int(r["sessions"] or 0),
            )
            for r in rows
        ]
