# src/task_timer/timings/memory_ledger.py

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Callable

from ..core.errors import NotFoundError
from ..tasks.task_models import OpenTiming, TaskTotal, Timing

logger = logging.getLogger(__name__)


class InMemoryTimingLedger:
    """
    Process-local TimingLedger (nothing survives a restart).

    Task names come from an injected lookup, so the ledger does not need to know
    about the task catalog. Rows whose task the lookup no longer knows are dropped
    on the next read, matching the cascade the SQLite schema does on delete.
    """

    def __init__(self, task_name_lookup: Callable[[int], str | None] | None = None) -> None:
        self._lock = threading.Lock()
        self._rows: dict[int, Timing] = {}
        self._ids = itertools.count(1)
        self._task_name_lookup = task_name_lookup

    def close(self) -> None:
        return

    def insert_open(self, task_id: int, start_time: int) -> int:
        with self._lock:
            timing_id = next(self._ids)
            self._rows[timing_id] = Timing(task_id=int(task_id), start_time=int(start_time), id=timing_id)
        return timing_id

    def update_duration(self, timing_id: int, duration: int) -> None:
        with self._lock:
            row = self._rows.get(int(timing_id))
            if row is None:
                raise NotFoundError("timing", int(timing_id))
            row.duration = int(duration)

    def delete(self, timing_id: int) -> None:
        with self._lock:
            self._rows.pop(int(timing_id), None)

    def _prune_orphans(self) -> None:
        """Drop timings whose task is gone, like the remove_task_timings trigger does in SQLite."""
        if self._task_name_lookup is None:
            return
        with self._lock:
            task_ids = {t.task_id for t in self._rows.values()}
        gone = {task_id for task_id in task_ids if self._task_name_lookup(task_id) is None}
        if not gone:
            return
        with self._lock:
            for timing_id in [k for k, t in self._rows.items() if t.task_id in gone]:
                del self._rows[timing_id]
        logger.debug("Dropped timings of deleted tasks %s", sorted(gone))

    def _task_name(self, task_id: int) -> str:
        name = self._task_name_lookup(task_id) if self._task_name_lookup else None
        return name or ""

    def query_open(self) -> OpenTiming | None:
        self._prune_orphans()
        with self._lock:
            open_rows = sorted(
                (t for t in self._rows.values() if t.is_open),
                key=lambda t: (t.start_time, t.id or 0),
                reverse=True,
            )
        if not open_rows:
            return None
        if len(open_rows) > 1:
            logger.warning("More than one open timing in memory ledger; using the newest")
        row = open_rows[0]
        return OpenTiming(
            timing_id=int(row.id or 0),
            task_id=row.task_id,
            start_time=row.start_time,
            task_name=self._task_name(row.task_id),
        )

    def list_timings(self, task_id: int) -> list[Timing]:
        self._prune_orphans()
        with self._lock:
            rows = [t for t in self._rows.values() if t.task_id == task_id]
        rows.sort(key=lambda t: (t.start_time, t.id or 0))
        return [Timing(task_id=t.task_id, start_time=t.start_time, duration=t.duration, id=t.id) for t in rows]

    def task_totals(self, *, since: int | None = None) -> list[TaskTotal]:
        self._prune_orphans()
        totals: dict[int, list[int]] = {}
        with self._lock:
            for t in self._rows.values():
                if t.is_open or t.start_time < int(since or 0):
                    continue
                acc = totals.setdefault(t.task_id, [0, 0])
                acc[0] += t.duration
                acc[1] += 1

        out = [
            TaskTotal(task_id=task_id, task_name=self._task_name(task_id), total_seconds=seconds, sessions=sessions)
            for task_id, (seconds, sessions) in totals.items()
        ]
        out.sort(key=lambda x: (-x.total_seconds, x.task_name.lower()))
        return out
