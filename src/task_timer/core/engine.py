# src/task_timer/core/engine.py

"""
Timing engine: the single authority for "what is being timed right now".

Decision table for toggle(task):
- nothing open          -> open a timing for task
- open on task, same    -> close it, nothing open afterwards
- open on task, other   -> close it, open a timing for the other task

Key invariants:
- at most one timing is open; the in-memory pointer (not storage) enforces it,
- every close computes duration = now - start_time and applies the ignore
  threshold (duration >= threshold keeps the row, shorter ones are deleted),
- state changes happen synchronously under one lock; ledger writes run in the
  background and their failures never roll the state back.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from concurrent.futures import Future
from dataclasses import dataclass, replace

from ..tasks.task_models import OpenTiming, Task, Timing
from .errors import PreconditionError, StorageUnavailable
from .observer import LiveValue
from .ports import ThresholdSource, TimingLedger, WriteDispatcher
from .writer import BackgroundWriter

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _Current:
    timing: Timing
    task_name: str
    # Resolves to the ledger id once insert_open has run.
    timing_id: Future


def _resolved(value: int) -> Future:
    fut: Future = Future()
    fut.set_result(value)
    return fut


class TimingEngine:
    def __init__(
        self,
        ledger: TimingLedger,
        settings: ThresholdSource,
        *,
        observer: LiveValue[str | None] | None = None,
        writer: WriteDispatcher | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._ledger = ledger
        self._writer = writer if writer is not None else BackgroundWriter()
        self._clock = clock or time.time
        self._lock = threading.RLock()

        self.timing_observer: LiveValue[str | None] = observer if observer is not None else LiveValue(None)

        self._current: _Current | None = None
        self._ignore_threshold = max(0, int(settings.ignore_threshold))
        self._threshold_sub = settings.subscribe(self.on_threshold_changed, replay=False)
        logger.debug("TimingEngine: ignoring timings shorter than %s seconds", self._ignore_threshold)

        try:
            found = self.retrieve_open_timing()
        except StorageUnavailable:
            logger.exception("Could not recover the open timing; starting with none")
            found = None

        if found is not None:
            self._current = _Current(
                timing=found.to_timing(),
                task_name=found.task_name,
                timing_id=_resolved(found.timing_id),
            )
            self.timing_observer.set(found.task_name)
            logger.info("Resumed timing task_id=%s (%s) started=%s", found.task_id, found.task_name, found.start_time)

    # ---- read side ----

    def _now(self) -> int:
        return int(self._clock())

    @property
    def current(self) -> Timing | None:
        """Copy of the open timing (duration stays 0 until it is closed)."""
        with self._lock:
            return replace(self._current.timing) if self._current else None

    @property
    def current_task_name(self) -> str | None:
        with self._lock:
            return self._current.task_name if self._current else None

    @property
    def ignore_threshold(self) -> int:
        with self._lock:
            return self._ignore_threshold

    def elapsed(self) -> int | None:
        """Seconds on the open timing so far (display only, nothing is stored)."""
        with self._lock:
            if self._current is None:
                return None
            return max(0, self._now() - self._current.timing.start_time)

    def retrieve_open_timing(self) -> OpenTiming | None:
        """Ask the ledger for the open record. Pure query: calling it twice gives the same answer."""
        found = self._ledger.query_open()
        logger.debug("retrieve_open_timing -> %s", found)
        return found

    # ---- write side ----

    def toggle(self, task: Task) -> Timing | None:
        """
        Start, stop or switch timing for task. Returns the timing now open (or None).

        Raises PreconditionError (before touching any state) if task was never saved.
        """
        task_id = getattr(task, "id", None)
        if not isinstance(task_id, int) or isinstance(task_id, bool) or task_id <= 0:
            raise PreconditionError(f"cannot time a task without an id: {task!r}")

        with self._lock:
            now = self._now()
            previous = self._current

            if previous is None:
                self._current = self._open(task, now)
            else:
                self._close(previous, now)
                if previous.timing.task_id == task_id:
                    self._current = None
                else:
                    self._current = self._open(task, now)

            self.timing_observer.set(self._current.task_name if self._current else None)
            return replace(self._current.timing) if self._current else None

    def on_threshold_changed(self, value: int) -> None:
        """New threshold applies to future closes only."""
        with self._lock:
            self._ignore_threshold = max(0, int(value))
            applied = self._ignore_threshold
        logger.debug("TimingEngine: now ignoring timings shorter than %s seconds", applied)

    def _open(self, task: Task, now: int) -> _Current:
        timing = Timing(task_id=task.id, start_time=now)
        fut = self._writer.submit(
            f"insert_open task_id={task.id}",
            self._insert_open,
            timing,
        )
        logger.info("Timing started task_id=%s (%s)", task.id, task.name)
        return _Current(timing=timing, task_name=task.name, timing_id=fut)

    def _insert_open(self, timing: Timing) -> int:
        timing_id = self._ledger.insert_open(timing.task_id, timing.start_time)
        timing.id = timing_id
        return timing_id

    def _close(self, current: _Current, now: int) -> None:
        duration = current.timing.close(now)
        # duration 0 is the "open" sentinel, so a zero-length interval is never kept.
        keep = duration > 0 and duration >= self._ignore_threshold
        logger.info(
            "Timing stopped task_id=%s (%s) duration=%ss -> %s",
            current.timing.task_id,
            current.task_name,
            duration,
            "save" if keep else "discard",
        )
        label = f"{'update_duration' if keep else 'delete'} task_id={current.timing.task_id}"
        self._writer.submit(label, self._persist_close, current.timing_id, duration, keep)

    def _persist_close(self, timing_id: Future, duration: int, keep: bool) -> None:
        # Same-record ordering: wait for this timing's own insert, nothing else.
        ident = int(timing_id.result())
        if keep:
            self._ledger.update_duration(ident, duration)
        else:
            self._ledger.delete(ident)

    # ---- lifecycle ----

    def close(self) -> None:
        """Release the settings subscription. Pending writes belong to the writer's owner."""
        self._threshold_sub.cancel()
