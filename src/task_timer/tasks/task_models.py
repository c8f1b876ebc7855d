# src/task_timer/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class Task:
    """A user-defined task. id == 0 means "not saved yet"."""

    name: str
    description: str = ""
    sort_order: int = 0
    id: int = 0

    @property
    def is_persisted(self) -> bool:
        return isinstance(self.id, int) and self.id > 0


@dataclass(slots=True)
class Timing:
    """
    One interval of work on one task.

    Notes:
    - duration == 0 is the "open" sentinel; it is set exactly once, on close
    - id stays None until the open record has been written to the ledger
    """

    task_id: int
    start_time: int
    duration: int = 0
    id: int | None = None

    @property
    def is_open(self) -> bool:
        return self.duration == 0

    def close(self, now: int) -> int:
        # A zero-second close keeps the sentinel; callers must not store it as closed.
        self.duration = max(0, int(now) - int(self.start_time))
        return self.duration


@dataclass(slots=True, frozen=True)
class OpenTiming:
    """The (at most one) open ledger record, joined with its task name."""

    timing_id: int
    task_id: int
    start_time: int
    task_name: str

    def to_timing(self) -> Timing:
        return Timing(task_id=self.task_id, start_time=self.start_time, id=self.timing_id)


@dataclass(slots=True, frozen=True)
class TaskTotal:
    task_id: int
    task_name: str
    total_seconds: int
    sessions: int
