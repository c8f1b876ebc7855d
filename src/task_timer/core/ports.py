# src/task_timer/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The engine depends on Protocols instead of concrete implementations.
This keeps the storage backend swappable (SQLite / in-memory) and makes testing easier.
"""

from collections.abc import Callable
from concurrent.futures import Future
from typing import Any, Protocol

from ..tasks.task_models import OpenTiming, Task


class Subscription(Protocol):
    """Handle returned by every subscribe(); cancel() is idempotent."""

    def cancel(self) -> None: ...


class TimingLedger(Protocol):
    """
    Durable storage of timing intervals.

    - insert_open: create a record with duration 0 and return its id
    - update_duration: raise NotFoundError if the id no longer exists
    - delete: idempotent, must only ever remove the given id
    - query_open: at most one open record expected, joined with its task name
    """

    def insert_open(self, task_id: int, start_time: int) -> int: ...
    def update_duration(self, timing_id: int, duration: int) -> None: ...
    def delete(self, timing_id: int) -> None: ...
    def query_open(self) -> OpenTiming | None: ...


class TaskRepo(Protocol):
    # Catalog API (console / task_api helpers)
    def add_task(self, *, name: str, description: str = "", sort_order: int = 0) -> int: ...
    def update_task(
            self,
            task_id: int,
            *,
            name: str | None = None,
            description: str | None = None,
            sort_order: int | None = None,
    ) -> None: ...
    def delete_task(self, task_id: int) -> None: ...
    def get_task(self, task_id: int) -> Task | None: ...
    def find_task_by_name(self, name: str) -> Task | None: ...
    def list_tasks(self) -> list[Task]: ...

    # Change notification (re-read on notify)
    def subscribe(self, callback: Callable[[], None]) -> Subscription: ...


class ThresholdSource(Protocol):
    """Where the engine gets its live ignore threshold from (SettingsWatcher)."""

    @property
    def ignore_threshold(self) -> int: ...

    def subscribe(self, callback: Callable[[int], None], *, replay: bool = True) -> Subscription: ...


class WriteDispatcher(Protocol):
    """Runs persistence writes off the caller's thread (BackgroundWriter)."""

    def submit(self, label: str, fn: Callable[..., Any], *args: Any) -> Future: ...
