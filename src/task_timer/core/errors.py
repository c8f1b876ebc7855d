# src/task_timer/core/errors.py

"""
Error taxonomy shared by the engine and the storage adapters.

Storage errors are reported (logged) by the background writer and never roll back
an in-memory timing transition.
"""

from __future__ import annotations


class TimerError(Exception):
    """Base class for task_timer errors."""


class PreconditionError(TimerError, ValueError):
    """The caller asked for something invalid (e.g. timing a task that was never saved)."""


class NotFoundError(TimerError, LookupError):
    """A ledger record targeted by update/delete no longer exists."""

    def __init__(self, what: str, ident: int) -> None:
        super().__init__(f"{what} id={ident} not found")
        self.what = what
        self.ident = ident


class StorageUnavailable(TimerError):
    """Transient failure reaching the underlying storage."""
