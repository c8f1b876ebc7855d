# src/task_timer/core/writer.py

"""
Background persistence writes.

Each write is an independent unit of work on a thread pool: the caller never
blocks, and writes for different records may complete in any order. Failures are
logged and counted, never retried; the exception stays on the returned Future so a
dependent write (close-after-insert of the same timing) can see it.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any

from .errors import NotFoundError, StorageUnavailable

logger = logging.getLogger(__name__)


class BackgroundWriter:
    def __init__(self, max_workers: int = 4) -> None:
        self._pool = ThreadPoolExecutor(max_workers=max(1, int(max_workers)), thread_name_prefix="timing-write")
        self._lock = threading.Lock()
        self._pending: set[Future] = set()
        self._failed = 0
        self._closed = False

    @property
    def failed_writes(self) -> int:
        with self._lock:
            return self._failed

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._pending)

    def _run(self, label: str, fn: Callable[..., Any], args: tuple[Any, ...]) -> Any:
        try:
            result = fn(*args)
        except NotFoundError as e:
            self._count_failure()
            logger.warning("%s: %s", label, e)
            raise
        except StorageUnavailable:
            self._count_failure()
            logger.exception("%s: storage unavailable", label)
            raise
        except Exception:
            self._count_failure()
            logger.exception("%s failed", label)
            raise
        logger.debug("%s done", label)
        return result

    def _count_failure(self) -> None:
        with self._lock:
            self._failed += 1

    def _forget(self, fut: Future) -> None:
        with self._lock:
            self._pending.discard(fut)

    def submit(self, label: str, fn: Callable[..., Any], *args: Any) -> Future:
        with self._lock:
            if self._closed:
                raise RuntimeError("BackgroundWriter is shut down")
            fut = self._pool.submit(self._run, label, fn, args)
            self._pending.add(fut)
        fut.add_done_callback(self._forget)
        return fut

    def flush(self, timeout: float | None = None) -> bool:
        """Wait for every write submitted so far. Returns False on timeout."""
        with self._lock:
            pending = list(self._pending)
        if not pending:
            return True
        _done, not_done = wait(pending, timeout=timeout)
        return not not_done

    def shutdown(self, timeout: float | None = 10.0) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
        if not self.flush(timeout=timeout):
            logger.warning("Shutting down with %s timing writes still pending", self.pending)
        self._pool.shutdown(wait=True)
