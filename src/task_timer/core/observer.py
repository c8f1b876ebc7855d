# src/task_timer/core/observer.py

"""
Minimal observer primitives.

- LiveValue[T]: holds the latest value and pushes it to subscribers
  ("latest value wins": a slow consumer is not guaranteed every intermediate value,
  only the most recent one after the producer is done).
- ChangeNotifier: value-less "something changed, re-read" signal used by stores.

Callbacks run synchronously on the producer's thread. A callback that raises is
logged and skipped; it never breaks the producer or other subscribers.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _Subscription:
    def __init__(self, release: Callable[[int], None], token: int) -> None:
        self._release = release
        self._token = token
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        self._release(self._token)


class _CallbackSet:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._callbacks: dict[int, Callable] = {}
        self._next = 0

    def add(self, callback: Callable) -> _Subscription:
        with self._lock:
            token = self._next
            self._next += 1
            self._callbacks[token] = callback
        return _Subscription(self._remove, token)

    def _remove(self, token: int) -> None:
        with self._lock:
            self._callbacks.pop(token, None)

    def snapshot(self) -> list[Callable]:
        with self._lock:
            return list(self._callbacks.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._callbacks)


def _safe_call(callback: Callable, *args) -> None:
    try:
        callback(*args)
    except Exception:
        logger.exception("Subscriber callback %r failed", callback)


class LiveValue(Generic[T]):
    def __init__(self, initial: T) -> None:
        self._lock = threading.Lock()
        self._value = initial
        self._subscribers = _CallbackSet()

    @property
    def value(self) -> T:
        with self._lock:
            return self._value

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def set(self, value: T) -> None:
        with self._lock:
            self._value = value
        for cb in self._subscribers.snapshot():
            _safe_call(cb, value)

    def subscribe(self, callback: Callable[[T], None], *, replay: bool = True) -> _Subscription:
        """Register callback; with replay=True it immediately receives the current value."""
        sub = self._subscribers.add(callback)
        if replay:
            _safe_call(callback, self.value)
        return sub


class ChangeNotifier:
    def __init__(self) -> None:
        self._subscribers = _CallbackSet()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: Callable[[], None]) -> _Subscription:
        return self._subscribers.add(callback)

    def notify(self) -> None:
        for cb in self._subscribers.snapshot():
            _safe_call(cb)
