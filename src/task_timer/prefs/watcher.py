# src/task_timer/prefs/watcher.py

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from ..core.observer import LiveValue
from .preferences import PreferenceStore

logger = logging.getLogger(__name__)

IGNORE_LESS_THAN_KEY = "ignore_less_than"
DEFAULT_IGNORE_LESS_THAN = 3


class SettingsWatcher:
    """
    Owns the live "ignore timings shorter than N seconds" value.

    - set_ignore_threshold(): user change from inside the app (persist + publish)
    - refresh(): pick up an edit made to the preferences file from outside
    - subscribe(): engine (or UI) gets every new value
    """

    def __init__(
        self,
        prefs: PreferenceStore,
        *,
        default_ignore_less_than: int = DEFAULT_IGNORE_LESS_THAN,
    ) -> None:
        self._prefs = prefs
        self._default = max(0, int(default_ignore_less_than))
        self._lock = threading.Lock()
        self._seen_mtime = prefs.mtime()
        self._threshold = LiveValue(self._read())
        logger.info("Ignoring timings shorter than %s seconds", self._threshold.value)

    def _read(self) -> int:
        return max(0, self._prefs.get_int(IGNORE_LESS_THAN_KEY, self._default))

    @property
    def ignore_threshold(self) -> int:
        return self._threshold.value

    def subscribe(self, callback: Callable[[int], None], *, replay: bool = True):
        return self._threshold.subscribe(callback, replay=replay)

    def set_ignore_threshold(self, value: int) -> int:
        value = max(0, int(value))
        with self._lock:
            self._prefs.set_int(IGNORE_LESS_THAN_KEY, value)
            self._seen_mtime = self._prefs.mtime()
            changed = value != self._threshold.value
            if changed:
                self._threshold.set(value)
        if changed:
            logger.info("Now ignoring timings shorter than %s seconds", value)
        return value

    def refresh(self) -> bool:
        """Re-read preferences if the file changed on disk. Returns True if the value changed."""
        with self._lock:
            mtime = self._prefs.mtime()
            if mtime == self._seen_mtime:
                return False
            self._seen_mtime = mtime
            value = self._read()
            if value == self._threshold.value:
                return False
            self._threshold.set(value)
        logger.info("Preferences changed on disk: ignoring timings shorter than %s seconds", value)
        return True
