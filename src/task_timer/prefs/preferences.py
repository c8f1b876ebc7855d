# src/task_timer/prefs/preferences.py

from __future__ import annotations

import contextlib
import json
import logging
import os
import threading
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class PreferenceStore:
    """
    User-editable preferences persisted as a small JSON object.

    Reads are best-effort: a missing file, broken JSON or a value of the wrong
    type yields the caller's default (logged) instead of an exception.
    Writes go through a temp file + os.replace so readers never see half a file.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def mtime(self) -> float | None:
        try:
            return self._path.stat().st_mtime
        except OSError:
            return None

    def _load(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text("utf-8"))
        except (OSError, ValueError):
            logger.warning("Preferences file %s is unreadable; using defaults", self._path)
            return {}
        if not isinstance(data, dict):
            logger.warning("Preferences file %s is not a JSON object; using defaults", self._path)
            return {}
        return data

    def get_int(self, key: str, default: int) -> int:
        with self._lock:
            raw = self._load().get(key)
        if raw is None:
            return default
        if isinstance(raw, bool):
            logger.warning("Preference %s=%r is not an integer; using %s", key, raw, default)
            return default
        try:
            return int(raw)
        except (TypeError, ValueError):
            logger.warning("Preference %s=%r is not an integer; using %s", key, raw, default)
            return default

    def set_int(self, key: str, value: int) -> None:
        with self._lock:
            data = self._load()
            data[key] = int(value)
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self._path.with_suffix(".tmp")
            tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), "utf-8")
            os.replace(tmp, self._path)
            with contextlib.suppress(OSError):
                os.chmod(self._path, 0o600)
        logger.debug("Preference saved %s=%s path=%s", key, value, self._path)
