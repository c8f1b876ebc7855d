# src/task_timer/core/state.py

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any

from ..prefs.watcher import SettingsWatcher
from ..tasks.task_api import TaskList
from ..tasks.task_store import TaskStore
from .engine import TimingEngine
from .writer import BackgroundWriter

logger = logging.getLogger(__name__)


@dataclass
class AppState:
    # Settings object (config.Settings or a test stand-in).
    settings: Any

    task_store: TaskStore
    ledger: Any  # TimingLedger (TimingStore or InMemoryTimingLedger)
    settings_watcher: SettingsWatcher
    writer: BackgroundWriter
    engine: TimingEngine
    task_list: TaskList

    lock: threading.RLock = field(default_factory=threading.RLock)

    def shutdown(self) -> None:
        """Best-effort shutdown: release subscriptions, then drain pending writes."""
        for name, fn in (
            ("engine", self.engine.close),
            ("task_list", self.task_list.close),
            ("writer", self.writer.shutdown),
            ("ledger", self.ledger.close),
            ("task_store", self.task_store.close),
        ):
            try:
                fn()
            except Exception:
                logger.exception("Shutdown step %s failed", name)
