# src/task_timer/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (stores/ledger/settings watcher/engine).
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.engine import TimingEngine
from ..core.state import AppState
from ..core.writer import BackgroundWriter
from ..prefs.preferences import PreferenceStore
from ..prefs.watcher import SettingsWatcher
from ..tasks.task_api import TaskList
from ..tasks.task_store import TaskStore
from ..timings.memory_ledger import InMemoryTimingLedger
from ..timings.timing_store import TimingStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)
    settings.preferences_path.parent.mkdir(parents=True, exist_ok=True)


def _build_ledger(settings, task_store: TaskStore):
    backend = str(getattr(settings, "storage_backend", "sqlite"))
    if backend == "memory":
        logger.info("Timings are kept in memory only (storage_backend=memory).")
        return InMemoryTimingLedger(task_store.get_task_name)
    return TimingStore(settings.db_path)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    task_store = TaskStore(settings.db_path)
    ledger = _build_ledger(settings, task_store)

    watcher = SettingsWatcher(
        PreferenceStore(settings.preferences_path),
        default_ignore_less_than=getattr(settings, "default_ignore_less_than", 3),
    )
    writer = BackgroundWriter(max_workers=getattr(settings, "write_workers", 4))
    engine = TimingEngine(ledger, watcher, writer=writer)

    return AppState(
        settings=settings,
        task_store=task_store,
        ledger=ledger,
        settings_watcher=watcher,
        writer=writer,
        engine=engine,
        task_list=TaskList(task_store),
    )
