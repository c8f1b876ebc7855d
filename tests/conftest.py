# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from task_timer.core.engine import TimingEngine
from task_timer.prefs.preferences import PreferenceStore
from task_timer.prefs.watcher import SettingsWatcher

from .fakes import FakeClock, InlineWriter, RecordingLedger


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with create_initial_state().

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="task-timer-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        db_path=tmp_path / "tasktimer.sqlite3",
        preferences_path=tmp_path / "preferences.json",
        storage_backend="sqlite",
        default_ignore_less_than=3,
        write_workers=2,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def ledger() -> RecordingLedger:
    return RecordingLedger(names={1: "Write", 2: "Read", 3: "Plan"})


@pytest.fixture()
def watcher(tmp_path: Path) -> SettingsWatcher:
    prefs = PreferenceStore(tmp_path / "preferences.json")
    w = SettingsWatcher(prefs, default_ignore_less_than=5)
    return w


@pytest.fixture()
def writer() -> InlineWriter:
    return InlineWriter()


@pytest.fixture()
def engine(ledger: RecordingLedger, watcher: SettingsWatcher, writer: InlineWriter, clock: FakeClock):
    """
    Engine wired with deterministic fakes (inline writes, manual clock).

    Threshold is 5 seconds; the startup query_open call is cleared from the ledger log.
    """
    eng = TimingEngine(ledger, watcher, writer=writer, clock=clock)
    ledger.calls.clear()
    yield eng
    eng.close()
