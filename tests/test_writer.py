# tests/test_writer.py

from __future__ import annotations

import logging
import threading

import pytest

from task_timer.core.errors import NotFoundError, StorageUnavailable
from task_timer.core.writer import BackgroundWriter


def test_writes_run_off_the_caller_thread() -> None:
    writer = BackgroundWriter(max_workers=2)
    caller = threading.get_ident()
    try:
        fut = writer.submit("thread_ident", threading.get_ident)
        assert writer.flush(timeout=5.0)
        assert fut.result() != caller
    finally:
        writer.shutdown()


def test_failures_are_logged_counted_and_kept_on_future(caplog) -> None:
    writer = BackgroundWriter(max_workers=2)

    def missing() -> None:
        raise NotFoundError("timing", 42)

    def down() -> None:
        raise StorageUnavailable("disk I/O error")

    try:
        with caplog.at_level(logging.WARNING, logger="task_timer.core.writer"):
            f1 = writer.submit("update_duration task_id=1", missing)
            f2 = writer.submit("insert_open task_id=2", down)
            assert writer.flush(timeout=5.0)
    finally:
        writer.shutdown()

    assert writer.failed_writes == 2
    assert isinstance(f1.exception(), NotFoundError)
    assert isinstance(f2.exception(), StorageUnavailable)
    assert "timing id=42 not found" in caplog.text
    assert "storage unavailable" in caplog.text


def test_submit_after_shutdown_is_rejected() -> None:
    writer = BackgroundWriter(max_workers=1)
    writer.shutdown()
    writer.shutdown()
    with pytest.raises(RuntimeError):
        writer.submit("late", lambda: None)
