# tests/test_logging_setup.py

from __future__ import annotations

import logging

import pytest

from task_timer.logging_setup import _ConsoleNoiseFilter, setup_logging


@pytest.fixture()
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)
    logging.captureWarnings(False)


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


def test_console_filter_levels() -> None:
    f = _ConsoleNoiseFilter()
    assert f.filter(_record("task_timer.core.engine", logging.DEBUG))
    assert not f.filter(_record("task_timer.core.writer", logging.INFO))
    assert f.filter(_record("task_timer.core.writer", logging.WARNING))
    assert not f.filter(_record("py.warnings", logging.WARNING))
    assert not f.filter(_record("urllib3", logging.WARNING))
    assert f.filter(_record("urllib3", logging.ERROR))


def test_setup_logging_writes_file(tmp_path, restore_root_logging) -> None:
    log_file = setup_logging(log_dir=tmp_path / "logs")
    logging.getLogger("task_timer.test").debug("hello file")
    for h in logging.getLogger().handlers:
        h.flush()

    assert log_file == tmp_path / "logs" / "task-timer.log"
    assert "hello file" in log_file.read_text(encoding="utf-8")
    assert len(logging.getLogger().handlers) == 2
