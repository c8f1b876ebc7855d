# src/task_timer/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "task-timer.log"

# Minimum console level per logger; anything not listed and outside task_timer gets ERROR.
_CONSOLE_FLOORS = {
    "task_timer.core.writer": logging.WARNING,
    "py.warnings": logging.ERROR,
}


class _ConsoleNoiseFilter(logging.Filter):
    """Keeps the prompt readable: pool-thread write chatter and library output stay in the file log."""

    def filter(self, record: logging.LogRecord) -> bool:
        floor = _CONSOLE_FLOORS.get(record.name)
        if floor is None:
            floor = logging.NOTSET if record.name.startswith("task_timer.") else logging.ERROR
        return record.levelno >= floor


def setup_logging(
    *,
    log_dir: str | Path = ".local/task-timer",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Send task_timer logs to stderr (filtered) and to <log_dir>/task-timer.log (everything).

    Replaces whatever handlers the root logger had. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    logging.captureWarnings(True)
    return log_file
