# src/task_timer/storage/schema.py

"""
SQLite schema shared by TaskStore and TimingStore (both live in one DB file).

The schema is intentionally simple and migration-safe:
- create tables/views/triggers if missing
- use PRAGMA table_info to detect missing columns
- add columns with ALTER TABLE only when needed

Thread-safety:
- callers open one short-lived connection per operation
"""

from __future__ import annotations

import contextlib
import logging
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)


def connect(db_path: str | Path) -> sqlite3.Connection:
    conn = sqlite3.connect(str(db_path), timeout=30.0)
    conn.row_factory = sqlite3.Row
    with contextlib.suppress(sqlite3.DatabaseError):
        conn.execute("PRAGMA journal_mode=WAL")
    return conn


def _add_missing_columns(cur: sqlite3.Cursor, table: str, wanted: dict[str, str]) -> None:
    cur.execute(f"PRAGMA table_info({table})")
    cols = {row["name"] for row in cur.fetchall()}
    for name, decl in wanted.items():
        if name in cols:
            continue
        cur.execute(f"ALTER TABLE {table} ADD COLUMN {name} {decl}")
        logger.info("Schema migration: added column %s.%s", table, name)


def ensure_schema(conn: sqlite3.Connection) -> None:
    cur = conn.cursor()

    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS tasks (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            description TEXT NOT NULL DEFAULT '',
            sort_order INTEGER NOT NULL DEFAULT 0
        )
        """
    )
    _add_missing_columns(
        cur,
        "tasks",
        {
            "description": "TEXT NOT NULL DEFAULT ''",
            "sort_order": "INTEGER NOT NULL DEFAULT 0",
        },
    )

    # duration = 0 marks the open ("current") timing.
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS timings (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            task_id INTEGER NOT NULL,
            start_time INTEGER NOT NULL,
            duration INTEGER NOT NULL DEFAULT 0
        )
        """
    )
    _add_missing_columns(cur, "timings", {"duration": "INTEGER NOT NULL DEFAULT 0"})

    cur.execute("CREATE INDEX IF NOT EXISTS idx_timings_task ON timings(task_id)")
    cur.execute("CREATE INDEX IF NOT EXISTS idx_timings_open ON timings(duration)")

    # Deleting a task drops its timings (open one included).
    cur.execute(
        """
        CREATE TRIGGER IF NOT EXISTS remove_task_timings
        AFTER DELETE ON tasks
        FOR EACH ROW
        BEGIN
            DELETE FROM timings WHERE task_id = OLD.id;
        END
        """
    )

    cur.execute(
        """
        CREATE VIEW IF NOT EXISTS current_timing AS
        SELECT timings.id AS timing_id,
               timings.task_id AS task_id,
               timings.start_time AS start_time,
               tasks.name AS task_name
        FROM timings
        JOIN tasks ON timings.task_id = tasks.id
        WHERE timings.duration = 0
        ORDER BY timings.start_time DESC, timings.id DESC
        """
    )

    conn.commit()


def init_db(db_path: str | Path) -> Path:
    """Create parent dir + schema; return the resolved path."""
    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = connect(path)
    try:
        ensure_schema(conn)
    finally:
        conn.close()
    return path
