# src/task_timer/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Nothing is required at import time; every value has a default.
- User-editable preferences (ignore threshold) live in the preferences file,
  not here. Settings only provide the initial default for them.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKTIMER"

STORAGE_BACKENDS = ("sqlite", "memory")

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def _env_choice(name: str, choices: tuple[str, ...], default: str) -> str:
    raw = _env(name, default).strip().lower()
    return raw if raw in choices else default


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    db_path: Path
    preferences_path: Path

    # ---- Storage / timing ----
    storage_backend: str
    default_ignore_less_than: int
    write_workers: int

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "task-timer").strip() or "task-timer"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/task-timer"))
        db_path = _env_path(_k("DB_PATH"), data_dir / "tasktimer.sqlite3")
        preferences_path = _env_path(_k("PREFERENCES_PATH"), data_dir / "preferences.json")

        storage_backend = _env_choice(_k("STORAGE"), STORAGE_BACKENDS, "sqlite")
        default_ignore_less_than = max(0, _env_int(_k("IGNORE_LESS_THAN"), 3))
        write_workers = max(1, _env_int(_k("WRITE_WORKERS"), 4))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            db_path=db_path,
            preferences_path=preferences_path,
            storage_backend=storage_backend,
            default_ignore_less_than=default_ignore_less_than,
            write_workers=write_workers,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
