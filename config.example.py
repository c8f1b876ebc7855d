# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
The ignore threshold is a user preference: it is changed with /ignore (or by editing
preferences.json) and is picked up without a restart. TASKTIMER_IGNORE_LESS_THAN only
sets its initial default.
"""

ENV_VARS = {
    # App / logging
    "TASKTIMER_APP_NAME": "App display name (default: task-timer).",
    "TASKTIMER_LOG_LEVEL": "Console logging level (default: INFO).",
    # Paths
    "TASKTIMER_DATA_DIR": "Local data directory (default: .local/task-timer).",
    "TASKTIMER_DB_PATH": "SQLite file for tasks and timings (default: <data_dir>/tasktimer.sqlite3).",
    "TASKTIMER_PREFERENCES_PATH": "User preferences JSON (default: <data_dir>/preferences.json).",
    # Storage / timing
    "TASKTIMER_STORAGE": "sqlite (default) or memory (timings are not kept across runs).",
    "TASKTIMER_IGNORE_LESS_THAN": "Default ignore threshold in seconds (default: 3).",
    "TASKTIMER_WRITE_WORKERS": "Background write threads (default: 4).",
}
