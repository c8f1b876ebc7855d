# src/task_timer/connectors/console_connector.py

from __future__ import annotations

import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def _on_timing_changed(name: str | None) -> None:
    _print_ts(f"[TIMING] {name}" if name is not None else "[TIMING] (nothing)")


def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Use /help for commands, /time <task> to start or stop timing, /exit to quit.\n")

    # Replays the recovered timing (if any) right away.
    timing_sub = state.engine.timing_observer.subscribe(_on_timing_changed)

    try:
        while True:
            try:
                user_input = input(">>> ").strip()
            except EOFError:
                logger.info("Console EOF received, exiting.")
                break
            except KeyboardInterrupt:
                logger.info("Console KeyboardInterrupt, exiting.")
                print()
                break

            if not user_input:
                continue

            if user_input.lower() in ("/exit", "/quit"):
                logger.info("Console exit command received.")
                break

            if not user_input.startswith("/"):
                user_input = "/time " + user_input

            try:
                with state.lock:
                    state.settings_watcher.refresh()
                    response = command_registry.handle(state, user_input)
            except Exception:
                logger.exception("Command handler crashed.")
                response = "Internal error while handling a command."

            if response is not None:
                print(f"[{_ts_local()}] {response}")
    finally:
        timing_sub.cancel()

    logger.info("Console connector finished.")
