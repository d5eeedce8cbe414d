# src/weekly_status/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


def _on_reachability(reachable: bool) -> None:
    if reachable:
        _print_ts("[STORAGE] Saving to the project file.")
    else:
        _print_ts("[STORAGE] State server unreachable. Saving to the local slot only (use /sync to retry).")


async def run_console_loop(state: AppState) -> None:
    """
    Line-based front end. Input is read in a worker thread so the event loop
    keeps running debounced remote saves while the prompt waits.
    """
    logger.info("Console connector started (storage=%s).", state.sync.storage_mode.value)
    _print_ts("[CONSOLE] Use /help for commands. Use /exit to quit.\n")

    state.sync.add_listener(_on_reachability)

    while True:
        try:
            user_input = (await asyncio.to_thread(input, ">>> ")).strip()
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
            _print_ts("Commands start with '/'. Use /help to list them.")
            continue

        try:
            cmd_response = await command_registry.handle_async(state, user_input)
        except Exception:
            logger.exception("Command handler crashed.")
            cmd_response = "Internal error while handling a command."

        if cmd_response is not None:
            _print_ts(cmd_response)

    logger.info("Console connector finished.")
