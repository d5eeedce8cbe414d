# src/weekly_status/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs one of:
- console: interactive REPL over the tracker (default),
- serve: the state server (GET/PUT /api/state),
- export / import: one-shot document transfer.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

import uvicorn

from ..cli.bootstrap import create_initial_state, create_server_app
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.errors import InvalidImport
from ..core.state import AppState
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="weekly-status", description="Weekly status tracker.")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("console", help="Interactive console (default).")

    serve = sub.add_parser("serve", help="Run the state server.")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)

    export = sub.add_parser("export", help="Write the document to DIR as a dated JSON file.")
    export.add_argument("directory", nargs="?", default=".")

    imp = sub.add_parser("import", help="Replace the document with the contents of FILE.")
    imp.add_argument("file")

    return parser


async def _shutdown(state: AppState) -> None:
    """Best-effort shutdown: push the last pending save, close the HTTP client."""
    try:
        await state.sync.aclose()
    except Exception:
        logger.exception("Failed to close the synchronizer.")


async def _run_console(settings) -> None:
    state = create_initial_state(settings=settings)
    await state.sync.initialize()
    try:
        state.weeks.ensure_current_week()
        await run_console_loop(state)
    finally:
        await _shutdown(state)


async def _run_export(settings, directory: str) -> int:
    state = create_initial_state(settings=settings)
    await state.sync.initialize()
    try:
        path = state.sync.export_file(Path(directory))
    finally:
        await _shutdown(state)
    print(path)
    return 0


async def _run_import(settings, file: str) -> int:
    state = create_initial_state(settings=settings)
    await state.sync.initialize()
    try:
        state.sync.import_file(file)
    except InvalidImport as e:
        logger.error("Import failed: %s", e)
        print(f"Import failed: {e}")
        return 1
    finally:
        await _shutdown(state)
    print("Import complete.")
    return 0


def _serve(settings, host: str | None, port: int | None) -> None:
    app = create_server_app(settings=settings)
    host = host or settings.server_host
    port = port or settings.server_port
    logger.info("State server listening on http://%s:%s", host, port)
    # log_config=None keeps our handlers instead of uvicorn's defaults.
    uvicorn.run(app, host=host, port=port, log_config=None)


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=getattr(settings, "data_dir", ".local/weekly-status"), console_level=console_level)

    logger.info("Starting %s (%s)...", getattr(settings, "app_name", "weekly-status"), args.command or "console")

    command = args.command or "console"
    if command == "serve":
        _serve(settings, args.host, args.port)
        return 0
    if command == "export":
        return asyncio.run(_run_export(settings, args.directory))
    if command == "import":
        return asyncio.run(_run_import(settings, args.file))

    try:
        asyncio.run(_run_console(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted.")
    logger.info("Bye.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
