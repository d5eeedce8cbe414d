# src/weekly_status/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the local slot, the optional remote store and the synchronizer into AppState,
- builds the state server app.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI

from ..config import get_settings
from ..core.ports import RemoteStore
from ..core.state import AppState
from ..core.sync import StateSynchronizer
from ..server.app import create_app
from ..storage.document_file import DocumentFile
from ..storage.local_store import JsonSlotStore
from ..storage.remote_store import HttpRemoteStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings (nothing is loaded yet;
    call `await state.sync.initialize()` inside the event loop).

    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    local = JsonSlotStore(
        settings.data_dir,
        slot_key=settings.slot_key,
        legacy_slot_key=settings.legacy_slot_key,
    )

    remote: RemoteStore | None = None
    if settings.remote_enabled:
        remote = HttpRemoteStore(
            settings.remote_base_url,
            endpoint=settings.state_endpoint,
            timeout_seconds=settings.remote_timeout_seconds,
        )
    else:
        logger.info("Remote store disabled; running on the local slot only.")

    sync = StateSynchronizer(local, remote, debounce_seconds=settings.save_debounce_seconds)
    return AppState.wire(settings, sync)


def create_server_app(*, settings=None) -> FastAPI:
    if settings is None:
        settings = get_settings()
    return create_app(DocumentFile(settings.server_data_file), max_body_bytes=settings.max_body_bytes)
