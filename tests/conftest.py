# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from weekly_status.core.state import AppState
from weekly_status.core.sync import StateSynchronizer
from weekly_status.storage.local_store import JsonSlotStore

from .fakes import FakeRemoteStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI commands.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="weekly-status",
        data_dir=tmp_path / "data",
        slot_key="weekly-status-tracker:v2",
        legacy_slot_key="weekly-status-tracker:v1",
        remote_enabled=False,
        remote_base_url="http://testserver",
        state_endpoint="/api/state",
        save_debounce_seconds=0.01,
        server_data_file=tmp_path / "server" / "weekly-status.json",
        max_body_bytes=1_000_000,
    )


@pytest.fixture()
def local_store(settings: SimpleNamespace) -> JsonSlotStore:
    return JsonSlotStore(
        settings.data_dir,
        slot_key=settings.slot_key,
        legacy_slot_key=settings.legacy_slot_key,
    )


@pytest.fixture()
def remote() -> FakeRemoteStore:
    return FakeRemoteStore()


@pytest.fixture()
def sync(local_store: JsonSlotStore) -> StateSynchronizer:
    """
    Local-only synchronizer. Nothing is loaded from disk: the in-memory
    document starts empty, which is what initialize() yields on a fresh slot.
    """
    return StateSynchronizer(local_store, None, debounce_seconds=0.01)


@pytest.fixture()
def state(settings: SimpleNamespace, sync: StateSynchronizer) -> AppState:
    return AppState.wire(settings, sync)
