# tests/test_sync.py

from __future__ import annotations

import asyncio
import json
from datetime import date
from pathlib import Path

import pytest

from weekly_status.core.errors import InvalidImport
from weekly_status.core.models import StorageMode
from weekly_status.core.normalize import normalize
from weekly_status.core.sync import StateSynchronizer, export_filename
from weekly_status.storage.local_store import JsonSlotStore

from .fakes import FailingLocalStore, FakeRemoteStore


def _add_week(key: str):
    def _mutate(doc):
        doc["weeks"][key] = {"tiles": [], "createdAt": "2024-01-01T00:00:00.000Z"}

    return _mutate


@pytest.mark.asyncio
async def test_reachable_remote_replaces_local(local_store: JsonSlotStore, remote: FakeRemoteStore) -> None:
    local_store.save_local(normalize({"weeks": {"2023-01-02": {"tiles": []}}}))
    remote.stored = {"weeks": {"2024-01-01": {"tiles": [{"text": "from server"}]}}}

    sync = StateSynchronizer(local_store, remote, debounce_seconds=0.01)
    await sync.initialize()

    assert sync.storage_mode is StorageMode.REMOTE
    assert list(sync.document["weeks"]) == ["2024-01-01"]
    assert list(local_store.load_local()["weeks"]) == ["2024-01-01"]


@pytest.mark.asyncio
async def test_unreachable_remote_falls_back_to_local(local_store: JsonSlotStore, remote: FakeRemoteStore) -> None:
    local_store.save_local(normalize({"weeks": {"2023-01-02": {"tiles": []}}}))
    remote.fail_load = True

    sync = StateSynchronizer(local_store, remote, debounce_seconds=0.01)
    await sync.initialize()

    assert sync.storage_mode is StorageMode.LOCAL
    assert list(sync.document["weeks"]) == ["2023-01-02"]


@pytest.mark.asyncio
async def test_invalid_remote_body_falls_back_to_local(local_store: JsonSlotStore, remote: FakeRemoteStore) -> None:
    remote.stored = {"nope": 1}
    sync = StateSynchronizer(local_store, remote, debounce_seconds=0.01)
    await sync.initialize()
    assert sync.storage_mode is StorageMode.LOCAL
    assert sync.document["weeks"] == {}


@pytest.mark.asyncio
async def test_legacy_slot_is_migrated_and_saved(local_store: JsonSlotStore) -> None:
    local_store.legacy_path.parent.mkdir(parents=True, exist_ok=True)
    local_store.legacy_path.write_text(
        json.dumps({"weeks": {"2024-01-01": {"done": [{"text": "a"}], "plan": []}}}), "utf-8"
    )

    sync = StateSynchronizer(local_store, None)
    await sync.initialize()

    tiles = sync.document["weeks"]["2024-01-01"]["tiles"]
    assert [t["text"] for t in tiles] == ["Last week", "a"]
    assert local_store.load_local() == sync.document
    # the legacy slot is left alone
    assert local_store.legacy_path.exists()


@pytest.mark.asyncio
async def test_malformed_legacy_starts_empty(local_store: JsonSlotStore) -> None:
    local_store.legacy_path.parent.mkdir(parents=True, exist_ok=True)
    local_store.legacy_path.write_text(json.dumps({"weeks": {"2024-01-01": {"done": "bad"}}}), "utf-8")

    sync = StateSynchronizer(local_store, None)
    await sync.initialize()
    assert sync.document["weeks"] == {}


@pytest.mark.asyncio
async def test_rapid_commits_coalesce_into_one_save(local_store: JsonSlotStore, remote: FakeRemoteStore) -> None:
    sync = StateSynchronizer(local_store, remote, debounce_seconds=0.05)
    await sync.initialize()

    sync.commit(_add_week("2024-01-01"))
    sync.commit(_add_week("2024-01-08"))
    sync.commit(_add_week("2024-01-15"))
    assert remote.saves == []

    await asyncio.sleep(0.2)
    await sync.flush()

    assert len(remote.saves) == 1
    assert sorted(remote.saves[0]["weeks"]) == ["2024-01-01", "2024-01-08", "2024-01-15"]


@pytest.mark.asyncio
async def test_flush_sends_pending_save_immediately(local_store: JsonSlotStore, remote: FakeRemoteStore) -> None:
    sync = StateSynchronizer(local_store, remote, debounce_seconds=10.0)
    await sync.initialize()

    sync.commit(_add_week("2024-01-01"))
    await sync.flush()

    assert len(remote.saves) == 1


@pytest.mark.asyncio
async def test_commit_saves_locally_every_time(local_store: JsonSlotStore) -> None:
    sync = StateSynchronizer(local_store, None)
    await sync.initialize()

    sync.commit(_add_week("2024-01-01"))
    assert list(local_store.load_local()["weeks"]) == ["2024-01-01"]


@pytest.mark.asyncio
async def test_failed_save_demotes_without_retry(local_store: JsonSlotStore, remote: FakeRemoteStore) -> None:
    sync = StateSynchronizer(local_store, remote, debounce_seconds=0.01)
    await sync.initialize()
    flips: list[bool] = []
    sync.add_listener(flips.append)

    remote.fail_save = True
    sync.commit(_add_week("2024-01-01"))
    await sync.flush()
    assert sync.storage_mode is StorageMode.LOCAL
    assert flips == [False]

    # server comes back, but nothing is sent until an explicit reload
    remote.fail_save = False
    sync.commit(_add_week("2024-01-08"))
    await sync.flush()
    assert remote.saves == []
    assert list(local_store.load_local()["weeks"]) == ["2024-01-01", "2024-01-08"]

    assert await sync.refresh() is True
    assert sync.storage_mode is StorageMode.REMOTE
    assert flips == [False, True]


@pytest.mark.asyncio
async def test_refresh_discards_pending_save(local_store: JsonSlotStore, remote: FakeRemoteStore) -> None:
    sync = StateSynchronizer(local_store, remote, debounce_seconds=0.05)
    await sync.initialize()

    sync.commit(_add_week("2024-01-01"))
    remote.stored = {"weeks": {"2030-01-07": {"tiles": []}}}

    assert await sync.refresh() is True
    await asyncio.sleep(0.2)
    await sync.flush()

    assert remote.saves == []
    assert list(remote.stored["weeks"]) == ["2030-01-07"]
    assert list(sync.document["weeks"]) == ["2030-01-07"]
    assert list(local_store.load_local()["weeks"]) == ["2030-01-07"]

    # edits after the reload are sent again
    sync.commit(_add_week("2030-01-14"))
    await sync.flush()
    assert sorted(remote.saves[-1]["weeks"]) == ["2030-01-07", "2030-01-14"]


@pytest.mark.asyncio
async def test_stale_snapshot_is_not_sent_after_newer_one(local_store: JsonSlotStore, remote: FakeRemoteStore) -> None:
    sync = StateSynchronizer(local_store, remote)
    await sync.initialize()

    newer = normalize({"weeks": {"2024-01-08": {"tiles": []}}})
    older = normalize({"weeks": {"2024-01-01": {"tiles": []}}})
    await sync._send(2, newer)
    await sync._send(1, older)

    assert len(remote.saves) == 1
    assert list(remote.stored["weeks"]) == ["2024-01-08"]


@pytest.mark.asyncio
async def test_local_save_failure_keeps_editing() -> None:
    local = FailingLocalStore()
    sync = StateSynchronizer(local, None)
    await sync.initialize()

    sync.commit(_add_week("2024-01-01"))
    assert "2024-01-01" in sync.document["weeks"]
    assert local.save_attempts >= 1


@pytest.mark.asyncio
async def test_import_replaces_document(local_store: JsonSlotStore, remote: FakeRemoteStore) -> None:
    sync = StateSynchronizer(local_store, remote, debounce_seconds=0.01)
    await sync.initialize()
    sync.commit(_add_week("2023-01-02"))

    sync.import_whole({"weeks": {"2024-01-01": {"tiles": [{"text": "imported"}]}}, "taskSortMode": "status"})
    await sync.flush()

    assert list(sync.document["weeks"]) == ["2024-01-01"]
    assert sync.document["taskSortMode"] == "status"
    assert list(local_store.load_local()["weeks"]) == ["2024-01-01"]
    assert list(remote.saves[-1]["weeks"]) == ["2024-01-01"]


@pytest.mark.asyncio
async def test_invalid_import_leaves_document_alone(local_store: JsonSlotStore) -> None:
    sync = StateSynchronizer(local_store, None)
    await sync.initialize()
    sync.commit(_add_week("2024-01-01"))
    before = json.loads(json.dumps(sync.document))

    with pytest.raises(InvalidImport, match="Missing weeks"):
        sync.import_whole({"not_weeks": {}})
    with pytest.raises(InvalidImport, match="Invalid JSON"):
        sync.import_text("{nope")

    assert sync.document == before


@pytest.mark.asyncio
async def test_export_file_uses_dated_name(local_store: JsonSlotStore, tmp_path: Path) -> None:
    sync = StateSynchronizer(local_store, None)
    await sync.initialize()
    sync.commit(_add_week("2024-01-01"))

    path = sync.export_file(tmp_path / "out", today=date(2024, 3, 5))

    assert path.name == "weekly-status-tracker-2024-03-05.json"
    assert json.loads(path.read_text("utf-8")) == sync.document


def test_export_filename() -> None:
    assert export_filename(date(2024, 1, 9)) == "weekly-status-tracker-2024-01-09.json"


@pytest.mark.asyncio
async def test_aclose_closes_remote(local_store: JsonSlotStore, remote: FakeRemoteStore) -> None:
    sync = StateSynchronizer(local_store, remote)
    await sync.initialize()
    await sync.aclose()
    assert remote.closed is True


@pytest.mark.asyncio
async def test_send_without_remote_is_a_no_op(local_store: JsonSlotStore) -> None:
    sync = StateSynchronizer(local_store, None)
    await sync._send(1, normalize({"weeks": {}}))
    assert sync.storage_mode is StorageMode.LOCAL
