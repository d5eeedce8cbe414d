# tests/test_local_store.py

from __future__ import annotations

import json

from weekly_status.core.normalize import normalize
from weekly_status.storage.local_store import JsonSlotStore, slot_filename


def test_slot_filename_is_filesystem_safe() -> None:
    assert slot_filename("weekly-status-tracker:v2") == "weekly-status-tracker_v2.json"
    assert slot_filename(":::") == "slot.json"


def test_missing_slots_read_as_none(local_store: JsonSlotStore) -> None:
    assert local_store.load_local() is None
    assert local_store.load_legacy() is None


def test_save_then_load_round_trips(local_store: JsonSlotStore) -> None:
    doc = normalize({"weeks": {"2024-01-01": {"tiles": [{"text": "hello"}]}}})
    local_store.save_local(doc)
    assert local_store.load_local() == doc
    assert not local_store.path.with_suffix(".tmp").exists()


def test_corrupt_slot_reads_as_none(local_store: JsonSlotStore) -> None:
    local_store.path.parent.mkdir(parents=True, exist_ok=True)
    local_store.path.write_text("{not json", "utf-8")
    assert local_store.load_local() is None


def test_wrong_shape_slot_reads_as_none(local_store: JsonSlotStore) -> None:
    local_store.path.parent.mkdir(parents=True, exist_ok=True)
    local_store.path.write_text(json.dumps({"weeks": []}), "utf-8")
    assert local_store.load_local() is None


def test_legacy_slot_is_returned_raw(local_store: JsonSlotStore) -> None:
    raw = {"weeks": {"2024-01-01": {"done": [{"text": "x"}]}}}
    local_store.legacy_path.parent.mkdir(parents=True, exist_ok=True)
    local_store.legacy_path.write_text(json.dumps(raw), "utf-8")
    assert local_store.load_legacy() == raw
