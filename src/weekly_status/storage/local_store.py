# src/weekly_status/storage/local_store.py

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any

from ..core.models import Document
from ..core.normalize import is_valid_shape, normalize

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def slot_filename(key: str) -> str:
    """'weekly-status-tracker:v2' -> 'weekly-status-tracker_v2.json'"""
    safe = _UNSAFE_CHARS.sub("_", key).strip("._") or "slot"
    return f"{safe}.json"


class JsonSlotStore:
    """
    Local durable slots, one JSON file per named key under data_dir.

    - reads are tolerant: missing, unreadable or shape-invalid values read as None
    - writes replace the whole value atomically (tmp file + os.replace)
    - the legacy slot is only ever read, never written or removed
    """

    def __init__(
        self,
        data_dir: str | Path,
        *,
        slot_key: str = "weekly-status-tracker:v2",
        legacy_slot_key: str = "weekly-status-tracker:v1",
    ) -> None:
        self._dir = Path(data_dir)
        self._path = self._dir / slot_filename(slot_key)
        self._legacy_path = self._dir / slot_filename(legacy_slot_key)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def legacy_path(self) -> Path:
        return self._legacy_path

    def _read_json(self, path: Path) -> Any | None:
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text("utf-8"))
        except (OSError, ValueError):
            logger.warning("Unreadable slot file %s", path, exc_info=True)
            return None

    def load_local(self) -> Document | None:
        data = self._read_json(self._path)
        if data is None:
            return None
        if not is_valid_shape(data):
            logger.warning("Slot %s does not hold a state document; ignoring it", self._path)
            return None
        return normalize(data)

    def save_local(self, doc: Document) -> None:
        self._dir.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(".tmp")
        tmp.write_text(json.dumps(doc, ensure_ascii=False), "utf-8")
        os.replace(tmp, self._path)
        logger.debug("Saved local slot %s", self._path)

    def load_legacy(self) -> Any | None:
        return self._read_json(self._legacy_path)
