# src/weekly_status/storage/document_file.py

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from ..core.models import Document
from ..core.normalize import empty_document, is_valid_shape, normalize

logger = logging.getLogger(__name__)


class DocumentFile:
    """
    Server-side durable copy of the state document.

    A single JSON file; created with an empty document when missing.
    Writes go to `<file>.tmp` first and are renamed over the target, so a crash
    mid-write never leaves a half-written document behind.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def ensure(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        if not self._path.exists():
            self._path.write_text(json.dumps({"weeks": {}}, indent=2), "utf-8")
            logger.info("Created state file %s", self._path)

    def read(self) -> Document:
        self.ensure()
        try:
            data = json.loads(self._path.read_text("utf-8"))
        except (OSError, ValueError):
            logger.exception("Failed to read state file %s; serving an empty document", self._path)
            return empty_document()
        if not is_valid_shape(data):
            logger.warning("State file %s has an invalid shape; serving an empty document", self._path)
            return empty_document()
        return normalize(data)

    def write(self, doc: Document) -> Document:
        normalized = normalize(doc)
        self.ensure()
        tmp = self._path.with_name(self._path.name + ".tmp")
        tmp.write_text(json.dumps(normalized, ensure_ascii=False, indent=2), "utf-8")
        os.replace(tmp, self._path)
        logger.debug("Wrote state file %s (%d weeks)", self._path, len(normalized["weeks"]))
        return normalized
