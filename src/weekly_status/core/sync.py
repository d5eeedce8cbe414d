# src/weekly_status/core/sync.py

from __future__ import annotations

"""
State synchronizer.

Owns the single in-memory document and is the only writer to both stores.

Every mutation goes through commit():
- apply the mutator to the in-memory document,
- re-normalize the whole document,
- save it to the local slot (synchronously, best-effort),
- schedule a debounced remote save.

Remote saves:
- only while the remote store is reachable,
- rapid commits coalesce: a new schedule cancels the unfired timer, so only the
  latest snapshot is sent,
- writes are serialized and sequence-numbered; a snapshot older than one already
  sent is dropped instead of overwriting newer remote state,
- a failed save flips to local-only mode. There is no retry and no polling;
  reachability comes back only with the next successful load (initialize/refresh).
"""

import asyncio
import copy
import json
import logging
from collections.abc import Callable
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, TypeVar

from .dates import sort_week_keys
from .errors import InvalidImport, MalformedInput, Unreachable
from .migration import migrate_legacy
from .models import Document, StorageMode
from .normalize import Invalid, empty_document, normalize, validate_document
from .ports import LocalStore, RemoteStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

ReachabilityListener = Callable[[bool], None]

DEFAULT_DEBOUNCE_SECONDS = 0.3


def export_filename(day: date) -> str:
    return f"weekly-status-tracker-{day.isoformat()}.json"


class StateSynchronizer:
    def __init__(
        self,
        local: LocalStore,
        remote: RemoteStore | None = None,
        *,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ) -> None:
        self._local = local
        self._remote = remote
        self._debounce_s = max(0.0, float(debounce_seconds))

        self._doc: Document = empty_document()
        self._remote_reachable = False
        self._listeners: list[ReachabilityListener] = []

        self._timer: asyncio.TimerHandle | None = None
        self._pending: tuple[int, Document] | None = None
        self._seq = 0
        self._last_sent_seq = 0
        self._write_lock = asyncio.Lock()
        self._inflight: set[asyncio.Task[None]] = set()

    # ---- read access ----

    @property
    def document(self) -> Document:
        return self._doc

    @property
    def remote_reachable(self) -> bool:
        return self._remote_reachable

    @property
    def storage_mode(self) -> StorageMode:
        return StorageMode.REMOTE if self._remote_reachable else StorageMode.LOCAL

    def week_keys(self) -> list[str]:
        return sort_week_keys(self._doc["weeks"].keys())

    def add_listener(self, callback: ReachabilityListener) -> None:
        """Called with the new value whenever reachability flips."""
        self._listeners.append(callback)

    def _set_reachable(self, value: bool) -> None:
        if value == self._remote_reachable:
            return
        self._remote_reachable = value
        logger.info("Storage mode -> %s", self.storage_mode.value)
        for cb in list(self._listeners):
            try:
                cb(value)
            except Exception:
                logger.exception("Reachability listener failed")

    # ---- startup ----

    def _load_initial_local(self) -> Document:
        doc = self._local.load_local()
        if doc is not None:
            return doc

        legacy = self._local.load_legacy()
        if legacy is None:
            return empty_document()

        try:
            migrated = migrate_legacy(legacy)
        except MalformedInput:
            logger.warning("Legacy document could not be migrated; starting empty", exc_info=True)
            return empty_document()

        self._save_local(migrated)
        return migrated

    async def initialize(self) -> None:
        """
        Load local (or migrate, or start empty), then try the remote store once.
        A reachable remote is the source of truth and replaces the local copy.
        """
        self._doc = self._load_initial_local()
        logger.info(
            "Local state loaded: %d weeks, %d tasks, %d skills",
            len(self._doc["weeks"]),
            len(self._doc["tasks"]),
            len(self._doc["skills"]),
        )
        await self.refresh()

    async def refresh(self) -> bool:
        """One explicit remote load. Returns True when the remote answered."""
        if self._remote is None:
            self._set_reachable(False)
            return False

        # A reload supersedes every snapshot taken before it.
        self._discard_pending_save()

        try:
            async with self._write_lock:
                remote_doc = await self._remote.load_remote()
        except (Unreachable, MalformedInput) as e:
            logger.info("Remote store unavailable (%s); using local storage", e)
            self._set_reachable(False)
            return False

        self._doc = remote_doc
        self._save_local(self._doc)
        self._set_reachable(True)
        return True

    def _discard_pending_save(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
        if self._pending is not None:
            logger.debug("Discarding pending remote save seq=%s", self._pending[0])
        self._timer = None
        self._pending = None
        self._last_sent_seq = max(self._last_sent_seq, self._seq)

    # ---- mutation path ----

    def _save_local(self, doc: Document) -> None:
        try:
            self._local.save_local(doc)
        except Exception:
            # Local storage is the last resort; editing continues without it.
            logger.exception("Local save failed")

    def commit(self, mutator: Callable[[Document], T]) -> T:
        result = mutator(self._doc)
        self._doc = normalize(self._doc)
        self._save_local(self._doc)
        self.schedule_remote_save(self._doc)
        return result

    def schedule_remote_save(self, doc: Document) -> None:
        if self._remote is None or not self._remote_reachable:
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop; remote save skipped")
            return

        if self._timer is not None:
            self._timer.cancel()

        self._seq += 1
        # Snapshot now: the live document keeps changing until the timer fires.
        self._pending = (self._seq, copy.deepcopy(doc))
        self._timer = loop.call_later(self._debounce_s, self._fire)

    def _fire(self) -> None:
        self._timer = None
        pending, self._pending = self._pending, None
        if pending is None:
            return
        task = asyncio.get_running_loop().create_task(self._send(*pending))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _send(self, seq: int, doc: Document) -> None:
        if self._remote is None:
            return
        async with self._write_lock:
            if seq <= self._last_sent_seq:
                logger.debug("Dropping stale remote save seq=%s (last sent %s)", seq, self._last_sent_seq)
                return
            self._last_sent_seq = seq

            try:
                await self._remote.save_remote(doc)
            except Unreachable as e:
                logger.warning("Remote save failed (%s); switching to local-only mode", e)
                self._set_reachable(False)
                return
            except Exception:
                logger.exception("Remote save crashed; switching to local-only mode")
                self._set_reachable(False)
                return

            logger.debug("Remote save ok seq=%s", seq)
            self._set_reachable(True)

    async def flush(self) -> None:
        """Send a pending save right away and wait for in-flight writes."""
        if self._timer is not None:
            self._timer.cancel()
            self._fire()
        if self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    async def aclose(self) -> None:
        await self.flush()
        if self._remote is not None:
            await self._remote.aclose()

    # ---- import / export ----

    def import_whole(self, candidate: Any) -> None:
        result = validate_document(candidate)
        if isinstance(result, Invalid):
            raise InvalidImport(result.reason)

        replacement = result.document

        def _replace(doc: Document) -> None:
            doc.clear()
            doc.update(replacement)

        self.commit(_replace)
        logger.info("Imported document: %d weeks, %d tasks", len(replacement["weeks"]), len(replacement["tasks"]))

    def import_text(self, text: str) -> None:
        try:
            parsed = json.loads(text)
        except ValueError as e:
            raise InvalidImport(f"Invalid JSON: {e}") from e
        self.import_whole(parsed)

    def import_file(self, path: str | Path) -> None:
        try:
            text = Path(path).read_text("utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise InvalidImport(f"Cannot read {path}: {e}") from e
        self.import_text(text)

    def export_json(self) -> str:
        return json.dumps(self._doc, ensure_ascii=False, indent=2)

    def export_file(self, directory: str | Path, *, today: date | None = None) -> Path:
        day = today or datetime.now(timezone.utc).date()
        out_dir = Path(directory)
        out_dir.mkdir(parents=True, exist_ok=True)
        path = out_dir / export_filename(day)
        path.write_text(self.export_json(), "utf-8")
        logger.info("Exported state to %s", path)
        return path
