# src/weekly_status/managers/weeks.py

from __future__ import annotations

import logging
from datetime import date

from ..core.dates import parse_week_key, shift_week, week_key, week_label
from ..core.models import Document, Tile, Week
from ..core.normalize import now_iso
from ..core.sync import StateSynchronizer
from .reorder import is_valid_move, move_within

logger = logging.getLogger(__name__)


def _require_key(key: str) -> str:
    if parse_week_key(key) is None:
        raise ValueError(f"week key must be an ISO date (YYYY-MM-DD), got {key!r}")
    return key


def _new_week() -> Week:
    return Week(tiles=[], createdAt=now_iso())


class WeekManager:
    """Week containers keyed by their Monday, each holding an ordered tile list."""

    def __init__(self, sync: StateSynchronizer) -> None:
        self._sync = sync

    # ---- queries ----

    def week_keys(self) -> list[str]:
        return self._sync.week_keys()

    def get(self, key: str) -> Week | None:
        return self._sync.document["weeks"].get(key)

    def tiles(self, key: str) -> list[Tile]:
        week = self.get(key)
        return list(week["tiles"]) if week else []

    @staticmethod
    def label(key: str) -> str:
        return week_label(key)

    # ---- weeks ----

    def ensure_week(self, key: str) -> bool:
        """Create the week if missing. Returns False (and commits nothing) if it exists."""
        _require_key(key)
        if key in self._sync.document["weeks"]:
            return False

        def _add(doc: Document) -> None:
            doc["weeks"][key] = _new_week()

        self._sync.commit(_add)
        logger.info("Week %s created", key)
        return True

    add_week = ensure_week

    def ensure_current_week(self, today: date | None = None) -> str | None:
        """First-run helper: start with this week when there are no weeks at all."""
        if self._sync.document["weeks"]:
            return None
        key = week_key(today or date.today())
        self.ensure_week(key)
        return key

    def add_next_week(self, today: date | None = None) -> str:
        keys = self.week_keys()
        base = keys[0] if keys else week_key(today or date.today())
        key = shift_week(base, 1)
        self.ensure_week(key)
        return key

    def add_previous_week(self, today: date | None = None) -> str:
        keys = self.week_keys()
        base = keys[-1] if keys else week_key(today or date.today())
        key = shift_week(base, -1)
        self.ensure_week(key)
        return key

    def delete_week(self, key: str) -> bool:
        """Unconditional; asking the user first is the caller's job."""
        if key not in self._sync.document["weeks"]:
            return False

        def _delete(doc: Document) -> None:
            del doc["weeks"][key]

        self._sync.commit(_delete)
        logger.info("Week %s deleted", key)
        return True

    # ---- tiles ----

    def add_tile(self, key: str, text: str = "") -> None:
        """New tiles go to the top of the week."""
        _require_key(key)

        def _add(doc: Document) -> None:
            week = doc["weeks"].setdefault(key, _new_week())
            week["tiles"].insert(0, Tile(text=str(text)))

        self._sync.commit(_add)

    def update_tile(self, key: str, index: int, text: str) -> bool:
        week = self.get(key)
        if week is None or not 0 <= index < len(week["tiles"]):
            return False

        def _update(doc: Document) -> None:
            doc["weeks"][key]["tiles"][index]["text"] = str(text)

        self._sync.commit(_update)
        return True

    def delete_tile(self, key: str, index: int) -> bool:
        week = self.get(key)
        if week is None or not 0 <= index < len(week["tiles"]):
            return False

        def _delete(doc: Document) -> None:
            del doc["weeks"][key]["tiles"][index]

        self._sync.commit(_delete)
        return True

    def move_tile(self, key: str, from_index: int, to_index: int) -> bool:
        week = self.get(key)
        if week is None or not is_valid_move(len(week["tiles"]), from_index, to_index):
            return False

        return self._sync.commit(lambda doc: move_within(doc["weeks"][key]["tiles"], from_index, to_index))

    def move_tile_relative(self, key: str, index: int, direction: int) -> bool:
        """Up (-1) / down (+1) buttons."""
        return self.move_tile(key, index, index + direction)

    def drop_tile(self, from_week: str, from_index: int, to_week: str, to_index: int) -> bool:
        """
        Drag-and-drop: the tile lands in front of the tile it was dropped on.
        Drops onto another week are ignored.
        """
        if from_week != to_week:
            logger.debug("Ignoring cross-week drop %s -> %s", from_week, to_week)
            return False
        insert_at = to_index - 1 if from_index < to_index else to_index
        return self.move_tile(from_week, from_index, insert_at)
