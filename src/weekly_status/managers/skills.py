# src/weekly_status/managers/skills.py

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..core.models import Document, Skill
from ..core.normalize import generate_id, now_iso
from ..core.sync import StateSynchronizer
from .reorder import is_valid_move, move_within

logger = logging.getLogger(__name__)


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


class SkillManager:
    """Skill cards. Stored order is the display order (drag to reorder)."""

    def __init__(self, sync: StateSynchronizer) -> None:
        self._sync = sync

    def skills(self) -> list[Skill]:
        return list(self._sync.document["skills"])

    def get(self, skill_id: str) -> Skill | None:
        for skill in self._sync.document["skills"]:
            if skill["id"] == skill_id:
                return skill
        return None

    def _index_of(self, skill_id: str) -> int:
        for i, skill in enumerate(self._sync.document["skills"]):
            if skill["id"] == skill_id:
                return i
        return -1

    def add(self, title: str = "", text: str = "") -> str:
        skill = Skill(id=generate_id(), title=_as_text(title), text=_as_text(text), createdAt=now_iso())
        self._sync.commit(lambda doc: doc["skills"].append(skill))
        logger.debug("Skill added id=%s", skill["id"])
        return skill["id"]

    def update(self, skill_id: str, patch: Mapping[str, Any]) -> bool:
        index = self._index_of(skill_id)
        if index < 0:
            return False

        def _apply(doc: Document) -> None:
            skill = doc["skills"][index]
            if "title" in patch:
                skill["title"] = _as_text(patch["title"])
            if "text" in patch:
                skill["text"] = _as_text(patch["text"])

        self._sync.commit(_apply)
        return True

    def delete(self, skill_id: str) -> bool:
        index = self._index_of(skill_id)
        if index < 0:
            return False

        def _delete(doc: Document) -> None:
            del doc["skills"][index]

        self._sync.commit(_delete)
        return True

    def move_within(self, from_index: int, to_index: int) -> bool:
        if not is_valid_move(len(self._sync.document["skills"]), from_index, to_index):
            return False
        return self._sync.commit(lambda doc: move_within(doc["skills"], from_index, to_index))
