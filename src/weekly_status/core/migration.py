# src/weekly_status/core/migration.py

from __future__ import annotations

"""
Legacy (v1) document migration.

v1 kept two lists per week:
    {"weeks": {"2023-12-25": {"done": [...], "plan": [...], "createdAt": "..."}}}

v2 keeps one ordered tile list per week. The two lists become sections headed by
literal divider tiles ("Last week", "Next week"); a section whose list is empty
is left out entirely, divider included.
"""

import logging
from typing import Any

from .errors import MalformedInput
from .models import LAST_WEEK_DIVIDER, NEXT_WEEK_DIVIDER, Document
from .normalize import normalize

logger = logging.getLogger(__name__)


def _item_texts(raw: Any, *, week_key: str, field: str) -> list[str]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise MalformedInput(f"week {week_key}: {field} is not a list")

    out: list[str] = []
    for item in raw:
        # v1 stored {"text": ...} objects; hand-edited files often hold bare strings.
        if isinstance(item, dict):
            text = item.get("text")
        else:
            text = item
        if isinstance(text, str) and text:
            out.append(text)
    return out


def migrate_legacy(raw: Any) -> Document:
    """
    Convert a v1 document into a normalized v2 document.

    Raises MalformedInput when the legacy value cannot be read as v1 data;
    the caller decides what to fall back to.
    """
    if not isinstance(raw, dict):
        raise MalformedInput("legacy document is not an object")

    old_weeks = raw.get("weeks")
    if old_weeks is None:
        old_weeks = {}
    if not isinstance(old_weeks, dict):
        raise MalformedInput("legacy weeks is not an object")

    weeks: dict[str, Any] = {}
    for key, week in old_weeks.items():
        if not isinstance(week, dict):
            logger.warning("Legacy week %s is not an object; migrating it empty", key)
            week = {}

        done = _item_texts(week.get("done"), week_key=key, field="done")
        plan = _item_texts(week.get("plan"), week_key=key, field="plan")

        tiles: list[dict[str, str]] = []
        if done:
            tiles.append({"text": LAST_WEEK_DIVIDER})
            tiles.extend({"text": t} for t in done)
        if plan:
            tiles.append({"text": NEXT_WEEK_DIVIDER})
            tiles.extend({"text": t} for t in plan)

        weeks[key] = {"tiles": tiles, "createdAt": week.get("createdAt")}

    logger.info("Migrated legacy document: %d weeks", len(weeks))
    return normalize({"weeks": weeks})
