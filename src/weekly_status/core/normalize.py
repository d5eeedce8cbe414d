# src/weekly_status/core/normalize.py

from __future__ import annotations

"""
Schema normalizer.

Everything that enters the state layer (local slot, remote body, user import)
goes through `normalize()` before it is kept in memory or written anywhere.

Rules:
- normalize() is total: it never raises, bad parts are repaired or dropped
- records that are not objects are dropped, never defaulted into existence
- each field is repaired on its own (a bad status does not cost the name)
- ids are de-duplicated in order; the first occurrence keeps its id
"""

import logging
import math
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from .models import (
    TASK_COLUMN_DEFAULTS,
    TASK_COLUMN_KEYS,
    TASK_COLUMN_MIN,
    Document,
    Skill,
    Task,
    TaskColumns,
    TaskPriority,
    TaskSortMode,
    TaskStatus,
    Tile,
    Week,
)

logger = logging.getLogger(__name__)


# ---- timestamps / ids ----


def now_iso() -> str:
    """UTC now as `2024-01-01T09:30:00.000Z`."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        dt = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def timestamp_sort_key(value: Any) -> float:
    dt = parse_timestamp(value)
    return dt.timestamp() if dt is not None else 0.0


def generate_id() -> str:
    return str(uuid.uuid4())


# ---- shape validation ----


@dataclass(frozen=True, slots=True)
class Valid:
    document: Document


@dataclass(frozen=True, slots=True)
class Invalid:
    reason: str


ValidationResult = Valid | Invalid


def is_valid_shape(candidate: Any) -> bool:
    return isinstance(candidate, dict) and isinstance(candidate.get("weeks"), dict)


def validate_document(candidate: Any) -> ValidationResult:
    """Shape check used before a whole document replaces the current one."""
    if not isinstance(candidate, dict):
        return Invalid("Invalid JSON shape: expected an object")
    if "weeks" not in candidate:
        return Invalid("Missing weeks")
    if not isinstance(candidate["weeks"], dict):
        return Invalid("Invalid JSON shape: weeks must be an object")
    return Valid(normalize(candidate))


# ---- field repair ----


def _repair_created_at(raw: Any, now: str) -> str:
    return raw if parse_timestamp(raw) is not None else now


def round_half_up(value: float) -> int:
    if isinstance(value, int):
        return value
    return int(math.floor(value + 0.5))


def normalize_task_columns(raw: Any) -> TaskColumns:
    source = raw if isinstance(raw, dict) else {}
    out: dict[str, int] = {}
    for key in TASK_COLUMN_KEYS:
        fallback = TASK_COLUMN_DEFAULTS[key]
        value = source.get(key, fallback)
        # bool is an int subclass; a width of True is still garbage.
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            value = fallback
        elif isinstance(value, float) and not math.isfinite(value):
            value = fallback
        out[key] = max(TASK_COLUMN_MIN[key], round_half_up(value))
    return TaskColumns(name=out["name"], status=out["status"], priority=out["priority"])


def _normalize_tile(raw: Any) -> Tile | None:
    if not isinstance(raw, dict):
        return None
    text = raw.get("text")
    return Tile(text=text if isinstance(text, str) else "")


def _normalize_week(raw: Any, now: str) -> Week | None:
    if not isinstance(raw, dict):
        return None
    raw_tiles = raw.get("tiles")
    tiles: list[Tile] = []
    if isinstance(raw_tiles, list):
        for t in raw_tiles:
            tile = _normalize_tile(t)
            if tile is not None:
                tiles.append(tile)
    return Week(tiles=tiles, createdAt=_repair_created_at(raw.get("createdAt"), now))


def _normalize_weeks(raw: Any, now: str) -> dict[str, Week]:
    if not isinstance(raw, dict):
        return {}
    out: dict[str, Week] = {}
    for key, value in raw.items():
        if not isinstance(key, str):
            continue
        week = _normalize_week(value, now)
        if week is None:
            logger.debug("Dropping week %r: not an object", key)
            continue
        out[key] = week
    return out


def _raw_id(raw: dict[str, Any]) -> str:
    v = raw.get("id")
    return v if isinstance(v, str) and v.strip() else generate_id()


def _normalize_task(raw: Any, now: str) -> Task | None:
    if not isinstance(raw, dict):
        return None
    name = raw.get("name")
    return Task(
        id=_raw_id(raw),
        name=name if isinstance(name, str) else "",
        status=TaskStatus.from_raw(raw.get("status")).value,
        priority=TaskPriority.from_raw(raw.get("priority")).value,
        createdAt=_repair_created_at(raw.get("createdAt"), now),
    )


def _normalize_skill(raw: Any, now: str) -> Skill | None:
    if not isinstance(raw, dict):
        return None
    title = raw.get("title")
    text = raw.get("text")
    return Skill(
        id=_raw_id(raw),
        title=title if isinstance(title, str) else "",
        text=text if isinstance(text, str) else "",
        createdAt=_repair_created_at(raw.get("createdAt"), now),
    )


def _dedupe_ids(records: list[Any]) -> None:
    seen: set[str] = set()
    for rec in records:
        rec_id = rec["id"]
        while rec_id in seen:
            rec_id = generate_id()
        if rec_id != rec["id"]:
            logger.debug("Regenerated duplicate id %s -> %s", rec["id"], rec_id)
            rec["id"] = rec_id
        seen.add(rec_id)


def normalize(candidate: Any) -> Document:
    """Turn anything into a canonical Document. Never raises."""
    src: dict[str, Any] = candidate if isinstance(candidate, dict) else {}
    now = now_iso()

    raw_tasks = src.get("tasks")
    tasks: list[Task] = []
    if isinstance(raw_tasks, list):
        for t in raw_tasks:
            task = _normalize_task(t, now)
            if task is not None:
                tasks.append(task)
    _dedupe_ids(tasks)

    raw_skills = src.get("skills")
    skills: list[Skill] = []
    if isinstance(raw_skills, list):
        for s in raw_skills:
            skill = _normalize_skill(s, now)
            if skill is not None:
                skills.append(skill)
    _dedupe_ids(skills)

    return Document(
        weeks=_normalize_weeks(src.get("weeks"), now),
        tasks=tasks,
        skills=skills,
        taskSortMode=TaskSortMode.from_raw(src.get("taskSortMode")).value,
        taskColumns=normalize_task_columns(src.get("taskColumns")),
    )


def empty_document() -> Document:
    return normalize({"weeks": {}})
