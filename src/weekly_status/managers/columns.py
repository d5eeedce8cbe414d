# src/weekly_status/managers/columns.py

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from ..core.models import TASK_COLUMN_KEYS, TASK_COLUMN_MIN, TaskColumns
from ..core.normalize import normalize_task_columns, round_half_up

# Resize handles sit between two neighbouring columns.
RESIZE_PAIRS = {
    "name_status": ("name", "status"),
    "status_priority": ("status", "priority"),
}


def _min_columns() -> TaskColumns:
    return TaskColumns(
        name=TASK_COLUMN_MIN["name"],
        status=TASK_COLUMN_MIN["status"],
        priority=TASK_COLUMN_MIN["priority"],
    )


def columns_min_total() -> int:
    return sum(TASK_COLUMN_MIN[k] for k in TASK_COLUMN_KEYS)


def resize_pair(
    start_left: int,
    start_right: int,
    delta: float,
    min_left: int,
    min_right: int,
) -> tuple[int, int]:
    """Move the border between two columns by `delta`; their sum stays the same."""
    total = start_left + start_right
    left = min(max(start_left + delta, min_left), total - min_right)
    left_i = round_half_up(left)
    return left_i, total - left_i


def resize_columns(columns: Mapping[str, Any], pair: str, delta: float) -> TaskColumns:
    if pair not in RESIZE_PAIRS:
        raise ValueError(f"unknown resize handle: {pair!r}")
    left, right = RESIZE_PAIRS[pair]

    start = normalize_task_columns(columns)
    new_left, new_right = resize_pair(
        start[left], start[right], delta, TASK_COLUMN_MIN[left], TASK_COLUMN_MIN[right]
    )
    out = dict(start)
    out[left] = new_left
    out[right] = new_right
    return normalize_task_columns(out)


def fit_columns_to_width(columns: Mapping[str, Any], available_width: float | None) -> TaskColumns:
    """
    Shrink preferred widths so they fit `available_width`.

    Each column gives up space in proportion to its room above the minimum;
    nothing goes below its minimum. Stored preferences are not touched.
    """
    normalized = normalize_task_columns(columns)

    if available_width is None or not math.isfinite(available_width) or available_width <= 0:
        return normalized

    if available_width <= columns_min_total():
        return _min_columns()

    total = sum(normalized[k] for k in TASK_COLUMN_KEYS)
    if total <= available_width:
        return normalized

    overflow = total - available_width
    room = {k: normalized[k] - TASK_COLUMN_MIN[k] for k in TASK_COLUMN_KEYS}
    total_room = sum(room.values())
    if total_room <= 0:
        return _min_columns()

    adjusted: dict[str, int] = {}
    for k in TASK_COLUMN_KEYS:
        share = overflow * room[k] / total_room if room[k] > 0 else 0
        adjusted[k] = max(TASK_COLUMN_MIN[k], round_half_up(normalized[k] - share))

    # Rounding can leave us a pixel or two over; shave them off round-robin.
    capped = math.floor(available_width)
    adjusted_total = sum(adjusted.values())
    while adjusted_total > capped:
        changed = False
        for k in TASK_COLUMN_KEYS:
            if adjusted_total <= capped:
                break
            if adjusted[k] > TASK_COLUMN_MIN[k]:
                adjusted[k] -= 1
                adjusted_total -= 1
                changed = True
        if not changed:
            break

    return TaskColumns(name=adjusted["name"], status=adjusted["status"], priority=adjusted["priority"])
