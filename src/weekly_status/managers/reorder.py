# src/weekly_status/managers/reorder.py

from __future__ import annotations

from typing import Any


def is_valid_move(length: int, from_index: int, to_index: int) -> bool:
    if from_index == to_index:
        return False
    return 0 <= from_index < length and 0 <= to_index < length


def move_within(items: list[Any], from_index: int, to_index: int) -> bool:
    """
    Move one element inside `items` (splice out, splice in; not a swap).

    `to_index` is a position in the list *after* the element was removed, so
    [A, B, C, D] with (0, 2) gives [B, C, A, D].
    Returns False and leaves `items` alone when either index is out of range or
    both are equal.
    """
    if not is_valid_move(len(items), from_index, to_index):
        return False
    moved = items.pop(from_index)
    items.insert(to_index, moved)
    return True
