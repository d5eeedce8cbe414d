# tests/test_weeks.py

from __future__ import annotations

from datetime import date

import pytest

from weekly_status.core.state import AppState
from weekly_status.managers.reorder import is_valid_move, move_within


@pytest.mark.parametrize(
    ("src", "dst", "expected"),
    [
        (0, 2, ["B", "C", "A", "D"]),
        (3, 0, ["D", "A", "B", "C"]),
        (1, 3, ["A", "C", "D", "B"]),
    ],
)
def test_move_within(src: int, dst: int, expected: list[str]) -> None:
    items = ["A", "B", "C", "D"]
    assert move_within(items, src, dst) is True
    assert items == expected


@pytest.mark.parametrize(("src", "dst"), [(1, 1), (-1, 0), (0, 4), (4, 0)])
def test_move_within_rejects_no_op_and_out_of_range(src: int, dst: int) -> None:
    items = ["A", "B", "C", "D"]
    assert is_valid_move(len(items), src, dst) is False
    assert move_within(items, src, dst) is False
    assert items == ["A", "B", "C", "D"]


def _texts(state: AppState, key: str) -> list[str]:
    return [t["text"] for t in state.weeks.tiles(key)]


def test_ensure_week_is_idempotent(state: AppState) -> None:
    assert state.weeks.ensure_week("2024-01-01") is True
    created_at = state.weeks.get("2024-01-01")["createdAt"]
    assert state.weeks.ensure_week("2024-01-01") is False
    assert state.weeks.get("2024-01-01")["createdAt"] == created_at


def test_ensure_week_rejects_bad_key(state: AppState) -> None:
    with pytest.raises(ValueError):
        state.weeks.ensure_week("next tuesday")


def test_ensure_current_week_only_when_empty(state: AppState) -> None:
    assert state.weeks.ensure_current_week(today=date(2024, 1, 3)) == "2024-01-01"
    assert state.weeks.ensure_current_week(today=date(2024, 2, 7)) is None
    assert state.weeks.week_keys() == ["2024-01-01"]


def test_next_and_previous_week_extend_the_range(state: AppState) -> None:
    state.weeks.ensure_week("2024-01-08")
    state.weeks.ensure_week("2024-01-01")

    assert state.weeks.add_next_week() == "2024-01-15"
    assert state.weeks.add_previous_week() == "2023-12-25"
    assert state.weeks.week_keys() == ["2024-01-15", "2024-01-08", "2024-01-01", "2023-12-25"]


def test_next_week_without_weeks_starts_from_today(state: AppState) -> None:
    assert state.weeks.add_next_week(today=date(2024, 1, 3)) == "2024-01-08"


def test_delete_week(state: AppState) -> None:
    state.weeks.add_tile("2024-01-01", "a")
    assert state.weeks.delete_week("2024-01-01") is True
    assert state.weeks.get("2024-01-01") is None
    assert state.weeks.delete_week("2024-01-01") is False


def test_new_tiles_go_first(state: AppState) -> None:
    state.weeks.add_tile("2024-01-01", "first")
    state.weeks.add_tile("2024-01-01", "second")
    assert _texts(state, "2024-01-01") == ["second", "first"]


def test_update_and_delete_tile(state: AppState) -> None:
    state.weeks.add_tile("2024-01-01", "a")
    state.weeks.add_tile("2024-01-01", "b")

    assert state.weeks.update_tile("2024-01-01", 1, "a2") is True
    assert state.weeks.update_tile("2024-01-01", 5, "nope") is False
    assert _texts(state, "2024-01-01") == ["b", "a2"]

    assert state.weeks.delete_tile("2024-01-01", 0) is True
    assert _texts(state, "2024-01-01") == ["a2"]
    assert state.weeks.delete_tile("2023-01-02", 0) is False


def test_move_tile_up_and_down(state: AppState) -> None:
    for text in ("C", "B", "A"):
        state.weeks.add_tile("2024-01-01", text)

    assert state.weeks.move_tile_relative("2024-01-01", 0, 1) is True
    assert _texts(state, "2024-01-01") == ["B", "A", "C"]
    assert state.weeks.move_tile_relative("2024-01-01", 0, -1) is False
    assert state.weeks.move_tile_relative("2024-01-01", 2, 1) is False


def test_drop_tile_lands_before_target(state: AppState) -> None:
    for text in ("D", "C", "B", "A"):
        state.weeks.add_tile("2024-01-01", text)

    # dragging A onto C puts it in front of C
    assert state.weeks.drop_tile("2024-01-01", 0, "2024-01-01", 2) is True
    assert _texts(state, "2024-01-01") == ["B", "A", "C", "D"]

    # dragging D onto B puts it in front of B
    assert state.weeks.drop_tile("2024-01-01", 3, "2024-01-01", 0) is True
    assert _texts(state, "2024-01-01") == ["D", "B", "A", "C"]


def test_cross_week_drop_is_ignored(state: AppState) -> None:
    state.weeks.add_tile("2024-01-01", "a")
    state.weeks.add_tile("2024-01-08", "b")

    assert state.weeks.drop_tile("2024-01-01", 0, "2024-01-08", 0) is False
    assert _texts(state, "2024-01-01") == ["a"]
    assert _texts(state, "2024-01-08") == ["b"]


def test_week_mutations_reach_local_slot(state: AppState, local_store) -> None:
    state.weeks.add_tile("2024-01-01", "persisted")
    assert local_store.load_local()["weeks"]["2024-01-01"]["tiles"] == [{"text": "persisted"}]
