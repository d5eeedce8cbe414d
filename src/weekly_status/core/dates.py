# src/weekly_status/core/dates.py

from __future__ import annotations

from datetime import date, timedelta


def start_of_week(d: date) -> date:
    """Monday of the week containing `d`."""
    return d - timedelta(days=d.weekday())


def week_key(d: date) -> str:
    return start_of_week(d).isoformat()


def parse_week_key(key: str) -> date | None:
    try:
        return date.fromisoformat(key)
    except (TypeError, ValueError):
        return None


def shift_week(key: str, weeks: int) -> str:
    d = parse_week_key(key)
    if d is None:
        raise ValueError(f"not a week key: {key!r}")
    return (d + timedelta(days=7 * weeks)).isoformat()


def week_label(key: str) -> str:
    d = parse_week_key(key)
    if d is None:
        return key
    return f"Week of {key} -> {(d + timedelta(days=6)).isoformat()}"


def sort_week_keys(keys) -> list[str]:
    # Newest first; ISO dates sort lexicographically.
    return sorted(keys, reverse=True)
