# src/weekly_status/core/models.py

from __future__ import annotations

from enum import StrEnum
from typing import Any, TypedDict


class TaskStatus(StrEnum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    DONE = "done"

    @classmethod
    def from_raw(cls, raw: Any) -> TaskStatus:
        if not isinstance(raw, str):
            return cls.NOT_STARTED
        try:
            return cls(raw)
        except ValueError:
            return cls.NOT_STARTED

    @property
    def ordinal(self) -> int:
        return _STATUS_ORDER[self]


class TaskPriority(StrEnum):
    P0 = "P0"
    P1 = "P1"
    P2 = "P2"
    P3 = "P3"

    @classmethod
    def from_raw(cls, raw: Any) -> TaskPriority:
        if not isinstance(raw, str):
            return cls.P0
        try:
            return cls(raw)
        except ValueError:
            return cls.P0

    @property
    def ordinal(self) -> int:
        return _PRIORITY_ORDER[self]


class TaskSortMode(StrEnum):
    PRIORITY = "priority"
    STATUS = "status"
    CREATED_AT = "created_at"

    @classmethod
    def from_raw(cls, raw: Any) -> TaskSortMode:
        if not isinstance(raw, str):
            return cls.CREATED_AT
        try:
            return cls(raw)
        except ValueError:
            return cls.CREATED_AT


class StorageMode(StrEnum):
    """Where edits currently end up (shown as a passive indicator)."""

    REMOTE = "remote"
    LOCAL = "local"


_STATUS_ORDER = {
    TaskStatus.NOT_STARTED: 0,
    TaskStatus.IN_PROGRESS: 1,
    TaskStatus.DONE: 2,
}

_PRIORITY_ORDER = {
    TaskPriority.P0: 0,
    TaskPriority.P1: 1,
    TaskPriority.P2: 2,
    TaskPriority.P3: 3,
}

TASK_COLUMN_KEYS = ("name", "status", "priority")
TASK_COLUMN_DEFAULTS = {"name": 440, "status": 180, "priority": 120}
TASK_COLUMN_MIN = {"name": 260, "status": 140, "priority": 100}

LAST_WEEK_DIVIDER = "Last week"
NEXT_WEEK_DIVIDER = "Next week"


# Documents are plain JSON-compatible dicts; the TypedDicts only describe them.


class Tile(TypedDict):
    text: str


class Week(TypedDict):
    tiles: list[Tile]
    createdAt: str


class Task(TypedDict):
    id: str
    name: str
    status: str
    priority: str
    createdAt: str


class Skill(TypedDict):
    id: str
    title: str
    text: str
    createdAt: str


class TaskColumns(TypedDict):
    name: int
    status: int
    priority: int


class Document(TypedDict):
    weeks: dict[str, Week]
    tasks: list[Task]
    skills: list[Skill]
    taskSortMode: str
    taskColumns: TaskColumns
