# src/weekly_status/managers/tasks.py

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..core.models import (
    Document,
    Task,
    TaskColumns,
    TaskPriority,
    TaskSortMode,
    TaskStatus,
)
from ..core.normalize import generate_id, normalize_task_columns, now_iso, timestamp_sort_key
from ..core.sync import StateSynchronizer
from .columns import fit_columns_to_width, resize_columns

logger = logging.getLogger(__name__)

_STATUS_VALUES = frozenset(s.value for s in TaskStatus)
_PRIORITY_VALUES = frozenset(p.value for p in TaskPriority)
_SORT_MODE_VALUES = frozenset(m.value for m in TaskSortMode)


def sort_tasks(tasks: list[Task], mode: str) -> list[Task]:
    """
    Display order for a sort mode. Stored order is never changed.

    Keys: mode ordinal (created_at: newest first), then newest first,
    then original position.
    """
    sort_mode = TaskSortMode.from_raw(mode)

    def _key(entry: tuple[int, Task]) -> tuple[float, float, int]:
        index, task = entry
        newest_first = -timestamp_sort_key(task["createdAt"])
        if sort_mode is TaskSortMode.PRIORITY:
            primary = float(TaskPriority.from_raw(task["priority"]).ordinal)
        elif sort_mode is TaskSortMode.STATUS:
            primary = float(TaskStatus.from_raw(task["status"]).ordinal)
        else:
            primary = newest_first
        return (primary, newest_first, index)

    return [task for _, task in sorted(enumerate(tasks), key=_key)]


def _find(doc: Document, task_id: str) -> Task | None:
    for task in doc["tasks"]:
        if task["id"] == task_id:
            return task
    return None


class TaskManager:
    def __init__(self, sync: StateSynchronizer) -> None:
        self._sync = sync

    # ---- queries ----

    def tasks(self) -> list[Task]:
        return list(self._sync.document["tasks"])

    def get(self, task_id: str) -> Task | None:
        return _find(self._sync.document, task_id)

    @property
    def sort_mode(self) -> str:
        return self._sync.document["taskSortMode"]

    def sorted_tasks(self) -> list[Task]:
        doc = self._sync.document
        return sort_tasks(doc["tasks"], doc["taskSortMode"])

    # ---- mutations ----

    def add(self, name: str = "") -> str:
        """New tasks go to the front of the list. Returns the new id."""
        task = Task(
            id=generate_id(),
            name=str(name),
            status=TaskStatus.NOT_STARTED.value,
            priority=TaskPriority.P0.value,
            createdAt=now_iso(),
        )
        self._sync.commit(lambda doc: doc["tasks"].insert(0, task))
        logger.debug("Task added id=%s", task["id"])
        return task["id"]

    def update(self, task_id: str, patch: Mapping[str, Any]) -> bool:
        """
        Apply a partial patch. Fields are checked one by one: an invalid status
        is ignored without blocking a name change in the same patch.
        Unknown keys are ignored.
        """
        if self.get(task_id) is None:
            return False

        def _apply(doc: Document) -> None:
            task = _find(doc, task_id)
            if task is None:
                return

            if "name" in patch:
                name = patch["name"]
                task["name"] = "" if name is None else str(name)

            status = patch.get("status")
            if isinstance(status, str) and status in _STATUS_VALUES:
                task["status"] = TaskStatus(status).value

            priority = patch.get("priority")
            if isinstance(priority, str) and priority in _PRIORITY_VALUES:
                task["priority"] = TaskPriority(priority).value

        self._sync.commit(_apply)
        return True

    def delete(self, task_id: str) -> bool:
        if self.get(task_id) is None:
            return False

        def _delete(doc: Document) -> None:
            doc["tasks"][:] = [t for t in doc["tasks"] if t["id"] != task_id]

        self._sync.commit(_delete)
        logger.debug("Task deleted id=%s", task_id)
        return True

    def set_sort_mode(self, mode: str) -> bool:
        if not isinstance(mode, str) or mode not in _SORT_MODE_VALUES:
            return False
        if self.sort_mode == mode:
            return False

        def _set(doc: Document) -> None:
            doc["taskSortMode"] = TaskSortMode(mode).value

        self._sync.commit(_set)
        return True

    # ---- column widths ----

    def columns(self) -> TaskColumns:
        return normalize_task_columns(self._sync.document["taskColumns"])

    def set_columns(self, columns: Mapping[str, Any]) -> TaskColumns:
        normalized = normalize_task_columns(dict(columns))

        def _set(doc: Document) -> None:
            doc["taskColumns"] = normalized

        self._sync.commit(_set)
        return normalized

    def resize_columns(
        self,
        pair: str,
        delta: float,
        *,
        start: Mapping[str, Any] | None = None,
    ) -> TaskColumns:
        """
        Drag a resize handle (`name_status` or `status_priority`) by `delta`.
        `start` is the layout the drag started from (defaults to the stored widths).
        """
        base = start if start is not None else self.columns()
        return self.set_columns(resize_columns(base, pair, delta))

    def fitted_columns(self, available_width: float | None) -> TaskColumns:
        return fit_columns_to_width(self.columns(), available_width)
