# src/weekly_status/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..managers.skills import SkillManager
from ..managers.tasks import TaskManager
from ..managers.weeks import WeekManager
from .sync import StateSynchronizer


@dataclass
class AppState:
    """
    Everything a front end (console, tests, any other UI) needs.

    The synchronizer owns the document; the managers are thin views over it.
    """

    settings: Any
    sync: StateSynchronizer
    weeks: WeekManager
    tasks: TaskManager
    skills: SkillManager

    @classmethod
    def wire(cls, settings: Any, sync: StateSynchronizer) -> AppState:
        return cls(
            settings=settings,
            sync=sync,
            weeks=WeekManager(sync),
            tasks=TaskManager(sync),
            skills=SkillManager(sync),
        )
