# src/taskflow/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum


class TaskStatus(StrEnum):
    """
    Persisted task status.

    Notes:
    - "overdue" is never stored; it is derived at read time (see DisplayStatus).
    - COMPLETED / COMPLETED_LATE are terminal.
    """

    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    COMPLETED_LATE = "COMPLETED_LATE"

    @classmethod
    def from_db(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.NOT_STARTED
        try:
            return cls(raw)
        except ValueError:
            return cls.NOT_STARTED

    @classmethod
    def parse(cls, raw: str) -> TaskStatus:
        """Lenient user-facing parser: "done", "in-progress", "late"..."""
        key = (raw or "").strip().upper().replace("-", "_").replace(" ", "_")
        key = _STATUS_ALIASES.get(key, key)
        return cls(key)

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.COMPLETED, TaskStatus.COMPLETED_LATE)


_STATUS_ALIASES = {
    "TODO": "NOT_STARTED",
    "NEW": "NOT_STARTED",
    "STARTED": "IN_PROGRESS",
    "WIP": "IN_PROGRESS",
    "DOING": "IN_PROGRESS",
    "DONE": "COMPLETED",
    "COMPLETE": "COMPLETED",
    "LATE": "COMPLETED_LATE",
    "DONE_LATE": "COMPLETED_LATE",
}


class DisplayKind(StrEnum):
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    OVERDUE = "OVERDUE"
    DONE_ON_TIME = "DONE_ON_TIME"
    DONE_LATE = "DONE_LATE"


@dataclass(frozen=True, slots=True)
class DisplayStatus:
    """
    View-only classification of a task at a given instant.

    `days` is set only for OVERDUE, `percent` only for IN_PROGRESS.
    """

    kind: DisplayKind
    days: int | None = None
    percent: int | None = None

    @property
    def label(self) -> str:
        match self.kind:
            case DisplayKind.DONE_ON_TIME:
                return "Completed"
            case DisplayKind.DONE_LATE:
                return "Completed late"
            case DisplayKind.OVERDUE:
                return f"Overdue {self.days} day{'s' if self.days != 1 else ''}"
            case DisplayKind.NOT_STARTED:
                return "Not started"
            case DisplayKind.IN_PROGRESS:
                return f"In progress {self.percent}%"


@dataclass(slots=True)
class Task:
    id: str
    title: str
    content: str
    status: TaskStatus
    progress: int
    due_date: date

    creator_id: str | None
    assignee_id: str | None = None
    completed_at: datetime | None = None


@dataclass(slots=True)
class TaskDraft:
    """Validated input for creating a task (form or accepted AI suggestion)."""

    title: str
    content: str
    due_date: date
    assignee_id: str | None = None
