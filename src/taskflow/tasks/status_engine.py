# src/taskflow/tasks/status_engine.py

"""
Task status engine.

Pure functions over Task snapshots:
- overdue_days(): whole days past due, in the reference timezone
- display_status(): derived view (overdue overrides a stale stored status)
- apply_status_edit() / apply_progress_edit() / apply_due_date_edit():
  transition rules; they return a new Task and never persist anything.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, timedelta

from ..core.clock import DEFAULT_TIMEZONE, TzLike, day_start, parse_due_date, start_of_day
from ..core.errors import InvalidInput, InvalidTransition
from .task_models import DisplayKind, DisplayStatus, Task, TaskStatus

logger = logging.getLogger(__name__)

_ONE_DAY = timedelta(days=1)


def overdue_days(due_date: date, reference: datetime, tz: TzLike = DEFAULT_TIMEZONE) -> int:
    """
    Days between the due date and the reference instant, both at start-of-day.

    > 0: overdue by that many days; 0: due today; < 0: due in the future.
    """
    delta = start_of_day(reference, tz) - day_start(due_date, tz)
    return delta // _ONE_DAY


def is_overdue(task: Task, reference: datetime, tz: TzLike = DEFAULT_TIMEZONE) -> bool:
    """Active (not completed) and past its due date."""
    return not task.status.is_terminal and overdue_days(task.due_date, reference, tz) > 0


def display_status(task: Task, reference: datetime, tz: TzLike = DEFAULT_TIMEZONE) -> DisplayStatus:
    # Order matters: completion first, then overdue, then the stored status.
    match task.status:
        case TaskStatus.COMPLETED:
            return DisplayStatus(DisplayKind.DONE_ON_TIME)
        case TaskStatus.COMPLETED_LATE:
            return DisplayStatus(DisplayKind.DONE_LATE)
        case TaskStatus.NOT_STARTED | TaskStatus.IN_PROGRESS:
            days = overdue_days(task.due_date, reference, tz)
            if days > 0:
                return DisplayStatus(DisplayKind.OVERDUE, days=days)
            if task.status is TaskStatus.NOT_STARTED:
                return DisplayStatus(DisplayKind.NOT_STARTED)
            return DisplayStatus(DisplayKind.IN_PROGRESS, percent=task.progress)


def _coerce_progress(value: object) -> int:
    if isinstance(value, bool):
        raise InvalidInput(f"Progress must be a whole number, got {value!r}.")
    if isinstance(value, int):
        n = value
    elif isinstance(value, float) and value.is_integer():
        n = int(value)
    else:
        try:
            n = int(str(value).strip().rstrip("%"))
        except ValueError as e:
            raise InvalidInput(f"Progress must be a whole number, got {value!r}.") from e
    return max(0, min(100, n))


def apply_status_edit(
    task: Task,
    requested: TaskStatus,
    reference: datetime,
    *,
    progress: object | None = None,
    tz: TzLike = DEFAULT_TIMEZONE,
) -> Task:
    """
    Apply a user's status (and optional progress) change.

    - Completed tasks are immutable here -> InvalidTransition.
    - COMPLETED on an overdue task is recorded as COMPLETED_LATE.
    - IN_PROGRESS takes the clamped progress when given.
    - Entering a completed variant stamps completed_at with `reference`.
    """
    if task.status.is_terminal:
        raise InvalidTransition(
            f"Task {task.id} is already {task.status.value}; its status can no longer change."
        )

    new_progress = task.progress
    completed_at = task.completed_at

    match requested:
        case TaskStatus.COMPLETED:
            days = overdue_days(task.due_date, reference, tz)
            final = TaskStatus.COMPLETED_LATE if days > 0 else TaskStatus.COMPLETED
            if final is TaskStatus.COMPLETED_LATE:
                logger.info("Task %s completed %d day(s) late; recording COMPLETED_LATE", task.id, days)
            completed_at = reference
        case TaskStatus.COMPLETED_LATE:
            final = TaskStatus.COMPLETED_LATE
            completed_at = reference
        case TaskStatus.IN_PROGRESS:
            final = TaskStatus.IN_PROGRESS
            if progress is not None:
                new_progress = _coerce_progress(progress)
        case TaskStatus.NOT_STARTED:
            final = TaskStatus.NOT_STARTED

    return replace(task, status=final, progress=new_progress, completed_at=completed_at)


def apply_progress_edit(
    task: Task,
    progress: object,
    reference: datetime,
    *,
    tz: TzLike = DEFAULT_TIMEZONE,
) -> Task:
    """Progress slider: touching it starts a NOT_STARTED task."""
    requested = TaskStatus.IN_PROGRESS if task.status is TaskStatus.NOT_STARTED else task.status
    return apply_status_edit(task, requested, reference, progress=progress, tz=tz)


def apply_due_date_edit(task: Task, new_date: object, *, tz: TzLike = DEFAULT_TIMEZONE) -> Task:
    """
    Replace the due date.

    Status is never reclassified: a COMPLETED_LATE task stays late even if the
    new date would have made it on time.
    """
    return replace(task, due_date=parse_due_date(new_date, tz))
