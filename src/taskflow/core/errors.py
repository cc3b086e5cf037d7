# src/taskflow/core/errors.py

"""
Error kinds raised by the task engine and the services around it.

All of them are local and recoverable: the front end reports the message and
lets the user try again.
"""

from __future__ import annotations


class TaskflowError(Exception):
    """Base class for all application errors."""


class InvalidTransition(TaskflowError):
    """Status edit attempted on a task that is already completed."""


class InvalidInput(TaskflowError):
    """Missing or unparseable user input (dates, progress, names...)."""


class PermissionDenied(TaskflowError):
    """The acting user's role does not allow the operation."""


class TaskNotFound(TaskflowError):
    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class ExtractionFailed(TaskflowError):
    """The AI service could not turn meeting content into tasks."""


class ClockUnavailable(TaskflowError):
    """
    Network time could not be obtained.

    Internal to the clock: always recovered by falling back to local time.
    """
