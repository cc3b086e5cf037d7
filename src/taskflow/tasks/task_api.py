# src/taskflow/tasks/task_api.py

"""
Task use cases.

Each edit follows the same shape: read the snapshot from the store, run it
through the status engine, write the full record back.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime
from typing import Literal

from ..core.clock import parse_due_date
from ..core.errors import InvalidInput, TaskNotFound
from ..core.state import AppState
from ..users import permissions
from ..users.user_models import User
from . import status_engine
from .task_models import Task, TaskDraft, TaskStatus

logger = logging.getLogger(__name__)

Scope = Literal["all", "my"]


def resolve_task(state: AppState, task_ref: str) -> Task:
    """Look a task up by full id or by an unambiguous id prefix."""
    ref = (task_ref or "").strip()
    if not ref:
        raise InvalidInput("Task id is required.")

    task = state.tasks.get_task(ref)
    if task is not None:
        return task

    matches = state.tasks.find_by_prefix(ref)
    if not matches:
        raise TaskNotFound(ref)
    if len(matches) > 1:
        raise InvalidInput(f"Task id prefix {ref!r} is ambiguous ({len(matches)} matches).")
    return matches[0]


def list_tasks(state: AppState, actor: User, *, scope: Scope = "all") -> list[Task]:
    """Tasks sorted by due date; scope="my" keeps only the actor's assignments."""
    tasks = state.tasks.list_tasks()
    if scope == "my":
        tasks = [t for t in tasks if t.assignee_id == actor.id]
    return sorted(tasks, key=lambda t: t.due_date)


def _resolve_assignee(state: AppState, assignee_name: str | None) -> str | None:
    name = (assignee_name or "").strip()
    if not name:
        return None
    user = state.users.find_by_name(name)
    if user is None:
        raise InvalidInput(f"Unknown assignee: {name}")
    return user.id


def create_task(
    state: AppState,
    actor: User,
    *,
    title: str,
    due_date: str,
    content: str = "",
    assignee_name: str | None = None,
) -> Task:
    permissions.require(permissions.can_manage_tasks(actor), "create tasks")

    title = (title or "").strip()
    if not title:
        raise InvalidInput("Task title is required.")

    draft = TaskDraft(
        title=title,
        content=content,
        due_date=parse_due_date(due_date, state.timezone),
        assignee_id=_resolve_assignee(state, assignee_name),
    )
    task = state.tasks.add_task(draft, creator_id=actor.id)
    logger.info("Task created id=%s by=%s", task.id, actor.name)
    return task


def accept_drafts(state: AppState, actor: User, drafts: Iterable[TaskDraft]) -> list[Task]:
    """Create tasks from already-sanitized drafts (AI suggestions)."""
    created = [state.tasks.add_task(d, creator_id=actor.id) for d in drafts]
    logger.info("Accepted %d suggested task(s) by=%s", len(created), actor.name)
    return created


def change_status(
    state: AppState,
    actor: User,
    task_ref: str,
    requested: TaskStatus,
    *,
    now: datetime,
    progress: object | None = None,
) -> Task:
    task = resolve_task(state, task_ref)
    permissions.require(permissions.can_edit_status(actor, task), "change this task's status")

    updated = status_engine.apply_status_edit(task, requested, now, progress=progress, tz=state.timezone)
    return state.tasks.replace_task(updated)


def change_progress(state: AppState, actor: User, task_ref: str, progress: object, *, now: datetime) -> Task:
    task = resolve_task(state, task_ref)
    permissions.require(permissions.can_edit_status(actor, task), "change this task's progress")

    updated = status_engine.apply_progress_edit(task, progress, now, tz=state.timezone)
    return state.tasks.replace_task(updated)


def change_due_date(state: AppState, actor: User, task_ref: str, new_date: str) -> Task:
    permissions.require(permissions.can_manage_tasks(actor), "change due dates")
    task = resolve_task(state, task_ref)

    updated = status_engine.apply_due_date_edit(task, new_date, tz=state.timezone)
    return state.tasks.replace_task(updated)


def delete_task(state: AppState, actor: User, task_ref: str) -> Task:
    permissions.require(permissions.can_manage_tasks(actor), "delete tasks")
    task = resolve_task(state, task_ref)
    if not state.tasks.delete_task(task.id):
        raise TaskNotFound(task.id)
    logger.info("Task deleted id=%s by=%s", task.id, actor.name)
    return task
