# tests/test_task_api.py

from __future__ import annotations

from datetime import date

import pytest

from taskflow.core.errors import InvalidInput, InvalidTransition, PermissionDenied, TaskNotFound
from taskflow.core.state import AppState
from taskflow.tasks import task_api
from taskflow.tasks.task_models import TaskStatus
from taskflow.users import user_api
from taskflow.users.user_models import User, UserRole


def test_operator_creates_task_for_employee(state: AppState, operator: User, employee: User) -> None:
    task = task_api.create_task(
        state, operator, title="Call ACME", due_date="2024-01-12", content="price", assignee_name="Eve"
    )
    assert task.assignee_id == employee.id
    assert task.creator_id == operator.id
    assert task.due_date == date(2024, 1, 12)
    assert task.status is TaskStatus.NOT_STARTED


def test_employee_cannot_manage_tasks(state: AppState, admin: User, employee: User) -> None:
    with pytest.raises(PermissionDenied):
        task_api.create_task(state, employee, title="x", due_date="2024-01-12")

    task = task_api.create_task(state, admin, title="x", due_date="2024-01-12", assignee_name="Eve")
    with pytest.raises(PermissionDenied):
        task_api.change_due_date(state, employee, task.id, "2024-02-01")
    with pytest.raises(PermissionDenied):
        task_api.delete_task(state, employee, task.id)


def test_create_rejects_bad_input(state: AppState, admin: User) -> None:
    with pytest.raises(InvalidInput):
        task_api.create_task(state, admin, title="  ", due_date="2024-01-12")
    with pytest.raises(InvalidInput):
        task_api.create_task(state, admin, title="x", due_date="soon")
    with pytest.raises(InvalidInput):
        task_api.create_task(state, admin, title="x", due_date="2024-01-12", assignee_name="Ghost")
    assert state.tasks.list_tasks() == []


def test_status_edit_only_by_assignee_or_admin(
    state: AppState, admin: User, operator: User, employee: User
) -> None:
    task = task_api.create_task(state, admin, title="x", due_date="2024-01-20", assignee_name="Eve")
    now = state.reference_now()

    with pytest.raises(PermissionDenied):
        task_api.change_status(state, operator, task.id, TaskStatus.IN_PROGRESS, now=now)

    started = task_api.change_status(state, employee, task.id, TaskStatus.IN_PROGRESS, now=now, progress=40)
    assert (started.status, started.progress) == (TaskStatus.IN_PROGRESS, 40)

    done = task_api.change_status(state, admin, task.id, TaskStatus.COMPLETED, now=now)
    assert done.status is TaskStatus.COMPLETED
    assert state.tasks.get_task(task.id) == done


def test_overdue_completion_is_stored_as_late(state: AppState, admin: User, employee: User) -> None:
    task = task_api.create_task(state, admin, title="x", due_date="2024-01-09", assignee_name="Eve")

    done = task_api.change_status(state, employee, task.id, TaskStatus.COMPLETED, now=state.reference_now())

    assert done.status is TaskStatus.COMPLETED_LATE
    stored = state.tasks.get_task(task.id)
    assert stored is not None and stored.status is TaskStatus.COMPLETED_LATE

    with pytest.raises(InvalidTransition):
        task_api.change_status(state, admin, task.id, TaskStatus.IN_PROGRESS, now=state.reference_now())


def test_progress_and_due_date_edits(state: AppState, admin: User, employee: User) -> None:
    task = task_api.create_task(state, admin, title="x", due_date="2024-01-20", assignee_name="Eve")

    moved = task_api.change_progress(state, employee, task.id, "120", now=state.reference_now())
    assert (moved.status, moved.progress) == (TaskStatus.IN_PROGRESS, 100)

    later = task_api.change_due_date(state, admin, task.id, "2024-03-01")
    assert later.due_date == date(2024, 3, 1)
    assert later.progress == 100


def test_resolve_by_prefix(state: AppState, admin: User) -> None:
    task = task_api.create_task(state, admin, title="x", due_date="2024-01-20")

    assert task_api.resolve_task(state, task.id[:8]).id == task.id
    with pytest.raises(TaskNotFound):
        task_api.resolve_task(state, "zzzz")
    with pytest.raises(InvalidInput):
        task_api.resolve_task(state, " ")


def test_delete_returns_removed_task(state: AppState, operator: User) -> None:
    task = task_api.create_task(state, operator, title="temp", due_date="2024-01-20")

    removed = task_api.delete_task(state, operator, task.id)

    assert removed.id == task.id
    assert state.tasks.get_task(task.id) is None
    with pytest.raises(TaskNotFound):
        task_api.delete_task(state, operator, task.id)


def test_list_sorted_by_due_date_and_scoped(state: AppState, admin: User, employee: User) -> None:
    late = task_api.create_task(state, admin, title="late", due_date="2024-03-01", assignee_name="Eve")
    soon = task_api.create_task(state, admin, title="soon", due_date="2024-01-11")
    mine = task_api.create_task(state, admin, title="mine", due_date="2024-02-01", assignee_name="Eve")

    assert [t.id for t in task_api.list_tasks(state, employee)] == [soon.id, mine.id, late.id]
    assert [t.id for t in task_api.list_tasks(state, employee, scope="my")] == [mine.id, late.id]


# ---- roles ----


def test_admin_changes_roles(state: AppState, admin: User, employee: User) -> None:
    promoted = user_api.change_role(state, admin, "Eve", UserRole.OPERATOR)
    assert promoted.role is UserRole.OPERATOR

    demoted = user_api.change_role(state, admin, "Eve", UserRole.USER)
    assert demoted.role is UserRole.USER


def test_role_change_rules(state: AppState, admin: User, operator: User, employee: User) -> None:
    with pytest.raises(PermissionDenied):
        user_api.change_role(state, operator, "Eve", UserRole.OPERATOR)
    with pytest.raises(PermissionDenied):
        user_api.change_role(state, admin, "Boss", UserRole.USER)
    with pytest.raises(InvalidInput):
        user_api.change_role(state, admin, "Eve", UserRole.ADMIN)
    with pytest.raises(InvalidInput):
        user_api.change_role(state, admin, "Ghost", UserRole.USER)


@pytest.mark.parametrize("ref", ["%", "_"])
def test_wildcard_reference_resolves_nothing(state: AppState, operator: User, ref: str) -> None:
    task = task_api.create_task(state, operator, title="Quarterly report", due_date="2024-01-20")

    with pytest.raises(TaskNotFound):
        task_api.resolve_task(state, ref)
    with pytest.raises(TaskNotFound):
        task_api.delete_task(state, operator, ref)
    assert state.tasks.get_task(task.id) is not None
