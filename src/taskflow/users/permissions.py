# src/taskflow/users/permissions.py

"""
Role rules.

- ADMIN: everything; the only role that can change roles.
- OPERATOR: create/delete tasks, edit due dates, see analytics.
- USER: change status/progress of tasks assigned to them.
- Everyone: see all tasks, use the meeting assistant.
"""

from __future__ import annotations

from ..core.errors import PermissionDenied
from ..tasks.task_models import Task
from .user_models import User, UserRole

_MANAGERS = (UserRole.ADMIN, UserRole.OPERATOR)


def can_edit_status(user: User, task: Task) -> bool:
    if user.role is UserRole.ADMIN:
        return True
    return task.assignee_id == user.id


def can_manage_tasks(user: User) -> bool:
    """Create, delete, change due dates."""
    return user.role in _MANAGERS


def can_view_team(user: User) -> bool:
    return user.role in _MANAGERS


def can_change_role(actor: User, target: User) -> bool:
    # Admin accounts are not modifiable, including by other admins.
    return actor.role is UserRole.ADMIN and target.role is not UserRole.ADMIN


def require(allowed: bool, action: str) -> None:
    if not allowed:
        raise PermissionDenied(f"You are not allowed to {action}.")
