# src/taskflow/users/user_api.py

from __future__ import annotations

import logging

from ..core.errors import InvalidInput
from ..core.state import AppState
from . import permissions
from .user_models import User, UserRole

logger = logging.getLogger(__name__)


def change_role(state: AppState, actor: User, target_name: str, role: UserRole) -> User:
    """Admins promote/demote non-admin users; admin accounts are fixed."""
    target = state.users.find_by_name(target_name)
    if target is None:
        raise InvalidInput(f"Unknown user: {target_name}")
    if role is UserRole.ADMIN:
        raise InvalidInput("Roles can only be set to OPERATOR or USER.")

    permissions.require(permissions.can_change_role(actor, target), f"change the role of {target.name}")

    updated = state.users.update_user_role(target.id, role)
    if updated is None:
        raise InvalidInput(f"Unknown user: {target_name}")
    logger.info("Role changed user=%s role=%s by=%s", updated.name, role.value, actor.name)
    return updated
