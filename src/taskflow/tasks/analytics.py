# src/taskflow/tasks/analytics.py

"""Per-employee performance figures built on the status engine's classifications."""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from ..core.clock import DEFAULT_TIMEZONE, TzLike
from ..users.user_models import User, UserRole
from .status_engine import is_overdue
from .task_models import Task, TaskStatus

ON_TIME_WEIGHT = 100
LATE_PENALTY = 5
OVERDUE_PENALTY = 15


@dataclass(frozen=True, slots=True)
class UserPerformance:
    user_id: str
    name: str
    title: str
    role: UserRole
    completed: int
    late: int
    overdue: int
    total: int
    score: int


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def efficiency_score(*, on_time: int, late: int, active_overdue: int, total: int) -> int:
    """
    0..100. Share of on-time completions, minus 5 per late completion and
    15 per task that is currently overdue. No tasks -> 0.
    """
    if total <= 0:
        return 0
    score = _round_half_up(ON_TIME_WEIGHT * on_time / total)
    score -= LATE_PENALTY * late
    score -= OVERDUE_PENALTY * active_overdue
    return max(0, min(100, score))


def user_performance(
    user: User,
    tasks: Iterable[Task],
    reference: datetime,
    *,
    tz: TzLike = DEFAULT_TIMEZONE,
) -> UserPerformance:
    own = [t for t in tasks if t.assignee_id == user.id]
    completed = sum(1 for t in own if t.status is TaskStatus.COMPLETED)
    late = sum(1 for t in own if t.status is TaskStatus.COMPLETED_LATE)
    overdue = sum(1 for t in own if is_overdue(t, reference, tz))
    return UserPerformance(
        user_id=user.id,
        name=user.name,
        title=user.title,
        role=user.role,
        completed=completed,
        late=late,
        overdue=overdue,
        total=len(own),
        score=efficiency_score(on_time=completed, late=late, active_overdue=overdue, total=len(own)),
    )


def team_performance(
    users: Iterable[User],
    tasks: Iterable[Task],
    reference: datetime,
    *,
    tz: TzLike = DEFAULT_TIMEZONE,
) -> list[UserPerformance]:
    """Rows for every non-admin user, in store order."""
    task_list = list(tasks)
    return [
        user_performance(u, task_list, reference, tz=tz)
        for u in users
        if u.role is not UserRole.ADMIN
    ]
