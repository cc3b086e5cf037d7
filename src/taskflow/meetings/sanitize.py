# src/taskflow/meetings/sanitize.py

"""
Boundary between AI output and the task domain.

AI suggestions are untrusted drafts. Before they become tasks:
- text is trimmed; a missing title falls back to the start of the content
- empty suggestions are dropped
- a missing or unparseable due date becomes "today + default_due_days"
- the assignee is matched by exact name; anything else means unassigned
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timedelta

from ..core.clock import DEFAULT_TIMEZONE, TzLike, calendar_day, parse_due_date
from ..core.errors import InvalidInput
from ..tasks.task_models import TaskDraft
from ..users.user_models import User
from .meeting_models import SuggestedTask

logger = logging.getLogger(__name__)

DEFAULT_DUE_DAYS = 3
_TITLE_FALLBACK_CHARS = 40


def sanitize_suggestion(
    suggestion: SuggestedTask,
    users: Iterable[User],
    reference: datetime,
    *,
    default_due_days: int = DEFAULT_DUE_DAYS,
    tz: TzLike = DEFAULT_TIMEZONE,
) -> TaskDraft | None:
    title = " ".join((suggestion.title or "").split())
    content = (suggestion.content or "").strip()

    if not title:
        title = " ".join(content.split())[:_TITLE_FALLBACK_CHARS]
    if not title:
        logger.info("Dropping empty AI suggestion")
        return None

    try:
        due = parse_due_date(suggestion.due_date, tz)
    except InvalidInput:
        due = calendar_day(reference, tz) + timedelta(days=max(0, int(default_due_days)))
        logger.debug("Suggestion %r has no usable due date (%r); defaulting to %s", title, suggestion.due_date, due)

    wanted = (suggestion.assignee_name or "").strip()
    assignee = next((u for u in users if wanted and u.name == wanted), None)

    return TaskDraft(
        title=title,
        content=content,
        due_date=due,
        assignee_id=assignee.id if assignee else None,
    )


def sanitize_suggestions(
    suggestions: Iterable[SuggestedTask],
    users: Iterable[User],
    reference: datetime,
    *,
    default_due_days: int = DEFAULT_DUE_DAYS,
    tz: TzLike = DEFAULT_TIMEZONE,
) -> list[TaskDraft]:
    user_list = list(users)
    drafts: list[TaskDraft] = []
    for s in suggestions:
        draft = sanitize_suggestion(s, user_list, reference, default_due_days=default_due_days, tz=tz)
        if draft is not None:
            drafts.append(draft)
    return drafts
