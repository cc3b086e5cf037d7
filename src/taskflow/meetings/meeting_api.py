# src/taskflow/meetings/meeting_api.py

from __future__ import annotations

import logging
import shutil
from dataclasses import replace
from datetime import datetime
from pathlib import Path

from ..core.clock import calendar_day, parse_due_date
from ..core.errors import InvalidInput
from ..core.state import AppState
from ..tasks import task_api
from ..tasks.task_models import Task
from ..users.user_models import User
from .extractor import extract_tasks_from_content
from .meeting_models import AUDIO_CONTENT_MARKER, ExtractionResult, Meeting, SuggestedTask
from .sanitize import DEFAULT_DUE_DAYS, sanitize_suggestions

logger = logging.getLogger(__name__)


def _keep_recording(state: AppState, audio_path: Path, meeting_day: str) -> str | None:
    """Copy the recording under the data dir so the meeting keeps a playable source."""
    target_dir = getattr(state.settings, "recordings_dir", None)
    if target_dir is None:
        return str(audio_path)
    try:
        target_dir = Path(target_dir)
        target_dir.mkdir(parents=True, exist_ok=True)
        target = target_dir / f"{meeting_day}-{audio_path.name}"
        shutil.copy2(audio_path, target)
        return str(target)
    except OSError:
        logger.exception("Failed to keep recording %s", audio_path)
        return None


def process_meeting(
    state: AppState,
    actor: User,
    *,
    now: datetime,
    content: str = "",
    audio_path: str | Path | None = None,
) -> tuple[Meeting, ExtractionResult]:
    """
    Summarize a meeting and stage its action items.

    The meeting record is saved right away; suggestions wait in
    state.pending_suggestions until the user accepts them.
    """
    today = calendar_day(now, state.timezone).isoformat()
    users = state.users.list_users()

    result = extract_tasks_from_content(
        state.llm,
        content=content,
        users=users,
        today=today,
        audio_path=audio_path,
    )

    recording_path = None
    if audio_path is not None:
        recording_path = _keep_recording(state, Path(audio_path), today)

    meeting = state.meetings.add_meeting(
        title=f"Meeting notes {today}",
        date=now,
        content=AUDIO_CONTENT_MARKER if audio_path is not None else content,
        summary=result.summary,
        recording_path=recording_path,
    )

    state.pending_suggestions = list(result.tasks)
    logger.info("Meeting %s processed by=%s suggestions=%d", meeting.id, actor.name, len(result.tasks))
    return meeting, result


def _pending_index(state: AppState, number: int) -> int:
    if not 1 <= number <= len(state.pending_suggestions):
        raise InvalidInput(f"No pending suggestion #{number} (there are {len(state.pending_suggestions)}).")
    return number - 1


def edit_suggestion(
    state: AppState,
    number: int,
    *,
    title: str | None = None,
    content: str | None = None,
    assignee_name: str | None = None,
    due_date: str | None = None,
) -> SuggestedTask:
    """
    Correct a staged suggestion before it is accepted (1-based `number`).

    Only the given fields change. An explicit due date or assignee must be
    valid; an empty string clears the field, which then gets the usual
    defaults when the suggestion is accepted.
    """
    idx = _pending_index(state, number)
    current = state.pending_suggestions[idx]

    if due_date is not None and due_date.strip():
        due_date = parse_due_date(due_date, state.timezone).isoformat()
    if assignee_name is not None and assignee_name.strip():
        assignee_name = assignee_name.strip()
        if state.users.find_by_name(assignee_name) is None:
            raise InvalidInput(f"Unknown assignee: {assignee_name}")

    updated = replace(
        current,
        title=current.title if title is None else title,
        content=current.content if content is None else content,
        assignee_name=current.assignee_name if assignee_name is None else assignee_name,
        due_date=current.due_date if due_date is None else due_date,
    )
    state.pending_suggestions[idx] = updated
    return updated


def drop_suggestion(state: AppState, number: int) -> SuggestedTask:
    """Remove a staged suggestion (1-based `number`) so it is never created."""
    return state.pending_suggestions.pop(_pending_index(state, number))


def accept_suggestions(state: AppState, actor: User, *, now: datetime) -> list[Task]:
    """Turn the staged suggestions into NOT_STARTED tasks and clear them."""
    default_days = int(getattr(state.settings, "default_due_days", DEFAULT_DUE_DAYS))
    drafts = sanitize_suggestions(
        state.pending_suggestions,
        state.users.list_users(),
        now,
        default_due_days=default_days,
        tz=state.timezone,
    )
    created = task_api.accept_drafts(state, actor, drafts)
    state.pending_suggestions = []
    return created
