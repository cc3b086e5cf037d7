# src/taskflow/meetings/meeting_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(slots=True)
class Meeting:
    id: str
    title: str
    date: datetime
    content: str  # transcript, or AUDIO_CONTENT_MARKER for recordings
    summary: str | None = None
    recording_path: str | None = None


@dataclass(slots=True)
class SuggestedTask:
    """
    Raw action item as returned by the AI service.

    Untrusted: every field may be empty or malformed until it goes through
    meetings.sanitize.
    """

    title: str = ""
    content: str = ""
    assignee_name: str = ""
    due_date: str = ""


@dataclass(slots=True)
class ExtractionResult:
    summary: str
    tasks: list[SuggestedTask] = field(default_factory=list)


AUDIO_CONTENT_MARKER = "[audio recording]"
