# src/taskflow/meetings/extractor.py

"""
Meeting -> minutes + action items.

One LLM call per meeting. The model gets the team roster and either the
transcript text or the audio recording, and must answer with strict JSON:

    {"summary": "...", "tasks": [{"title", "content", "assigneeName", "dueDate"}]}

The answer is parsed leniently (malformed items are skipped); the suggestions
it yields are still untrusted and go through meetings.sanitize.
"""

from __future__ import annotations

import base64
import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from ..core.errors import ExtractionFailed
from ..core.ports import ChatMessage, LLMClient
from ..users.user_models import User
from .meeting_models import ExtractionResult, SuggestedTask

logger = logging.getLogger(__name__)

NO_SUMMARY = "No summary could be generated."

EXTRACTION_SYSTEM_PROMPT = """
You are a professional executive assistant.

Analyze the meeting content (text or audio), tell the speakers apart, and:
1. Write concise, professional meeting minutes.
2. Extract concrete action items (tasks).

Team members: [{roster}].

For every task identify:
- title: a short action instruction.
- content: background and concrete requirements.
- assigneeName: must match a team member name exactly. If the person is not
  on the list or cannot be determined, return an empty string.
- dueDate: format YYYY-MM-DD. Infer it from context ("next Friday",
  "tomorrow") relative to {today}. If no deadline is mentioned, return an
  empty string.

Output format:
Return STRICT JSON only. No extra text. No Markdown.
{{"summary": "<minutes>", "tasks": [{{"title": "", "content": "", "assigneeName": "", "dueDate": ""}}]}}
""".strip()

TEXT_PROMPT = "Analyze the following meeting notes, summarize them and extract the action items:\n\n{content}"
AUDIO_PROMPT = "Listen to this meeting recording, summarize it and extract every person's action items."

_AUDIO_FORMATS = {".wav": "wav", ".mp3": "mp3"}


def build_system_prompt(users: Iterable[User], today: str) -> str:
    roster = ", ".join(u.name for u in users)
    return EXTRACTION_SYSTEM_PROMPT.format(roster=roster, today=today)


def audio_part(path: str | Path) -> dict[str, Any]:
    """OpenAI-style `input_audio` content part for a local recording."""
    p = Path(path)
    fmt = _AUDIO_FORMATS.get(p.suffix.lower())
    if fmt is None:
        raise ExtractionFailed(f"Unsupported audio format: {p.suffix or '(none)'} (use .wav or .mp3)")
    try:
        data = base64.b64encode(p.read_bytes()).decode("ascii")
    except OSError as e:
        raise ExtractionFailed(f"Cannot read recording {p}: {e.strerror or e}") from e
    return {"type": "input_audio", "input_audio": {"data": data, "format": fmt}}


def build_messages(content: str, audio_path: str | Path | None = None) -> list[ChatMessage]:
    if audio_path is not None:
        return [
            {
                "role": "user",
                "content": [audio_part(audio_path), {"type": "text", "text": AUDIO_PROMPT}],
            }
        ]
    return [{"role": "user", "content": TEXT_PROMPT.format(content=content)}]


def _extract_json_object(raw: str) -> str:
    raw = raw.strip()
    if raw.startswith("{") and raw.endswith("}"):
        return raw
    first = raw.find("{")
    last = raw.rfind("}")
    if first != -1 and last != -1 and last > first:
        return raw[first : last + 1]
    return raw


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def parse_extraction(raw: str) -> ExtractionResult:
    try:
        data = json.loads(_extract_json_object(raw))
    except json.JSONDecodeError as e:
        logger.warning("AI answer is not valid JSON (len=%d)", len(raw))
        raise ExtractionFailed("The AI answer could not be parsed. Please try again.") from e

    if not isinstance(data, dict):
        raise ExtractionFailed("The AI answer has an unexpected shape. Please try again.")

    summary = _as_str(data.get("summary")).strip() or NO_SUMMARY

    tasks: list[SuggestedTask] = []
    raw_tasks = data.get("tasks") or []
    if not isinstance(raw_tasks, list):
        raw_tasks = []
    for item in raw_tasks:
        if not isinstance(item, dict):
            logger.debug("Skipping non-object task item: %r", item)
            continue
        tasks.append(
            SuggestedTask(
                title=_as_str(item.get("title")),
                content=_as_str(item.get("content")),
                assignee_name=_as_str(item.get("assigneeName", item.get("assignee_name"))),
                due_date=_as_str(item.get("dueDate", item.get("due_date"))),
            )
        )

    return ExtractionResult(summary=summary, tasks=tasks)


def extract_tasks_from_content(
    llm: LLMClient,
    *,
    content: str,
    users: Iterable[User],
    today: str,
    audio_path: str | Path | None = None,
) -> ExtractionResult:
    """
    Run the extraction call.

    `today` (YYYY-MM-DD, reference timezone) anchors relative deadlines.
    Any LLM failure is reported as ExtractionFailed.
    """
    if audio_path is None and not (content or "").strip():
        raise ExtractionFailed("Meeting content is empty.")

    messages = build_messages(content, audio_path)
    system_prompt = build_system_prompt(users, today)

    raw = ""
    try:
        for piece in llm.stream_chat(messages, system_prompt, json_mode=True):
            raw += piece
    except RuntimeError as e:
        logger.warning("Meeting extraction failed: %s", e)
        raise ExtractionFailed(f"AI processing failed, please retry. ({e})") from e

    result = parse_extraction(raw)
    logger.info("Meeting extraction: summary_len=%d tasks=%d", len(result.summary), len(result.tasks))
    return result
