# src/taskflow/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (LLM/clock/stores).
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.clock import NetworkClock
from ..core.ports import LLMClient
from ..core.state import AppState
from ..llm.client import OpenRouterLLMClient
from ..llm.offline import OfflineLLMClient
from ..meetings.meeting_store import MeetingStore
from ..tasks.task_store import TaskStore
from ..users.user_store import UserStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)
    settings.recordings_dir.mkdir(parents=True, exist_ok=True)


def create_llm_client(settings) -> LLMClient:
    try:
        return OpenRouterLLMClient(settings)
    except RuntimeError as e:
        # Fallback for demos / local runs without external services.
        logger.info("AI service not configured (%s); using offline client.", e)
        return OfflineLLMClient()


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    return AppState(
        settings=settings,
        llm=create_llm_client(settings),
        clock=NetworkClock(settings.time_source_url, timeout=settings.time_timeout_seconds),
        tasks=TaskStore(settings.db_path),
        users=UserStore(settings.db_path),
        meetings=MeetingStore(settings.db_path),
    )
