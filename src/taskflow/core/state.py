# src/taskflow/core/state.py

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

from .ports import Clock, LLMClient, MeetingRepo, TaskRepo, UserRepo

if TYPE_CHECKING:
    from ..meetings.meeting_models import SuggestedTask
    from ..users.user_models import User


@dataclass
class AppState:
    """
    Composition root output: everything a front end needs for one session.

    Stores hold the data; the session fields (current_user, pending
    suggestions) live only as long as the process.
    """

    settings: Any

    llm: LLMClient
    clock: Clock
    tasks: TaskRepo
    users: UserRepo
    meetings: MeetingRepo

    current_user: User | None = None
    pending_suggestions: list[SuggestedTask] = field(default_factory=list)

    @property
    def timezone(self) -> str:
        return str(getattr(self.settings, "reference_timezone", "Asia/Shanghai"))

    def reference_now(self) -> datetime:
        """One clock fetch per front-end action."""
        return asyncio.run(self.clock.now())
