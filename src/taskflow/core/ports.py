# src/taskflow/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the services.

Services depend on Protocols instead of concrete implementations.
This keeps storage/LLM/clock swappable and makes testing easier.
"""

from datetime import datetime
from typing import Any, Iterable, Protocol

ChatMessage = dict[str, Any]
# OpenAI-style chat messages: {"role": "...", "content": str | list[content parts]}.


class LLMClient(Protocol):
    """Streaming chat completion client (OpenAI/OpenRouter-compatible)."""

    def stream_chat(
        self,
        messages: list[ChatMessage],
        system_prompt: str,
        *,
        json_mode: bool = False,
    ) -> Iterable[str]: ...


class Clock(Protocol):
    """Source of the reference instant (timezone-aware)."""

    async def now(self) -> datetime: ...


class TaskRepo(Protocol):
    def add_task(self, draft: Any, *, creator_id: str | None) -> Any: ...
    def get_task(self, task_id: str) -> Any | None: ...
    def find_by_prefix(self, prefix: str) -> list[Any]: ...
    def list_tasks(self) -> list[Any]: ...
    def replace_task(self, task: Any) -> Any: ...
    def delete_task(self, task_id: str) -> bool: ...


class UserRepo(Protocol):
    def register_user(self, *, name: str, password: str, title: str = "") -> Any: ...
    def login_user(self, name: str, password: str | None) -> Any | None: ...
    def update_user_role(self, user_id: str, role: Any) -> Any | None: ...
    def get_user(self, user_id: str | None) -> Any | None: ...
    def find_by_name(self, name: str | None) -> Any | None: ...
    def list_users(self) -> list[Any]: ...


class MeetingRepo(Protocol):
    def add_meeting(
        self,
        *,
        title: str,
        date: datetime,
        content: str,
        summary: str | None = None,
        recording_path: str | None = None,
    ) -> Any: ...

    def list_meetings(self, limit: int = 50) -> list[Any]: ...
