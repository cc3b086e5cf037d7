# src/taskflow/llm/offline.py

from __future__ import annotations

import json
from collections.abc import Iterable

from ..core.ports import ChatMessage


class OfflineLLMClient:
    """
    Offline deterministic LLM client used for demos when no external API is configured.

    Meeting-extraction prompts get a valid JSON answer with a placeholder
    summary and no action items, so the rest of the flow keeps working.
    """

    def stream_chat(
        self,
        messages: list[ChatMessage],
        system_prompt: str,
        *,
        json_mode: bool = False,
    ) -> Iterable[str]:
        yield json.dumps(
            {
                "summary": (
                    "Offline demo mode: no external AI is configured. "
                    "Set TASKFLOW_OPENROUTER_API_KEY (and TASKFLOW_LLM_MODELS) to extract real minutes."
                ),
                "tasks": [],
            }
        )
