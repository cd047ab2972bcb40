"""Adapter protocol and response narrowing shared by the provider clients."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from resumeit.models.provider import ProviderConfig


class ProviderClient(Protocol):
    """Sends one user prompt and returns the raw assistant text."""

    config: ProviderConfig

    async def complete(self, prompt: str) -> str: ...


@dataclass(frozen=True)
class GenerationSettings:
    temperature: float = 0.3
    max_tokens: int = 4000


def chat_completion_text(payload: Any) -> str | None:
    """Narrow an OpenAI-style ``{"choices": [{"message": {"content": ...}}]}`` body."""
    if not isinstance(payload, dict):
        return None
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    message = first.get("message")
    if isinstance(message, dict) and isinstance(message.get("content"), str):
        return message["content"]
    # Legacy completions shape
    if isinstance(first.get("text"), str):
        return first["text"]
    return None
