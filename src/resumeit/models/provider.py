"""Provider identifiers and per-provider bookkeeping types."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class ProviderId(str, Enum):
    HUGGINGFACE = "huggingface"
    OPENROUTER = "openrouter"
    GROQ = "groq"
    BYTEZ = "bytez"
    GEMINI = "gemini"
    TOGETHER = "together"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ProviderConfig:
    """Connection settings for one provider, resolved from the environment."""

    provider: ProviderId
    api_key: str
    base_url: str
    model: str

    def __repr__(self) -> str:
        # Keep credentials out of logs and tracebacks
        return (
            f"ProviderConfig(provider={self.provider.value!r}, base_url={self.base_url!r}, "
            f"model={self.model!r}, api_key={'***' if self.api_key else ''!r})"
        )


@dataclass
class ProviderUsageStats:
    success_count: int = 0
    cooldown_until: datetime | None = None


class AttemptStatus(str, Enum):
    SKIPPED_UNCONFIGURED = "skipped-unconfigured"
    SKIPPED_COOLDOWN = "skipped-cooldown"
    SKIPPED_QUOTA = "skipped-quota"
    SUCCEEDED = "succeeded"
    FAILED_RETRYABLE = "failed-retryable"
    FAILED_TERMINAL = "failed-terminal"

    @property
    def skipped(self) -> bool:
        return self.value.startswith("skipped")


@dataclass(frozen=True)
class ProviderAttemptOutcome:
    """What happened to one provider during a single generation request."""

    provider: ProviderId
    status: AttemptStatus
    detail: str | None = None
