"""Generation telemetry data models."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, Field


class GenerationLog(BaseModel):
    """One tailoring request: which providers were tried and how it ended."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    provider: str | None = None  # the provider that answered
    model: str | None = None
    success: bool = True
    duration_ms: int = 0
    attempted_providers: list[str] = []
    skipped_providers: list[str] = []
    error_kind: str | None = None
    error_message: str | None = None
    match_score: float | None = None
