"""Hugging Face router client: OpenAI-compatible calls paced by a shared throttle."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from resumeit.clients.base import GenerationSettings
from resumeit.clients.openai_compat import OpenAICompatibleClient
from resumeit.clients.retry import call_with_timeout
from resumeit.models.provider import ProviderConfig
from resumeit.providers.throttle import RequestThrottle, call_with_rate_limit_retry

logger = logging.getLogger(__name__)


class HuggingFaceClient:
    def __init__(
        self,
        config: ProviderConfig,
        throttle: RequestThrottle,
        settings: GenerationSettings | None = None,
        *,
        timeout_s: float = 30.0,
        max_retries: int = 3,
        base_delay_ms: int = 3_000,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.config = config
        self.throttle = throttle
        self.timeout_s = timeout_s
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self._sleep = sleep
        self._inner = OpenAICompatibleClient(
            config, settings, timeout_s=timeout_s, max_attempts=1, sleep=sleep
        )

    async def _attempt(self, prompt: str) -> str:
        # The timer runs inside the slot, so a hung call frees it when it fires
        return await call_with_timeout(
            lambda: self._inner.complete_once(prompt),
            provider=self.config.provider,
            timeout_s=self.timeout_s,
        )

    async def complete(self, prompt: str) -> str:
        try:
            return await call_with_rate_limit_retry(
                self.throttle,
                lambda: self._attempt(prompt),
                provider=self.config.provider,
                max_retries=self.max_retries,
                base_delay_ms=self.base_delay_ms,
                sleep=self._sleep,
            )
        finally:
            await self._inner.aclose()
