"""OpenAI-compatible chat-completions client (Groq, Together, OpenAI, Hugging Face router)."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

import openai
from openai import AsyncOpenAI

from resumeit.clients.base import GenerationSettings
from resumeit.clients.retry import call_with_retries
from resumeit.errors import TRANSPORT_CONNECT, TRANSPORT_TIMEOUT, EmptyResponseError, ProviderCallError
from resumeit.models.provider import ProviderConfig

logger = logging.getLogger(__name__)


def _translate_error(config: ProviderConfig, exc: openai.OpenAIError) -> ProviderCallError:
    if isinstance(exc, openai.APIStatusError):
        return ProviderCallError(
            config.provider,
            exc.message,
            status=exc.status_code,
            retry_after=exc.response.headers.get("retry-after"),
        )
    if isinstance(exc, openai.APITimeoutError):
        return ProviderCallError(config.provider, str(exc), code=TRANSPORT_TIMEOUT)
    if isinstance(exc, openai.APIConnectionError):
        return ProviderCallError(config.provider, str(exc), code=TRANSPORT_CONNECT)
    return ProviderCallError(config.provider, str(exc))


class OpenAICompatibleClient:
    """Single-message chat completion with per-attempt timeout and backoff retries."""

    def __init__(
        self,
        config: ProviderConfig,
        settings: GenerationSettings | None = None,
        *,
        timeout_s: float = 30.0,
        max_attempts: int = 3,
        retry_wait_s: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.config = config
        self.settings = settings or GenerationSettings()
        self.timeout_s = timeout_s
        self.max_attempts = max_attempts
        self.retry_wait_s = retry_wait_s
        self._sleep = sleep
        # SDK retries off; call_with_retries owns the backoff
        self.client = AsyncOpenAI(
            api_key=config.api_key or "placeholder",
            base_url=config.base_url,
            max_retries=0,
        )

    async def _create(self, prompt: str) -> str:
        try:
            completion = await self.client.chat.completions.create(
                model=self.config.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.settings.temperature,
                max_tokens=self.settings.max_tokens,
                stream=False,
            )
        except openai.OpenAIError as e:
            raise _translate_error(self.config, e) from e

        content = completion.choices[0].message.content if completion.choices else None
        if not content:
            raise EmptyResponseError(self.config.provider)
        usage = getattr(completion, "usage", None)
        if usage is not None:
            logger.debug(
                "%s usage: %s prompt, %s completion tokens",
                self.config.provider.value,
                usage.prompt_tokens,
                usage.completion_tokens,
            )
        return content

    async def complete_once(self, prompt: str) -> str:
        """One call, no timeout race and no retries (the throttled path wraps this)."""
        return await self._create(prompt)

    async def aclose(self) -> None:
        await self.client.close()

    async def complete(self, prompt: str) -> str:
        logger.info(
            "Calling %s model=%s max_tokens=%d temperature=%.2f timeout=%.1fs",
            self.config.provider.value,
            self.config.model,
            self.settings.max_tokens,
            self.settings.temperature,
            self.timeout_s,
        )
        try:
            return await call_with_retries(
                lambda: self._create(prompt),
                provider=self.config.provider,
                timeout_s=self.timeout_s,
                max_attempts=self.max_attempts,
                wait_s=self.retry_wait_s,
                sleep=self._sleep,
            )
        finally:
            await self.aclose()
