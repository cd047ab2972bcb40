"""Claude API wrapper with async support and retry logic."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import anthropic

from resumeit.clients.base import GenerationSettings
from resumeit.clients.retry import call_with_retries
from resumeit.errors import TRANSPORT_CONNECT, TRANSPORT_TIMEOUT, EmptyResponseError, ProviderCallError
from resumeit.models.provider import ProviderConfig

logger = logging.getLogger(__name__)


@dataclass
class LLMResponse:
    """Response from the LLM including usage metadata."""

    text: str
    input_tokens: int
    output_tokens: int


class AnthropicClient:
    """Async Claude client with exponential-backoff retries on transient errors."""

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
        kwargs: dict = {"api_key": config.api_key, "max_retries": 0}
        if config.base_url:
            kwargs["base_url"] = config.base_url
        self.client = anthropic.AsyncAnthropic(**kwargs)

    async def _call_api(self, prompt: str) -> anthropic.types.Message:
        """Make one API call, translating SDK errors."""
        try:
            return await self.client.messages.create(
                model=self.config.model,
                max_tokens=self.settings.max_tokens,
                temperature=self.settings.temperature,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIStatusError as e:
            raise ProviderCallError(
                self.config.provider,
                e.message,
                status=e.status_code,
                retry_after=e.response.headers.get("retry-after"),
            ) from e
        except anthropic.APITimeoutError as e:
            raise ProviderCallError(self.config.provider, str(e), code=TRANSPORT_TIMEOUT) from e
        except anthropic.APIConnectionError as e:
            raise ProviderCallError(self.config.provider, str(e), code=TRANSPORT_CONNECT) from e

    async def generate(self, prompt: str) -> LLMResponse:
        """Send a prompt to Claude and return the text response with usage."""
        logger.debug("LLM call: model=%s", self.config.model)
        message = await call_with_retries(
            lambda: self._call_api(prompt),
            provider=self.config.provider,
            timeout_s=self.timeout_s,
            max_attempts=self.max_attempts,
            wait_s=self.retry_wait_s,
            sleep=self._sleep,
        )
        text = "".join(
            block.text for block in message.content if getattr(block, "type", "text") == "text"
        )
        input_tokens = message.usage.input_tokens
        output_tokens = message.usage.output_tokens
        logger.debug("LLM response: %d input, %d output tokens", input_tokens, output_tokens)
        return LLMResponse(text=text, input_tokens=input_tokens, output_tokens=output_tokens)

    async def aclose(self) -> None:
        await self.client.close()

    async def complete(self, prompt: str) -> str:
        logger.info("Calling anthropic model=%s", self.config.model)
        try:
            response = await self.generate(prompt)
        finally:
            await self.aclose()
        if not response.text:
            raise EmptyResponseError(self.config.provider)
        return response.text
