"""Build the adapter for a resolved provider config."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

from resumeit.clients.anthropic_client import AnthropicClient
from resumeit.clients.base import GenerationSettings, ProviderClient
from resumeit.clients.bytez_client import BytezClient
from resumeit.clients.gemini import GeminiClient
from resumeit.clients.huggingface import HuggingFaceClient
from resumeit.clients.openai_compat import OpenAICompatibleClient
from resumeit.clients.openrouter import OpenRouterClient
from resumeit.config import AppConfig
from resumeit.models.provider import ProviderConfig, ProviderId
from resumeit.providers.throttle import RequestThrottle

OPENAI_COMPATIBLE = frozenset({ProviderId.GROQ, ProviderId.TOGETHER, ProviderId.OPENAI})


def create_client(
    config: ProviderConfig,
    app_config: AppConfig,
    *,
    throttle: RequestThrottle,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> ProviderClient:
    llm = app_config.llm
    settings = GenerationSettings(temperature=llm.temperature, max_tokens=llm.max_tokens)
    timeout_s = llm.timeout_ms / 1000
    retry_wait_s = llm.retry_wait_ms / 1000

    if config.provider in OPENAI_COMPATIBLE:
        return OpenAICompatibleClient(
            config,
            settings,
            timeout_s=timeout_s,
            max_attempts=llm.max_attempts,
            retry_wait_s=retry_wait_s,
            sleep=sleep,
        )
    if config.provider == ProviderId.HUGGINGFACE:
        return HuggingFaceClient(
            config,
            throttle,
            settings,
            timeout_s=timeout_s,
            max_retries=app_config.throttle.max_retries,
            base_delay_ms=app_config.throttle.retry_base_delay_ms,
            sleep=sleep,
        )
    if config.provider == ProviderId.OPENROUTER:
        return OpenRouterClient(
            config,
            settings,
            site_url=app_config.site.url,
            site_name=app_config.site.name,
            timeout_s=timeout_s,
        )
    if config.provider == ProviderId.BYTEZ:
        return BytezClient(config, settings, timeout_s=timeout_s)
    if config.provider == ProviderId.GEMINI:
        return GeminiClient(config, settings, timeout_s=timeout_s)
    if config.provider == ProviderId.ANTHROPIC:
        return AnthropicClient(
            config,
            settings,
            timeout_s=timeout_s,
            max_attempts=llm.max_attempts,
            retry_wait_s=retry_wait_s,
            sleep=sleep,
        )

    raise ValueError(f"Unsupported provider '{config.provider}'")
