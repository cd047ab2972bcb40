"""Static knowledge of each supported LLM provider."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from resumeit.models.provider import ProviderConfig, ProviderId

MIN_CREDENTIAL_LENGTH = 10
PLACEHOLDER_CREDENTIAL = "placeholder"


@dataclass(frozen=True)
class ProviderSpec:
    key_env: str
    env_prefix: str  # for <PREFIX>_BASE_URL, <PREFIX>_MODEL, <PREFIX>_DAILY_LIMIT
    base_url: str
    model: str
    display_name: str


PROVIDERS: dict[ProviderId, ProviderSpec] = {
    ProviderId.HUGGINGFACE: ProviderSpec(
        key_env="HF_TOKEN",
        env_prefix="HF",
        base_url="https://router.huggingface.co/v1",
        model="openai/gpt-oss-120b",
        display_name="Hugging Face",
    ),
    ProviderId.OPENROUTER: ProviderSpec(
        key_env="OPENROUTER_API_KEY",
        env_prefix="OPENROUTER",
        base_url="https://openrouter.ai/api/v1",
        model="openai/gpt-4o",
        display_name="OpenRouter",
    ),
    ProviderId.GROQ: ProviderSpec(
        key_env="GROQ_API_KEY",
        env_prefix="GROQ",
        base_url="https://api.groq.com/openai/v1",
        model="llama-3.3-70b-versatile",
        display_name="Groq",
    ),
    ProviderId.BYTEZ: ProviderSpec(
        key_env="BYTEZ_API_KEY",
        env_prefix="BYTEZ",
        base_url="https://api.bytez.com/models/v2",
        model="openai/gpt-oss-20b",
        display_name="Bytez",
    ),
    ProviderId.GEMINI: ProviderSpec(
        key_env="GEMINI_API_KEY",
        env_prefix="GEMINI",
        base_url="https://generativelanguage.googleapis.com/v1beta",
        model="gemini-2.0-flash",
        display_name="Google Gemini",
    ),
    ProviderId.TOGETHER: ProviderSpec(
        key_env="TOGETHER_API_KEY",
        env_prefix="TOGETHER",
        base_url="https://api.together.xyz/v1",
        model="meta-llama/Llama-3.3-70B-Instruct-Turbo",
        display_name="Together AI",
    ),
    ProviderId.OPENAI: ProviderSpec(
        key_env="OPENAI_API_KEY",
        env_prefix="OPENAI",
        base_url="https://api.openai.com/v1",
        model="gpt-4o-mini",
        display_name="OpenAI",
    ),
    ProviderId.ANTHROPIC: ProviderSpec(
        key_env="ANTHROPIC_API_KEY",
        env_prefix="ANTHROPIC",
        base_url="https://api.anthropic.com",
        model="claude-haiku-4-5-20251001",
        display_name="Anthropic",
    ),
}


def key_env_var(provider: ProviderId) -> str:
    """Name of the environment variable holding the provider's credential."""
    return PROVIDERS[provider].key_env


def resolve_config(provider: ProviderId, env: Mapping[str, str] | None = None) -> ProviderConfig:
    """Build the connection config for a provider from the current environment."""
    if env is None:
        env = os.environ
    spec = PROVIDERS[provider]
    base_url = (env.get(f"{spec.env_prefix}_BASE_URL") or "").strip() or spec.base_url
    model = (env.get(f"{spec.env_prefix}_MODEL") or "").strip() or spec.model
    return ProviderConfig(
        provider=provider,
        api_key=(env.get(spec.key_env) or "").strip(),
        base_url=base_url.rstrip("/"),
        model=model,
    )


def has_usable_credential(config: ProviderConfig) -> bool:
    key = config.api_key
    return bool(key) and key != PLACEHOLDER_CREDENTIAL and len(key) >= MIN_CREDENTIAL_LENGTH
