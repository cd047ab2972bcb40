"""Compute the ordered list of providers to try for one request."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from resumeit.config import ChainConfig
from resumeit.models.provider import ProviderId

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER = ProviderId.HUGGINGFACE

_ALIASES: dict[str, ProviderId] = {
    "hf": ProviderId.HUGGINGFACE,
    "hugging_face": ProviderId.HUGGINGFACE,
    "hugging-face": ProviderId.HUGGINGFACE,
    "google": ProviderId.GEMINI,
    "together_ai": ProviderId.TOGETHER,
    "together-ai": ProviderId.TOGETHER,
    "togetherai": ProviderId.TOGETHER,
    "claude": ProviderId.ANTHROPIC,
}


def normalize_provider(token: str | None) -> ProviderId | None:
    """Map a configured name to a provider.

    Blank tokens yield None; unknown names fall back to DEFAULT_PROVIDER.
    """
    name = (token or "").strip().lower()
    if not name:
        return None
    try:
        return ProviderId(name)
    except ValueError:
        pass
    if name in _ALIASES:
        return _ALIASES[name]
    logger.warning("Unknown LLM provider %r, using %s", token, DEFAULT_PROVIDER.value)
    return DEFAULT_PROVIDER


def dedupe(providers: Iterable[ProviderId | str | None]) -> list[ProviderId]:
    """Keep supported providers in first-seen order, dropping repeats."""
    seen: list[ProviderId] = []
    for item in providers:
        if isinstance(item, ProviderId):
            provider = item
        else:
            try:
                provider = ProviderId(item)
            except ValueError:
                continue
        if provider not in seen:
            seen.append(provider)
    return seen


def build_chain(config: ChainConfig) -> list[ProviderId]:
    """Explicit chain wins, then the priority ladder, then the built-in default."""
    if config.chain:
        chain = dedupe(normalize_provider(token) for token in config.chain)
        if chain:
            return chain
    if config.priority:
        chain = dedupe(normalize_provider(token) for token in config.priority)
        if chain:
            return chain
    return dedupe(normalize_provider(token) for token in config.default_chain)
