"""Google Gemini generateContent REST client."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from resumeit.clients.base import GenerationSettings
from resumeit.clients.retry import call_with_timeout
from resumeit.errors import TRANSPORT_CONNECT, TRANSPORT_TIMEOUT, EmptyResponseError, ProviderCallError
from resumeit.models.provider import ProviderConfig

logger = logging.getLogger(__name__)


def candidate_text(payload: Any) -> str:
    """Concatenate every text part of the first candidate."""
    if not isinstance(payload, dict):
        return ""
    candidates = payload.get("candidates") or []
    if not candidates or not isinstance(candidates[0], dict):
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(part["text"] for part in parts if isinstance(part, dict) and isinstance(part.get("text"), str))


class GeminiClient:
    def __init__(
        self,
        config: ProviderConfig,
        settings: GenerationSettings | None = None,
        *,
        timeout_s: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self.settings = settings or GenerationSettings()
        self.timeout_s = timeout_s
        self._transport = transport

    async def request(self, prompt: str) -> dict:
        body = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.settings.temperature,
                "maxOutputTokens": self.settings.max_tokens,
            },
        }
        url = f"{self.config.base_url}/models/{self.config.model}:generateContent"
        async with httpx.AsyncClient(transport=self._transport, timeout=None) as client:
            try:
                resp = await client.post(url, json=body, headers={"x-goog-api-key": self.config.api_key})
                resp.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise ProviderCallError(
                    self.config.provider,
                    f"Gemini returned {e.response.status_code}: {e.response.text[:200]}",
                    status=e.response.status_code,
                    retry_after=e.response.headers.get("retry-after"),
                ) from e
            except httpx.TimeoutException as e:
                raise ProviderCallError(self.config.provider, str(e), code=TRANSPORT_TIMEOUT) from e
            except httpx.TransportError as e:
                raise ProviderCallError(self.config.provider, str(e), code=TRANSPORT_CONNECT) from e
            return resp.json()

    async def complete(self, prompt: str) -> str:
        logger.info("Calling gemini model=%s", self.config.model)
        payload = await call_with_timeout(
            lambda: self.request(prompt), provider=self.config.provider, timeout_s=self.timeout_s
        )
        text = candidate_text(payload)
        if not text:
            raise EmptyResponseError(self.config.provider, "Gemini returned an empty response.")
        return text
