"""OpenRouter REST client."""

from __future__ import annotations

import logging

import httpx

from resumeit.clients.base import GenerationSettings, chat_completion_text
from resumeit.clients.retry import call_with_timeout
from resumeit.errors import TRANSPORT_CONNECT, TRANSPORT_TIMEOUT, EmptyResponseError, ProviderCallError
from resumeit.models.provider import ProviderConfig

logger = logging.getLogger(__name__)


class OpenRouterClient:
    """POSTs chat-completions JSON with OpenRouter's attribution headers."""

    def __init__(
        self,
        config: ProviderConfig,
        settings: GenerationSettings | None = None,
        *,
        site_url: str = "https://resumeit.app",
        site_name: str = "ResumeIt",
        timeout_s: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self.settings = settings or GenerationSettings(max_tokens=2500)
        self.site_url = site_url
        self.site_name = site_name
        self.timeout_s = timeout_s
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "HTTP-Referer": self.site_url,
            "X-Title": self.site_name,
            "Content-Type": "application/json",
        }

    async def request(self, prompt: str) -> dict:
        """Return the raw response body."""
        body = {
            "model": self.config.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.settings.temperature,
            "max_tokens": self.settings.max_tokens,
        }
        async with httpx.AsyncClient(transport=self._transport, timeout=None) as client:
            try:
                resp = await client.post(
                    f"{self.config.base_url}/chat/completions",
                    json=body,
                    headers=self._headers(),
                )
                resp.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise ProviderCallError(
                    self.config.provider,
                    f"OpenRouter returned {e.response.status_code}: {e.response.text[:200]}",
                    status=e.response.status_code,
                    retry_after=e.response.headers.get("retry-after"),
                ) from e
            except httpx.TimeoutException as e:
                raise ProviderCallError(self.config.provider, str(e), code=TRANSPORT_TIMEOUT) from e
            except httpx.TransportError as e:
                raise ProviderCallError(self.config.provider, str(e), code=TRANSPORT_CONNECT) from e
            return resp.json()

    async def complete(self, prompt: str) -> str:
        logger.info("Calling openrouter model=%s", self.config.model)
        payload = await call_with_timeout(
            lambda: self.request(prompt), provider=self.config.provider, timeout_s=self.timeout_s
        )
        content = chat_completion_text(payload)
        if not content:
            raise EmptyResponseError(self.config.provider)
        return content
