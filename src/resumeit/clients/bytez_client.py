"""Bytez REST client: one-shot model run returning an ``{error, output}`` envelope."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from resumeit.clients.base import GenerationSettings, chat_completion_text
from resumeit.clients.retry import call_with_timeout
from resumeit.errors import TRANSPORT_CONNECT, TRANSPORT_TIMEOUT, EmptyResponseError, ProviderCallError
from resumeit.models.provider import ProviderConfig

logger = logging.getLogger(__name__)


def unpack_run_result(result: Any) -> tuple[Any, Any]:
    """Split a run result into (error, output).

    The API answers with ``{"error": ..., "output": ...}``; an ``(error, output)``
    pair or an object with those attributes is accepted too.
    """
    if isinstance(result, dict):
        return result.get("error"), result.get("output")
    if isinstance(result, tuple) and len(result) == 2:
        return result
    return getattr(result, "error", None), getattr(result, "output", None)


def output_text(output: Any) -> str:
    """Normalize a Bytez output to text.

    Handles a bare string, a chat-completions body, ``{"output": "..."}``
    and ``{"role": ..., "content": "..."}`` messages; anything else is
    serialized so the extractor can still look for JSON in it.
    """
    if isinstance(output, str):
        return output
    text = chat_completion_text(output)
    if text:
        return text
    if isinstance(output, dict):
        for key in ("output", "content"):
            if isinstance(output.get(key), str) and output[key]:
                return output[key]
    if isinstance(output, list) and output:
        return output_text(output[0])
    return json.dumps(output)


class BytezClient:
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

    async def run(self, prompt: str) -> Any:
        """POST the chat messages to the model and return the decoded envelope."""
        body = {
            "messages": [{"role": "user", "content": prompt}],
            "stream": False,
            "params": {
                "temperature": self.settings.temperature,
                "max_new_tokens": self.settings.max_tokens,
            },
        }
        headers = {"Authorization": f"Key {self.config.api_key}", "Content-Type": "application/json"}
        async with httpx.AsyncClient(transport=self._transport, timeout=None) as client:
            try:
                resp = await client.post(f"{self.config.base_url}/{self.config.model}", json=body, headers=headers)
                resp.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise ProviderCallError(
                    self.config.provider,
                    f"Bytez returned {e.response.status_code}: {e.response.text[:200]}",
                    status=e.response.status_code,
                    retry_after=e.response.headers.get("retry-after"),
                ) from e
            except httpx.TimeoutException as e:
                raise ProviderCallError(self.config.provider, str(e), code=TRANSPORT_TIMEOUT) from e
            except httpx.TransportError as e:
                raise ProviderCallError(self.config.provider, str(e), code=TRANSPORT_CONNECT) from e
            return resp.json()

    async def complete(self, prompt: str) -> str:
        logger.info("Calling bytez model=%s", self.config.model)
        result = await call_with_timeout(
            lambda: self.run(prompt), provider=self.config.provider, timeout_s=self.timeout_s
        )
        error, output = unpack_run_result(result)
        if error:
            raise ProviderCallError(
                self.config.provider,
                error if isinstance(error, str) else json.dumps(error),
            )
        if not output:
            raise EmptyResponseError(self.config.provider, "Bytez returned an empty response.")
        return output_text(output)
