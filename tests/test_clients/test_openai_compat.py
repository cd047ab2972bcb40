"""Tests for the OpenAI-compatible chat-completions client."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import openai
import pytest

from resumeit.clients.base import GenerationSettings
from resumeit.clients.openai_compat import OpenAICompatibleClient
from resumeit.errors import (
    TRANSPORT_CONNECT,
    EmptyResponseError,
    ProviderCallError,
    RetriesExhaustedError,
)

_REQUEST = httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions")


def _make_completion(text: str | None) -> MagicMock:
    """Build a mock ChatCompletion-like object."""
    completion = MagicMock()
    completion.choices = [MagicMock(message=MagicMock(content=text))]
    completion.usage.prompt_tokens = 100
    completion.usage.completion_tokens = 50
    return completion


def _status_error(cls, status: int, headers: dict | None = None):
    response = httpx.Response(status, request=_REQUEST, headers=headers or {})
    return cls(f"HTTP {status}", response=response, body=None)


def _client(groq_config, mock_cls, create, **kwargs) -> OpenAICompatibleClient:
    mock_client = MagicMock()
    mock_client.chat.completions.create = create
    mock_client.close = AsyncMock()
    mock_cls.return_value = mock_client
    options = {"timeout_s": 1.0, "max_attempts": 3, "retry_wait_s": 0}
    options.update(kwargs)
    return OpenAICompatibleClient(groq_config, GenerationSettings(temperature=0.3, max_tokens=4000), **options)


class TestOpenAICompatibleInit:
    def test_sdk_retries_disabled(self, groq_config):
        with patch("resumeit.clients.openai_compat.AsyncOpenAI") as mock_cls:
            OpenAICompatibleClient(groq_config)
            mock_cls.assert_called_once_with(
                api_key=groq_config.api_key,
                base_url=groq_config.base_url,
                max_retries=0,
            )


class TestOpenAICompatibleComplete:
    async def test_returns_message_content(self, groq_config):
        with patch("resumeit.clients.openai_compat.AsyncOpenAI") as mock_cls:
            create = AsyncMock(return_value=_make_completion('{"ok": true}'))
            client = _client(groq_config, mock_cls, create)
            result = await client.complete("tailor this")

        assert result == '{"ok": true}'
        kwargs = create.await_args.kwargs
        assert kwargs["model"] == "llama-3.3-70b-versatile"
        assert kwargs["messages"] == [{"role": "user", "content": "tailor this"}]
        assert kwargs["temperature"] == 0.3
        assert kwargs["max_tokens"] == 4000
        mock_cls.return_value.close.assert_awaited_once()

    async def test_empty_content_raises(self, groq_config):
        with patch("resumeit.clients.openai_compat.AsyncOpenAI") as mock_cls:
            create = AsyncMock(return_value=_make_completion(None))
            client = _client(groq_config, mock_cls, create)
            with pytest.raises(EmptyResponseError):
                await client.complete("prompt")
        assert create.await_count == 1

    async def test_server_error_retried_then_succeeds(self, groq_config):
        with patch("resumeit.clients.openai_compat.AsyncOpenAI") as mock_cls:
            create = AsyncMock(
                side_effect=[
                    _status_error(openai.InternalServerError, 500),
                    _make_completion("done"),
                ]
            )
            client = _client(groq_config, mock_cls, create)
            result = await client.complete("prompt")
        assert result == "done"
        assert create.await_count == 2

    async def test_rate_limit_not_retried(self, groq_config):
        with patch("resumeit.clients.openai_compat.AsyncOpenAI") as mock_cls:
            create = AsyncMock(side_effect=_status_error(openai.RateLimitError, 429, {"retry-after": "7"}))
            client = _client(groq_config, mock_cls, create)
            with pytest.raises(ProviderCallError) as exc_info:
                await client.complete("prompt")
        assert exc_info.value.status == 429
        mock_cls.return_value.close.assert_awaited_once()
        assert exc_info.value.retry_after == "7"
        assert create.await_count == 1

    async def test_unauthorized_not_retried(self, groq_config):
        with patch("resumeit.clients.openai_compat.AsyncOpenAI") as mock_cls:
            create = AsyncMock(side_effect=_status_error(openai.AuthenticationError, 401))
            client = _client(groq_config, mock_cls, create)
            with pytest.raises(ProviderCallError) as exc_info:
                await client.complete("prompt")
        assert exc_info.value.status == 401
        assert create.await_count == 1

    async def test_timeout_every_attempt_exhausts_retries(self, groq_config):
        async def hang(**kwargs):
            await asyncio.sleep(10)

        with patch("resumeit.clients.openai_compat.AsyncOpenAI") as mock_cls:
            create = AsyncMock(side_effect=hang)
            client = _client(groq_config, mock_cls, create, timeout_s=0.01)
            with pytest.raises(RetriesExhaustedError) as exc_info:
                await client.complete("prompt")
        assert create.await_count == 3
        assert "groq" in str(exc_info.value)
        assert "timeout" in str(exc_info.value)

    async def test_connection_error_translated(self, groq_config):
        with patch("resumeit.clients.openai_compat.AsyncOpenAI") as mock_cls:
            create = AsyncMock(side_effect=openai.APIConnectionError(request=_REQUEST))
            client = _client(groq_config, mock_cls, create, max_attempts=1)
            with pytest.raises(ProviderCallError) as exc_info:
                await client.complete("prompt")
        assert exc_info.value.code == TRANSPORT_CONNECT

    async def test_backoff_doubles(self, groq_config):
        sleeps: list[float] = []

        async def fake_sleep(seconds):
            sleeps.append(seconds)

        with patch("resumeit.clients.openai_compat.AsyncOpenAI") as mock_cls:
            create = AsyncMock(side_effect=_status_error(openai.InternalServerError, 502))
            client = _client(groq_config, mock_cls, create, retry_wait_s=1.0, sleep=fake_sleep)
            with pytest.raises(RetriesExhaustedError):
                await client.complete("prompt")
        assert sleeps == [1.0, 2.0]
