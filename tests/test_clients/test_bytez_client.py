"""Tests for the Bytez REST client."""

from __future__ import annotations

import json
from types import SimpleNamespace

import httpx
import pytest

from resumeit.clients.base import GenerationSettings
from resumeit.clients.bytez_client import BytezClient, output_text, unpack_run_result
from resumeit.errors import EmptyResponseError, ProviderCallError
from resumeit.models.provider import ProviderConfig, ProviderId


@pytest.fixture
def bytez_config() -> ProviderConfig:
    return ProviderConfig(
        provider=ProviderId.BYTEZ,
        api_key="bytez-test-1234567890",
        base_url="https://api.bytez.com/models/v2",
        model="openai/gpt-oss-20b",
    )


def _client(bytez_config, handler) -> BytezClient:
    return BytezClient(
        bytez_config,
        GenerationSettings(temperature=0.3, max_tokens=4000),
        timeout_s=1.0,
        transport=httpx.MockTransport(handler),
    )


class TestBytezClient:
    async def test_runs_model_with_single_user_message(self, bytez_config):
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"error": None, "output": {"role": "assistant", "content": "{}"}})

        result = await _client(bytez_config, handler).complete("prompt")

        assert result == "{}"
        assert seen["url"] == "https://api.bytez.com/models/v2/openai/gpt-oss-20b"
        assert seen["auth"] == "Key bytez-test-1234567890"
        assert seen["body"]["messages"] == [{"role": "user", "content": "prompt"}]
        assert seen["body"]["stream"] is False

    async def test_error_field_raises(self, bytez_config):
        client = _client(bytez_config, lambda r: httpx.Response(200, json={"error": "model not found", "output": None}))
        with pytest.raises(ProviderCallError, match="model not found"):
            await client.complete("prompt")

    async def test_empty_output_raises(self, bytez_config):
        client = _client(bytez_config, lambda r: httpx.Response(200, json={"error": None, "output": ""}))
        with pytest.raises(EmptyResponseError, match="Bytez returned an empty response"):
            await client.complete("prompt")

    async def test_http_error_status(self, bytez_config):
        client = _client(bytez_config, lambda r: httpx.Response(401, text="bad key"))
        with pytest.raises(ProviderCallError) as exc_info:
            await client.complete("prompt")
        assert exc_info.value.status == 401


class TestUnpackRunResult:
    def test_dict(self):
        assert unpack_run_result({"error": "e", "output": "o"}) == ("e", "o")

    def test_pair(self):
        assert unpack_run_result((None, "o")) == (None, "o")

    def test_object(self):
        assert unpack_run_result(SimpleNamespace(error=None, output="o")) == (None, "o")


class TestOutputText:
    def test_string(self):
        assert output_text("plain") == "plain"

    def test_chat_body(self):
        assert output_text({"choices": [{"message": {"content": "hi"}}]}) == "hi"

    def test_output_key(self):
        assert output_text({"output": "text"}) == "text"

    def test_list_of_messages(self):
        assert output_text([{"role": "assistant", "content": "first"}]) == "first"

    def test_unknown_shape_serialized(self):
        assert output_text({"score": 3}) == '{"score": 3}'
