"""Tests for per-attempt timeouts and transient retries."""

from __future__ import annotations

import asyncio

import pytest

from resumeit.clients.retry import call_with_retries, call_with_timeout
from resumeit.errors import TRANSPORT_TIMEOUT, ProviderCallError, RetriesExhaustedError
from resumeit.models.provider import ProviderId


class Flaky:
    """Fails with the queued errors, then returns ``result``."""

    def __init__(self, errors, result="ok"):
        self.errors = list(errors)
        self.result = result
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.result


async def _no_sleep(seconds: float) -> None:
    return None


class TestCallWithTimeout:
    async def test_returns_value(self):
        async def fast():
            return 42

        assert await call_with_timeout(fast, provider=ProviderId.GROQ, timeout_s=1) == 42

    async def test_timeout_raises_provider_error(self):
        async def slow():
            await asyncio.sleep(5)

        with pytest.raises(ProviderCallError) as exc_info:
            await call_with_timeout(slow, provider=ProviderId.GROQ, timeout_s=0.01)
        assert exc_info.value.code == TRANSPORT_TIMEOUT
        assert str(exc_info.value) == "groq API timeout"


class TestCallWithRetries:
    async def test_transient_then_success(self):
        call = Flaky([ProviderCallError(ProviderId.GROQ, "bad gateway", status=502)])
        result = await call_with_retries(call, provider=ProviderId.GROQ, timeout_s=1, sleep=_no_sleep)
        assert result == "ok"
        assert call.calls == 2

    async def test_non_transient_raised_immediately(self):
        call = Flaky([ProviderCallError(ProviderId.GROQ, "bad request", status=400)])
        with pytest.raises(ProviderCallError) as exc_info:
            await call_with_retries(call, provider=ProviderId.GROQ, timeout_s=1, sleep=_no_sleep)
        assert exc_info.value.status == 400
        assert call.calls == 1

    async def test_exhaustion_names_provider_and_attempts(self):
        errors = [ProviderCallError(ProviderId.TOGETHER, "down", status=503) for _ in range(3)]
        call = Flaky(errors)
        with pytest.raises(RetriesExhaustedError) as exc_info:
            await call_with_retries(call, provider=ProviderId.TOGETHER, timeout_s=1, sleep=_no_sleep)

        error = exc_info.value
        assert call.calls == 3
        assert error.provider == ProviderId.TOGETHER
        assert error.attempt_count == 3
        assert error.last_error is not None
        assert "together" in str(error)
        assert "retries exhausted" in str(error)

    async def test_single_attempt_raises_original(self):
        call = Flaky([ProviderCallError(ProviderId.GROQ, "down", status=500)])
        with pytest.raises(ProviderCallError) as exc_info:
            await call_with_retries(
                call, provider=ProviderId.GROQ, timeout_s=1, max_attempts=1, sleep=_no_sleep
            )
        assert not isinstance(exc_info.value, RetriesExhaustedError)
        assert exc_info.value.status == 500

    async def test_timeouts_are_retried(self):
        calls = 0

        async def hang():
            nonlocal calls
            calls += 1
            await asyncio.sleep(5)

        with pytest.raises(RetriesExhaustedError):
            await call_with_retries(hang, provider=ProviderId.GROQ, timeout_s=0.01, sleep=_no_sleep)
        assert calls == 3
