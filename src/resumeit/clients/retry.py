"""Per-attempt timeout and transient-error retries for provider calls."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from resumeit.errors import TRANSPORT_TIMEOUT, ProviderCallError, RetriesExhaustedError
from resumeit.models.provider import ProviderId

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _is_transient(exc: BaseException) -> bool:
    return isinstance(exc, ProviderCallError) and exc.transient


async def call_with_timeout(
    call: Callable[[], Awaitable[T]],
    *,
    provider: ProviderId,
    timeout_s: float,
) -> T:
    """Race one call against a timer; the timer firing fails only this attempt."""
    try:
        return await asyncio.wait_for(call(), timeout=timeout_s)
    except asyncio.TimeoutError as e:
        raise ProviderCallError(
            provider, f"{provider.value} API timeout", code=TRANSPORT_TIMEOUT
        ) from e


async def call_with_retries(
    call: Callable[[], Awaitable[T]],
    *,
    provider: ProviderId,
    timeout_s: float,
    max_attempts: int = 3,
    wait_s: float = 1.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Retry transient failures with 2^n backoff (wait_s, 2*wait_s, ...).

    Non-transient errors (401, 402, 429, malformed requests) propagate on the
    first attempt. Running out of attempts raises RetriesExhaustedError.
    """

    def _log_retry(state: RetryCallState) -> None:
        exc = state.outcome.exception() if state.outcome else None
        logger.warning(
            "%s attempt %d/%d failed: %s. Retrying in %.1fs...",
            provider.value,
            state.attempt_number,
            max_attempts,
            exc,
            state.next_action.sleep if state.next_action else 0,
        )

    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=wait_s),
        retry=retry_if_exception(_is_transient),
        before_sleep=_log_retry,
        sleep=sleep,
    )
    try:
        return await retrying(call_with_timeout, call, provider=provider, timeout_s=timeout_s)
    except RetryError as e:
        last = e.last_attempt.exception()
        if max_attempts == 1 and last is not None:
            raise last from None
        raise RetriesExhaustedError(provider, max_attempts, last) from last
