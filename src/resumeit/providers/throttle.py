"""Sliding-window + concurrency admission control for strictly limited providers.

Example:
    throttle = RequestThrottle(window_ms=60_000, max_requests=8, max_concurrent=1)

    async with throttle.slot():
        content = await client.complete(prompt)
"""

from __future__ import annotations

import asyncio
import logging
import math
import random
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import TypeVar

from resumeit.errors import ProviderCallError, RetriesExhaustedError
from resumeit.models.provider import ProviderId

logger = logging.getLogger(__name__)

T = TypeVar("T")

POLL_DELAY_MS = 50
CONCURRENCY_POLL_DELAY_MS = 75
MAX_JITTER_MS = 250


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


class RequestThrottle:
    """Admits a call once both the window budget and the concurrency budget allow it.

    Callers poll with short sleeps rather than queueing on a primitive, so the
    state stays two plain fields that tests can inspect.
    """

    def __init__(
        self,
        window_ms: int = 60_000,
        max_requests: int = 8,
        max_concurrent: int = 1,
        *,
        clock: Callable[[], float] = _monotonic_ms,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.window_ms = window_ms
        self.max_requests = max_requests
        self.max_concurrent = max_concurrent
        self.active_requests = 0
        self.timestamps: list[float] = []
        self._clock = clock
        self._sleep = sleep

    @property
    def enabled(self) -> bool:
        return self.max_requests > 0

    def _prune(self, now: float) -> None:
        self.timestamps = [ts for ts in self.timestamps if now - ts < self.window_ms]

    async def acquire(self) -> None:
        if not self.enabled:
            return

        while True:
            now = self._clock()
            self._prune(now)

            within_window = len(self.timestamps) < self.max_requests
            within_concurrency = self.active_requests < self.max_concurrent
            if within_window and within_concurrency:
                self.timestamps.append(now)
                self.active_requests += 1
                return

            oldest = self.timestamps[0] if self.timestamps else now
            wait_for_window = (
                POLL_DELAY_MS if within_window
                else max(POLL_DELAY_MS, self.window_ms - (now - oldest))
            )
            wait_for_concurrency = POLL_DELAY_MS if within_concurrency else CONCURRENCY_POLL_DELAY_MS
            await self._sleep(max(wait_for_window, wait_for_concurrency) / 1000)

    def release(self) -> None:
        if self.active_requests > 0:
            self.active_requests -= 1

    @asynccontextmanager
    async def slot(self) -> AsyncIterator[None]:
        await self.acquire()
        try:
            yield
        finally:
            if self.enabled:
                self.release()


def compute_retry_delay(
    attempt: int,
    retry_after: str | None = None,
    *,
    base_delay_ms: int = 3_000,
) -> float:
    """Milliseconds to wait before retry number ``attempt + 1``.

    A positive Retry-After header (seconds) wins but never undercuts the base
    delay; otherwise exponential backoff from the base with up to 250ms jitter.
    """
    if retry_after:
        try:
            seconds = float(retry_after)
        except ValueError:
            seconds = 0.0
        if math.isfinite(seconds) and seconds > 0:
            return max(seconds * 1000, base_delay_ms)
    backoff = base_delay_ms * 2 ** max(0, attempt - 1)
    return backoff + random.randint(0, MAX_JITTER_MS - 1)


async def call_with_rate_limit_retry(
    throttle: RequestThrottle,
    call: Callable[[], Awaitable[T]],
    *,
    provider: ProviderId,
    max_retries: int = 3,
    base_delay_ms: int = 3_000,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run ``call`` inside a throttle slot, backing off on upstream 429s.

    Any other error propagates immediately. The slot is released before
    sleeping so a backing-off caller does not hold concurrency.
    """
    for attempt in range(1, max_retries + 1):
        logger.info("Calling %s (attempt %d/%d)", provider.value, attempt, max_retries)
        async with throttle.slot():
            try:
                return await call()
            except ProviderCallError as exc:
                if exc.status != 429:
                    raise
                if attempt == max_retries:
                    raise RetriesExhaustedError(
                        provider,
                        attempt,
                        exc,
                        message=(
                            f"Rate limit exceeded for {provider.value}: unable to generate tailoring "
                            f"after {attempt} attempts due to upstream rate limiting (retries exhausted). "
                            "Please wait 30 seconds and try again."
                        ),
                    ) from exc
                delay_ms = compute_retry_delay(attempt, exc.retry_after, base_delay_ms=base_delay_ms)
        logger.warning(
            "%s rate limit hit (attempt %d). Retrying in %dms...", provider.value, attempt, delay_ms
        )
        await sleep(delay_ms / 1000)
    raise RetriesExhaustedError(provider, max_retries, None)
