"""Per-provider daily success counters and rate-limit cooldowns.

State is keyed by the current UTC date; the first check on a new day drops
every counter and cooldown. The tracker has no locks: a check and the later
mutation for the same provider can interleave across await points, so two
concurrent requests may both pass the check before either records a cooldown.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import datetime, timedelta, timezone

from resumeit.errors import ProviderErrorKind
from resumeit.models.provider import ProviderId, ProviderUsageStats

logger = logging.getLogger(__name__)

MIN_COOLDOWN_MS = 1_000


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UsageTracker:
    """Process-wide usage bookkeeping, owned by one orchestrator."""

    def __init__(
        self,
        daily_limits: Mapping[str, int] | None = None,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.daily_limits = {str(k): v for k, v in (daily_limits or {}).items()}
        self._clock = clock
        self._window_key = self._current_key()
        self._stats: dict[ProviderId, ProviderUsageStats] = {}

    def _current_key(self) -> str:
        return self._clock().astimezone(timezone.utc).date().isoformat()

    @property
    def window_key(self) -> str:
        return self._window_key

    def roll_window(self) -> bool:
        """Discard all stats when the UTC date changed. Returns True on rollover."""
        key = self._current_key()
        if key == self._window_key:
            return False
        logger.info("Usage window rolled over %s -> %s; resetting provider stats", self._window_key, key)
        self._window_key = key
        self._stats.clear()
        return True

    def stats(self, provider: ProviderId) -> ProviderUsageStats:
        if provider not in self._stats:
            self._stats[provider] = ProviderUsageStats()
        return self._stats[provider]

    def check(self, provider: ProviderId) -> tuple[ProviderErrorKind, str] | None:
        """Return (kind, reason) when the provider must be skipped right now."""
        self.roll_window()
        stats = self._stats.get(provider)
        if stats is None:
            return None
        now = self._clock()
        if stats.cooldown_until is not None and now < stats.cooldown_until:
            remaining = max(1, int((stats.cooldown_until - now).total_seconds() + 0.999))
            return (
                ProviderErrorKind.COOLDOWN,
                f"{provider.value} is cooling down after a rate limit ({remaining}s remaining)",
            )
        limit = self.daily_limits.get(provider.value)
        if limit is not None and stats.success_count >= limit:
            return (
                ProviderErrorKind.QUOTA_EXCEEDED,
                f"{provider.value} daily quota reached ({stats.success_count}/{limit})",
            )
        return None

    def is_skippable(self, provider: ProviderId) -> str | None:
        result = self.check(provider)
        return result[1] if result else None

    def record_success(self, provider: ProviderId) -> None:
        self.roll_window()
        self.stats(provider).success_count += 1

    def record_cooldown(self, provider: ProviderId, duration_ms: int) -> datetime:
        self.roll_window()
        until = self._clock() + timedelta(milliseconds=max(duration_ms, MIN_COOLDOWN_MS))
        self.stats(provider).cooldown_until = until
        logger.warning("%s cooling down until %s", provider.value, until.isoformat())
        return until

    def snapshot(self) -> dict[str, dict]:
        """Current stats as plain dicts (for the CLI and health output)."""
        return {
            provider.value: {
                "success_count": stats.success_count,
                "cooldown_until": stats.cooldown_until.isoformat() if stats.cooldown_until else None,
                "daily_limit": self.daily_limits.get(provider.value),
            }
            for provider, stats in self._stats.items()
        }
