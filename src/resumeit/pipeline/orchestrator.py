"""Provider orchestrator: walk the fallback chain until one provider yields a valid result."""

from __future__ import annotations

import asyncio
import logging
import os
import time
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field

from resumeit.clients.base import ProviderClient
from resumeit.clients.factory import create_client
from resumeit.config import AppConfig
from resumeit.errors import (
    ConfigurationError,
    LLMProviderError,
    ProviderErrorKind,
    classify_error,
)
from resumeit.logging.models import GenerationLog
from resumeit.logging.usage_store import UsageStore
from resumeit.models.provider import (
    AttemptStatus,
    ProviderAttemptOutcome,
    ProviderConfig,
    ProviderId,
)
from resumeit.models.tailor import TailorResponse
from resumeit.prompts import build_tailor_prompt
from resumeit.providers.chain import build_chain
from resumeit.providers.registry import has_usable_credential, key_env_var, resolve_config
from resumeit.providers.throttle import RequestThrottle
from resumeit.providers.usage import UsageTracker
from resumeit.utils.json_parser import extract_and_validate

logger = logging.getLogger(__name__)

ClientFactory = Callable[[ProviderConfig], ProviderClient]

_SKIP_STATUS = {
    ProviderErrorKind.COOLDOWN: AttemptStatus.SKIPPED_COOLDOWN,
    ProviderErrorKind.QUOTA_EXCEEDED: AttemptStatus.SKIPPED_QUOTA,
}


@dataclass
class TailorResult:
    """Validated response plus which provider produced it."""

    response: TailorResponse
    provider: ProviderId
    model: str
    duration_ms: int = 0
    outcomes: list[ProviderAttemptOutcome] = field(default_factory=list)

    @property
    def attempted_providers(self) -> list[str]:
        return [o.provider.value for o in self.outcomes if not o.status.skipped]

    @property
    def skipped_providers(self) -> list[str]:
        return [o.provider.value for o in self.outcomes if o.status.skipped]


class TailorOrchestrator:
    """Owns the process-wide provider state and runs one generation per call.

    Construct once at startup and share it; the usage tracker and throttle
    live on the instance.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        env: Mapping[str, str] | None = None,
        usage: UsageTracker | None = None,
        throttle: RequestThrottle | None = None,
        client_factory: ClientFactory | None = None,
        store: UsageStore | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.config = config or AppConfig()
        self._env = env
        self.usage = usage or UsageTracker(self.config.quota.daily_limits)
        self.throttle = throttle or RequestThrottle(
            window_ms=self.config.throttle.window_ms,
            max_requests=self.config.throttle.max_requests,
            max_concurrent=self.config.throttle.max_concurrent,
            sleep=sleep,
        )
        self._sleep = sleep
        self._client_factory = client_factory or self._default_client
        if store is None and self.config.store.enabled:
            store = UsageStore(self.config.store.resolved_db_path)
        self.store = store

    def _default_client(self, provider_config: ProviderConfig) -> ProviderClient:
        return create_client(provider_config, self.config, throttle=self.throttle, sleep=self._sleep)

    @property
    def env(self) -> Mapping[str, str]:
        # Read lazily so credential changes are picked up on the next request
        return os.environ if self._env is None else self._env

    def chain(self) -> list[ProviderId]:
        return build_chain(self.config.chain)

    async def generate_tailored(self, job_description: str, resume_text: str) -> TailorResponse:
        result = await self.generate_tailored_with_meta(job_description, resume_text)
        return result.response

    async def generate_tailored_with_meta(self, job_description: str, resume_text: str) -> TailorResult:
        """Try each provider in chain order and return the first validated result.

        Raises ConfigurationError when the chain is empty, otherwise the last
        provider error (or ALL_PROVIDERS_FAILED when every provider was skipped).
        """
        start = time.monotonic()
        self.usage.roll_window()

        chain = self.chain()
        if not chain:
            raise ConfigurationError(
                "No LLM providers configured. Set LLM_PROVIDER_CHAIN or LLM_PRIMARY_PROVIDER."
            )
        logger.info("Provider chain: %s", ", ".join(p.value for p in chain))

        prompt = build_tailor_prompt(
            job_description, resume_text, char_limit=self.config.llm.prompt_char_limit
        )
        outcomes: list[ProviderAttemptOutcome] = []
        last_error: LLMProviderError | None = None

        for provider in chain:
            provider_config = resolve_config(provider, self.env)

            if not has_usable_credential(provider_config):
                reason = f"Invalid or missing {key_env_var(provider)}"
                logger.warning("Skipping %s: %s", provider.value, reason)
                outcomes.append(ProviderAttemptOutcome(provider, AttemptStatus.SKIPPED_UNCONFIGURED, reason))
                continue

            skip = self.usage.check(provider)
            if skip is not None:
                kind, reason = skip
                logger.warning("Skipping %s: %s", provider.value, reason)
                outcomes.append(ProviderAttemptOutcome(provider, _SKIP_STATUS[kind], reason))
                continue

            attempt_start = time.monotonic()
            try:
                client = self._client_factory(provider_config)
                content = await client.complete(prompt)
                logger.debug("%s response length: %d", provider.value, len(content or ""))
                response = extract_and_validate(content)
            except Exception as e:
                error = classify_error(e, provider)
                last_error = error
                if error.rate_limited:
                    self.usage.record_cooldown(provider, self.config.quota.cooldown_ms)
                status = AttemptStatus.FAILED_RETRYABLE if error.retryable else AttemptStatus.FAILED_TERMINAL
                outcomes.append(ProviderAttemptOutcome(provider, status, str(error)))
                logger.error(
                    "%s failed (%s): %s", provider.value, error.kind.value, error, exc_info=True
                )
                continue

            self.usage.record_success(provider)
            outcomes.append(ProviderAttemptOutcome(provider, AttemptStatus.SUCCEEDED))
            result = TailorResult(
                response=response,
                provider=provider,
                model=provider_config.model,
                duration_ms=int((time.monotonic() - start) * 1000),
                outcomes=outcomes,
            )
            logger.info(
                "%s succeeded in %dms (match_score=%s)",
                provider.value,
                int((time.monotonic() - attempt_start) * 1000),
                response.match_score,
            )
            self._save_log(result=result)
            return result

        if last_error is None:
            # Statuses only; per-provider reasons stay on .attempts
            summary = ", ".join(f"{o.provider.value}: {o.status.value}" for o in outcomes)
            last_error = LLMProviderError(
                ProviderErrorKind.ALL_PROVIDERS_FAILED,
                f"All AI providers failed or were skipped ({summary}). Please try again later.",
            )
        last_error.attempts = outcomes
        self._save_log(
            error=last_error,
            outcomes=outcomes,
            duration_ms=int((time.monotonic() - start) * 1000),
        )
        raise last_error

    def _save_log(
        self,
        *,
        result: TailorResult | None = None,
        error: LLMProviderError | None = None,
        outcomes: list[ProviderAttemptOutcome] | None = None,
        duration_ms: int = 0,
    ) -> None:
        if self.store is None:
            return
        if result is not None:
            log = GenerationLog(
                provider=result.provider.value,
                model=result.model,
                duration_ms=result.duration_ms,
                attempted_providers=result.attempted_providers,
                skipped_providers=result.skipped_providers,
                match_score=result.response.match_score,
            )
        else:
            outcomes = outcomes or []
            log = GenerationLog(
                success=False,
                duration_ms=duration_ms,
                attempted_providers=[o.provider.value for o in outcomes if not o.status.skipped],
                skipped_providers=[o.provider.value for o in outcomes if o.status.skipped],
                error_kind=error.kind.value if error else None,
                error_message=str(error) if error else None,
            )
        try:
            self.store.save_log(log)
        except Exception:
            logger.error("Failed to save generation log", exc_info=True)
