"""Error types raised by provider adapters and the orchestrator.

Adapters raise ``ProviderCallError`` (wire level: HTTP status or transport
code). The extractor raises ``ExtractionError``. The orchestrator converts
either into an ``LLMProviderError`` tagged with a ``ProviderErrorKind`` via
``classify_error``. The user-facing messages keep the substrings the HTTP
layer matches on ("API token", env var names, "Rate limit", "loading",
"busy", "internet", "connect").
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import TYPE_CHECKING

from resumeit.models.provider import ProviderId
from resumeit.providers.registry import key_env_var

if TYPE_CHECKING:
    from resumeit.models.provider import ProviderAttemptOutcome

# Transport codes carried by ProviderCallError when there is no HTTP status
TRANSPORT_CONNECT = "connect"
TRANSPORT_TIMEOUT = "timeout"


class ProviderErrorKind(str, Enum):
    UNCONFIGURED = "unconfigured"
    COOLDOWN = "cooldown"
    QUOTA_EXCEEDED = "quota_exceeded"
    UNAUTHORIZED = "unauthorized"
    PAYMENT_REQUIRED = "payment_required"
    RATE_LIMITED = "rate_limited"
    UNAVAILABLE = "unavailable"
    MALFORMED_OUTPUT = "malformed_output"
    SCHEMA_INVALID = "schema_invalid"
    NETWORK_ERROR = "network_error"
    TIMEOUT = "timeout"
    EMPTY_RESPONSE = "empty_response"
    RETRIES_EXHAUSTED = "retries_exhausted"
    ALL_PROVIDERS_FAILED = "all_providers_failed"
    UNKNOWN = "unknown"


_HTTP_STATUS: dict[ProviderErrorKind, int] = {
    ProviderErrorKind.UNCONFIGURED: 500,
    ProviderErrorKind.UNAUTHORIZED: 500,
    ProviderErrorKind.PAYMENT_REQUIRED: 500,
    ProviderErrorKind.SCHEMA_INVALID: 500,
    ProviderErrorKind.EMPTY_RESPONSE: 500,
    ProviderErrorKind.UNKNOWN: 500,
    ProviderErrorKind.MALFORMED_OUTPUT: 500,
    ProviderErrorKind.RATE_LIMITED: 429,
    ProviderErrorKind.COOLDOWN: 429,
    ProviderErrorKind.QUOTA_EXCEEDED: 429,
    ProviderErrorKind.UNAVAILABLE: 503,
    ProviderErrorKind.NETWORK_ERROR: 503,
    ProviderErrorKind.TIMEOUT: 503,
    ProviderErrorKind.RETRIES_EXHAUSTED: 503,
    ProviderErrorKind.ALL_PROVIDERS_FAILED: 500,
}

# Kinds whose message embeds upstream text; their status is read from the message
_FREE_TEXT_KINDS = frozenset({ProviderErrorKind.MALFORMED_OUTPUT, ProviderErrorKind.UNKNOWN})

_CREDENTIAL_MARKERS = ("HF_TOKEN", "GROQ_API_KEY", "BYTEZ_API_KEY", "API token")

# Kinds worth another try later (or on another provider); the rest need a human
RETRYABLE_KINDS = frozenset({
    ProviderErrorKind.RATE_LIMITED,
    ProviderErrorKind.UNAVAILABLE,
    ProviderErrorKind.NETWORK_ERROR,
    ProviderErrorKind.TIMEOUT,
    ProviderErrorKind.RETRIES_EXHAUSTED,
    ProviderErrorKind.MALFORMED_OUTPUT,
    ProviderErrorKind.EMPTY_RESPONSE,
})


def status_from_text(message: str) -> int:
    """HTTP status for an error message, matched on the substrings clients rely on."""
    if any(marker in message for marker in _CREDENTIAL_MARKERS):
        return 500
    if "Rate limit" in message:
        return 429
    if "loading" in message or "busy" in message:
        return 503
    if "internet" in message or "connect" in message:
        return 503
    return 500


class ProviderCallError(Exception):
    """Wire-level failure from a provider adapter."""

    def __init__(
        self,
        provider: ProviderId,
        message: str,
        *,
        status: int | None = None,
        code: str | None = None,
        retry_after: str | None = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.status = status
        self.code = code
        self.retry_after = retry_after

    @property
    def transient(self) -> bool:
        """Timeouts, connection failures and 5xx; never 4xx."""
        if self.code in (TRANSPORT_CONNECT, TRANSPORT_TIMEOUT):
            return True
        return self.status is not None and self.status >= 500


class EmptyResponseError(ProviderCallError):
    def __init__(self, provider: ProviderId, message: str = "AI model returned empty response. Please try again."):
        super().__init__(provider, message)


class ExtractionStage(str, Enum):
    EMPTY = "empty"
    NO_JSON = "no_json"
    INCOMPLETE_JSON = "incomplete_json"
    INVALID_JSON = "invalid_json"
    SCHEMA_INVALID = "schema_invalid"


class ExtractionError(ValueError):
    """Model output could not be turned into a valid TailorResponse."""

    def __init__(self, stage: ExtractionStage, message: str):
        super().__init__(message)
        self.stage = stage


class LLMProviderError(Exception):
    """Classified failure surfaced to callers of the orchestrator."""

    def __init__(
        self,
        kind: ProviderErrorKind,
        message: str,
        *,
        provider: ProviderId | None = None,
        status: int | None = None,
        detail: str | None = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.provider = provider
        self.status = status
        self.detail = detail if detail is not None else message
        self.attempts: list[ProviderAttemptOutcome] = []

    @property
    def message(self) -> str:
        return str(self)

    @property
    def retryable(self) -> bool:
        return self.kind in RETRYABLE_KINDS

    @property
    def rate_limited(self) -> bool:
        return self.kind == ProviderErrorKind.RATE_LIMITED

    @property
    def http_status(self) -> int:
        if self.kind in _FREE_TEXT_KINDS:
            return status_from_text(self.message)
        return _HTTP_STATUS.get(self.kind, 500)


class ConfigurationError(LLMProviderError):
    def __init__(self, message: str):
        super().__init__(ProviderErrorKind.UNCONFIGURED, message)


class RetriesExhaustedError(LLMProviderError):
    """A provider kept failing until its retry ceiling was reached."""

    def __init__(
        self,
        provider: ProviderId,
        attempts: int,
        last_error: BaseException | None,
        *,
        message: str | None = None,
    ):
        # The classified cause keeps the wording ("busy", "loading", "connect") the status hinges on
        self.cause = classify_error(last_error, provider) if last_error is not None else None
        last_message = self.cause.message if self.cause is not None else "unknown error"
        super().__init__(
            ProviderErrorKind.RETRIES_EXHAUSTED,
            message
            or f"{provider.value} API failed after {attempts} attempts (retries exhausted): {last_message}",
            provider=provider,
            status=getattr(last_error, "status", None),
            detail=str(last_error) if last_error is not None else last_message,
        )
        self.attempt_count = attempts
        self.last_error = last_error

    @property
    def rate_limited(self) -> bool:
        return self.status == 429

    @property
    def http_status(self) -> int:
        if self.rate_limited:
            return 429
        return self.cause.http_status if self.cause is not None else 500


_EXTRACTION_KINDS = {
    ExtractionStage.EMPTY: ProviderErrorKind.EMPTY_RESPONSE,
    ExtractionStage.NO_JSON: ProviderErrorKind.MALFORMED_OUTPUT,
    ExtractionStage.INCOMPLETE_JSON: ProviderErrorKind.MALFORMED_OUTPUT,
    ExtractionStage.INVALID_JSON: ProviderErrorKind.MALFORMED_OUTPUT,
    ExtractionStage.SCHEMA_INVALID: ProviderErrorKind.SCHEMA_INVALID,
}


def classify_error(exc: BaseException, provider: ProviderId) -> LLMProviderError:
    """Map any failure from one provider attempt to a tagged LLMProviderError."""
    if isinstance(exc, LLMProviderError):
        if exc.provider is None:
            exc.provider = provider
        return exc

    if isinstance(exc, ExtractionError):
        return LLMProviderError(_EXTRACTION_KINDS[exc.stage], str(exc), provider=provider)

    if isinstance(exc, EmptyResponseError):
        return LLMProviderError(ProviderErrorKind.EMPTY_RESPONSE, str(exc), provider=provider)

    status = getattr(exc, "status", None)
    code = getattr(exc, "code", None)
    detail = str(exc)
    name = provider.value

    if status == 401:
        return LLMProviderError(
            ProviderErrorKind.UNAUTHORIZED,
            f"Invalid {name} API token. Please check {key_env_var(provider)} in .env file.",
            provider=provider, status=status, detail=detail,
        )
    if status == 402:
        if provider == ProviderId.OPENROUTER:
            message = (
                "OpenRouter account has insufficient credits. Please add credits at "
                "https://openrouter.ai/credits or move another provider ahead in LLM_PROVIDER_CHAIN"
            )
        else:
            message = "Payment required. Please check your API account billing."
        return LLMProviderError(
            ProviderErrorKind.PAYMENT_REQUIRED, message,
            provider=provider, status=status, detail=detail,
        )
    if status == 429:
        if provider == ProviderId.GROQ:
            message = (
                "Groq rate limit exceeded (Rate limit). You have 30 requests per minute. "
                "Please wait a moment before trying again."
            )
        else:
            message = f"Rate limit exceeded for {name}. Please wait a moment before trying again."
        return LLMProviderError(
            ProviderErrorKind.RATE_LIMITED, message,
            provider=provider, status=status, detail=detail,
        )
    if status == 503 or "loading" in detail:
        return LLMProviderError(
            ProviderErrorKind.UNAVAILABLE,
            "AI model is loading. Please wait 30 seconds and try again.",
            provider=provider, status=status, detail=detail,
        )
    if code == TRANSPORT_TIMEOUT or isinstance(exc, asyncio.TimeoutError):
        return LLMProviderError(
            ProviderErrorKind.TIMEOUT,
            f"{name} API timeout. The model is busy; please try again.",
            provider=provider, status=status, detail=detail,
        )
    if code == TRANSPORT_CONNECT or isinstance(exc, ConnectionError):
        return LLMProviderError(
            ProviderErrorKind.NETWORK_ERROR,
            f"Cannot connect to {name} API. Please check your internet connection.",
            provider=provider, status=status, detail=detail,
        )
    return LLMProviderError(
        ProviderErrorKind.UNKNOWN,
        f"AI service error: {detail or 'Unknown error'}. Please try again.",
        provider=provider, status=status, detail=detail,
    )
