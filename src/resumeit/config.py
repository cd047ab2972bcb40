"""Application configuration loaded from config.yaml and the environment."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from resumeit.models.provider import ProviderId
from resumeit.providers.registry import PROVIDERS

PRIORITY_ENV_VARS = (
    "LLM_PRIMARY_PROVIDER",
    "LLM_SECONDARY_PROVIDER",
    "LLM_TERTIARY_PROVIDER",
    "LLM_QUATERNARY_PROVIDER",
)


@dataclass(frozen=True)
class LLMConfig:
    temperature: float = 0.3
    max_tokens: int = 4000
    timeout_ms: int = 30_000  # per attempt
    max_attempts: int = 3
    retry_wait_ms: int = 1_000  # backoff base: 1s, 2s, 4s ...
    prompt_char_limit: int = 3500

    def __post_init__(self):
        if not 0 <= self.temperature <= 2:
            raise ValueError(f"temperature must be between 0 and 2, got {self.temperature}")
        if self.max_tokens < 1:
            raise ValueError(f"max_tokens must be >= 1, got {self.max_tokens}")
        if self.timeout_ms < 1:
            raise ValueError(f"timeout_ms must be >= 1, got {self.timeout_ms}")
        if not 1 <= self.max_attempts <= 10:
            raise ValueError(f"max_attempts must be between 1 and 10, got {self.max_attempts}")
        if self.retry_wait_ms < 0:
            raise ValueError(f"retry_wait_ms must be >= 0, got {self.retry_wait_ms}")
        if self.prompt_char_limit < 1:
            raise ValueError(f"prompt_char_limit must be >= 1, got {self.prompt_char_limit}")


@dataclass(frozen=True)
class ChainConfig:
    chain: tuple[str, ...] = ()
    priority: tuple[str, ...] = ()
    default_chain: tuple[str, ...] = ("groq", "huggingface")

    def __post_init__(self):
        # YAML hands us lists
        object.__setattr__(self, "chain", tuple(self.chain))
        object.__setattr__(self, "priority", tuple(self.priority))
        object.__setattr__(self, "default_chain", tuple(self.default_chain))
        if len(self.priority) > len(PRIORITY_ENV_VARS):
            raise ValueError(
                f"priority accepts at most {len(PRIORITY_ENV_VARS)} stages, got {len(self.priority)}"
            )


@dataclass(frozen=True)
class QuotaConfig:
    daily_limits: dict[str, int] = field(default_factory=lambda: {"groq": 1000})
    cooldown_ms: int = 10_000

    def __post_init__(self):
        if self.cooldown_ms < 0:
            raise ValueError(f"cooldown_ms must be >= 0, got {self.cooldown_ms}")
        for name, limit in self.daily_limits.items():
            if limit < 1:
                raise ValueError(f"daily_limits[{name}] must be >= 1, got {limit}")


@dataclass(frozen=True)
class ThrottleConfig:
    window_ms: int = 60_000
    max_requests: int = 8
    max_concurrent: int = 1
    retry_base_delay_ms: int = 3_000
    max_retries: int = 3

    def __post_init__(self):
        if self.window_ms < 1:
            raise ValueError(f"window_ms must be >= 1, got {self.window_ms}")
        if self.max_concurrent < 1:
            raise ValueError(f"max_concurrent must be >= 1, got {self.max_concurrent}")
        if self.max_retries < 1:
            raise ValueError(f"max_retries must be >= 1, got {self.max_retries}")


@dataclass(frozen=True)
class SiteConfig:
    url: str = "https://resumeit.app"
    name: str = "ResumeIt"


@dataclass(frozen=True)
class StoreConfig:
    enabled: bool = False
    db_path: str = "~/.resumeit/usage.db"

    @property
    def resolved_db_path(self) -> Path:
        return Path(self.db_path).expanduser()


@dataclass(frozen=True)
class AppConfig:
    llm: LLMConfig = field(default_factory=LLMConfig)
    chain: ChainConfig = field(default_factory=ChainConfig)
    quota: QuotaConfig = field(default_factory=QuotaConfig)
    throttle: ThrottleConfig = field(default_factory=ThrottleConfig)
    site: SiteConfig = field(default_factory=SiteConfig)
    store: StoreConfig = field(default_factory=StoreConfig)


def parse_env_int(value: str | None, fallback: int) -> int:
    """Parse a positive integer, tolerating trailing comments like ``8  # per minute``."""
    token = re.split(r"[\s#]", (value or "").strip(), maxsplit=1)[0]
    try:
        parsed = int(token)
    except ValueError:
        return fallback
    return parsed if parsed > 0 else fallback


def _parse_env_float(value: str | None, fallback: float) -> float:
    token = re.split(r"[\s#]", (value or "").strip(), maxsplit=1)[0]
    try:
        return float(token)
    except ValueError:
        return fallback


def split_chain(value: str) -> list[str]:
    return [token.strip() for token in value.split(",") if token.strip()]


def _env_overrides(raw: dict, env: Mapping[str, str]) -> dict:
    """Overlay environment variables on the raw YAML sections."""
    llm = dict(raw.get("llm") or {})
    chain = dict(raw.get("chain") or {})
    quota = dict(raw.get("quota") or {})
    throttle = dict(raw.get("throttle") or {})
    site = dict(raw.get("site") or {})
    store = dict(raw.get("store") or {})

    llm_defaults = LLMConfig()
    if "LLM_TEMPERATURE" in env:
        llm["temperature"] = _parse_env_float(env["LLM_TEMPERATURE"], llm_defaults.temperature)
    for env_name, key in (
        ("LLM_MAX_TOKENS", "max_tokens"),
        ("LLM_TIMEOUT_MS", "timeout_ms"),
        ("LLM_MAX_ATTEMPTS", "max_attempts"),
        ("LLM_RETRY_WAIT_MS", "retry_wait_ms"),
        ("LLM_PROMPT_CHAR_LIMIT", "prompt_char_limit"),
    ):
        if env_name in env:
            llm[key] = parse_env_int(env[env_name], llm.get(key, getattr(llm_defaults, key)))

    explicit_chain = (env.get("LLM_PROVIDER_CHAIN") or "").strip()
    if explicit_chain:
        chain["chain"] = split_chain(explicit_chain)
    # LLM_PROVIDER is the legacy single-provider switch; it acts as the first stage
    stages = [env.get(name, "").strip() for name in PRIORITY_ENV_VARS]
    if not stages[0]:
        stages[0] = (env.get("LLM_PROVIDER") or "").strip()
    if any(stages):
        chain["priority"] = [stage for stage in stages if stage]

    limits = dict(quota.get("daily_limits") or QuotaConfig().daily_limits)
    for provider in ProviderId:
        env_name = f"{PROVIDERS[provider].env_prefix}_DAILY_LIMIT"
        if env_name in env:
            limits[provider.value] = parse_env_int(env[env_name], limits.get(provider.value, 1000))
    quota["daily_limits"] = limits
    if "LLM_RATE_LIMIT_COOLDOWN_MS" in env:
        quota["cooldown_ms"] = parse_env_int(
            env["LLM_RATE_LIMIT_COOLDOWN_MS"], quota.get("cooldown_ms", QuotaConfig.cooldown_ms)
        )

    throttle_defaults = ThrottleConfig()
    for env_name, key in (
        ("HF_RATE_LIMIT_WINDOW_MS", "window_ms"),
        ("HF_MAX_REQUESTS_PER_WINDOW", "max_requests"),
        ("HF_MAX_CONCURRENT_REQUESTS", "max_concurrent"),
        ("HF_RATE_LIMIT_RETRY_BASE_DELAY_MS", "retry_base_delay_ms"),
        ("HF_RATE_LIMIT_MAX_RETRIES", "max_retries"),
    ):
        if env_name in env:
            throttle[key] = parse_env_int(env[env_name], throttle.get(key, getattr(throttle_defaults, key)))

    if env.get("YOUR_SITE_URL"):
        site["url"] = env["YOUR_SITE_URL"]
    if env.get("YOUR_SITE_NAME"):
        site["name"] = env["YOUR_SITE_NAME"]

    if env.get("RESUMEIT_USAGE_DB"):
        store["db_path"] = env["RESUMEIT_USAGE_DB"]
        store["enabled"] = True

    return {
        "llm": llm,
        "chain": chain,
        "quota": quota,
        "throttle": throttle,
        "site": site,
        "store": store,
    }


def load_config(
    path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> AppConfig:
    """Load config from YAML file, then apply environment overrides."""
    if path is None:
        # Look for config.yaml relative to the project root
        candidates = [
            Path.cwd() / "config.yaml",
            Path(__file__).resolve().parent.parent.parent / "config.yaml",
        ]
        for c in candidates:
            if c.exists():
                path = c
                break

    raw: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            raw = yaml.safe_load(p.read_text()) or {}

    merged = _env_overrides(raw, os.environ if env is None else env)
    return AppConfig(
        llm=LLMConfig(**merged["llm"]),
        chain=ChainConfig(**merged["chain"]),
        quota=QuotaConfig(**merged["quota"]),
        throttle=ThrottleConfig(**merged["throttle"]),
        site=SiteConfig(**merged["site"]),
        store=StoreConfig(**merged["store"]),
    )
