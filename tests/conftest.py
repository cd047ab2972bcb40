"""Shared test fixtures."""

from __future__ import annotations

import json

import pytest

from resumeit.config import AppConfig, ChainConfig, LLMConfig, QuotaConfig, ThrottleConfig
from resumeit.models.provider import ProviderConfig, ProviderId


@pytest.fixture
def sample_tailor_data() -> dict:
    return {
        "tailored": {
            "professional_summary": "Backend engineer with 5 years building high-traffic Python APIs.",
            "key_skills": ["Python", "FastAPI", "PostgreSQL", "Redis", "Kubernetes"],
            "experience_bullets": [
                "Led migration of a monolith to 12 services, cutting deploy time by 70%",
                "Optimized PostgreSQL queries, reducing p95 latency from 800ms to 120ms",
            ],
            "suggested_keywords": ["microservices", "observability", "CI/CD"],
            "dynamic_resume_points": [
                {
                    "category": "Technical Achievements",
                    "points": [
                        {
                            "text": "Built an event pipeline processing 2M messages/day",
                            "impact": "Enabled real-time analytics for 40 customers",
                            "keywords": ["Kafka", "streaming"],
                        }
                    ],
                }
            ],
            "customization_suggestions": [
                {
                    "section": "Experience",
                    "suggestion": "Move the Kubernetes work to the top",
                    "priority": "high",
                    "reasoning": "The posting lists Kubernetes as a core requirement",
                }
            ],
        },
        "resume": {
            "sections": [
                {"heading": "Summary", "body": "Backend engineer..."},
                {"heading": "Experience", "bullets": ["Led migration...", "Optimized queries..."]},
            ],
            "full_text": "Jane Doe\nBackend engineer...",
        },
        "match_score": 82,
        "application_strategy": {
            "cover_letter_points": ["Scaling experience", "On-call ownership"],
            "interview_topics": ["System design", "Incident response"],
            "salary_research": {"range": "$140,000 - $170,000", "factors": ["Seniority", "Location"]},
            "networking_suggestions": ["Reach out to the platform team lead"],
        },
        "projects": [
            {
                "title": "Rate limiter service",
                "description": "Token-bucket limiter shared by 30 services",
                "technologies": ["Go", "Redis"],
                "relevance_score": 90,
            }
        ],
        "competitive_analysis": {
            "strengths": ["Distributed systems"],
            "gaps": ["No Terraform experience"],
            "improvement_areas": ["Infrastructure as code"],
        },
    }


@pytest.fixture
def sample_tailor_json(sample_tailor_data) -> str:
    return json.dumps(sample_tailor_data)


@pytest.fixture
def sample_jd_text() -> str:
    return """Senior Backend Engineer

Responsibilities:
- Design and run Python services handling millions of requests per day
- Own PostgreSQL and Redis performance

Requirements:
- 5+ years of Python
- Kubernetes in production
"""


@pytest.fixture
def sample_resume_text() -> str:
    return """Jane Doe
jane@example.com

Experience:
- Acme (2020 - now) Backend Engineer
  - Migrated a monolith to microservices
  - Cut p95 latency from 800ms to 120ms
"""


@pytest.fixture
def fast_config() -> AppConfig:
    """Config with no real waiting: tiny timeouts and zero backoff."""
    return AppConfig(
        llm=LLMConfig(timeout_ms=50, max_attempts=3, retry_wait_ms=0),
        chain=ChainConfig(default_chain=("groq", "huggingface")),
        quota=QuotaConfig(daily_limits={"groq": 1000}, cooldown_ms=10_000),
        throttle=ThrottleConfig(retry_base_delay_ms=1, max_retries=3),
    )


@pytest.fixture
def groq_config() -> ProviderConfig:
    return ProviderConfig(
        provider=ProviderId.GROQ,
        api_key="gsk_test_key_1234567890",
        base_url="https://api.groq.com/openai/v1",
        model="llama-3.3-70b-versatile",
    )


@pytest.fixture
def full_env() -> dict[str, str]:
    """Environment with a usable credential for every provider."""
    return {
        "HF_TOKEN": "hf_test_token_1234567890",
        "OPENROUTER_API_KEY": "sk-or-test-1234567890",
        "GROQ_API_KEY": "gsk_test_key_1234567890",
        "BYTEZ_API_KEY": "bytez-test-1234567890",
        "GEMINI_API_KEY": "gemini-test-1234567890",
        "TOGETHER_API_KEY": "together-test-1234567890",
        "OPENAI_API_KEY": "sk-test-1234567890",
        "ANTHROPIC_API_KEY": "sk-ant-test-1234567890",
    }
