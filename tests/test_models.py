"""Tests for the response and provider data models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from resumeit.models import (
    AttemptStatus,
    ProviderAttemptOutcome,
    ProviderConfig,
    ProviderId,
    TailorResponse,
)


class TestTailorResponse:
    def test_valid(self, sample_tailor_data):
        response = TailorResponse.model_validate(sample_tailor_data)
        assert response.match_score == 82
        assert response.tailored.dynamic_resume_points[0].points[0].keywords == ["Kafka", "streaming"]
        assert response.application_strategy.salary_research.range == "$140,000 - $170,000"

    def test_salary_research_optional(self, sample_tailor_data):
        del sample_tailor_data["application_strategy"]["salary_research"]
        response = TailorResponse.model_validate(sample_tailor_data)
        assert response.application_strategy.salary_research is None

    @pytest.mark.parametrize("score", [-1, 100.5])
    def test_match_score_bounds(self, sample_tailor_data, score):
        sample_tailor_data["match_score"] = score
        with pytest.raises(ValidationError):
            TailorResponse.model_validate(sample_tailor_data)

    def test_invalid_priority(self, sample_tailor_data):
        sample_tailor_data["tailored"]["customization_suggestions"][0]["priority"] = "urgent"
        with pytest.raises(ValidationError):
            TailorResponse.model_validate(sample_tailor_data)

    def test_missing_section(self, sample_tailor_data):
        del sample_tailor_data["competitive_analysis"]
        with pytest.raises(ValidationError):
            TailorResponse.model_validate(sample_tailor_data)

    def test_frozen(self, sample_tailor_data):
        response = TailorResponse.model_validate(sample_tailor_data)
        with pytest.raises(ValidationError):
            response.match_score = 10


class TestProviderModels:
    def test_provider_id_str(self):
        assert str(ProviderId.GROQ) == "groq"
        assert ProviderId("together") is ProviderId.TOGETHER

    def test_config_repr_hides_key(self, groq_config):
        text = repr(groq_config)
        assert groq_config.api_key not in text
        assert "***" in text
        assert "llama-3.3-70b-versatile" in text

    def test_config_frozen(self, groq_config):
        with pytest.raises(AttributeError):
            groq_config.model = "other"

    def test_attempt_status_skipped(self):
        assert AttemptStatus.SKIPPED_COOLDOWN.skipped
        assert AttemptStatus.SKIPPED_QUOTA.skipped
        assert not AttemptStatus.FAILED_TERMINAL.skipped
        assert not AttemptStatus.SUCCEEDED.skipped

    def test_outcome_defaults(self):
        outcome = ProviderAttemptOutcome(ProviderId.GEMINI, AttemptStatus.SUCCEEDED)
        assert outcome.detail is None
