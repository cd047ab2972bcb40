"""Data models for the tailoring core."""

from resumeit.models.provider import (
    AttemptStatus,
    ProviderAttemptOutcome,
    ProviderConfig,
    ProviderId,
    ProviderUsageStats,
)
from resumeit.models.tailor import (
    ApplicationStrategy,
    CompetitiveAnalysis,
    CustomizationSuggestion,
    DynamicResumePoints,
    Project,
    ResumePoint,
    ResumeSection,
    SalaryResearch,
    TailoredContent,
    TailoredResume,
    TailorResponse,
)

__all__ = [
    "ApplicationStrategy",
    "AttemptStatus",
    "CompetitiveAnalysis",
    "CustomizationSuggestion",
    "DynamicResumePoints",
    "Project",
    "ProviderAttemptOutcome",
    "ProviderConfig",
    "ProviderId",
    "ProviderUsageStats",
    "ResumePoint",
    "ResumeSection",
    "SalaryResearch",
    "TailoredContent",
    "TailoredResume",
    "TailorResponse",
]
