"""Pydantic models for the validated tailoring output."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class ResumePoint(BaseModel):
    text: str
    impact: str
    keywords: list[str]


class DynamicResumePoints(BaseModel):
    category: str  # e.g. "Technical Achievements"
    points: list[ResumePoint]


class CustomizationSuggestion(BaseModel):
    section: str
    suggestion: str
    priority: Literal["high", "medium", "low"]
    reasoning: str


class TailoredContent(BaseModel):
    professional_summary: str
    key_skills: list[str]
    experience_bullets: list[str]
    suggested_keywords: list[str]
    dynamic_resume_points: list[DynamicResumePoints]
    customization_suggestions: list[CustomizationSuggestion]


class ResumeSection(BaseModel):
    heading: str
    bullets: list[str] | None = None
    body: str | None = None


class TailoredResume(BaseModel):
    sections: list[ResumeSection]
    full_text: str


class SalaryResearch(BaseModel):
    range: str
    factors: list[str]


class ApplicationStrategy(BaseModel):
    cover_letter_points: list[str]
    interview_topics: list[str]
    salary_research: SalaryResearch | None = None
    networking_suggestions: list[str]


class Project(BaseModel):
    title: str
    description: str
    technologies: list[str]
    relevance_score: float


class CompetitiveAnalysis(BaseModel):
    strengths: list[str]
    gaps: list[str]
    improvement_areas: list[str]


class TailorResponse(BaseModel):
    """Full structured result of one tailoring generation."""

    tailored: TailoredContent
    resume: TailoredResume
    match_score: float = Field(ge=0, le=100)
    application_strategy: ApplicationStrategy
    projects: list[Project]
    competitive_analysis: CompetitiveAnalysis

    model_config = {"frozen": True}
