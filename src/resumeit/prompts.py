"""Prompt template for resume tailoring."""

from __future__ import annotations

import re

DEFAULT_CHAR_LIMIT = 3500

TAILOR_PROMPT = """\
You are an expert ATS-optimized resume consultant. Analyze the job and resume, then respond with ONLY a valid JSON object. Do not include any explanatory text before or after the JSON.

JOB DESCRIPTION:
{job_description}

CURRENT RESUME:
{user_resume}

CRITICAL: Your response must be ONLY valid JSON, starting with { and ending with }. No additional text.

For "experience_bullets", provide 5-8 polished, ready-to-use resume bullet points that:
- Start with strong action verbs (Led, Developed, Implemented, Achieved, etc.)
- Include specific metrics and quantified results where possible
- Are directly relevant to the job description requirements
- Follow the STAR method (Situation, Task, Action, Result)
- Can be copied directly into the resume without editing
- Are tailored to match the job's key requirements and keywords

Return this exact JSON structure:
{
  "tailored": {
    "professional_summary": "ATS-optimized 2-3 sentence summary highlighting relevant experience",
    "key_skills": ["skill1", "skill2", "skill3", "skill4", "skill5"],
    "experience_bullets": ["Ready-to-use bullet 1 with metrics", "Ready-to-use bullet 2 with impact", "Ready-to-use bullet 3 with achievement", "Ready-to-use bullet 4 with results", "Ready-to-use bullet 5 with quantified value"],
    "suggested_keywords": ["keyword1", "keyword2", "keyword3"],
    "dynamic_resume_points": [
      {
        "category": "Technical Achievements",
        "points": [
          {
            "text": "Specific achievement bullet point",
            "impact": "Quantified business impact",
            "keywords": ["keyword1", "keyword2"]
          }
        ]
      }
    ],
    "customization_suggestions": [
      {
        "section": "Experience",
        "suggestion": "Specific actionable suggestion",
        "priority": "high",
        "reasoning": "Why this matters"
      }
    ]
  },
  "resume": {
    "sections": [
      {
        "heading": "Section Name",
        "bullets": ["bullet 1", "bullet 2"],
        "body": "Section content"
      }
    ],
    "full_text": "Complete resume text"
  },
  "match_score": 75,
  "application_strategy": {
    "cover_letter_points": ["Point 1", "Point 2"],
    "interview_topics": ["Topic 1", "Topic 2"],
    "salary_research": {
      "range": "$80,000 - $120,000",
      "factors": ["Factor 1", "Factor 2"]
    },
    "networking_suggestions": ["Suggestion 1", "Suggestion 2"]
  },
  "projects": [
    {
      "title": "Project Name",
      "description": "Project description",
      "technologies": ["tech1", "tech2"],
      "relevance_score": 85
    }
  ],
  "competitive_analysis": {
    "strengths": ["Strength 1", "Strength 2"],
    "gaps": ["Gap 1", "Gap 2"],
    "improvement_areas": ["Area 1", "Area 2"]
  }
}

IMPORTANT: Respond ONLY with the JSON object. No explanatory text.
"""


# Template holds literal JSON braces
_PLACEHOLDER = re.compile(r"\{(job_description|user_resume)\}")


def build_tailor_prompt(
    job_description: str,
    resume_text: str,
    char_limit: int = DEFAULT_CHAR_LIMIT,
) -> str:
    """Fill the template, truncating both inputs to ``char_limit`` characters."""
    values = {
        "job_description": job_description[:char_limit],
        "user_resume": resume_text[:char_limit],
    }
    # One pass, so placeholder text inside either input stays literal
    return _PLACEHOLDER.sub(lambda m: values[m.group(1)], TAILOR_PROMPT)
