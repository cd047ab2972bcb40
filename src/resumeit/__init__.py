"""ResumeIt multi-provider LLM tailoring core."""

__version__ = "0.1.0"
