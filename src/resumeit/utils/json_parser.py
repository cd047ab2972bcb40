"""Extract and validate the tailoring JSON embedded in model output."""

from __future__ import annotations

import json
import logging
import re

from pydantic import ValidationError

from resumeit.errors import ExtractionError, ExtractionStage
from resumeit.models.tailor import TailorResponse

logger = logging.getLogger(__name__)

_FENCE_JSON = re.compile(r"```json\s*")
_FENCE = re.compile(r"```\s*")

EMPTY_MESSAGE = "AI model returned empty response. Please try again."
NO_JSON_MESSAGE = (
    "AI model did not return JSON. It may be busy or the model needs to warm up. "
    "Please wait 30 seconds and try again."
)
INCOMPLETE_MESSAGE = "AI model returned incomplete JSON. Please try again."
SCHEMA_MESSAGE = "AI model response missing required fields. Please try again."


def _strip_code_fences(text: str) -> str:
    """Remove every markdown fence marker (```json and bare ```)."""
    return _FENCE.sub("", _FENCE_JSON.sub("", text))


def extract_json_text(content: str | None) -> str:
    """Return the outermost ``{...}`` span of a model response.

    Raises ExtractionError when the response is empty, has no braces, or
    the brace counts of the span do not match.
    """
    if not content or not content.strip():
        raise ExtractionError(ExtractionStage.EMPTY, EMPTY_MESSAGE)

    text = _strip_code_fences(content)
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        logger.error("No JSON braces in model output: %s", content[:500])
        raise ExtractionError(ExtractionStage.NO_JSON, NO_JSON_MESSAGE)

    candidate = text[start : end + 1]
    opened = candidate.count("{")
    closed = candidate.count("}")
    if opened != closed:
        logger.error("Mismatched braces: %d open, %d close", opened, closed)
        raise ExtractionError(ExtractionStage.INCOMPLETE_JSON, INCOMPLETE_MESSAGE)

    logger.debug("Extracted JSON length: %d", len(candidate))
    return candidate


def extract_and_validate(content: str | None) -> TailorResponse:
    """Parse model output into a validated TailorResponse."""
    candidate = extract_json_text(content)
    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as e:
        logger.error("JSON parse error: %s; preview: %s", e, candidate[:500])
        raise ExtractionError(
            ExtractionStage.INVALID_JSON,
            f"AI model returned invalid JSON: {e}. Please try again.",
        ) from e

    try:
        return TailorResponse.model_validate(data)
    except ValidationError as e:
        logger.error("Schema validation failed: %s", e.errors(include_url=False))
        raise ExtractionError(ExtractionStage.SCHEMA_INVALID, SCHEMA_MESSAGE) from e
