"""JSON parsing for LLM responses.

Models are asked for strict JSON but regularly wrap it in markdown fences or
leave trailing commas. Anything else is a parse error.
"""

import json
import re
from typing import Any, Dict

import structlog

from interview_engine.core.exceptions import LLMResponseParseError

log = structlog.get_logger(__name__)


def strip_markdown_fences(text: str) -> str:
    """Strip markdown code fences from LLM response."""
    text = text.strip()
    if text.startswith("```json"):
        text = text[7:]
    elif text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


def _repair_json(text: str) -> str:
    """Drop trailing commas and surrounding prose around the outermost object."""
    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        text = text[start : end + 1]
    text = re.sub(r",\s*\]", "]", text)
    text = re.sub(r",\s*\}", "}", text)
    return text


def parse_json_object(response_text: str) -> Dict[str, Any]:
    """
    Parse an LLM response into a JSON object.

    Raises:
        LLMResponseParseError: Not a JSON object even after repair
    """
    text = strip_markdown_fences(response_text)

    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        repaired = _repair_json(text)
        try:
            data = json.loads(repaired)
        except json.JSONDecodeError as e:
            raise LLMResponseParseError(f"Invalid JSON in LLM response: {e}") from e
        log.warning(
            "llm_json_repaired",
            original_length=len(text),
            repaired_length=len(repaired),
        )

    if not isinstance(data, dict):
        raise LLMResponseParseError("LLM response must be a JSON object")
    return data
