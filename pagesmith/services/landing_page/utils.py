"""Shared utilities for the landing page package."""

import json
import logging
from typing import Any, Optional

from pydantic import ValidationError

from ..models import LandingPageDocument

logger = logging.getLogger(__name__)


def parse_llm_json(response_text: str) -> dict:
    """Parse a JSON object from LLM text output, handling markdown code blocks.

    Tries, in order:
    1. Direct JSON parse after stripping code fences
    2. The span from the first '{' to the last '}'
    3. Raise ValueError if nothing works

    Raises:
        ValueError: If no JSON object is found in the text
    """
    clean = (response_text or "").strip()
    if clean.startswith("```"):
        lines = clean.split("\n")
        lines = lines[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        clean = "\n".join(lines).strip()

    try:
        parsed = json.loads(clean)
        if isinstance(parsed, dict):
            return parsed
    except json.JSONDecodeError:
        pass

    start = clean.find("{")
    end = clean.rfind("}")
    if start != -1 and end > start:
        try:
            parsed = json.loads(clean[start : end + 1])
            if isinstance(parsed, dict):
                return parsed
        except json.JSONDecodeError:
            pass

    raise ValueError(f"Could not parse JSON from LLM response: {clean[:200]}...")


def coerce_document(payload: Any) -> Optional[LandingPageDocument]:
    """Turn a generated payload into a document, or None if it is unusable.

    Unusable means: not a mapping, no ``sections`` list, an empty
    ``sections`` list, no ``metadata`` object, or content that fails
    schema validation. There is no field-by-field repair; callers fall
    back to a locally built page instead.
    """
    if not isinstance(payload, dict):
        return None

    sections = payload.get("sections")
    if not isinstance(sections, list) or not sections:
        logger.warning("Generated payload has no sections")
        return None

    if not isinstance(payload.get("metadata"), dict):
        logger.warning("Generated payload has no metadata")
        return None

    if not all(isinstance(s, dict) and isinstance(s.get("type"), str) for s in sections):
        logger.warning("Generated payload has malformed sections")
        return None

    try:
        document = LandingPageDocument.from_dict(payload)
    except ValidationError as e:
        logger.warning(f"Generated payload failed validation: {e}")
        return None

    reissued = document.reissue_duplicate_ids()
    if reissued:
        logger.warning(f"Generated payload repeated section ids; reissued {len(reissued)}")
    return document
