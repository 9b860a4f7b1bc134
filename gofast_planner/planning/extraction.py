# gofast_planner/planning/extraction.py
"""Extract the JSON document from raw generative-backend output."""

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*\n(.*?)\n```", re.DOTALL | re.IGNORECASE)
_BARE_OBJECT_RE = re.compile(r"(\{.*\})", re.DOTALL)


def extract_json(raw_output: str) -> Any:
    """
    Extract JSON from model output, handling common formatting variations.

    Tries, in order:
    1. Direct JSON parse (output is pure JSON)
    2. Code fence extraction (```json ... ```)
    3. Bare object extraction (first "{" through last "}")

    Truncated output is not repaired: a plan cut off mid-document is
    rejected rather than silently shortened.

    Args:
        raw_output: Raw text from the backend

    Returns:
        Parsed JSON value

    Raises:
        ValueError: If no valid JSON found
    """
    try:
        return json.loads(raw_output.strip())
    except json.JSONDecodeError:
        pass

    fence_match = _FENCE_RE.search(raw_output)
    if fence_match:
        try:
            return json.loads(fence_match.group(1).strip())
        except json.JSONDecodeError:
            pass

    bare_match = _BARE_OBJECT_RE.search(raw_output)
    if bare_match:
        try:
            return json.loads(bare_match.group(1))
        except json.JSONDecodeError as e:
            logger.debug(f"Bare object candidate did not parse: {e}")

    preview = raw_output[:200].replace("\n", "\\n")
    raise ValueError(
        f"Could not extract valid JSON from output ({len(raw_output)} chars). "
        f"Preview: {preview}"
    )
