"""Locate and decode the JSON object embedded in a model response."""

import json
from typing import Any, Dict, Optional

from errors import ParseError


def find_balanced_object(text: str) -> Optional[str]:
    """Return the first balanced {...} substring, skipping braces inside strings."""
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start:index + 1]
    return None


def extract_json_object(text: str) -> Dict[str, Any]:
    """Decode the first JSON object found in text.

    Args:
        text: Raw model output, possibly wrapped in prose or code fences

    Returns:
        The decoded mapping

    Raises:
        ParseError: If no balanced object exists or it does not decode to a mapping
    """
    candidate = find_balanced_object(text or "")
    if candidate is None:
        raise ParseError("No JSON object found in response")
    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON in response: {e}") from e
    if not isinstance(data, dict):
        raise ParseError("JSON in response is not an object")
    return data
