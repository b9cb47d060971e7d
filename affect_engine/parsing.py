"""
Reply Parsing - Decode model replies into JSON objects.

Language models are asked for strict JSON but frequently wrap it in
prose or code fences. Strategy:
1. Strict json.loads of the whole reply
2. Otherwise decode the first balanced {...} substring
3. Otherwise give up with ParseError
"""

import json
import logging
from typing import Any, Optional

from .exceptions import ParseError


logger = logging.getLogger(__name__)


def find_balanced_object(text: str) -> Optional[str]:
    """
    Return the first balanced {...} substring of text, or None.

    Braces inside JSON string literals are ignored so that a value such
    as "use {braces}" does not end the object early.
    """
    start = text.find("{")
    if start < 0:
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


def parse_json_object(content: str, provider_name: str = "") -> dict[str, Any]:
    """
    Decode a reply into a JSON object.

    Raises:
        ParseError: if neither strict nor balanced-substring decoding
            yields a JSON object
    """
    if not content or not content.strip():
        raise ParseError("Empty reply", provider_name=provider_name)

    try:
        data = json.loads(content)
        if isinstance(data, dict):
            return data
    except (ValueError, TypeError):
        pass

    candidate = find_balanced_object(content)
    if candidate is None:
        raise ParseError(
            "No JSON object found in reply",
            provider_name=provider_name,
            raw_data=content,
        )

    try:
        data = json.loads(candidate)
    except (ValueError, TypeError) as e:
        raise ParseError(
            f"Embedded JSON object could not be decoded: {e}",
            provider_name=provider_name,
            raw_data=content,
        )

    if not isinstance(data, dict):
        raise ParseError(
            "Embedded JSON is not an object",
            provider_name=provider_name,
            raw_data=content,
        )

    logger.debug(f"[{provider_name}] Recovered JSON object from chatty reply")
    return data
