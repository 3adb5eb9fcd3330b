"""JSON repair utilities for scoring responses from local LLMs.

Small local models asked for ``{"complexity": 7}`` frequently answer with
something close but not quite valid:
- The object wrapped in prose or a markdown code fence
- Trailing commas before closing brackets
- Output truncated before the closing brace

This module repairs those cases before giving up.
"""

import json
import re
import logging
from typing import Any, Dict, Tuple

logger = logging.getLogger(__name__)


def repair_json(raw: str) -> Tuple[Dict[str, Any], bool]:
    """
    Attempt to parse JSON, applying repairs if needed.

    Args:
        raw: Raw string that should contain a JSON object

    Returns:
        Tuple of (parsed_dict, was_repaired)

    Raises:
        json.JSONDecodeError: If JSON cannot be parsed even after repairs
    """
    try:
        return json.loads(raw), False
    except json.JSONDecodeError:
        pass

    repaired = _extract_json_block(raw)
    repaired = _fix_trailing_commas(repaired)
    repaired = _balance_brackets(repaired)

    result = json.loads(repaired)
    logger.debug("JSON repair successful")
    return result, True


def _extract_json_block(text: str) -> str:
    """Extract a JSON object from surrounding text or markdown."""
    text = re.sub(r'^```(?:json)?\s*', '', text, flags=re.MULTILINE)
    text = re.sub(r'```\s*$', '', text, flags=re.MULTILINE)

    first_brace = text.find('{')
    if first_brace == -1:
        return text.strip()

    last_brace = text.rfind('}')
    if last_brace > first_brace:
        return text[first_brace:last_brace + 1]
    # Truncated: keep everything after the opening brace for bracket balancing
    return text[first_brace:].strip()


def _fix_trailing_commas(text: str) -> str:
    """Remove trailing commas before closing brackets."""
    return re.sub(r',\s*([\}\]])', r'\1', text)


def _balance_brackets(text: str) -> str:
    """Add missing closing brackets in the correct order."""
    stack = []
    in_string = False

    for i, char in enumerate(text):
        if char == '"' and (i == 0 or text[i - 1] != '\\'):
            in_string = not in_string
        elif not in_string:
            if char in '{[':
                stack.append(char)
            elif char in '}]' and stack:
                stack.pop()

    if not stack:
        return text

    text = text.rstrip()
    if in_string:
        text += '"'
    if text.endswith(','):
        text = text[:-1]

    closers = {'[': ']', '{': '}'}
    for opener in reversed(stack):
        text += closers[opener]
    return text


def parse_llm_json(raw: str, component_name: str = "unknown") -> Dict[str, Any]:
    """
    Parse a JSON object from an LLM response with automatic repair.

    Args:
        raw: Raw LLM response string
        component_name: Name of the component for logging

    Returns:
        Parsed JSON as dictionary

    Raises:
        json.JSONDecodeError: If the response is empty, not an object, or cannot
            be parsed even after repairs
    """
    if not raw or not raw.strip():
        raise json.JSONDecodeError("Empty response", raw or "", 0)

    logger.debug(f"[{component_name}] RAW LLM OUTPUT: {raw[:500]}")

    result, was_repaired = repair_json(raw)
    if was_repaired:
        logger.info(f"[{component_name}] JSON was repaired before parsing")
    if not isinstance(result, dict):
        raise json.JSONDecodeError("Expected a JSON object", raw, 0)
    return result
