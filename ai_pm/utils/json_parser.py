"""
Tolerant JSON parsing for LLM output.

Handles common JSON issues in model replies:
- Markdown code blocks (```json ... ```)
- Trailing commas
- Leading/trailing whitespace
"""

import json
import re
import logging
from typing import Any, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

DEFAULT_WRAPPER_KEYS: Tuple[str, ...] = ("proposals", "issues")


def parse_json_with_retry(text: str, log_errors: bool = True) -> Tuple[Optional[Any], Optional[str]]:
    """
    Parse JSON from text, trying progressively more forgiving strategies.

    1. Direct parsing
    2. Strip markdown code blocks
    3. Fix trailing commas

    Args:
        text: Text containing JSON
        log_errors: Whether to log errors (default: True)

    Returns:
        Tuple of (parsed_value, error_message)
        - If successful: (value, None)
        - If failed: (None, error_message)
    """
    if not text or not isinstance(text, str):
        return None, "Input is not a valid string"

    stripped = _strip_markdown_code_blocks(text)
    candidates = [text, stripped, _fix_trailing_commas(stripped)]

    last_error = None
    for attempt, candidate in enumerate(candidates, start=1):
        try:
            return json.loads(candidate), None
        except json.JSONDecodeError as e:
            last_error = e
            if log_errors:
                logger.debug(f"JSON parse attempt {attempt} failed: {e}")

    error_msg = f"Failed to parse JSON after {len(candidates)} attempts. Last error: {last_error}"
    if log_errors:
        logger.error(f"{error_msg}. Text (first 1000 chars): {text[:1000]}")
    return None, error_msg


def _strip_markdown_code_blocks(text: str) -> str:
    """Remove markdown code blocks (```json ... ``` or ``` ... ```)."""
    text = re.sub(r'```json\s*\n?(.*?)\n?```', r'\1', text, flags=re.DOTALL)
    text = re.sub(r'```\s*\n?(.*?)\n?```', r'\1', text, flags=re.DOTALL)
    return text.strip()


def _fix_trailing_commas(text: str) -> str:
    """Fix trailing commas in JSON (remove commas before } or ])."""
    return re.sub(r',(\s*[}\]])', r'\1', text)


def extract_items(parsed: Any, wrapper_keys: Sequence[str] = DEFAULT_WRAPPER_KEYS) -> List[Any]:
    """
    Pull the item list out of a decoded reply.

    A bare array is used as-is; otherwise the first wrapper key holding a
    list wins. Anything else is an empty list.
    """
    if isinstance(parsed, list):
        return parsed
    if isinstance(parsed, dict):
        for key in wrapper_keys:
            value = parsed.get(key)
            if isinstance(value, list):
                return value
    return []


def parse_items(text: Optional[str], wrapper_keys: Sequence[str] = DEFAULT_WRAPPER_KEYS) -> List[Any]:
    """Decode a reply into a list of items. Never raises on bad input."""
    if not text:
        return []
    parsed, error = parse_json_with_retry(text)
    if error:
        return []
    return extract_items(parsed, wrapper_keys)
