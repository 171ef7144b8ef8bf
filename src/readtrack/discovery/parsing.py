"""Tolerant JSON parsing for model output.

Models asked for "pure JSON" still wrap it in Markdown fences, add a
sentence before it, or leave trailing commas. The pipeline below recovers
from those in order:

1. strip code fences
2. parse as-is
3. slice the outermost ``[...]`` (or ``{...}``) and parse that
4. drop trailing commas before ``}``/``]`` and retry

If every step fails the caller gets ``None`` and decides what to do with
the raw text.
"""

import json
import re
from typing import Any, Optional

FENCE_RE = re.compile(r"```[a-zA-Z]*")
TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")

BRACKETS = {
    list: ("[", "]"),
    dict: ("{", "}"),
}

_FAILED = object()


def strip_code_fences(text: str) -> str:
    """Remove Markdown code fence markers (```json ... ```)."""
    text = (text or "").strip()
    if "```" not in text:
        return text
    return FENCE_RE.sub("", text).strip()


def slice_outermost(text: str, opening: str, closing: str) -> Optional[str]:
    """Return the span from the first ``opening`` to the last ``closing``."""
    start = text.find(opening)
    end = text.rfind(closing)
    if start == -1 or end == -1 or end <= start:
        return None
    return text[start : end + 1]


def remove_trailing_commas(text: str) -> str:
    """Drop commas that directly precede a closing brace or bracket."""
    return TRAILING_COMMA_RE.sub(r"\1", text)


def _loads(text: Optional[str]) -> Any:
    if not text:
        return _FAILED
    try:
        return json.loads(text)
    except ValueError:
        return _FAILED


def parse_json_lenient(text: str, container: type = list) -> Optional[Any]:
    """Parse JSON out of model output, repairing common damage.

    Args:
        text: Raw completion text
        container: ``list`` or ``dict``, the shape to slice for when the
            text has extra prose around it

    Returns:
        The parsed value, or None if nothing could be recovered
    """
    cleaned = strip_code_fences(text)
    if not cleaned:
        return None

    opening, closing = BRACKETS.get(container, BRACKETS[list])
    sliced = slice_outermost(cleaned, opening, closing)

    attempts = [cleaned, sliced, remove_trailing_commas(cleaned)]
    if sliced:
        attempts.append(remove_trailing_commas(sliced))

    for candidate in attempts:
        parsed = _loads(candidate)
        if parsed is not _FAILED:
            return parsed
    return None
