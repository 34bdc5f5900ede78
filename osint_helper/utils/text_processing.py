"""Text cleaning, JSON extraction and deduplication helpers."""

from __future__ import annotations

import json
import re
from typing import Any, Iterable, TypeVar

from osint_helper.utils.exceptions import ModelResponseParsingError
from osint_helper.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

_FENCED_JSON = re.compile(r"```json\s*([\s\S]*?)\s*```")


def extract_json(text: str) -> str:
    """Cut the JSON document out of free-form LLM text.

    Tries a fenced ```json block first. Otherwise the outer document is
    whichever of ``{`` or ``[`` opens first, cut up to its last closing
    bracket. Returns the input unchanged when none is found.
    """
    match = _FENCED_JSON.search(text)
    if match and match.group(1):
        return match.group(1).strip()

    openers = [(text.find(o), c) for o, c in (("{", "}"), ("[", "]")) if o in text]
    for start, closer in sorted(openers):
        end = text.rfind(closer)
        if end > start:
            return text[start : end + 1].strip()

    return text


def parse_llm_json(text: str) -> Any:
    """Parse JSON from LLM text, logging both forms on failure.

    A response that is already a clean JSON document is parsed as is;
    only otherwise is the document cut out with :func:`extract_json`.
    """
    cleaned = text.strip()
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        cleaned = extract_json(text)

    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as exc:
        logger.error(
            "llm_json_parse_failed",
            raw_text=text[:4000],
            cleaned_text=cleaned[:4000],
            error=str(exc),
        )
        raise ModelResponseParsingError(
            f"LLM returned invalid JSON: {exc.msg} at position {exc.pos}"
        ) from exc


def clean_strings(values: Iterable[Any]) -> list[str]:
    """Trim, drop blanks and non-strings, and deduplicate preserving order."""
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        if not isinstance(value, str):
            continue
        value = value.strip()
        if value and value not in seen:
            seen.add(value)
            result.append(value)
    return result


def truncate_content(text: str, max_chars: int = 50_000) -> str:
    """Truncate text to max chars, adding a marker if truncated."""
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + "\n\n[... content truncated ...]"


def chunked(items: list[T], size: int) -> list[list[T]]:
    """Split ``items`` into consecutive slices of at most ``size`` elements."""
    if size < 1:
        raise ValueError("chunk size must be positive")
    return [items[i : i + size] for i in range(0, len(items), size)]
