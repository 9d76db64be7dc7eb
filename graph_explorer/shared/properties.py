"""
Tolerant parsing of node/edge ``properties`` text.

The data pipeline that produced the graphs wrote property blobs with
Python literals (``None``, ``True``, ``False``, ``NaN``) and single quotes
instead of strict JSON.  Parsing happens only at the tool facade; the
ranking code searches the raw text.
"""

import json
import re
from typing import Any

_LITERAL_REPLACEMENTS = (
    (re.compile(r"\bNone\b"), "null"),
    (re.compile(r"\bTrue\b"), "true"),
    (re.compile(r"\bFalse\b"), "false"),
    (re.compile(r"\bNaN\b"), "null"),
)


def parse_properties(text: str | None) -> dict[str, Any] | None:
    """Parse a properties blob into a dict.

    Strict JSON is tried first; on failure the Python-literal dialect is
    normalised and parsed again.  Returns None for empty input, for text
    that is not parseable either way, and for JSON that is not an object.
    """
    if not text:
        return None

    for candidate in (text, _normalise(text)):
        try:
            parsed = json.loads(candidate, parse_constant=_null_constant)
        except ValueError:
            continue
        return parsed if isinstance(parsed, dict) else None
    return None


def _null_constant(_name: str) -> None:
    return None


def _normalise(text: str) -> str:
    for pattern, replacement in _LITERAL_REPLACEMENTS:
        text = pattern.sub(replacement, text)
    return text.replace("'", '"')
