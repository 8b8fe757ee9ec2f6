"""Centralized JSON serialization and parsing utilities.

Pre-created partial functions for common JSON serialization patterns,
plus the parse/format/validate helpers behind the form's JSON editors.
"""

from __future__ import annotations

import json

from collections.abc import Callable
from functools import partial
from typing import Any

from core.exceptions import InvalidJsonError

# Compact JSON serialization (no spaces) with fallback to str for non-serializable types.
# Example: json_compact({"key": "value"}) -> '{"key":"value"}'
json_compact: Callable[..., str] = partial(json.dumps, separators=(",", ":"), default=str)

# Pretty-printed JSON with 2-space indentation, matching the form's editors.
# Example: json_pretty({"key": "value"}) -> multi-line formatted output
json_pretty: Callable[..., str] = partial(json.dumps, indent=2, ensure_ascii=False)

NESTING_TOO_DEEP = "nesting too deep"


def _reject_constant(token: str) -> Any:
    """NaN and Infinity are not JSON."""
    raise ValueError(f"Unexpected token {token}")


def parse_json_text(text: str, field: str | None = None) -> Any:
    """Parse user-supplied JSON text.

    Args:
        text: Raw text from a form field
        field: Field name used in the error message

    Returns:
        The parsed JSON value

    Raises:
        InvalidJsonError: If the text is not valid JSON
    """
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except (TypeError, ValueError) as e:
        raise InvalidJsonError(field, str(e)) from e
    except RecursionError as e:
        raise InvalidJsonError(field, NESTING_TOO_DEEP) from e


def format_json_text(text: str, field: str | None = None) -> str:
    """Re-indent JSON text with 2 spaces.

    Raises:
        InvalidJsonError: If the text is not valid JSON
    """
    value = parse_json_text(text, field)
    try:
        return json_pretty(value)
    except RecursionError as e:
        raise InvalidJsonError(field, NESTING_TOO_DEEP) from e


def validate_json_text(text: str) -> tuple[bool, str]:
    """Check JSON text and return a user-facing verdict.

    Example:
        >>> validate_json_text('{"a": 1}')
        (True, 'Valid JSON')
    """
    try:
        parse_json_text(text)
    except InvalidJsonError as e:
        return False, f"Invalid JSON: {e.reason}"
    return True, "Valid JSON"

