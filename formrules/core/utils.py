"""
Shared value helpers for the rule engine.

Answers arrive as decoded JSON, so the same logical value may be a
string, a number or a list. These helpers give the evaluator and the
rules engine one consistent set of coercions.
"""

import re
from datetime import date, datetime
from typing import Any

from dateutil import parser as dateutil_parser

_NUMBER_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


def parse_date(value: str) -> date | None:
    """Parse a date string into a date object.

    Supports ISO 8601 formats (YYYY-MM-DD) and datetime strings.
    Returns None if the value cannot be parsed.

    Args:
        value: The date string to parse.

    Returns:
        A date object, or None if parsing fails.
    """
    if not value or not isinstance(value, str):
        return None

    try:
        parsed = dateutil_parser.parse(value)
        # If the input is a datetime, extract just the date part
        if isinstance(parsed, datetime):
            return parsed.date()
        return parsed
    except (ValueError, TypeError, OverflowError):
        return None


# Two unrelated fill-in dates; a string naming a full calendar date parses
# the same against both.
_FILL_IN_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


def parse_complete_date(value: str) -> date | None:
    """Parse a string that names a full calendar date.

    Unlike `parse_date`, partial inputs such as "May" or "Mon" are
    rejected instead of being completed from the current date.
    """
    if not value or not isinstance(value, str):
        return None

    try:
        first, second = (
            dateutil_parser.parse(value, default=default) for default in _FILL_IN_DEFAULTS
        )
    except (ValueError, TypeError, OverflowError):
        return None

    if first.date() != second.date():
        return None
    return first.date()


def to_number(value: Any) -> int | float | None:
    """Return `value` as a number, or None if it is not numeric.

    Numeric strings (surrounding whitespace allowed) are converted.
    Booleans, None and the empty string are not numbers, and only
    decimal notation is accepted ("Infinity" and "NaN" are text).
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not _NUMBER_RE.match(text):
        return None
    if any(c in text for c in ".eE"):
        return float(text)
    return int(text)


def stringify(value: Any) -> str:
    """Render an answer value as text the way it appears in JSON forms."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join(stringify(item) for item in value)
    return str(value)


def loose_equals(left: Any, right: Any) -> bool:
    """Coercing equality, so that `"5"` equals `5`.

    - None only equals None
    - booleans compare as 1/0
    - a list compared with a scalar compares as its comma-joined text
    - a number compared with a string compares numerically, and is
      unequal when the string is not numeric
    """
    if left is None or right is None:
        return left is None and right is None

    if isinstance(left, bool):
        left = int(left)
    if isinstance(right, bool):
        right = int(right)

    left_is_list = isinstance(left, (list, tuple))
    right_is_list = isinstance(right, (list, tuple))
    if left_is_list and not right_is_list:
        left = stringify(left)
    elif right_is_list and not left_is_list:
        right = stringify(right)

    if isinstance(left, (int, float)) and isinstance(right, str):
        number = to_number(right)
        return number is not None and left == number
    if isinstance(right, (int, float)) and isinstance(left, str):
        number = to_number(left)
        return number is not None and number == right

    return left == right


def is_empty(value: Any) -> bool:
    """Check if an answer is empty: None, blank string, or empty list."""
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    if isinstance(value, (list, tuple)) and len(value) == 0:
        return True
    return False
