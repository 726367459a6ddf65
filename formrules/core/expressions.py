"""
Deterministic evaluator for branching and validation expressions.

An expression is a single binary comparison:

    <left> <operator> <right>

with operators `==` (or `=`), `!=`, `>`, `<`, `>=`, `<=`. Each operand
is either a field reference or a literal (quoted string, `true` /
`false`, or a number). The nullary function `today()` is replaced by
the current UTC date (ISO format) before parsing.

Examples:
    - "field_smoke == 'Yes'"
    - "field_age > 18"
    - "field_end_date > field_start_date"
    - "field_due_date > today()"

A bare token is a field reference only if it is a key of the answer
map; otherwise it is read as a literal. Any failure evaluates to False.
"""

import logging
import re
from collections.abc import Mapping
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

from formrules.core.utils import loose_equals, parse_complete_date, stringify, to_number

logger = logging.getLogger(__name__)


class Operator(str, Enum):
    """Comparison operators understood by the evaluator."""

    EQUALS = "=="
    ASSIGN_EQUALS = "="
    NOT_EQUALS = "!="
    GREATER = ">"
    LESS = "<"
    GREATER_OR_EQUAL = ">="
    LESS_OR_EQUAL = "<="


# Alternatives are tried in this order at each position, left to right
_OPERATOR_RE = re.compile(r"(==|!=|>=|<=|>|<|=)")

_TODAY_RE = re.compile(r"today\(\)")
_SINGLE_QUOTED_RE = re.compile(r"'[^']*'")
_DOUBLE_QUOTED_RE = re.compile(r'"[^"]*"')
_IDENTIFIER_RE = re.compile(r"\b([a-zA-Z_][a-zA-Z0-9_]*)\b")

# Bare words that are never field references
RESERVED_WORDS = frozenset({"true", "false", "and", "or", "not"})


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------


def evaluate(
    expression: str,
    answers: Mapping[str, Any],
    today: date | None = None,
) -> bool:
    """Evaluate a condition expression against the answer map.

    Args:
        expression: The condition string (e.g. "field_age > 18").
        answers: Current answers keyed by field ID. Never mutated.
        today: Date substituted for `today()`; defaults to the current UTC date.

    Returns:
        The comparison result, or False if the expression is malformed
        or cannot be evaluated.
    """
    try:
        prepared = _replace_special_functions(expression, today)
        parsed = _parse_expression(prepared)
        if parsed is None:
            logger.debug("Expression has no single comparison: %r", expression)
            return False

        left, operator, right = parsed
        left_value = _resolve_operand(left, answers)
        right_value = _resolve_operand(right, answers)
        return _apply_operator(left_value, operator, right_value)
    except Exception:
        logger.warning("Expression evaluation failed: %r", expression, exc_info=True)
        return False


def _replace_special_functions(expression: str, today: date | None) -> str:
    """Replace `today()` with the quoted ISO date."""
    if "today()" in expression:
        iso_today = (today or _utc_today()).isoformat()
        expression = _TODAY_RE.sub(f"'{iso_today}'", expression)
    return expression


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


def _parse_expression(expression: str) -> tuple[str, Operator, str] | None:
    """Split an expression into (left, operator, right).

    The first operator found wins; the expression must split into
    exactly two operands around it.
    """
    expression = expression.strip()

    match = _OPERATOR_RE.search(expression)
    if not match:
        return None

    operator = match.group(0)
    parts = expression.split(operator)
    if len(parts) != 2:
        return None

    return parts[0].strip(), Operator(operator), parts[1].strip()


def _resolve_operand(token: str, answers: Mapping[str, Any]) -> Any:
    """Read a field value if `token` is an answer key, else parse a literal."""
    if token in answers:
        return answers[token]
    return _parse_literal(token)


def _parse_literal(token: str) -> Any:
    """Parse a literal: quoted string, boolean, number, or bare text."""
    if (token.startswith("'") and token.endswith("'")) or (
        token.startswith('"') and token.endswith('"')
    ):
        return token[1:-1]

    if token == "true":
        return True
    if token == "false":
        return False

    number = to_number(token)
    if number is not None:
        return number

    return token


def _apply_operator(left: Any, operator: Operator, right: Any) -> bool:
    match operator:
        case Operator.EQUALS | Operator.ASSIGN_EQUALS:
            return loose_equals(left, right)
        case Operator.NOT_EQUALS:
            return not loose_equals(left, right)
        case Operator.GREATER:
            return _compare(left, right) > 0
        case Operator.LESS:
            return _compare(left, right) < 0
        case Operator.GREATER_OR_EQUAL:
            return _compare(left, right) >= 0
        case Operator.LESS_OR_EQUAL:
            return _compare(left, right) <= 0

    return False


def _compare(left: Any, right: Any) -> int:
    """Three-way compare: numerically, then as dates, then as text."""
    left_number = to_number(left)
    right_number = to_number(right)
    if left_number is not None and right_number is not None:
        return _sign(left_number, right_number)

    left_date = parse_complete_date(left) if isinstance(left, str) else None
    right_date = parse_complete_date(right) if isinstance(right, str) else None
    if left_date is not None and right_date is not None:
        return _sign(left_date, right_date)

    return _sign(stringify(left), stringify(right))


def _sign(left: Any, right: Any) -> int:
    return (left > right) - (left < right)


# ---------------------------------------------------------------------------
# Static analysis
# ---------------------------------------------------------------------------


def ordered_field_references(expression: str) -> list[str]:
    """Return the field IDs an expression references, in first-seen order.

    Quoted literals and `today()` are removed before scanning so that
    option values such as 'Female' are not mistaken for field IDs.
    """
    if not expression:
        return []

    cleaned = _SINGLE_QUOTED_RE.sub("", expression)
    cleaned = _DOUBLE_QUOTED_RE.sub("", cleaned)
    cleaned = _TODAY_RE.sub("", cleaned)

    references: dict[str, None] = {}
    for match in _IDENTIFIER_RE.finditer(cleaned):
        name = match.group(1)
        if name.lower() not in RESERVED_WORDS:
            references.setdefault(name, None)

    return list(references)


def extract_field_references(expression: str) -> set[str]:
    """Return the set of field IDs referenced by an expression."""
    return set(ordered_field_references(expression))
