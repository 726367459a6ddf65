"""
Validation rules engine.

Checks one field's answer against the rules attached to the field,
plus the option checks implied by select field types. All failures are
reported, not just the first.

Rule semantics:
- required     value must not be empty
- requiredIf   value must not be empty while `condition` holds
- min / max    bound check for number and date fields (skipped when empty)
- regex        value must match the pattern (skipped when empty)
- cross_field  `condition` must hold against the full answer map
"""

import logging
import re
from collections.abc import Mapping
from typing import Any

from formrules.core.errors import ErrorCode, ValidationError, field_path, make_error
from formrules.core.expressions import evaluate
from formrules.core.schema import FieldType, FormField, RuleKind, ValidationRule
from formrules.core.utils import is_empty, parse_date, stringify, to_number

logger = logging.getLogger(__name__)


def validate_field(
    field: FormField,
    value: Any,
    answers: Mapping[str, Any],
) -> list[ValidationError]:
    """Validate a field value against its rules and its type's options.

    Args:
        field: The field definition.
        value: The submitted value for this field (None if absent).
        answers: The full answer map, used by conditional rules.

    Returns:
        Every failure found, in rule order, followed by any option error.
    """
    errors: list[ValidationError] = []

    for rule in field.validation or []:
        error = _validate_rule(field, value, rule, answers)
        if error is not None:
            errors.append(error)

    option_error = validate_options(field, value)
    if option_error is not None:
        errors.append(option_error)

    return errors


def _validate_rule(
    field: FormField,
    value: Any,
    rule: ValidationRule,
    answers: Mapping[str, Any],
) -> ValidationError | None:
    match rule.rule:
        case RuleKind.REQUIRED:
            failed = is_empty(value)
        case RuleKind.REQUIRED_IF:
            failed = bool(rule.condition) and evaluate(rule.condition, answers) and is_empty(value)
        case RuleKind.MIN:
            failed = _violates_bound(field, value, rule, lambda v, bound: v < bound)
        case RuleKind.MAX:
            failed = _violates_bound(field, value, rule, lambda v, bound: v > bound)
        case RuleKind.REGEX:
            failed = _violates_pattern(value, rule)
        case RuleKind.CROSS_FIELD:
            failed = bool(rule.condition) and not evaluate(rule.condition, answers)

    if not failed:
        return None
    return make_error(field_path(field.id), rule.rule.value, rule.message)


def _violates_bound(field: FormField, value: Any, rule: ValidationRule, exceeds) -> bool:
    """Check a min/max bound; `exceeds(value, bound)` is True on violation.

    Numbers that cannot be read fail the check. Dates that cannot be
    parsed are left to other rules.
    """
    if is_empty(value):
        return False

    if field.type == FieldType.NUMBER:
        bound = to_number(rule.value)
        if bound is None:
            logger.warning(
                "Field '%s' has a non-numeric %s bound: %r", field.id, rule.rule.value, rule.value
            )
            return False
        number = to_number(value)
        return number is None or exceeds(number, bound)

    if field.type == FieldType.DATE:
        bound_date = parse_date(stringify(rule.value))
        value_date = parse_date(stringify(value))
        if bound_date is None or value_date is None:
            return False
        return exceeds(value_date, bound_date)

    return False


def _violates_pattern(value: Any, rule: ValidationRule) -> bool:
    """Check a regex rule. A malformed pattern never fails the field."""
    if is_empty(value) or not rule.value:
        return False

    try:
        pattern = re.compile(str(rule.value))
    except re.error as e:
        logger.warning("Invalid regex pattern %r: %s", rule.value, e)
        return False

    return pattern.search(stringify(value)) is None


# ---------------------------------------------------------------------------
# Option checks for select fields
# ---------------------------------------------------------------------------


def validate_options(field: FormField, value: Any) -> ValidationError | None:
    """Check a select field's value against its options.

    Empty values are not checked here (that is what `required` is for).
    """
    if is_empty(value):
        return None

    match field.type:
        case FieldType.SINGLE_SELECT:
            return _validate_single_select(field, value)
        case FieldType.MULTISELECT:
            return _validate_multiselect(field, value)

    return None


def _validate_single_select(field: FormField, value: Any) -> ValidationError | None:
    """A singleSelect value must be one of the options."""
    if field.options and value not in field.options:
        return make_error(
            field_path(field.id),
            ErrorCode.INVALID_OPTION,
            f"Invalid option: {stringify(value)}",
        )
    return None


def _validate_multiselect(field: FormField, value: Any) -> ValidationError | None:
    """A multiselect value must be a list whose items are all options."""
    if not isinstance(value, list):
        return make_error(
            field_path(field.id),
            ErrorCode.INVALID_TYPE,
            "Multiselect field must be an array",
        )

    if field.options:
        for item in value:
            if item not in field.options:
                return make_error(
                    field_path(field.id),
                    ErrorCode.INVALID_OPTION,
                    f"Invalid option: {stringify(item)}",
                )
    return None
