"""
Authoring-time validation of form definitions.

Runs when a form is created or updated, before it is stored:

1. shape validation against the definition models (fatal on failure)
2. identifier uniqueness across sections, groups and fields
3. option completeness for select fields
4. branching references point at existing fields
5. rule condition references and rule/type compatibility
6. circular dependencies

Steps 2-6 all run and their errors are returned together.
"""

import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from formrules.core.errors import (
    DependencyDepthError,
    ErrorCode,
    InvalidFormDefinition,
    ValidationError,
    field_path,
    make_error,
)
from formrules.core.expressions import ordered_field_references
from formrules.core.graph import build_dependency_graph, detect_cycles, get_all_fields
from formrules.core.schema import SELECT_TYPES, FieldType, FormDefinition, RuleKind

logger = logging.getLogger(__name__)

# Rule kinds restricted to certain field types
RULE_FIELD_TYPES: dict[RuleKind, tuple[FieldType, ...]] = {
    RuleKind.MIN: (FieldType.NUMBER, FieldType.DATE),
    RuleKind.MAX: (FieldType.NUMBER, FieldType.DATE),
    RuleKind.REGEX: (FieldType.TEXT, FieldType.TEXTAREA),
}

# Pydantic error types mapped onto structural error codes
_SHAPE_ERROR_CODES: dict[str, ErrorCode] = {
    "missing": ErrorCode.INVALID_TYPE,
    "enum": ErrorCode.INVALID_ENUM_VALUE,
    "too_short": ErrorCode.TOO_SMALL,
    "string_too_short": ErrorCode.TOO_SMALL,
    "too_long": ErrorCode.TOO_BIG,
    "string_too_long": ErrorCode.TOO_BIG,
}


def validate_form_definition(raw: Any) -> list[ValidationError]:
    """Validate a form definition.

    Args:
        raw: The decoded JSON definition, or an already built
            FormDefinition (shape validation is then skipped).

    Returns:
        All errors found; an empty list means the definition is valid.
    """
    _, errors = _check_definition(raw)
    return errors


def load_form_definition(raw: Any) -> FormDefinition:
    """Build a FormDefinition, refusing definitions with any error.

    Raises:
        InvalidFormDefinition: If `validate_form_definition` reports errors.
    """
    form, errors = _check_definition(raw)
    if errors or form is None:
        raise InvalidFormDefinition(errors)
    return form


def _check_definition(raw: Any) -> tuple[FormDefinition | None, list[ValidationError]]:
    if isinstance(raw, FormDefinition):
        form = raw
    else:
        try:
            form = FormDefinition.model_validate(raw)
        except PydanticValidationError as e:
            shape_errors = _shape_errors(e)
            logger.debug("Definition failed shape validation: %d error(s)", len(shape_errors))
            return None, shape_errors

    errors: list[ValidationError] = []
    errors.extend(_check_unique_ids(form))
    errors.extend(_check_options(form))
    errors.extend(_check_branching_references(form))
    errors.extend(_check_rules(form))
    errors.extend(_check_cycles(form))

    logger.debug("Definition checked: %d error(s)", len(errors))
    return form, errors


# ---------------------------------------------------------------------------
# Step 1: shape
# ---------------------------------------------------------------------------


def _shape_errors(exc: PydanticValidationError) -> list[ValidationError]:
    errors = []
    for err in exc.errors():
        error_type = err["type"]
        code = _SHAPE_ERROR_CODES.get(error_type)
        if code is None and error_type.endswith("_type"):
            code = ErrorCode.INVALID_TYPE

        path = ".".join(str(part) for part in err["loc"]) or "form"
        errors.append(make_error(path, code or error_type, err["msg"]))
    return errors


# ---------------------------------------------------------------------------
# Steps 2-6
# ---------------------------------------------------------------------------


def _check_unique_ids(form: FormDefinition) -> list[ValidationError]:
    """Sections, groups and fields share one identifier namespace."""
    seen: set[str] = set()
    duplicates: dict[str, None] = {}

    def register(identifier: str) -> None:
        if identifier in seen:
            duplicates.setdefault(identifier, None)
        seen.add(identifier)

    for section in form.sections:
        register(section.id)
        for field in section.fields:
            register(field.id)
        for group in section.groups:
            register(group.id)
            for field in group.fields:
                register(field.id)

    return [
        make_error(
            field_path(duplicate),
            ErrorCode.DUPLICATE_FIELD_ID,
            f"Field ID '{duplicate}' is used multiple times. "
            "Field IDs must be unique across the entire form.",
        )
        for duplicate in duplicates
    ]


def _check_options(form: FormDefinition) -> list[ValidationError]:
    errors = []
    for field in get_all_fields(form):
        if field.type in SELECT_TYPES and not field.options:
            errors.append(make_error(
                field_path(field.id),
                ErrorCode.MISSING_OPTIONS,
                f"Field '{field.id}' of type '{field.type.value}' must have options defined.",
            ))
    return errors


def _check_branching_references(form: FormDefinition) -> list[ValidationError]:
    fields = get_all_fields(form)
    field_ids = {f.id for f in fields}
    errors = []

    for field in fields:
        if field.branching is None:
            continue

        for expression in (field.branching.show_if, field.branching.hide_if):
            for ref in ordered_field_references(expression):
                if ref not in field_ids:
                    errors.append(make_error(
                        field_path(field.id, "branching"),
                        ErrorCode.INVALID_FIELD_REFERENCE,
                        f"Field '{field.id}' references non-existent field '{ref}' "
                        f"in expression: {expression}",
                    ))

    return errors


def _check_rules(form: FormDefinition) -> list[ValidationError]:
    """Rule condition references must exist; rules must suit the field type."""
    fields = get_all_fields(form)
    field_ids = {f.id for f in fields}
    errors = []

    for field in fields:
        for rule in field.validation or []:
            for ref in ordered_field_references(rule.condition):
                if ref not in field_ids:
                    errors.append(make_error(
                        field_path(field.id, "validation"),
                        ErrorCode.INVALID_FIELD_REFERENCE,
                        f"Validation rule references non-existent field: {ref}",
                    ))

            allowed_types = RULE_FIELD_TYPES.get(rule.rule)
            if allowed_types and field.type not in allowed_types:
                allowed = ", ".join(t.value for t in allowed_types)
                errors.append(make_error(
                    field_path(field.id, "validation"),
                    ErrorCode.INCOMPATIBLE_RULE,
                    f"Validation rule '{rule.rule.value}' cannot be used with field type "
                    f"'{field.type.value}'. Allowed types: {allowed}",
                ))

    return errors


def _check_cycles(form: FormDefinition) -> list[ValidationError]:
    try:
        cycles = detect_cycles(build_dependency_graph(form))
    except DependencyDepthError as e:
        logger.warning("Dependency check aborted: %s", e)
        return [make_error("form.branching", ErrorCode.DEPENDENCY_TOO_DEEP, str(e))]

    return [
        make_error(
            "form.branching",
            ErrorCode.CIRCULAR_DEPENDENCY,
            f"Circular dependency detected: {' → '.join(cycle)}",
        )
        for cycle in cycles
    ]
