"""
Submission completion check.

A submission may be saved as an in-progress draft at any time. Moving
it to `done` requires that:
- every submitted field is a currently visible field of the form
- every visible field passes its validation rules and option checks

Fields that are hidden by branching are skipped entirely; their rules
do not run for this answer set.
"""

import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from formrules.core.errors import ErrorCode, ValidationError, field_path, make_error
from formrules.core.graph import get_all_fields
from formrules.core.rules import validate_field
from formrules.core.schema import FormDefinition
from formrules.core.visibility import resolve_visibility

logger = logging.getLogger(__name__)


class SubmissionStatus(str, Enum):
    """Lifecycle status of a submission."""

    IN_PROGRESS = "in-progress"
    DONE = "done"


class SubmissionResult(BaseModel):
    """Outcome of a submission check."""

    is_valid: bool
    errors: list[ValidationError] = Field(default_factory=list)


def validate_submission(
    form: FormDefinition,
    answers: Mapping[str, Any],
) -> SubmissionResult:
    """Check a submission's answers before it is marked `done`.

    Args:
        form: A form definition that passed definition validation.
        answers: The submitted answers keyed by field ID. Never mutated.

    Returns:
        A SubmissionResult carrying every error found.
    """
    visibility = resolve_visibility(form, answers)
    errors: list[ValidationError] = []

    # Submitted answers must belong to visible fields
    for field_id in answers:
        if not visibility.get(field_id, False):
            errors.append(make_error(
                field_path(field_id),
                ErrorCode.INVALID_FIELD,
                f"Field '{field_id}' is not visible or does not exist in the form",
            ))

    for field in get_all_fields(form):
        if not visibility.get(field.id, False):
            continue
        errors.extend(validate_field(field, answers.get(field.id), answers))

    if errors:
        logger.info("Submission rejected with %d error(s)", len(errors))

    return SubmissionResult(is_valid=not errors, errors=errors)


def check_submission(
    form: FormDefinition,
    answers: Mapping[str, Any],
    status: SubmissionStatus = SubmissionStatus.DONE,
) -> SubmissionResult:
    """Check a submission for the requested status.

    Drafts are accepted as-is so that partial answers can be kept; only
    a `done` submission is validated.
    """
    if status == SubmissionStatus.IN_PROGRESS:
        return SubmissionResult(is_valid=True)
    return validate_submission(form, answers)


def get_visible_answers(form: FormDefinition, answers: Mapping[str, Any]) -> dict[str, Any]:
    """Return only answers for currently visible fields."""
    visibility = resolve_visibility(form, answers)
    return {k: v for k, v in answers.items() if visibility.get(k, False)}
