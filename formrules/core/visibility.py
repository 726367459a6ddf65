"""
Deterministic visibility resolver for form fields.

Evaluates each field's `showIf` / `hideIf` branching against the
current answers. Expressions always read the answer map itself, never
other fields' computed visibility, so hiding a field does not by itself
hide the fields that depend on it; the submission check enforces that
answers to hidden fields are not accepted.
"""

from collections.abc import Mapping
from typing import Any

from formrules.core.expressions import evaluate
from formrules.core.graph import get_all_fields
from formrules.core.schema import FormDefinition, FormField


def is_field_visible(field: FormField, answers: Mapping[str, Any]) -> bool:
    """Determine if a field should be visible given the current answers.

    If the field has no branching it is always visible. A `showIf`
    decides visibility on its own; a `hideIf` that holds hides the field
    regardless of `showIf`.

    Args:
        field: The form field to evaluate.
        answers: Current answers keyed by field ID.

    Returns:
        True if the field should be visible, False otherwise.
    """
    if field.branching is None:
        return True

    visible = True

    if field.branching.show_if:
        visible = evaluate(field.branching.show_if, answers)

    # hideIf always wins
    if field.branching.hide_if and evaluate(field.branching.hide_if, answers):
        visible = False

    return visible


def resolve_visibility(
    form: FormDefinition,
    answers: Mapping[str, Any],
) -> dict[str, bool]:
    """Resolve visibility for every field of a form.

    Fields are evaluated once each, in document order. Each field reads
    only the answer map, so no dependency ordering is needed.

    Args:
        form: A form definition that passed definition validation.
        answers: Current answers keyed by field ID.

    Returns:
        A mapping of field ID to visibility.
    """
    return {field.id: is_field_visible(field, answers) for field in get_all_fields(form)}


def get_visible_fields(form: FormDefinition, answers: Mapping[str, Any]) -> list[FormField]:
    """Return all fields that are currently visible, in document order."""
    visibility = resolve_visibility(form, answers)
    return [field for field in get_all_fields(form) if visibility.get(field.id, False)]
