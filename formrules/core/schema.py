"""
Form definition models.

These Pydantic models describe the authored structure of a form:
sections, groups and fields, plus the branching expressions and
validation rules attached to each field. They only enforce the JSON
shape of a definition; identifier uniqueness, option completeness,
references and cycles are checked by `formrules.core.definition` so
that every problem can be reported in a single pass.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# --- Enums ---


class FieldType(str, Enum):
    """Supported form field types."""

    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"
    DATE = "date"
    SINGLE_SELECT = "singleSelect"
    MULTISELECT = "multiselect"
    FILE = "file"
    SIGNATURE = "signature"


class RuleKind(str, Enum):
    """Supported validation rule kinds.

    Dispatch over rule kinds is closed: every member must be handled
    by `formrules.core.rules.validate_field`.
    """

    REQUIRED = "required"
    REQUIRED_IF = "requiredIf"
    MIN = "min"
    MAX = "max"
    REGEX = "regex"
    CROSS_FIELD = "cross_field"


# Field types whose answers are picked from `options`
SELECT_TYPES = frozenset({FieldType.SINGLE_SELECT, FieldType.MULTISELECT})


class _DefinitionModel(BaseModel):
    """Base for definition models: camelCase on the wire, snake_case in code."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)


# --- Field-level models ---


class Branching(_DefinitionModel):
    """Conditional visibility for a field.

    A field with neither expression is always visible. When `hideIf`
    evaluates true the field is hidden regardless of `showIf`.
    """

    show_if: str | None = Field(
        default=None,
        alias="showIf",
        description="Expression that must hold for the field to be shown",
    )
    hide_if: str | None = Field(
        default=None,
        alias="hideIf",
        description="Expression that hides the field when it holds",
    )


class ValidationRule(_DefinitionModel):
    """A single validation rule attached to a field."""

    rule: RuleKind = Field(
        ...,
        description="The rule kind",
    )
    value: Any = Field(
        default=None,
        description="Rule argument: numeric/date bound for min/max, pattern for regex",
    )
    condition: str | None = Field(
        default=None,
        description="Expression used by requiredIf and cross_field",
    )
    message: str = Field(
        ...,
        min_length=1,
        description="Message reported when the rule fails",
    )


class FormField(_DefinitionModel):
    """Definition of a single form field.

    Field IDs share one flat namespace across the whole form.
    """

    id: str = Field(
        ...,
        min_length=1,
        description="Field identifier, unique across the form",
    )
    type: FieldType = Field(
        ...,
        description="The input type for this field",
    )
    label: str = Field(
        ...,
        min_length=1,
        description="The question shown to the respondent",
    )
    help_text: str | None = Field(
        default=None,
        alias="helpText",
    )
    repeatable: bool | None = None
    options: list[str] | None = Field(
        default=None,
        description="Available options (required for singleSelect and multiselect)",
    )
    branching: Branching | None = Field(
        default=None,
        description="Conditional visibility (field is always visible if absent)",
    )
    validation: list[ValidationRule] | None = Field(
        default=None,
        description="Validation rules, evaluated only while the field is visible",
    )


# --- Containers ---


class Group(_DefinitionModel):
    """A block of fields inside a section.

    `repeatable` is carried for the renderer only; visibility and
    validation work per field ID regardless of repetition.
    """

    id: str = Field(..., min_length=1)
    title: str | None = None
    repeatable: bool = False
    fields: list[FormField] = Field(..., min_length=1)


class Section(_DefinitionModel):
    """A titled page of the form holding direct fields and groups."""

    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: str | None = None
    fields: list[FormField] = Field(default_factory=list)
    groups: list[Group] = Field(default_factory=list)


# --- Top-Level Definition ---


class FormDefinition(_DefinitionModel):
    """Top-level form definition: an ordered list of sections."""

    sections: list[Section] = Field(
        ...,
        min_length=1,
        description="Form sections (at least one required)",
    )
