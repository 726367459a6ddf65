"""
Error shapes shared by the rule engine.

`ValidationError` is the one stable contract crossing the engine
boundary: structural definition problems and submission rule failures
are both reported as lists of `{path, code, message}` records.
"""

from enum import Enum

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Machine-readable error categories."""

    # Submission rule failures
    REQUIRED = "required"
    REQUIRED_IF = "requiredIf"
    MIN = "min"
    MAX = "max"
    REGEX = "regex"
    CROSS_FIELD = "cross_field"
    INVALID_OPTION = "invalid_option"
    INVALID_FIELD = "invalid_field"

    # Structural definition errors
    INVALID_TYPE = "invalid_type"
    INVALID_ENUM_VALUE = "invalid_enum_value"
    TOO_SMALL = "too_small"
    TOO_BIG = "too_big"
    DUPLICATE_FIELD_ID = "duplicate_field_id"
    MISSING_OPTIONS = "missing_options"
    INVALID_FIELD_REFERENCE = "invalid_field_reference"
    INCOMPATIBLE_RULE = "incompatible_rule"
    CIRCULAR_DEPENDENCY = "circular_dependency"
    DEPENDENCY_TOO_DEEP = "dependency_too_deep"


class ValidationError(BaseModel):
    """A single validation problem.

    `path` names the offending field (`field.<id>`, optionally with a
    suffix such as `.branching`) or a form-level concern
    (`form.branching`). `code` is usually an `ErrorCode` value, but shape
    errors may pass through other codes verbatim.
    """

    path: str
    code: str
    message: str


def field_path(field_id: str, suffix: str | None = None) -> str:
    """Build the `field.<id>[.<suffix>]` path for an error."""
    path = f"field.{field_id}"
    return f"{path}.{suffix}" if suffix else path


def make_error(path: str, code: ErrorCode | str, message: str) -> ValidationError:
    """Build a ValidationError, flattening enum codes to their string value."""
    code_value = code.value if isinstance(code, ErrorCode) else code
    return ValidationError(path=path, code=code_value, message=message)


class DependencyDepthError(Exception):
    """Raised when a dependency traversal exceeds the configured depth."""

    def __init__(self, field_id: str, max_depth: int):
        self.field_id = field_id
        self.max_depth = max_depth
        super().__init__(
            f"Dependency chain through '{field_id}' exceeds maximum depth {max_depth}"
        )


class InvalidFormDefinition(Exception):
    """Raised by `load_form_definition` when a definition has errors."""

    def __init__(self, errors: list[ValidationError]):
        self.errors = errors
        super().__init__(
            f"Form definition is invalid ({len(errors)} error(s))"
        )
