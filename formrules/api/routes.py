"""
FastAPI routes for the form rule engine.

Endpoints:
- POST /forms/validate        : validate a form definition (authoring time)
- POST /forms/visibility      : resolve field visibility for an answer set
- POST /submissions/validate  : check a submission for the requested status
- GET  /health                : health check

The routes are stateless: definitions and answers arrive with each
request and nothing is stored.
"""

import logging
from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from formrules.core.definition import load_form_definition, validate_form_definition
from formrules.core.errors import InvalidFormDefinition, ValidationError
from formrules.core.schema import FormDefinition
from formrules.core.submission import SubmissionStatus, check_submission, get_visible_answers
from formrules.core.visibility import resolve_visibility

logger = logging.getLogger(__name__)

router = APIRouter()


# --- Request / Response Models ---


class DefinitionRequest(BaseModel):
    """Request body for /forms/validate."""

    definition: Any


class DefinitionResponse(BaseModel):
    valid: bool
    errors: list[ValidationError]


class VisibilityRequest(BaseModel):
    """Request body for /forms/visibility."""

    definition: Any
    answers: dict[str, Any] = {}


class VisibilityResponse(BaseModel):
    visibility: dict[str, bool]


class SubmissionRequest(BaseModel):
    """Request body for /submissions/validate."""

    definition: Any
    data: dict[str, Any]
    status: SubmissionStatus = SubmissionStatus.DONE


class SubmissionResponse(BaseModel):
    valid: bool
    status: SubmissionStatus
    errors: list[ValidationError]
    visible_answers: dict[str, Any]


# --- Helpers ---


def _load_or_400(definition: Any) -> FormDefinition:
    """Build the definition, answering 400 with its errors when invalid."""
    try:
        return load_form_definition(definition)
    except InvalidFormDefinition as e:
        raise HTTPException(
            status_code=400,
            detail={
                "message": "Invalid form definition",
                "errors": [error.model_dump() for error in e.errors],
            },
        )


# --- Endpoints ---


@router.post("/forms/validate", response_model=DefinitionResponse)
async def validate_definition(request: DefinitionRequest):
    """Validate a form definition before it is stored."""
    errors = validate_form_definition(request.definition)
    return DefinitionResponse(valid=not errors, errors=errors)


@router.post("/forms/visibility", response_model=VisibilityResponse)
async def visibility(request: VisibilityRequest):
    """Resolve which fields are visible for the given answers."""
    form = _load_or_400(request.definition)
    return VisibilityResponse(visibility=resolve_visibility(form, request.answers))


@router.post("/submissions/validate", response_model=SubmissionResponse)
async def validate_submission_data(request: SubmissionRequest):
    """Check a submission for the requested status.

    In-progress drafts are always accepted; `done` submissions must pass
    every rule on every visible field.
    """
    form = _load_or_400(request.definition)

    try:
        result = check_submission(form, request.data, request.status)
        visible_answers = get_visible_answers(form, request.data)
    except Exception as e:
        logger.error("Error validating submission: %s", e, exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Error validating submission: {str(e)}",
        )

    return SubmissionResponse(
        valid=result.is_valid,
        status=request.status,
        errors=result.errors,
        visible_answers=visible_answers,
    )


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
