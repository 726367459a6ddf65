"""
Shared fixtures for the form rule engine test suite.

Provides the example definitions under `formrules/schemas/`, both as
raw JSON dicts and as validated FormDefinition models.
"""

import json
from pathlib import Path

import pytest

from formrules.core.definition import load_form_definition
from formrules.core.schema import FormDefinition

SCHEMAS_DIR = Path(__file__).parent.parent / "schemas"


def load_schema_json(filename: str) -> dict:
    """Load an example definition as a dict."""
    with open(SCHEMAS_DIR / filename) as f:
        return json.load(f)


@pytest.fixture
def intake_definition() -> dict:
    """The patient_intake example definition as raw JSON."""
    return load_schema_json("patient_intake.json")


@pytest.fixture
def intake_form(intake_definition) -> FormDefinition:
    """The patient_intake example definition as a model."""
    return load_form_definition(intake_definition)


@pytest.fixture
def complete_intake_answers() -> dict:
    """Answers that satisfy every rule of the patient_intake form."""
    return {
        "field_name": "Jane Doe",
        "field_age": 34,
        "field_gender": "Female",
        "field_pregnant": "No",
        "field_smoker": "Yes",
        "field_cigs": 5,
        "field_quit_attempts": ["Patches", "Gum"],
        "field_start_date": "2026-11-02",
        "field_end_date": "2026-11-20",
    }
