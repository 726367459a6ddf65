"""
Unit tests for the visibility resolver.

Tests cover:
- Fields with no branching (always visible)
- showIf alone decides visibility
- hideIf always wins over showIf
- Malformed expressions hide a showIf field rather than raising
- Whole-form resolution on the example intake form
- Visible field listing in document order
"""

from formrules.core.schema import FormDefinition, FormField
from formrules.core.visibility import get_visible_fields, is_field_visible, resolve_visibility


# --- Helpers ---


def make_field(
    field_id: str = "test_field",
    show_if: str | None = None,
    hide_if: str | None = None,
) -> FormField:
    """Build a text FormField with optional branching."""
    branching = None
    if show_if is not None or hide_if is not None:
        branching = {"showIf": show_if, "hideIf": hide_if}
    return FormField.model_validate({
        "id": field_id,
        "type": "text",
        "label": "Test label",
        "branching": branching,
    })


# =============================================================
# Test: Field with no branching (always visible)
# =============================================================


class TestNoBranching:
    """Fields without branching should always be visible."""

    def test_always_visible(self):
        assert is_field_visible(make_field(), {}) is True

    def test_always_visible_with_answers(self):
        assert is_field_visible(make_field(), {"other_field": "value"}) is True

    def test_empty_branching_is_visible(self):
        field = FormField.model_validate({
            "id": "f", "type": "text", "label": "F", "branching": {},
        })
        assert is_field_visible(field, {}) is True

    def test_form_without_branching_is_fully_visible(self, intake_definition):
        for section in intake_definition["sections"]:
            for field in section["fields"]:
                field.pop("branching", None)
            for group in section["groups"]:
                for field in group["fields"]:
                    field.pop("branching", None)
        form = FormDefinition.model_validate(intake_definition)

        for answers in ({}, {"field_smoker": "No"}, {"field_gender": "Male", "field_cigs": 0}):
            visibility = resolve_visibility(form, answers)
            assert all(visibility.values())
            assert len(visibility) == 10


# =============================================================
# Test: showIf
# =============================================================


class TestShowIf:
    """showIf sets visibility to the expression result."""

    def test_show_if_true(self):
        field = make_field(show_if="field_smoker == 'Yes'")
        assert is_field_visible(field, {"field_smoker": "Yes"}) is True

    def test_show_if_false(self):
        field = make_field(show_if="field_smoker == 'Yes'")
        assert is_field_visible(field, {"field_smoker": "No"}) is False

    def test_show_if_missing_answer(self):
        field = make_field(show_if="field_smoker == 'Yes'")
        assert is_field_visible(field, {}) is False

    def test_malformed_show_if_hides_field(self):
        field = make_field(show_if="field_smoker")
        assert is_field_visible(field, {"field_smoker": "Yes"}) is False


# =============================================================
# Test: hideIf
# =============================================================


class TestHideIf:
    """hideIf hides the field when it holds, regardless of showIf."""

    def test_hide_if_true(self):
        field = make_field(hide_if="field_age < 18")
        assert is_field_visible(field, {"field_age": 12}) is False

    def test_hide_if_false(self):
        field = make_field(hide_if="field_age < 18")
        assert is_field_visible(field, {"field_age": 30}) is True

    def test_hide_if_wins_over_show_if(self):
        field = make_field(show_if="field_smoker == 'Yes'", hide_if="field_cigs == 0")
        assert is_field_visible(field, {"field_smoker": "Yes", "field_cigs": 0}) is False

    def test_false_hide_if_keeps_show_if_result(self):
        field = make_field(show_if="field_smoker == 'Yes'", hide_if="field_cigs == 0")
        assert is_field_visible(field, {"field_smoker": "Yes", "field_cigs": 3}) is True
        assert is_field_visible(field, {"field_smoker": "No", "field_cigs": 3}) is False

    def test_malformed_hide_if_does_not_hide(self):
        field = make_field(hide_if="field_age <")
        assert is_field_visible(field, {"field_age": 12}) is True


# =============================================================
# Test: Whole-form resolution
# =============================================================


class TestResolveVisibility:
    """Tests for resolve_visibility on the intake form."""

    def test_every_field_has_an_entry(self, intake_form):
        visibility = resolve_visibility(intake_form, {})
        assert len(visibility) == 10

    def test_non_smoker_hides_smoking_fields(self, intake_form):
        visibility = resolve_visibility(intake_form, {"field_smoker": "No"})
        assert visibility["field_cigs"] is False
        assert visibility["field_quit_attempts"] is False
        assert visibility["field_smoker"] is True

    def test_smoker_shows_smoking_fields(self, intake_form):
        visibility = resolve_visibility(intake_form, {"field_smoker": "Yes"})
        assert visibility["field_cigs"] is True
        assert visibility["field_quit_attempts"] is True

    def test_zero_cigarettes_hides_quit_attempts(self, intake_form):
        visibility = resolve_visibility(intake_form, {"field_smoker": "Yes", "field_cigs": 0})
        assert visibility["field_cigs"] is True
        assert visibility["field_quit_attempts"] is False

    def test_pregnancy_question_depends_on_gender(self, intake_form):
        assert resolve_visibility(intake_form, {"field_gender": "Female"})["field_pregnant"] is True
        assert resolve_visibility(intake_form, {"field_gender": "Male"})["field_pregnant"] is False

    def test_answers_are_not_mutated(self, intake_form):
        answers = {"field_smoker": "Yes", "field_cigs": 0}
        resolve_visibility(intake_form, answers)
        assert answers == {"field_smoker": "Yes", "field_cigs": 0}

    def test_document_order_keys(self, intake_form):
        visibility = resolve_visibility(intake_form, {})
        assert list(visibility)[:4] == ["field_name", "field_age", "field_gender", "field_pregnant"]

    def test_long_show_if_chain(self):
        """Chains deeper than the graph traversal limit still resolve."""
        fields = [{"id": "f0", "type": "text", "label": "f0"}]
        for i in range(1, 600):
            fields.append({
                "id": f"f{i}",
                "type": "text",
                "label": f"f{i}",
                "branching": {"showIf": f"f{i - 1} == 'x'"},
            })
        form = FormDefinition.model_validate(
            {"sections": [{"id": "s", "title": "S", "fields": fields}]}
        )

        visibility = resolve_visibility(form, {"f0": "x"})
        assert len(visibility) == 600
        assert visibility["f0"] is True
        assert visibility["f1"] is True
        assert visibility["f2"] is False


class TestGetVisibleFields:
    """Tests for get_visible_fields."""

    def test_document_order(self, intake_form):
        visible = [f.id for f in get_visible_fields(intake_form, {"field_smoker": "Yes"})]
        assert visible == [
            "field_name",
            "field_age",
            "field_gender",
            "field_smoker",
            "field_cigs",
            "field_quit_attempts",
            "field_start_date",
            "field_end_date",
            "field_notes",
        ]
