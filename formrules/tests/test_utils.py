"""
Unit tests for the shared value helpers.

Tests cover:
- Date parsing: ISO dates, datetime strings, invalid inputs
- Complete-date parsing that rejects month or weekday names
- Number coercion of answer values and literals
- Stringification of answer values
- Coercing (loose) equality
- The emptiness predicate used by required rules
"""

from datetime import date

import pytest

from formrules.core.utils import (
    is_empty,
    loose_equals,
    parse_complete_date,
    parse_date,
    stringify,
    to_number,
)


# =============================================================
# Test: Date parsing utility
# =============================================================


class TestParseDate:
    """Tests for the parse_date utility function."""

    def test_iso_date(self):
        assert parse_date("2026-02-12") == date(2026, 2, 12)

    def test_iso_datetime(self):
        assert parse_date("2026-02-12T10:30:00") == date(2026, 2, 12)

    def test_date_with_slash(self):
        assert parse_date("2026/03/15") == date(2026, 3, 15)

    def test_none_input(self):
        assert parse_date(None) is None

    def test_empty_string(self):
        assert parse_date("") is None

    def test_non_string_input(self):
        assert parse_date(12345) is None

    def test_garbage_input(self):
        assert parse_date("not-a-date") is None

    def test_leap_year(self):
        assert parse_date("2024-02-29") == date(2024, 2, 29)

    def test_invalid_calendar_date(self):
        assert parse_date("2026-02-30") is None

    def test_month_name_is_completed(self):
        assert parse_date("May") is not None


class TestParseCompleteDate:
    """Tests for parse_complete_date, which rejects partial dates."""

    def test_iso_date(self):
        assert parse_complete_date("2026-02-12") == date(2026, 2, 12)

    def test_iso_datetime(self):
        assert parse_complete_date("2026-02-12T23:30:00") == date(2026, 2, 12)

    def test_date_with_slash(self):
        assert parse_complete_date("2026/03/15") == date(2026, 3, 15)

    @pytest.mark.parametrize("value", ["May", "June", "Mon", "Sun", "2026-05", "10:30"])
    def test_partial_dates_rejected(self, value):
        assert parse_complete_date(value) is None

    @pytest.mark.parametrize("value", [None, "", 12345, "not-a-date", "2026-02-30"])
    def test_invalid_input(self, value):
        assert parse_complete_date(value) is None


# =============================================================
# Test: Number coercion
# =============================================================


class TestToNumber:
    """Tests for to_number."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            (5, 5),
            (2.5, 2.5),
            ("42", 42),
            (" 7 ", 7),
            ("-3", -3),
            ("0.5", 0.5),
            (".5", 0.5),
            ("1e3", 1000.0),
        ],
    )
    def test_numeric_values(self, value, expected):
        assert to_number(value) == expected

    @pytest.mark.parametrize(
        "value",
        ["", "   ", "abc", "12abc", "2026-01-01", "Infinity", "NaN", None, True, False, [1]],
    )
    def test_non_numeric_values(self, value):
        assert to_number(value) is None

    def test_integer_string_stays_int(self):
        assert isinstance(to_number("10"), int)


# =============================================================
# Test: Stringify
# =============================================================


class TestStringify:
    """Tests for stringify."""

    def test_none_is_empty(self):
        assert stringify(None) == ""

    def test_booleans_are_lowercase(self):
        assert stringify(True) == "true"
        assert stringify(False) == "false"

    def test_integral_float_drops_fraction(self):
        assert stringify(5.0) == "5"

    def test_list_is_comma_joined(self):
        assert stringify(["a", "b"]) == "a,b"

    def test_plain_string(self):
        assert stringify("Yes") == "Yes"


# =============================================================
# Test: Loose equality
# =============================================================


class TestLooseEquals:
    """Tests for the coercing equality used by == and !=."""

    def test_numeric_string_equals_number(self):
        assert loose_equals("5", 5) is True
        assert loose_equals(5, "5") is True

    def test_non_numeric_string_not_equal_to_number(self):
        assert loose_equals("five", 5) is False

    def test_none_only_equals_none(self):
        assert loose_equals(None, None) is True
        assert loose_equals(None, "") is False
        assert loose_equals(0, None) is False

    def test_bool_compares_as_number(self):
        assert loose_equals(True, 1) is True
        assert loose_equals(False, 0) is True
        assert loose_equals(True, True) is True

    def test_bool_does_not_equal_its_name(self):
        assert loose_equals(True, "true") is False

    def test_single_item_list_equals_scalar(self):
        assert loose_equals(["Yes"], "Yes") is True
        assert loose_equals(["a", "b"], "a,b") is True

    def test_strings_are_case_sensitive(self):
        assert loose_equals("Yes", "yes") is False

    def test_empty_string_is_not_zero(self):
        assert loose_equals(0, "") is False
        assert loose_equals("", 0) is False
        assert loose_equals("", "") is True


# =============================================================
# Test: Emptiness predicate
# =============================================================


class TestIsEmpty:
    """Tests for is_empty."""

    @pytest.mark.parametrize("value", [None, "", "   ", "\t\n", []])
    def test_empty_values(self, value):
        assert is_empty(value) is True

    @pytest.mark.parametrize("value", ["a", 0, False, ["x"], {"k": "v"}])
    def test_non_empty_values(self, value):
        assert is_empty(value) is False
