"""Unit tests for result helpers."""

import math

import pytest

from chartcalc.formula.results import NA, coerce_number, is_na, is_number, to_display


class TestNotApplicable:
    """Tests for the NA sentinel."""

    def test_sentinel(self):
        assert is_na(NA)
        assert not NA
        assert str(NA) == "NA"
        assert NA != 0

    def test_to_display(self):
        assert to_display(NA) == "NA"
        assert to_display(None) == "NA"
        assert to_display(0.0) == 0.0


class TestCoerceNumber:
    """Tests for coerce_number."""

    @pytest.mark.parametrize("value,expected", [(3, 3.0), (2.5, 2.5), ("12", 12.0), (" 3.5 ", 3.5)])
    def test_numeric(self, value, expected):
        assert coerce_number(value) == expected

    @pytest.mark.parametrize("value", [None, True, "", "abc", "inf", [1], {"a": 1}])
    def test_not_numeric(self, value):
        assert coerce_number(value) is None

    def test_integer_too_large_for_float(self):
        """Out-of-range integers become signed infinity."""
        assert coerce_number(10**400) == math.inf
        assert coerce_number(-(10**400)) == -math.inf

    def test_bool_is_not_a_number(self):
        assert not is_number(False)
