"""Unit tests for formula functions."""

import math

import pytest

from chartcalc.formula.functions import (
    FORMULA_FUNCTIONS,
    func_abs,
    func_max,
    func_min,
    func_round,
)
from chartcalc.formula.results import NA


class TestNumericFunctions:
    """Tests for MAX, MIN, ROUND and ABS."""

    def test_registry(self):
        """Exactly the four math functions are registered."""
        assert set(FORMULA_FUNCTIONS) == {"MAX", "MIN", "ROUND", "ABS"}

    def test_max(self):
        """Test MAX function."""
        assert func_max(3, 7, 2) == 7

    def test_min(self):
        """Test MIN function."""
        assert func_min(3, 7, 2) == 2

    def test_max_ignores_invalid_args(self):
        """Non-numeric, NaN and NA arguments are ignored."""
        assert func_max(1, "x", math.nan, NA, 4) == 4
        assert func_min(NA, 9, "3") == 9

    def test_max_min_without_valid_args(self):
        """No valid arguments yields NA."""
        assert func_max() is NA
        assert func_min() is NA
        assert func_max("a", math.nan) is NA

    @pytest.mark.parametrize(
        "value,expected",
        [(2.5, 3), (2.4, 2), (-2.5, -3), (-2.4, -2), (0.5, 1), (10.7, 11), (7, 7)],
    )
    def test_round_half_away_from_zero(self, value, expected):
        """ROUND rounds halves away from zero."""
        assert func_round(value) == expected

    def test_round_large_value(self):
        """Huge values are already integral."""
        assert func_round(1e300) == 1e300

    def test_round_invalid(self):
        """ROUND of a non-finite or non-numeric value is NA."""
        assert func_round(math.nan) is NA
        assert func_round(math.inf) is NA
        assert func_round("2.5") is NA
        assert func_round(NA) is NA

    def test_abs(self):
        """Test ABS function."""
        assert func_abs(-4) == 4
        assert func_abs(4.5) == 4.5

    def test_abs_invalid(self):
        """ABS of a non-finite or non-numeric value is NA."""
        assert func_abs(math.nan) is NA
        assert func_abs(True) is NA
        assert func_abs(NA) is NA


class TestFunctionEdgeValues:
    """Tests for signed zero and out-of-range integers."""

    def test_round_to_zero_is_positive(self):
        """ROUND never yields negative zero."""
        result = func_round(-0.4)
        assert result == 0
        assert math.copysign(1.0, result) == 1.0

    def test_integer_too_large_for_float(self):
        """Integers beyond float range are not finite."""
        assert func_round(10**400) is NA
        assert func_abs(-(10**400)) is NA
        assert func_max(1, 10**400) == math.inf
