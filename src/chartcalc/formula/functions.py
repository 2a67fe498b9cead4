"""Formula functions for ChartCalc.

Implements the math functions available in formulas. Every function is
total: invalid input produces NA instead of raising.
"""

import math
from collections.abc import Callable
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from chartcalc.formula.results import NA, FormulaResult, coerce_number, is_number


# Type alias for formula functions
FormulaFunction = Callable[..., FormulaResult]

# Registry of formula functions
FORMULA_FUNCTIONS: dict[str, FormulaFunction] = {}


def register_function(name: str) -> Callable[[FormulaFunction], FormulaFunction]:
    """Decorator to register a formula function."""

    def decorator(func: FormulaFunction) -> FormulaFunction:
        FORMULA_FUNCTIONS[name.upper()] = func
        return func

    return decorator


def _numeric_args(args: tuple[Any, ...]) -> list[float]:
    """Keep numeric, non-NaN arguments."""
    values = (coerce_number(a) for a in args if is_number(a))
    return [v for v in values if not math.isnan(v)]


def _finite(value: Any) -> bool:
    return is_number(value) and math.isfinite(coerce_number(value))


@register_function("MAX")
def func_max(*args: Any) -> FormulaResult:
    """Maximum of the numeric arguments; NA if there are none."""
    values = _numeric_args(args)
    if not values:
        return NA
    return max(values)


@register_function("MIN")
def func_min(*args: Any) -> FormulaResult:
    """Minimum of the numeric arguments; NA if there are none."""
    values = _numeric_args(args)
    if not values:
        return NA
    return min(values)


@register_function("ROUND")
def func_round(value: Any) -> FormulaResult:
    """Round half away from zero to the nearest integer."""
    if not _finite(value):
        return NA
    if abs(value) >= 2**52:
        # Already integral at this magnitude
        return float(value)
    rounded = Decimal(repr(float(value))).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    # ROUND(-0.4) is 0, not -0
    return float(rounded) + 0.0


@register_function("ABS")
def func_abs(value: Any) -> FormulaResult:
    """Absolute value."""
    if not _finite(value):
        return NA
    return abs(float(value))
