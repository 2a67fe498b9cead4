"""Evaluation result types.

A formula either produces a finite number, a string (asset URLs and text
fields), or the NA sentinel meaning "could not be computed". NA is never
the number 0 and never compares equal to it.
"""

import math
from typing import Any, Union


class NotApplicable:
    """Singleton marking a value that could not be computed."""

    _instance: "NotApplicable | None" = None

    def __new__(cls) -> "NotApplicable":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NA"

    def __str__(self) -> str:
        return "NA"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> tuple[Any, ...]:
        return (NotApplicable, ())


NA = NotApplicable()

FormulaResult = Union[float, str, NotApplicable]


def is_na(value: Any) -> bool:
    """Return True if value is the NA sentinel."""
    return value is NA


def is_number(value: Any) -> bool:
    """True for int/float values; bools are not numbers in formulas."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def coerce_number(value: Any) -> float | None:
    """
    Convert a data value to a float if it represents a number.

    Numeric strings ("12", " 3.5 ") are accepted since statistics coming
    from the document store are not always typed.

    Integers too large for a float become signed infinity, which the
    evaluator reports as NA.

    Returns:
        The float value, or None if the value is not numeric
    """
    if is_number(value):
        try:
            return float(value)
        except OverflowError:
            return math.inf if value > 0 else -math.inf
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


def to_display(value: Any) -> float | str:
    """Render a result for consumers that show "NA" as text."""
    if value is NA or value is None:
        return "NA"
    return value
