"""
Custom exceptions for ChartCalc.

Provides a hierarchy of exceptions that map to HTTP status codes
and include structured error information.

Formula evaluation itself never raises: failures there collapse to the
NA sentinel. These exceptions are raised by the parser (syntax errors)
and by the metadata fetchers, and surfaced by the API layer.
"""

from typing import Any


class ChartCalcException(Exception):
    """
    Base exception for all ChartCalc errors.

    All custom exceptions should inherit from this class.
    """

    status_code = 500

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
            details: Additional error details
        """
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
            }
        }


# =============================================================================
# HTTP 400 - Bad Request Errors
# =============================================================================


class BadRequestError(ChartCalcException):
    """Invalid request parameters or payload."""

    status_code = 400


class FormulaSyntaxError(BadRequestError):
    """Formula could not be parsed."""

    def __init__(self, formula: str, reason: str) -> None:
        super().__init__(
            message=f"Invalid formula syntax: {reason}",
            code="FORMULA_SYNTAX_ERROR",
            details={"formula": formula[:200]},
        )
        self.reason = reason


# =============================================================================
# HTTP 502 - Upstream Errors
# =============================================================================


class MetadataFetchError(ChartCalcException):
    """Variable registry or content asset endpoint could not be read."""

    status_code = 502

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(
            message=f"Failed to fetch {source}: {reason}",
            code="METADATA_FETCH_ERROR",
            details={"source": source},
        )
