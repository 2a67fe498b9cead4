"""
Logging configuration for ChartCalc.

JSON lines in production, coloured single-line records in development.
Context passed through ``extra=`` (formula, token, cache name, ...) is
kept on the record and emitted as top-level JSON keys.
"""

import logging
import sys
from typing import Any

import orjson

# Formulas are user input of arbitrary length
MAX_FORMULA_LOG_LENGTH = 200

# Attributes every LogRecord carries; anything else came in through extra=
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
    "service",
}


def _context(record: logging.LogRecord) -> dict[str, Any]:
    context = {
        key: value
        for key, value in vars(record).items()
        if key not in _RECORD_ATTRS and not key.startswith("_")
    }
    formula = context.get("formula")
    if isinstance(formula, str) and len(formula) > MAX_FORMULA_LOG_LENGTH:
        context["formula"] = formula[:MAX_FORMULA_LOG_LENGTH] + "..."
    return context


class ServiceFilter(logging.Filter):
    """Stamp every record with the service name."""

    def __init__(self, service: str) -> None:
        super().__init__()
        self.service = service

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self.service
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line for log aggregators."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "service": getattr(record, "service", None),
            "logger": record.name,
            "message": record.getMessage(),
            "line": record.lineno,
        }
        log_data.update(_context(record))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return orjson.dumps(log_data, default=str).decode("utf-8")


class ConsoleFormatter(logging.Formatter):
    """Coloured level names, context appended as key=value pairs."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        levelname = record.levelname
        record.levelname = f"{color}{levelname}{self.RESET}"
        try:
            line = super().format(record)
        finally:
            record.levelname = levelname

        context = _context(record)
        if context:
            line += " | " + " ".join(f"{key}={value!r}" for key, value in context.items())
        return line


def setup_logging(
    log_level: str = "INFO",
    json_logs: bool = False,
    service: str = "chartcalc",
) -> None:
    """
    Set up application logging on the root logger.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Whether to output JSON logs (for production)
        service: Name stamped on every record
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(ServiceFilter(service))
    if json_logs:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            ConsoleFormatter(
                "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level.upper())

    # Metadata refreshes would log every request otherwise
    for noisy in ("uvicorn.access", "httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(
        "Logging configured", extra={"log_level": log_level, "json_logs": json_logs}
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name (usually __name__)."""
    return logging.getLogger(name)
