"""Core configuration and utilities for ChartCalc."""

from chartcalc.core.config import settings
from chartcalc.core.logging import setup_logging

__all__ = ["settings", "setup_logging"]
