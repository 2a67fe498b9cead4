"""ChartCalc - formula evaluation engine for report charts."""

__version__ = "0.1.0"
