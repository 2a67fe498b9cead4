"""API layer for ChartCalc."""
