"""Pydantic schemas for ChartCalc."""
