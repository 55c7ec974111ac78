"""Dimension contribution scoring for root cause analysis."""

__version__ = "1.0.0"
