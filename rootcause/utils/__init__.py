"""Utility modules for logging and common helpers."""

from rootcause.utils.logging import configure_logging, get_logger, log_event, scoring_context

__all__ = ["configure_logging", "get_logger", "log_event", "scoring_context"]
