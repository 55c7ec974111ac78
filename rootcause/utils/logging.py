"""
Structured logging for the contribution scorer.

Events carry the metric and dataset of the scoring call that emitted them:
the scorer binds both into structlog's context variables for the duration of
a call, so cube adapters and the aggregator log them without passing them
along.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from rootcause.config import get_settings
from rootcause.models.slices import IDENTITY_SEPARATOR

_configured = False


def add_slice_parts(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Split a ``dimension`` slice identity into searchable name/value fields."""
    identity = event_dict.get("dimension")
    if isinstance(identity, str) and IDENTITY_SEPARATOR in identity:
        name, _, value = identity.partition(IDENTITY_SEPARATOR)
        event_dict.setdefault("dimension_name", name)
        event_dict.setdefault("dimension_value", value)
    return event_dict


def configure_logging(force: bool = False) -> None:
    """
    Configure structlog for the scorer from settings.

    Renders JSON outside dev mode and colored console output in dev mode.
    Only the first call has an effect unless ``force`` is set.
    """
    global _configured
    if _configured and not force:
        return

    settings = get_settings()
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
    )

    if settings.log_format == "json" and not settings.dev_mode:
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            add_slice_parts,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured = True


def get_logger(name: str = __name__) -> structlog.BoundLogger:
    """Get a structlog logger named after the calling module."""
    return structlog.get_logger(name)


@contextmanager
def scoring_context(metric: str, dataset: str) -> Iterator[None]:
    """Bind the metric and dataset of a scoring call to every event logged inside it."""
    with structlog.contextvars.bound_contextvars(metric=metric, dataset=dataset):
        yield


def log_event(
    logger: structlog.BoundLogger,
    level: str,
    event: str,
    **kwargs: Any,
) -> None:
    """
    Log a structured event at a level chosen at runtime.

    Args:
        logger: Structlog logger instance
        level: Log level (info, warning, error, etc.)
        event: Event name
        **kwargs: Additional context fields
    """
    log_func = getattr(logger, level.lower(), logger.info)
    log_func(event, **kwargs)
