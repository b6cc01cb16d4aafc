"""Structured logging for the WARN notice pipeline."""

import logging
from typing import Optional, Union

from .config import JSONFormatter, KeyValueFormatter, ContextualFilter, configure_logging
from .context import (
    bind_log_context,
    clear_log_context,
    get_log_context,
    log_context,
    reset_log_context,
)


class ComponentLoggerAdapter(logging.LoggerAdapter):
    """LoggerAdapter that stamps a component name and keeps per-call extras."""

    def process(self, msg, kwargs):
        # Per-call extra wins over the adapter's defaults
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def get_logger(
    name: str, component: Optional[str] = None
) -> Union[logging.Logger, ComponentLoggerAdapter]:
    """Get a logger, optionally tagging every record with a component.

    Example:
        >>> logger = get_logger(__name__, component="pipeline")
        >>> logger.info("Run started", extra={"event": "pipeline.run.started"})
    """
    logger = logging.getLogger(name)
    if component:
        return ComponentLoggerAdapter(logger, {"component": component})
    return logger


__all__ = [
    "ComponentLoggerAdapter",
    "ContextualFilter",
    "JSONFormatter",
    "KeyValueFormatter",
    "bind_log_context",
    "clear_log_context",
    "configure_logging",
    "get_log_context",
    "get_logger",
    "log_context",
    "reset_log_context",
]
