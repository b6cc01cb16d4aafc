"""Scoped log context backed by contextvars.

Fields bound here (run_id, jurisdiction, provider, ...) are stamped onto every
log record emitted inside the scope by ContextualFilter. Each thread starts
with an empty context, so pool workers bind their own fields per task.
"""

from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Any, Dict, Iterator

_LOG_CONTEXT: ContextVar[Dict[str, Any]] = ContextVar("warn_log_context", default={})


def get_log_context() -> Dict[str, Any]:
    """Return a copy of the fields bound in the current context."""
    return dict(_LOG_CONTEXT.get())


def bind_log_context(**fields: Any) -> Token:
    """Add fields to the current context.

    Returns:
        Token for reset_log_context()
    """
    return _LOG_CONTEXT.set({**_LOG_CONTEXT.get(), **fields})


def reset_log_context(token: Token) -> None:
    """Restore the context captured by bind_log_context()."""
    _LOG_CONTEXT.reset(token)


def clear_log_context() -> None:
    """Drop every bound field. Used by tests."""
    _LOG_CONTEXT.set({})


@contextmanager
def log_context(**fields: Any) -> Iterator[Dict[str, Any]]:
    """Bind fields for the duration of a with-block.

    Example:
        >>> with log_context(run_id="abc123", jurisdiction="OR"):
        ...     logger.info("Fetching")  # carries run_id and jurisdiction
    """
    token = bind_log_context(**fields)
    try:
        yield get_log_context()
    finally:
        reset_log_context(token)
