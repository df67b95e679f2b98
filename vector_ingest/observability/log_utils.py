"""
Logging utilities for structured pipeline logging.

Context passed through ``extra=`` is rendered to short strings: a document's
embedding list is logged as its count and dimension, long key lists as their
length, so a run over thousands of chunks never floods a log line.

Dependencies: logging (stdlib)
System role: Logging helper functions
"""

import logging
from enum import Enum
from typing import Any

# Sequences up to this length are logged item by item
_MAX_LISTED_ITEMS = 5


def _render_sequence(values: list | tuple) -> str:
    if values and all(hasattr(item, "vector") for item in values):
        return f"{len(values)} embeddings (dim {len(values[0].vector)})"
    if len(values) <= _MAX_LISTED_ITEMS and all(isinstance(item, (str, int)) for item in values):
        return "[" + ", ".join(str(item) for item in values) + "]"
    return f"{type(values).__name__}({len(values)} items)"


def safe_log_value(value: Any, max_length: int = 300) -> str:
    """
    Render a context value as a bounded string.

    Args:
        value: Value to render
        max_length: Length after which the string is cut

    Returns:
        str: Log-safe representation
    """
    if value is None:
        return "None"
    if isinstance(value, Enum):
        rendered = str(value.value)
    elif isinstance(value, (list, tuple)):
        rendered = _render_sequence(value)
    elif isinstance(value, dict):
        rendered = f"dict({len(value)} keys)"
    else:
        rendered = str(value)

    if len(rendered) > max_length:
        return rendered[:max_length] + f"... (truncated, {len(rendered)} total)"
    return rendered


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    **context: Any,
) -> None:
    """Log ``message`` with every context value passed through safe_log_value."""
    logger.log(
        level,
        message,
        extra={key: safe_log_value(value) for key, value in context.items()},
    )


def log_exception_with_context(
    logger: logging.Logger,
    message: str,
    exc: BaseException,
    **context: Any,
) -> None:
    """
    Log a failure with its traceback and context.

    Pipeline errors contribute their ``details`` (batch index, status code,
    collaborator) unless the caller passed the same key explicitly.

    Args:
        logger: Logger instance
        message: Log message
        exc: Exception being reported
        **context: Additional context
    """
    merged = dict(getattr(exc, "details", None) or {})
    merged.update(context)
    extra = {key: safe_log_value(value) for key, value in merged.items()}
    extra["error_type"] = type(exc).__name__
    extra["error_msg"] = safe_log_value(getattr(exc, "message", str(exc)))
    logger.error(message, exc_info=exc, extra=extra)
