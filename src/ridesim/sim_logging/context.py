"""Task-local logging context for adding fields to log records.

Backed by a ContextVar so every asyncio task sees the fields that were set
when it was created, and fields set inside one ride's task never leak into
another ride's log records.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

_context: ContextVar[dict[str, Any] | None] = ContextVar("log_context", default=None)


class LogContext:
    """Accessors for the current task's log context fields."""

    @classmethod
    def set(cls, **kwargs: Any) -> None:
        _context.set({**cls.get(), **kwargs})

    @classmethod
    def get(cls) -> dict[str, Any]:
        return _context.get() or {}

    @classmethod
    def clear(cls) -> None:
        _context.set({})


class ContextFilter(logging.Filter):
    """Injects LogContext fields into log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in LogContext.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


class DefaultCorrelationFilter(logging.Filter):
    """Marks records logged outside any ride with a placeholder correlation_id."""

    def __init__(self, default: str = "-") -> None:
        super().__init__()
        self.default = default

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = self.default
        return True


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Context manager that sets logging context fields.

    Fields are injected into log records via ContextFilter, which must
    be attached to the handler (see setup_logging). Previous fields are
    restored on exit.
    """
    token = _context.set({**LogContext.get(), **kwargs})
    try:
        yield
    finally:
        _context.reset(token)


@contextmanager
def log_ride_context(ride_id: str, **kwargs: Any) -> Iterator[None]:
    """Convenience context manager for ride operations."""
    correlation_id = kwargs.pop("correlation_id", ride_id)
    with log_context(ride_id=ride_id, correlation_id=correlation_id, **kwargs):
        yield
