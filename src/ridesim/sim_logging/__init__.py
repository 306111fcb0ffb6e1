"""Logging with ride-scoped context and structured formatters."""

from .context import (
    ContextFilter,
    DefaultCorrelationFilter,
    LogContext,
    log_context,
    log_ride_context,
)
from .formatters import DevFormatter, JSONFormatter
from .setup import configure_from_settings, setup_logging

__all__ = [
    "setup_logging",
    "configure_from_settings",
    "log_context",
    "log_ride_context",
    "JSONFormatter",
    "DevFormatter",
    "DefaultCorrelationFilter",
    "LogContext",
    "ContextFilter",
]
