"""Root logger configuration."""

import logging
import os
import sys
from typing import TextIO

from ridesim.settings import SimulationSettings

from .context import ContextFilter, DefaultCorrelationFilter
from .formatters import DevFormatter, JSONFormatter

# Third-party loggers that are chatty at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "faker")


def setup_logging(
    level: str = "INFO",
    json_output: bool = False,
    environment: str = "development",
    stream: TextIO | None = None,
) -> logging.Handler:
    """Replace the root handlers with a single filtered stream handler."""
    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        root_logger.removeHandler(existing)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JSONFormatter(environment) if json_output else DevFormatter())

    # Order matters: the ride's correlation_id must be set before the default
    handler.addFilter(ContextFilter())
    handler.addFilter(DefaultCorrelationFilter())

    root_logger.addHandler(handler)
    root_logger.setLevel(level.upper())

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return handler


def configure_from_settings(
    settings: SimulationSettings, stream: TextIO | None = None
) -> logging.Handler:
    """Set up logging from settings; ``LOG_FORMAT`` and ``ENVIRONMENT`` env vars win."""
    log_format = os.environ.get("LOG_FORMAT") or settings.log_format
    return setup_logging(
        level=settings.log_level,
        json_output=log_format == "json",
        environment=os.environ.get("ENVIRONMENT", "development"),
        stream=stream,
    )
