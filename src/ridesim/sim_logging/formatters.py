"""Log formatters: JSON lines for machines, one-line text for people."""

import json
import logging
from datetime import UTC, datetime

RIDE_FIELDS = ("ride_id", "driver_id", "leg", "correlation_id")


def ride_fields(record: logging.LogRecord) -> dict[str, object]:
    """Ride context attached to ``record`` by ContextFilter or ``extra=``."""
    return {name: getattr(record, name) for name in RIDE_FIELDS if hasattr(record, name)}


class JSONFormatter(logging.Formatter):
    """One JSON object per record, ride fields included when present."""

    def __init__(self, environment: str = "development"):
        super().__init__()
        self.environment = environment

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "env": self.environment,
            **ride_fields(record),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class DevFormatter(logging.Formatter):
    """``time [LEVEL] [ride/leg] logger: message`` for terminals."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s [%(levelname)8s] [%(ride_tag)s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        tag = str(getattr(record, "correlation_id", "-"))
        leg = getattr(record, "leg", None)
        record.ride_tag = f"{tag}/{leg}" if leg else tag
        return super().format(record)
