"""Exception hierarchy for the dispatch simulation."""

from typing import Any


class SimulationError(Exception):
    """Base exception for all simulation errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class TransientError(SimulationError):
    """Errors that may succeed on retry."""

    pass


class NetworkError(TransientError):
    """Network-related transient errors (timeout, connection refused)."""

    pass


class ServiceUnavailableError(TransientError):
    """External service temporarily unavailable (non-2xx responses)."""

    pass


class PermanentError(SimulationError):
    """Errors that will not succeed on retry."""

    pass


class ValidationError(PermanentError):
    """Invalid input or data format."""

    pass


class StateError(PermanentError):
    """Invalid ride state transition."""

    pass


class ConfigurationError(PermanentError):
    """Missing or invalid configuration."""

    pass
