"""Retry utilities with configurable backoff."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

from .exceptions import TransientError

T = TypeVar("T")
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int = 3
    base_delay: float = 0.5
    multiplier: float = 2.0
    max_delay: float = 30.0
    retryable_exceptions: tuple[type[Exception], ...] = field(
        default_factory=lambda: (TransientError,)
    )

    @classmethod
    def fixed(
        cls,
        max_attempts: int,
        delay: float,
        retryable_exceptions: tuple[type[Exception], ...] = (TransientError,),
    ) -> "RetryConfig":
        """Constant delay between attempts (no exponential growth)."""
        return cls(
            max_attempts=max_attempts,
            base_delay=delay,
            multiplier=1.0,
            max_delay=delay,
            retryable_exceptions=retryable_exceptions,
        )

    def delay_for(self, attempt: int) -> float:
        """Delay before the retry that follows the zero-based ``attempt``."""
        return min(self.base_delay * (self.multiplier**attempt), self.max_delay)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    config: RetryConfig | None = None,
    operation_name: str = "operation",
) -> T:
    """Execute async operation, retrying retryable failures with backoff.

    Cancellation during the sleep propagates immediately and no further
    attempt is started.
    """
    if config is None:
        config = RetryConfig()

    last_exception: Exception | None = None

    for attempt in range(config.max_attempts):
        try:
            return await operation()
        except config.retryable_exceptions as e:
            last_exception = e
            if attempt == config.max_attempts - 1:
                logger.warning(
                    f"{operation_name} failed after {config.max_attempts} attempts: {e}"
                )
                raise

            delay = config.delay_for(attempt)
            logger.info(
                f"{operation_name} failed (attempt {attempt + 1}/{config.max_attempts}), "
                f"retrying in {delay:.1f}s: {e}"
            )

            await asyncio.sleep(delay)

    raise last_exception  # type: ignore
