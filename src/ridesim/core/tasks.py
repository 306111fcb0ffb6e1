"""Cancellable handles for timer-driven asyncio work."""

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any, Generic, TypeVar

T = TypeVar("T")
logger = logging.getLogger(__name__)


class TaskHandle(Generic[T]):
    """Owner-side handle for a background task.

    ``cancel()`` is idempotent and safe to call after the task finished.
    An inert handle (no task) behaves like an already finished task.
    """

    def __init__(self, task: "asyncio.Task[T] | None" = None, name: str = "task") -> None:
        self._task = task
        self.name = name
        if task is not None:
            task.add_done_callback(self._log_failure)

    @classmethod
    def spawn(cls, coro: Coroutine[Any, Any, T], name: str = "task") -> "TaskHandle[T]":
        """Schedule ``coro`` on the running event loop and wrap it."""
        return cls(asyncio.create_task(coro, name=name), name=name)

    @classmethod
    def inert(cls, name: str = "inert") -> "TaskHandle[Any]":
        return cls(None, name=name)

    @property
    def done(self) -> bool:
        return self._task is None or self._task.done()

    @property
    def cancelled(self) -> bool:
        return self._task is not None and self._task.cancelled()

    def cancel(self) -> None:
        if self._task is None or self._task.done():
            return
        self._task.cancel()
        logger.debug("Cancelled %s", self.name)

    async def wait(self) -> T | None:
        """Wait for the task and return its result, or None if it was cancelled."""
        if self._task is None:
            return None
        try:
            return await asyncio.shield(self._task)
        except asyncio.CancelledError:
            if self._task.cancelled():
                return None
            raise

    def _log_failure(self, task: "asyncio.Task[T]") -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("%s failed: %s", self.name, exc, exc_info=exc)
