"""Time-driven driver movement along a route.

The driver jumps from vertex to vertex: point ``i`` of an ``n``-point route is
reported at ``i * duration / (n - 1)`` with progress ``i / (n - 1)``, for
``i = 0 .. n - 2``. The final vertex is never reported; the leg ends one
interval after the last update, when the task finishes, and the owner of the
task signals completion (progress 1.0) through the ride status.
"""

import asyncio
import logging
from collections.abc import Callable, Sequence

from ridesim.core.tasks import TaskHandle
from ridesim.geo.models import Coordinate

logger = logging.getLogger(__name__)

PositionCallback = Callable[[Coordinate, float], None]


def simulate_movement(
    route: Sequence[Coordinate],
    duration: float,
    on_update: PositionCallback,
) -> TaskHandle[int]:
    """Animate a driver over ``route`` for ``duration`` seconds.

    Must be called from a running event loop. Routes with fewer than two
    points are ignored and an inert handle is returned.

    Returns:
        Handle whose result is the number of updates emitted.
    """
    if len(route) < 2:
        logger.debug("Route has %d point(s), nothing to animate", len(route))
        return TaskHandle.inert("movement")

    return TaskHandle.spawn(
        run_movement(route, duration, on_update),
        name=f"movement[{len(route)} pts]",
    )


async def run_movement(
    route: Sequence[Coordinate], duration: float, on_update: PositionCallback
) -> int:
    """Coroutine form of :func:`simulate_movement` for callers that own the task."""
    if len(route) < 2:
        return 0

    route = list(route)
    loop = asyncio.get_running_loop()
    steps = len(route) - 1
    interval = duration / steps
    start = loop.time()

    for i in range(steps):
        # Scheduled against the start time so ticks do not drift
        delay = start + i * interval - loop.time()
        if delay > 0:
            await asyncio.sleep(delay)
        on_update(route[i], i / steps)

    remaining = start + duration - loop.time()
    if remaining > 0:
        await asyncio.sleep(remaining)

    logger.debug("Movement finished after %d updates", steps)
    return steps
