"""Presentation-facing driver of one ride at a time.

The session owns every task it starts (search, approach leg, trip leg) and
hands observers snapshots of the ride plus live ``(position, progress)``
updates. ``close()`` cancels whatever is still running.
"""

import asyncio
import logging
import math
from typing import Protocol

from ridesim.agents.driver import VehicleClass
from ridesim.core.exceptions import StateError
from ridesim.core.tasks import TaskHandle
from ridesim.geo.models import Coordinate
from ridesim.matching.matching_engine import MatchingEngine, SearchOutcome, SearchUpdate
from ridesim.ride import LEG_TRANSITIONS, Leg, RideSimulation, RideStatus
from ridesim.sim_logging import log_ride_context
from ridesim.trips.movement import run_movement

logger = logging.getLogger(__name__)


class RideSessionObserver(Protocol):
    def on_snapshot(self, ride: RideSimulation) -> None: ...

    def on_position(self, position: Coordinate, progress: float) -> None: ...

    def on_search_update(self, update: SearchUpdate) -> None: ...

    def on_idle(self) -> None: ...


class NullObserver:
    def on_snapshot(self, ride: RideSimulation) -> None:
        pass

    def on_position(self, position: Coordinate, progress: float) -> None:
        pass

    def on_search_update(self, update: SearchUpdate) -> None:
        pass

    def on_idle(self) -> None:
        pass


def remaining_minutes(initial_eta_seconds: int, progress: float) -> int:
    """Minutes left on a leg for display, never below 1."""
    initial_minutes = math.ceil(initial_eta_seconds / 60)
    return max(1, math.ceil(initial_minutes * (1 - progress)))


class RideSession:
    def __init__(
        self,
        engine: MatchingEngine,
        observer: RideSessionObserver | None = None,
    ) -> None:
        self.engine = engine
        self.settings = engine.settings
        self.observer: RideSessionObserver = observer or NullObserver()
        self.ride: RideSimulation | None = None
        self.position: Coordinate | None = None
        self._search: TaskHandle[SearchOutcome] | None = None
        self._leg: TaskHandle[RideSimulation] | None = None

    def request_ride(
        self,
        pickup: Coordinate,
        dropoff: Coordinate,
        vehicle_class: VehicleClass = VehicleClass.STANDARD,
    ) -> TaskHandle[SearchOutcome]:
        """Discard any previous ride and start searching for a new one."""
        self.close()
        self.ride = RideSimulation(vehicle_class=vehicle_class)
        self.position = None
        logger.info(
            "Ride %s requested: %s -> %s (%s)",
            self.ride.ride_id,
            pickup.as_tuple(),
            dropoff.as_tuple(),
            vehicle_class.value,
        )
        self._publish()

        self._search = self.engine.request_ride(
            pickup,
            dropoff,
            vehicle_class,
            ride=self.ride,
            on_update=self._on_search_update,
            on_idle=self._on_idle,
        )
        return self._search

    def cancel_search(self) -> None:
        """Abort a search in flight. No-op once the search has finished."""
        if self._search is not None:
            self._search.cancel()
            self._search = None
        if self.ride is not None and self.ride.status is RideStatus.SEARCHING:
            self.ride.transition_to(RideStatus.CANCELLED)
            logger.info("Ride %s cancelled while searching", self.ride.ride_id)
            self._publish()

    def cancel_ride(self) -> None:
        """Cancel the ride at any non-terminal stage."""
        self.close()
        if self.ride is not None and not self.ride.status.is_terminal:
            self.ride.transition_to(RideStatus.CANCELLED)
            logger.info("Ride %s cancelled", self.ride.ride_id)
            self._publish()

    def start_leg(self, leg: Leg) -> TaskHandle[RideSimulation]:
        """Animate the approach or trip leg and advance the status when it ends.

        Raises:
            StateError: if there is no ride, the ride is not in the status the
                leg runs in, or another leg is still running.
        """
        ride = self._require_ride()
        expected, _ = LEG_TRANSITIONS[leg]
        if ride.status is not expected:
            raise StateError(
                f"Cannot start {leg.value} leg while ride is {ride.status.value}",
                details={"ride_id": ride.ride_id},
            )
        if self._leg is not None and not self._leg.done:
            raise StateError("Another leg is still running", details={"ride_id": ride.ride_id})

        self._leg = TaskHandle.spawn(self._run_leg(ride, leg), name=f"{leg.value}-leg[{ride.ride_id}]")
        return self._leg

    def close(self) -> None:
        """Cancel every task this session started. Safe to call repeatedly."""
        for handle in (self._search, self._leg):
            if handle is not None:
                handle.cancel()
        self._search = None
        self._leg = None

    async def _run_leg(self, ride: RideSimulation, leg: Leg) -> RideSimulation:
        _, next_status = LEG_TRANSITIONS[leg]
        duration = (
            self.settings.approach_duration if leg is Leg.APPROACH else self.settings.trip_duration
        )
        route = ride.route_for(leg)

        driver_id = ride.driver.id if ride.driver else None
        with log_ride_context(ride.ride_id, leg=leg.value, driver_id=driver_id):
            logger.info("Starting %s leg: %d points over %.1fs", leg.value, len(route), duration)
            ride.progress = 0.0
            self._publish()

            loop = asyncio.get_running_loop()
            started = loop.time()
            await run_movement(route, duration, self._on_position)

            # Degenerate routes emit nothing; the leg still lasts its full duration
            remaining = started + duration - loop.time()
            if remaining > 0:
                await asyncio.sleep(remaining)

            ride.transition_to(next_status)
            logger.info("Finished %s leg, ride is %s", leg.value, ride.status.value)
            self._publish()
        return ride

    def _on_position(self, position: Coordinate, progress: float) -> None:
        self.position = position
        if self.ride is not None:
            self.ride.progress = progress
        self.observer.on_position(position, progress)

    def _on_search_update(self, update: SearchUpdate) -> None:
        self.observer.on_search_update(update)
        self._publish()

    def _on_idle(self) -> None:
        logger.info("Search settled without a driver, returning to idle")
        self.ride = None
        self._search = None
        self.observer.on_idle()

    def _publish(self) -> None:
        if self.ride is not None:
            self.observer.on_snapshot(self.ride.snapshot())

    def _require_ride(self) -> RideSimulation:
        if self.ride is None:
            raise StateError("No active ride")
        return self.ride
