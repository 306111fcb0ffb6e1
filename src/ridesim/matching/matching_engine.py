"""Driver search and ride creation.

A search attempt waits ``search_duration`` and then finds a driver with
probability ``search_success_probability``. Unsuccessful attempts are retried
with a fixed delay up to ``max_search_attempts``; after that the ride ends in
``no_drivers`` and the caller is told there is nobody available. Nothing in
this flow raises on a missing driver or a failed route lookup.
"""

import asyncio
import logging
import random
from collections.abc import Callable

from pydantic import BaseModel

from ridesim.agents.driver import Driver, VehicleClass
from ridesim.agents.driver_factory import DriverFactory, calculate_eta
from ridesim.core.exceptions import TransientError
from ridesim.core.retry import RetryConfig, with_retry
from ridesim.core.tasks import TaskHandle
from ridesim.geo.models import Coordinate
from ridesim.geo.routing_client import RoutingGateway
from ridesim.ride import RideSimulation, RideStatus
from ridesim.settings import SimulationSettings
from ridesim.sim_logging import log_ride_context

logger = logging.getLogger(__name__)

SEARCHING_MESSAGE = "Finding your driver..."
RETRY_MESSAGE = "Searching again... ({attempt}/{max_attempts})"
DRIVER_FOUND_MESSAGE = "Driver found"
NO_DRIVERS_MESSAGE = "No drivers available at this time"


class NoDriverAvailableError(TransientError):
    """A single search attempt found nobody. Retryable."""

    pass


class SearchUpdate(BaseModel):
    """Progress message for whoever displays the search."""

    message: str
    attempt: int
    max_attempts: int


class SearchOutcome(BaseModel):
    ride: RideSimulation
    message: str

    @property
    def found(self) -> bool:
        return self.ride.driver is not None


SearchUpdateCallback = Callable[[SearchUpdate], None]


class MatchingEngine:
    def __init__(
        self,
        settings: SimulationSettings,
        gateway: RoutingGateway,
        driver_factory: DriverFactory | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.settings = settings
        self.gateway = gateway
        self.driver_factory = driver_factory or DriverFactory(
            radius_miles=settings.driver_search_radius_miles
        )
        self.rng = rng or self.driver_factory.random

    async def simulate_driver_search(
        self,
        pickup: Coordinate,
        vehicle_class: VehicleClass = VehicleClass.STANDARD,
    ) -> Driver | None:
        """One search attempt: a driver with its ETA to pickup, or None."""
        await asyncio.sleep(self.settings.search_duration)

        if self.rng.random() >= self.settings.search_success_probability:
            logger.info("No %s driver found near %s", vehicle_class.value, pickup.as_tuple())
            return None

        driver = self.driver_factory.generate_driver(pickup, vehicle_class)
        eta = calculate_eta(driver.current_location, pickup, self.settings.average_speed_mph)
        return driver.with_eta(eta)

    async def create_ride_simulation(
        self,
        pickup: Coordinate,
        dropoff: Coordinate,
        vehicle_class: VehicleClass = VehicleClass.STANDARD,
        ride: RideSimulation | None = None,
        attempt: int = 1,
    ) -> RideSimulation:
        """Run one search attempt and, on success, fetch both routes.

        Without a driver the ride is returned unchanged at ``searching`` with
        ``search_attempts`` set to ``attempt``.
        """
        ride = ride or RideSimulation(vehicle_class=vehicle_class)
        ride.search_attempts = attempt

        driver = await self.simulate_driver_search(pickup, vehicle_class)
        if driver is None:
            return ride

        approach = await self.gateway.fetch_route_details(driver.current_location, pickup)
        trip = await self.gateway.fetch_route_details(pickup, dropoff)

        ride.driver = driver
        ride.approach_route = approach.geometry
        ride.trip_route = trip.geometry
        ride.trip_info = trip.info
        ride.transition_to(RideStatus.APPROACHING)

        logger.info(
            "Matched driver %s (eta %ss, approach %d pts, trip %d pts)",
            driver.id,
            driver.eta,
            len(ride.approach_route),
            len(ride.trip_route),
        )
        return ride

    async def find_ride(
        self,
        pickup: Coordinate,
        dropoff: Coordinate,
        vehicle_class: VehicleClass = VehicleClass.STANDARD,
        ride: RideSimulation | None = None,
        on_update: SearchUpdateCallback | None = None,
    ) -> SearchOutcome:
        """Search with the bounded retry policy."""
        ride = ride or RideSimulation(vehicle_class=vehicle_class)
        max_attempts = self.settings.max_search_attempts
        attempts = 0

        def notify(message: str, attempt: int) -> None:
            if on_update:
                on_update(SearchUpdate(message=message, attempt=attempt, max_attempts=max_attempts))

        async def attempt_search() -> RideSimulation:
            nonlocal attempts
            attempts += 1
            ride.search_attempts = attempts
            if attempts == 1:
                notify(SEARCHING_MESSAGE, attempts)
            else:
                notify(RETRY_MESSAGE.format(attempt=attempts, max_attempts=max_attempts), attempts)
            await self.create_ride_simulation(pickup, dropoff, vehicle_class, ride, attempts)
            if ride.driver is None:
                raise NoDriverAvailableError(f"No driver found (attempt {attempts}/{max_attempts})")
            return ride

        config = RetryConfig.fixed(
            max_attempts, self.settings.retry_delay, (NoDriverAvailableError,)
        )

        with log_ride_context(ride.ride_id):
            try:
                await with_retry(attempt_search, config, operation_name="Driver search")
            except NoDriverAvailableError:
                ride.transition_to(RideStatus.NO_DRIVERS)
                notify(NO_DRIVERS_MESSAGE, attempts)
                return SearchOutcome(ride=ride, message=NO_DRIVERS_MESSAGE)

        notify(DRIVER_FOUND_MESSAGE, attempts)
        return SearchOutcome(ride=ride, message=DRIVER_FOUND_MESSAGE)

    def request_ride(
        self,
        pickup: Coordinate,
        dropoff: Coordinate,
        vehicle_class: VehicleClass = VehicleClass.STANDARD,
        ride: RideSimulation | None = None,
        on_update: SearchUpdateCallback | None = None,
        on_idle: Callable[[], None] | None = None,
    ) -> TaskHandle[SearchOutcome]:
        """Start a search in the background and return its handle.

        When no driver is found, ``on_idle`` is called once the no-drivers
        message has been shown for ``no_driver_display_delay`` seconds.
        The engine keeps no reference to the task; cancelling it is the
        caller's job. Must be called from a running event loop.
        """
        ride = ride or RideSimulation(vehicle_class=vehicle_class)
        return TaskHandle.spawn(
            self._search_then_settle(pickup, dropoff, vehicle_class, ride, on_update, on_idle),
            name=f"driver-search[{ride.ride_id}]",
        )

    async def _search_then_settle(
        self,
        pickup: Coordinate,
        dropoff: Coordinate,
        vehicle_class: VehicleClass,
        ride: RideSimulation,
        on_update: SearchUpdateCallback | None,
        on_idle: Callable[[], None] | None,
    ) -> SearchOutcome:
        outcome = await self.find_ride(pickup, dropoff, vehicle_class, ride, on_update)
        if not outcome.found:
            await asyncio.sleep(self.settings.no_driver_display_delay)
            if on_idle:
                on_idle()
        return outcome
