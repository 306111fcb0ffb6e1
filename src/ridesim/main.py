"""
Ride Dispatch Simulation - demo entry point

Prices every vehicle class for a pickup/drop-off pair, then runs one full ride
(driver search, approach leg, trip leg) against the configured routing
provider, logging every snapshot along the way.
"""

import argparse
import asyncio
import logging
import sys

from ridesim.agents.driver import VehicleClass
from ridesim.agents.driver_factory import DriverFactory
from ridesim.fare import format_arrival_time, format_distance, format_duration, get_all_vehicle_pricing
from ridesim.geo.models import Coordinate
from ridesim.geo.routing_client import RoutingGateway
from ridesim.matching.matching_engine import MatchingEngine, SearchUpdate
from ridesim.ride import Leg, RideSimulation
from ridesim.settings import Settings, get_settings
from ridesim.sim_logging import configure_from_settings
from ridesim.trips.ride_session import RideSession, remaining_minutes

logger = logging.getLogger(__name__)


class LoggingObserver:
    """Observer that reports ride activity through the log."""

    def __init__(self) -> None:
        self._initial_eta = 0

    def on_snapshot(self, ride: RideSimulation) -> None:
        if ride.driver is not None:
            self._initial_eta = ride.driver.eta
        logger.info(
            "Ride %s: status=%s attempts=%d progress=%.0f%%",
            ride.ride_id,
            ride.status.value,
            ride.search_attempts,
            ride.progress * 100,
        )

    def on_position(self, position: Coordinate, progress: float) -> None:
        logger.debug(
            "Driver at (%.5f, %.5f), %.0f%% done, ~%d min left",
            position.lat,
            position.lng,
            progress * 100,
            remaining_minutes(self._initial_eta, progress),
        )

    def on_search_update(self, update: SearchUpdate) -> None:
        logger.info("%s", update.message)

    def on_idle(self) -> None:
        logger.info("Back to idle")


def parse_coordinate(value: str) -> Coordinate:
    try:
        lat, lng = (float(part) for part in value.split(","))
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"expected LAT,LNG, got {value!r}") from e
    return Coordinate(lat=lat, lng=lng)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Simulate one dispatched ride")
    parser.add_argument("--pickup", type=parse_coordinate, required=True, help="LAT,LNG")
    parser.add_argument("--dropoff", type=parse_coordinate, required=True, help="LAT,LNG")
    parser.add_argument(
        "--vehicle-class",
        choices=[vc.value for vc in VehicleClass],
        default=VehicleClass.STANDARD.value,
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible drivers")
    return parser


async def run_ride(
    settings: Settings,
    pickup: Coordinate,
    dropoff: Coordinate,
    vehicle_class: VehicleClass,
    seed: int | None = None,
) -> RideSimulation | None:
    """Quote every class, then run one ride to completion (or no-drivers)."""
    gateway = RoutingGateway.from_settings(settings.routing)

    quote = await gateway.fetch_route_details(pickup, dropoff)
    if quote.info is not None:
        logger.info(
            "Trip: %s, %s",
            format_distance(quote.info.distance_meters),
            format_duration(quote.info.duration_seconds),
        )
    for option in get_all_vehicle_pricing(quote.info):
        logger.info(
            "%s: %s, arrives %s (%s), drop-off %s",
            option.config.name,
            option.pricing.price,
            option.pricing.arrival_time,
            option.pricing.away_time,
            option.pricing.eta,
        )

    factory = DriverFactory(radius_miles=settings.simulation.driver_search_radius_miles)
    if seed is not None:
        factory.fake.seed_instance(seed)
    engine = MatchingEngine(settings.simulation, gateway, factory)
    session = RideSession(engine, LoggingObserver())

    try:
        outcome = await session.request_ride(pickup, dropoff, vehicle_class).wait()
        if outcome is None or not outcome.found:
            return outcome.ride if outcome else None

        driver = outcome.ride.driver
        arrival = format_arrival_time(driver.eta, settings.simulation.speed_multiplier)
        logger.info(
            "%s (%s, %s, rating %.1f) is %s, demo %s",
            driver.name,
            driver.vehicle.description,
            driver.vehicle.plate,
            driver.rating,
            arrival.display_eta,
            arrival.away_time,
        )

        await session.start_leg(Leg.APPROACH).wait()
        return await session.start_leg(Leg.TRIP).wait()
    finally:
        session.close()


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_from_settings(settings.simulation)

    ride = asyncio.run(
        run_ride(settings, args.pickup, args.dropoff, VehicleClass(args.vehicle_class), args.seed)
    )
    if ride is None:
        sys.exit(1)
    logger.info("Ride %s finished with status %s", ride.ride_id, ride.status.value)


if __name__ == "__main__":
    main()
