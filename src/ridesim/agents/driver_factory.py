"""Synthesizes driver profiles for simulated matches."""

from __future__ import annotations

import logging
import string
import time
from typing import TYPE_CHECKING

from ridesim.agents.driver import Driver, Vehicle, VehicleClass
from ridesim.agents.faker_provider import create_faker_instance
from ridesim.geo.distance import haversine_distance_miles, random_point_within_radius
from ridesim.geo.models import Coordinate

if TYPE_CHECKING:
    from faker.proxy import Faker as FakerType

logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_lowercase


def calculate_eta(origin: Coordinate, destination: Coordinate, avg_speed_mph: float = 30.0) -> int:
    """Straight-line travel time in whole seconds at ``avg_speed_mph``."""
    distance_miles = haversine_distance_miles(origin, destination)
    return round(distance_miles / avg_speed_mph * 3600)


def initials_avatar(first_name: str, last_name: str) -> str:
    return f"{first_name[:1]}{last_name[:1]}"


class DriverFactory:
    """Creates drivers from an injectable Faker instance.

    All randomness (names, vehicle, rating, start position, plate, id suffix)
    is drawn from ``fake``, so a seeded instance yields reproducible drivers.
    """

    def __init__(self, fake: FakerType | None = None, radius_miles: float = 2.0) -> None:
        self.fake = fake if fake is not None else create_faker_instance()
        self.radius_miles = radius_miles

    @property
    def random(self):
        return self.fake.random

    def generate_driver(
        self,
        pickup: Coordinate,
        vehicle_class: VehicleClass = VehicleClass.STANDARD,
    ) -> Driver:
        """Generate a driver somewhere within ``radius_miles`` of pickup.

        The returned driver has ``eta == 0``; callers compute it with
        :func:`calculate_eta` once the starting location is known.
        """
        first_name = self.fake.driver_first_name()
        last_name = self.fake.driver_last_name()

        accessible = vehicle_class is VehicleClass.ACCESSIBLE
        vehicle = self.fake.rideshare_vehicle(accessible=accessible)

        rating = round(4.5 + self.random.random() * 0.5, 1)
        start = random_point_within_radius(pickup, self.radius_miles, rng=self.random)

        driver = Driver(
            id=self._driver_id(),
            name=f"{first_name} {last_name}",
            avatar=initials_avatar(first_name, last_name),
            rating=rating,
            vehicle=Vehicle(
                make=vehicle["make"],
                model=vehicle["model"],
                color=self.fake.vehicle_color(),
                plate=self.fake.license_plate_simple(),
                is_accessible=accessible,
            ),
            current_location=start,
            eta=0,
        )
        logger.debug(
            "Generated driver %s (%s, %s)", driver.id, driver.vehicle.description, vehicle_class.value
        )
        return driver

    def _driver_id(self) -> str:
        suffix = "".join(self.random.choice(_BASE36) for _ in range(9))
        return f"driver_{int(time.time() * 1000)}_{suffix}"
