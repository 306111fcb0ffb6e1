"""Custom Faker providers for simulated rideshare drivers."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypedDict

from faker import Faker
from faker.providers import BaseProvider

if TYPE_CHECKING:
    from faker.proxy import Faker as FakerType


class VehicleDict(TypedDict):
    """Type for vehicle data dictionary."""

    make: str
    model: str


class DriverNameProvider(BaseProvider):
    """Fixed name pools so generated drivers stay within a known, neutral set."""

    FIRST_NAMES: list[str] = [
        "Alex", "Jordan", "Taylor", "Casey", "Morgan", "Riley", "Avery", "Quinn",
        "Sam", "Blake", "Cameron", "Drew", "Emery", "Finley", "Harper", "Hayden",
        "Jamie", "Kendall", "Logan", "Marley", "Parker", "Peyton", "Reese", "Sage",
        "Skyler", "Tanner", "Teagan", "Tyler", "Wren", "Zion",
    ]  # fmt: skip

    LAST_NAMES: list[str] = [
        "Anderson", "Brown", "Davis", "Garcia", "Johnson", "Jones", "Martinez",
        "Miller", "Moore", "Rodriguez", "Smith", "Taylor", "Thomas", "Thompson",
        "White", "Williams", "Wilson", "Clark", "Lewis", "Lee", "Walker", "Hall",
        "Allen", "Young", "King", "Wright", "Lopez", "Hill", "Scott", "Green",
    ]  # fmt: skip

    def driver_first_name(self) -> str:
        return self.random_element(self.FIRST_NAMES)

    def driver_last_name(self) -> str:
        return self.random_element(self.LAST_NAMES)


class RideshareVehicleProvider(BaseProvider):
    """Vehicle pools per vehicle class plus a shared color pool."""

    STANDARD_VEHICLES: list[VehicleDict] = [
        {"make": "Honda", "model": "Civic"},
        {"make": "Toyota", "model": "Camry"},
        {"make": "Honda", "model": "Accord"},
        {"make": "Nissan", "model": "Altima"},
        {"make": "Toyota", "model": "Corolla"},
        {"make": "Hyundai", "model": "Elantra"},
        {"make": "Ford", "model": "Focus"},
        {"make": "Chevrolet", "model": "Cruze"},
    ]

    ACCESSIBLE_VEHICLES: list[VehicleDict] = [
        {"make": "Honda", "model": "Odyssey"},
        {"make": "Toyota", "model": "Sienna"},
        {"make": "Chrysler", "model": "Pacifica"},
        {"make": "Ford", "model": "Transit Connect"},
    ]

    VEHICLE_COLORS: list[str] = [
        "Silver", "White", "Black", "Gray", "Blue", "Red", "Green", "Brown",
    ]  # fmt: skip

    def rideshare_vehicle(self, accessible: bool = False) -> VehicleDict:
        """Pick a vehicle from the standard or the accessible pool."""
        pool = self.ACCESSIBLE_VEHICLES if accessible else self.STANDARD_VEHICLES
        return self.random_element(pool)

    def vehicle_color(self) -> str:
        return self.random_element(self.VEHICLE_COLORS)


class LicensePlateProvider(BaseProvider):
    """Plates in ABC123 format."""

    # I and O are left out to avoid confusion with 1 and 0
    PLATE_LETTERS = "ABCDEFGHJKLMNPQRSTUVWXYZ"
    PLATE_DIGITS = "0123456789"

    def license_plate_simple(self) -> str:
        letters = "".join(self.random_elements(self.PLATE_LETTERS, length=3, unique=False))
        numbers = "".join(self.random_elements(self.PLATE_DIGITS, length=3, unique=False))
        return f"{letters}{numbers}"


def create_faker_instance(seed: int | None = None) -> FakerType:
    """Create a configured Faker instance with the rideshare providers.

    Args:
        seed: Optional seed for reproducible random data.

    Returns:
        Configured Faker instance with en_US locale and all custom providers.
    """
    fake: FakerType = Faker("en_US")

    if seed is not None:
        fake.seed_instance(seed)

    fake.add_provider(DriverNameProvider)
    fake.add_provider(RideshareVehicleProvider)
    fake.add_provider(LicensePlateProvider)

    return fake
