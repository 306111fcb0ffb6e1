from typing import TYPE_CHECKING

import pytest

from ridesim.agents.driver_factory import DriverFactory
from ridesim.agents.faker_provider import create_faker_instance
from ridesim.geo.models import Coordinate
from ridesim.geo.routing_client import RoutingGateway
from ridesim.settings import SimulationSettings

if TYPE_CHECKING:
    from faker.proxy import Faker

ROUTING_URL = "https://routing.test/v2/directions/driving-car"

# Canonical polyline reference vector
ENCODED_ROUTE = "_p~iF~ps|U_ulLnnqC_mqNvxq`@"


@pytest.fixture
def fake() -> "Faker":
    """Seeded Faker instance for deterministic test data."""
    return create_faker_instance(seed=42)


@pytest.fixture
def driver_factory(fake: "Faker") -> DriverFactory:
    return DriverFactory(fake=fake)


@pytest.fixture
def fast_settings() -> SimulationSettings:
    """Simulation timings shrunk so timer-driven tests finish quickly."""
    return SimulationSettings(
        search_duration=0.0,
        approach_duration=0.05,
        trip_duration=0.05,
        retry_delay=0.01,
        no_driver_display_delay=0.01,
    )


@pytest.fixture
def gateway() -> RoutingGateway:
    return RoutingGateway(base_url=ROUTING_URL, api_key="test-key", timeout=1.0)


@pytest.fixture
def pickup() -> Coordinate:
    return Coordinate(lat=37.7749, lng=-122.4194)


@pytest.fixture
def dropoff() -> Coordinate:
    return Coordinate(lat=37.8044, lng=-122.2712)


@pytest.fixture
def ors_response() -> dict:
    return {
        "routes": [
            {
                "summary": {"distance": 5000.0, "duration": 600.0},
                "geometry": ENCODED_ROUTE,
            }
        ],
    }
