"""Per-vehicle-class fare model and display formatting.

Fares are estimated once from the provider's route summary:

    fare = base_rate + km * per_km_rate + minutes * per_min_rate + surcharge

floored at the class minimum fare. Everything here is pure; the current time
is passed in wherever a clock reading is needed.
"""

import math
from collections.abc import Mapping
from datetime import datetime, timedelta
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field

from ridesim.agents.driver import VehicleClass
from ridesim.core.exceptions import ValidationError
from ridesim.geo.models import RouteInfo

DEFAULT_MINIMUM_FARE = 8.00


class VehicleConfig(BaseModel):
    """Pricing parameters for one vehicle class."""

    model_config = ConfigDict(frozen=True)

    name: str
    base_rate: float = Field(ge=0)
    per_km_rate: float = Field(ge=0)
    per_min_rate: float = Field(ge=0)
    surcharge: float | None = Field(default=None, ge=0)
    minimum_fare: float = Field(ge=0)
    arrival_time_minutes: int = Field(ge=0)


VEHICLE_TYPES: Mapping[str, VehicleConfig] = MappingProxyType(
    {
        "standard": VehicleConfig(
            name="Standard Ride",
            base_rate=3.50,
            per_km_rate=1.25,
            per_min_rate=0.30,
            minimum_fare=8.00,
            arrival_time_minutes=4,
        ),
        "wheelchair": VehicleConfig(
            name="Wheelchair Van",
            base_rate=5.00,
            per_km_rate=1.60,
            per_min_rate=0.40,
            surcharge=5.00,
            minimum_fare=12.00,
            arrival_time_minutes=6,
        ),
    }
)


class PricingInfo(BaseModel):
    price: str
    arrival_time: str
    eta: str
    away_time: str


class VehiclePricing(BaseModel):
    id: str
    config: VehicleConfig
    pricing: PricingInfo


class ArrivalDisplay(BaseModel):
    display_eta: str
    demo_eta: str
    away_time: str


def pricing_key(vehicle_class: VehicleClass | str) -> str:
    """Map a vehicle class (or raw table key) to its pricing table key."""
    try:
        return VehicleClass(vehicle_class).pricing_key
    except ValueError:
        return str(vehicle_class)


def calculate_fare(
    route_info: RouteInfo | None,
    vehicle_class: VehicleClass | str,
    vehicle_types: Mapping[str, VehicleConfig] = VEHICLE_TYPES,
) -> float:
    """Calculate the fare for a ride.

    Without route info the class minimum fare is charged; an unknown class
    falls back to DEFAULT_MINIMUM_FARE.
    """
    config = vehicle_types.get(pricing_key(vehicle_class))
    if config is None:
        return DEFAULT_MINIMUM_FARE
    if route_info is None:
        return config.minimum_fare

    distance_km = route_info.distance_meters / 1000
    duration_min = route_info.duration_seconds / 60

    fare = config.base_rate + distance_km * config.per_km_rate + duration_min * config.per_min_rate
    if config.surcharge:
        fare += config.surcharge

    return max(fare, config.minimum_fare)


def format_price(amount: float) -> str:
    return f"${amount:.2f}"


def format_time(moment: datetime) -> str:
    """12-hour clock without a leading zero, e.g. ``11:44 PM``."""
    hour = moment.hour % 12 or 12
    suffix = "AM" if moment.hour < 12 else "PM"
    return f"{hour}:{moment.minute:02d} {suffix}"


def get_pricing_info(
    route_info: RouteInfo | None,
    vehicle_class: VehicleClass | str,
    now: datetime | None = None,
    vehicle_types: Mapping[str, VehicleConfig] = VEHICLE_TYPES,
) -> PricingInfo:
    """Price plus pickup arrival and drop-off ETA for one vehicle class.

    Raises:
        ValidationError: if the class is not in the pricing table.
    """
    key = pricing_key(vehicle_class)
    config = vehicle_types.get(key)
    if config is None:
        raise ValidationError(f"Unknown vehicle type: {key}", details={"vehicle_type": key})

    fare = calculate_fare(route_info, key, vehicle_types)
    now = now or datetime.now()

    arrival_time = now + timedelta(minutes=config.arrival_time_minutes)
    eta = arrival_time
    if route_info is not None:
        eta = arrival_time + timedelta(seconds=route_info.duration_seconds)

    return PricingInfo(
        price=format_price(fare),
        arrival_time=format_time(arrival_time),
        eta=format_time(eta),
        away_time=f"{config.arrival_time_minutes} min away",
    )


def get_all_vehicle_pricing(
    route_info: RouteInfo | None,
    now: datetime | None = None,
    vehicle_types: Mapping[str, VehicleConfig] = VEHICLE_TYPES,
) -> list[VehiclePricing]:
    now = now or datetime.now()
    return [
        VehiclePricing(
            id=key,
            config=config,
            pricing=get_pricing_info(route_info, key, now, vehicle_types),
        )
        for key, config in vehicle_types.items()
    ]


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def format_distance(meters: float) -> str:
    if meters < 1000:
        return f"{_round_half_up(meters)} m"
    return f"{meters / 1000:.1f} km"


def format_duration(seconds: float) -> str:
    minutes = _round_half_up(seconds / 60)
    if minutes < 60:
        return f"{minutes} min"
    hours, remaining = divmod(minutes, 60)
    return f"{hours}h {remaining}m"


def format_eta(seconds: float) -> str:
    """Rounded-up ETA, e.g. ``8 min``, ``1h 5m`` or ``2h``."""
    minutes = math.ceil(seconds / 60)
    if minutes < 60:
        return f"{minutes} min"
    hours, remaining = divmod(minutes, 60)
    return f"{hours}h {remaining}m" if remaining else f"{hours}h"


def format_arrival_time(eta_seconds: float, speed_multiplier: float) -> ArrivalDisplay:
    """Real ETA next to the accelerated demo ETA."""
    display_minutes = math.ceil(eta_seconds / 60)
    demo_minutes = math.ceil(display_minutes / speed_multiplier)
    return ArrivalDisplay(
        display_eta=f"{display_minutes} min",
        demo_eta=f"{demo_minutes} min",
        away_time=f"{demo_minutes} min away",
    )
