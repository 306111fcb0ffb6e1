"""Ride lifecycle state machine and models."""

import uuid
from enum import Enum

from pydantic import BaseModel, Field

from ridesim.agents.driver import Driver, VehicleClass
from ridesim.core.exceptions import StateError
from ridesim.geo.models import Route, RouteInfo


class RideStatus(str, Enum):
    """Ride lifecycle states."""

    SEARCHING = "searching"
    APPROACHING = "approaching"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    NO_DRIVERS = "no_drivers"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return not VALID_TRANSITIONS[self]


class Leg(str, Enum):
    """Animated segment of a ride."""

    APPROACH = "approach"
    TRIP = "trip"


VALID_TRANSITIONS: dict[RideStatus, set[RideStatus]] = {
    RideStatus.SEARCHING: {
        RideStatus.APPROACHING,
        RideStatus.NO_DRIVERS,
        RideStatus.CANCELLED,
    },
    RideStatus.APPROACHING: {RideStatus.IN_PROGRESS, RideStatus.CANCELLED},
    RideStatus.IN_PROGRESS: {RideStatus.COMPLETED, RideStatus.CANCELLED},
    RideStatus.COMPLETED: set(),
    RideStatus.NO_DRIVERS: set(),
    RideStatus.CANCELLED: set(),
}

# Status a leg runs in, and the status its natural completion leads to.
LEG_TRANSITIONS: dict[Leg, tuple[RideStatus, RideStatus]] = {
    Leg.APPROACH: (RideStatus.APPROACHING, RideStatus.IN_PROGRESS),
    Leg.TRIP: (RideStatus.IN_PROGRESS, RideStatus.COMPLETED),
}


class RideSimulation(BaseModel):
    """Aggregate state of one simulated ride."""

    ride_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    status: RideStatus = RideStatus.SEARCHING
    vehicle_class: VehicleClass = VehicleClass.STANDARD
    driver: Driver | None = None
    approach_route: Route = Field(default_factory=list)
    trip_route: Route = Field(default_factory=list)
    trip_info: RouteInfo | None = None
    progress: float = Field(default=0.0, ge=0.0, le=1.0)
    search_attempts: int = Field(default=0, ge=0)

    def transition_to(self, new_status: RideStatus) -> None:
        """Transition to a new status with validation."""
        if self.status.is_terminal:
            raise StateError(
                f"Cannot transition from terminal status {self.status.value}",
                details={"ride_id": self.ride_id},
            )

        if new_status not in VALID_TRANSITIONS[self.status]:
            raise StateError(
                f"Invalid transition from {self.status.value} to {new_status.value}",
                details={"ride_id": self.ride_id},
            )

        if new_status is RideStatus.APPROACHING and self.driver is None:
            raise StateError("Cannot start approaching without a driver")

        self.status = new_status

        if new_status in (RideStatus.APPROACHING, RideStatus.IN_PROGRESS):
            self.progress = 0.0
        elif new_status is RideStatus.COMPLETED:
            self.progress = 1.0

    def route_for(self, leg: Leg) -> Route:
        return self.approach_route if leg is Leg.APPROACH else self.trip_route

    def snapshot(self) -> "RideSimulation":
        """Independent copy safe to hand to observers."""
        return self.model_copy(deep=True)
