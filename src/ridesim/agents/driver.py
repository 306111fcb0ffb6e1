"""Driver profile models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from ridesim.geo.models import Coordinate


class VehicleClass(str, Enum):
    """Vehicle category chosen at request time."""

    STANDARD = "standard"
    ACCESSIBLE = "accessible"

    @property
    def pricing_key(self) -> str:
        """Key of this class in the vehicle pricing table."""
        return "wheelchair" if self is VehicleClass.ACCESSIBLE else self.value


class Vehicle(BaseModel):
    model_config = ConfigDict(frozen=True)

    make: str
    model: str
    color: str
    plate: str
    is_accessible: bool

    @property
    def description(self) -> str:
        return f"{self.color} {self.make} {self.model}"


class Driver(BaseModel):
    """Driver matched to a ride. Position during the ride is derived, never stored here."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    avatar: str = Field(min_length=2, max_length=2)
    rating: float = Field(ge=4.5, le=5.0)
    vehicle: Vehicle
    current_location: Coordinate
    eta: int = Field(default=0, ge=0, description="Seconds until the driver reaches pickup")

    def with_eta(self, eta_seconds: int) -> "Driver":
        return Driver.model_validate({**self.model_dump(), "eta": eta_seconds})
