"""Geographic value types shared by routing, matching and movement."""

from pydantic import BaseModel, ConfigDict, Field


class Coordinate(BaseModel):
    """WGS84 position in degrees."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(allow_inf_nan=False)
    lng: float = Field(allow_inf_nan=False)

    def as_tuple(self) -> tuple[float, float]:
        return self.lat, self.lng


# Travel order is significant; a usable route has at least two points.
Route = list[Coordinate]


class RouteInfo(BaseModel):
    """Distance and duration summary reported by the routing provider."""

    model_config = ConfigDict(frozen=True)

    distance_meters: float = Field(ge=0)
    duration_seconds: float = Field(ge=0)
