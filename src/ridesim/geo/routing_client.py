import logging
from typing import Any

import httpx
import polyline
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ridesim.core.exceptions import (
    NetworkError,
    ServiceUnavailableError,
    SimulationError,
    ValidationError,
)
from ridesim.geo.models import Coordinate, Route, RouteInfo
from ridesim.settings import RoutingSettings

logger = logging.getLogger(__name__)


class RouteResult(BaseModel):
    geometry: Route
    info: RouteInfo | None = None
    is_fallback: bool = False


class NoRouteFoundError(ValidationError):
    """Provider answered without a usable route. Inherits from ValidationError (non-retryable)."""

    pass


class RoutingServiceError(ServiceUnavailableError):
    """Provider returned a non-success status or the connection failed."""

    pass


class RoutingTimeoutError(NetworkError):
    """Routing request timed out."""

    pass


def decode_polyline(encoded: str, precision: int = 5) -> Route:
    """Decode polyline string to a list of coordinates in travel order."""
    coords = polyline.decode(encoded, precision)
    return [Coordinate(lat=lat, lng=lng) for lat, lng in coords]


def straight_line(origin: Coordinate, destination: Coordinate) -> RouteResult:
    """Two-point fallback route with no distance/duration summary."""
    return RouteResult(geometry=[origin, destination], info=None, is_fallback=True)


class RoutingGateway:
    """Directions client that never fails upward.

    Requests go to an OpenRouteService-style endpoint that takes a POST body of
    ``[lng, lat]`` waypoints and answers with ``routes[0].geometry`` (encoded
    polyline) and ``routes[0].summary``. Every failure is logged and replaced
    by the straight-line route between the two waypoints.
    """

    def __init__(self, base_url: str, api_key: str = "", timeout: float = 5.0):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: RoutingSettings) -> "RoutingGateway":
        return cls(settings.base_url, api_key=settings.api_key, timeout=settings.timeout)

    async def fetch_route(self, origin: Coordinate, destination: Coordinate) -> Route:
        """Route geometry from ``origin`` to ``destination`` (at least two points)."""
        result = await self.fetch_route_details(origin, destination)
        return result.geometry

    async def fetch_route_details(
        self, origin: Coordinate, destination: Coordinate
    ) -> RouteResult:
        try:
            return await self._request_route(origin, destination)
        except SimulationError as e:
            logger.warning(
                "Route request %s -> %s failed, using straight line: %s",
                origin.as_tuple(),
                destination.as_tuple(),
                e,
            )
            return straight_line(origin, destination)

    async def _request_route(
        self, origin: Coordinate, destination: Coordinate
    ) -> RouteResult:
        body = {
            "coordinates": [
                [origin.lng, origin.lat],
                [destination.lng, destination.lat],
            ]
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.base_url, json=body, headers=self._headers())
        except httpx.TimeoutException as e:
            raise RoutingTimeoutError(f"Request timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise RoutingServiceError(f"Network error: {e}") from e

        if not response.is_success:
            raise RoutingServiceError(
                f"Routing server error: {response.status_code}",
                details={"status_code": response.status_code},
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ValidationError("Routing response is not valid JSON") from e

        route = self._first_route(data)
        geometry = route.get("geometry")
        if not isinstance(geometry, str) or not geometry:
            raise NoRouteFoundError("Route has no encoded geometry")

        try:
            coords = decode_polyline(geometry)
        except (IndexError, TypeError, ValueError) as e:
            raise ValidationError(f"Could not decode route geometry: {e}") from e

        if len(coords) < 2:
            raise ValidationError(f"Route geometry has {len(coords)} point(s)")

        return RouteResult(geometry=coords, info=self._parse_summary(route.get("summary")))

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = self.api_key
        return headers

    @staticmethod
    def _first_route(data: Any) -> dict[str, Any]:
        routes = data.get("routes") if isinstance(data, dict) else None
        if not routes or not isinstance(routes, list) or not isinstance(routes[0], dict):
            raise NoRouteFoundError("No route returned by routing provider")
        return routes[0]

    @staticmethod
    def _parse_summary(summary: Any) -> RouteInfo | None:
        if not isinstance(summary, dict):
            return None
        try:
            return RouteInfo(
                distance_meters=summary["distance"],
                duration_seconds=summary["duration"],
            )
        except (KeyError, PydanticValidationError):
            logger.debug("Ignoring incomplete route summary: %s", summary)
            return None
