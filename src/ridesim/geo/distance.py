"""Great-circle distance and random point sampling.

Distances in miles back the driver ETA estimate; the metric variant is kept
for callers that work with provider distances (meters).
"""

import math
import random
from math import atan2, cos, radians, sin, sqrt

from ridesim.geo.models import Coordinate

EARTH_RADIUS_MILES = 3959.0
EARTH_RADIUS_M = 6_371_000

# 1 degree of latitude is roughly 69 miles
MILES_PER_DEGREE = 69.0


def _central_angle(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    lat1, lon1, lat2, lon2 = map(radians, [lat1, lon1, lat2, lon2])
    dlat = lat2 - lat1
    dlon = lon2 - lon1

    a = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    return 2 * atan2(sqrt(a), sqrt(1 - a))


def haversine_distance_miles(a: Coordinate, b: Coordinate) -> float:
    """Calculate the great-circle distance between two points in miles.

    Args:
        a: First point
        b: Second point

    Returns:
        Distance between the two points in miles
    """
    return EARTH_RADIUS_MILES * _central_angle(a.lat, a.lng, b.lat, b.lng)


def haversine_distance_m(a: Coordinate, b: Coordinate) -> float:
    """Calculate the great-circle distance between two points in meters."""
    return EARTH_RADIUS_M * _central_angle(a.lat, a.lng, b.lat, b.lng)


def random_point_within_radius(
    center: Coordinate,
    radius_miles: float,
    rng: random.Random | None = None,
) -> Coordinate:
    """Pick a random point around ``center``.

    The angle is uniform in [0, 2*pi) and the offset is uniform in
    [0, radius_miles / 69] degrees, so samples cluster toward the center
    rather than being uniform over the disc area.

    Args:
        center: Point to sample around
        radius_miles: Maximum offset in miles
        rng: Random source; defaults to the module-level generator

    Returns:
        Sampled coordinate
    """
    rand = rng.random if rng is not None else random.random
    radius_degrees = radius_miles / MILES_PER_DEGREE

    angle = rand() * 2 * math.pi
    distance = rand() * radius_degrees

    return Coordinate(
        lat=center.lat + distance * math.cos(angle),
        lng=center.lng + distance * math.sin(angle),
    )
