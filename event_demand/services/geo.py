"""Great-circle distance helpers for venue proximity."""

import math
from typing import Final

from event_demand.domain.models import Venue

EARTH_RADIUS_MILES: Final[float] = 3959.0


def haversine_miles(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two points in miles.

    Example:
        >>> round(haversine_miles(35.1495, -90.0490, 35.1382, -90.0506), 2)
        0.79
    """
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_MILES * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def with_downtown_distance(
    venue: Venue, downtown_latitude: float, downtown_longitude: float
) -> Venue:
    """Copy of ``venue`` with its downtown distance derived from coordinates.

    Venues that already carry a distance, or lack coordinates, are returned
    unchanged.
    """
    if venue.downtown_distance_miles is not None or not venue.has_coordinates:
        return venue

    distance = haversine_miles(
        venue.latitude,  # type: ignore[arg-type]
        venue.longitude,  # type: ignore[arg-type]
        downtown_latitude,
        downtown_longitude,
    )
    return venue.model_copy(update={"downtown_distance_miles": distance})
