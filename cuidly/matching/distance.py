"""Great-circle distance between coordinates (haversine)."""

import math

from cuidly.matching.schemas import Coordinates

EARTH_RADIUS_KM = 6371.0


def haversine_km(a: Coordinates, b: Coordinates) -> float:
    """Distance in km between two points, rounded to 2 decimals."""
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    d_lat = math.radians(b.latitude - a.latitude)
    d_lon = math.radians(b.longitude - a.longitude)

    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return round(EARTH_RADIUS_KM * c, 2)


def distance_between(a: Coordinates | None, b: Coordinates | None) -> float | None:
    """Distance in km, or None if either side has no coordinates."""
    if a is None or b is None:
        return None
    return haversine_km(a, b)
