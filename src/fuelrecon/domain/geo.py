"""Great-circle distance helpers."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fuelrecon.domain.model import Coordinates

EARTH_RADIUS_KM = 6371.0


def distance_km(origin: Coordinates, target: Coordinates) -> float:
    """Haversine distance between two points in kilometres."""

    lat1 = math.radians(origin.latitude)
    lat2 = math.radians(target.latitude)
    d_lat = lat2 - lat1
    d_lon = math.radians(target.longitude - origin.longitude)
    a = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def bounding_box(origin: Coordinates, radius_km: float) -> tuple[float, float, float, float]:
    """Return ``(min_lat, max_lat, min_lon, max_lon)`` enclosing the radius.

    Used to pre-filter stores before the exact distance check.
    """

    lat_delta = math.degrees(radius_km / EARTH_RADIUS_KM)
    cos_lat = max(math.cos(math.radians(origin.latitude)), 1e-6)
    lon_delta = math.degrees(radius_km / (EARTH_RADIUS_KM * cos_lat))
    return (
        origin.latitude - lat_delta,
        origin.latitude + lat_delta,
        origin.longitude - lon_delta,
        origin.longitude + lon_delta,
    )
