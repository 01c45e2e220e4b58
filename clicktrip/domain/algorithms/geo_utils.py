from __future__ import annotations

import math

from clicktrip.domain.models import GeoPoint

EARTH_RADIUS_M = 6371000.0
WALKING_SPEED_MPS = 1.4  # ~5 km/h


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters between two lat/lon pairs in degrees."""

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)

    s = (
        math.sin(dlat / 2.0) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(dlon / 2.0) ** 2
    )
    if s > 1.0:
        s = 1.0
    return 2.0 * EARTH_RADIUS_M * math.asin(math.sqrt(s))


def haversine_distance_m(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in meters."""

    return haversine_m(a.lat, a.lon, b.lat, b.lon)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def estimate_walking_minutes(
    a: GeoPoint, b: GeoPoint, *, speed_mps: float = WALKING_SPEED_MPS
) -> int:
    """Straight-line walking estimate, rounded up to whole minutes."""

    return int(math.ceil(haversine_distance_m(a, b) / speed_mps / 60.0))
