"""
Great-circle math on a spherical earth.
Points may be anything with latitude/longitude attributes or (lat, lon) pairs.
"""
import math
from typing import Any, Tuple

EARTH_RADIUS_KM = 6371.0


def _coords(point: Any) -> Tuple[float, float]:
    if isinstance(point, (tuple, list)):
        return float(point[0]), float(point[1])
    return float(point.latitude), float(point.longitude)


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    # Rounding can push a slightly outside [0, 1] near coincident or antipodal points
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def distance(p1: Any, p2: Any) -> float:
    """Haversine distance between two points in kilometers."""
    lat1, lon1 = _coords(p1)
    lat2, lon2 = _coords(p2)
    return haversine_km(lat1, lon1, lat2, lon2)


def initial_bearing(p1: Any, p2: Any) -> float:
    """Forward azimuth from p1 towards p2, in degrees clockwise from north [0, 360)."""
    lat1, lon1 = _coords(p1)
    lat2, lon2 = _coords(p2)
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_lambda = math.radians(lon2 - lon1)

    y = math.sin(d_lambda) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(d_lambda)
    return (math.degrees(math.atan2(y, x)) + 360.0) % 360.0
