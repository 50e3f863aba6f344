"""
Purpose: Distance math on the sphere.
What it does:
Great-circle (haversine) distance plus the local equirectangular scale used
to project a point onto a segment. Both share one earth radius so offsets
and arc positions stay consistent with each other.
"""

from __future__ import annotations

import math
from typing import Tuple

from .models import GeoPoint

# Mean earth radius in km (IUGG)
EARTH_RADIUS_KM = 6371.0088

# Length of one degree of latitude, and of longitude at the equator
KM_PER_DEGREE = math.pi / 180.0 * EARTH_RADIUS_KM


def haversine_km(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in km between two points."""
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    dlat = lat2 - lat1
    dlng = math.radians(b.lng - a.lng)

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    # float error can push h a hair above 1 for antipodal points
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(min(1.0, h)))


def local_scale_km(reference_lat: float) -> Tuple[float, float]:
    """
    km per degree of (longitude, latitude) around `reference_lat`.

    Good at city / interregional scale, not across hemispheres.
    """
    return KM_PER_DEGREE * math.cos(math.radians(reference_lat)), KM_PER_DEGREE


def round_km(distance_km: float) -> float:
    """Round half-up to one decimal place (0.05 -> 0.1, never banker's rounding)."""
    return math.floor(distance_km * 10 + 0.5) / 10
