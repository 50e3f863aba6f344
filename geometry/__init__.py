"""
Geometry package for route matching.

Public API:
- Types: GeoPoint, RoutePath, RouteProjection, RoutePathError
- Distances: haversine_km, round_km
- Projection: nearest_point_on_route, route_length_km
- Codecs: route_from_geojson, route_from_polyline (and the reverse)

No storage or HTTP here, pure functions only.
"""
from .models import GeoPoint, LngLat, RoutePath, RoutePathError, RouteProjection
from .distance import EARTH_RADIUS_KM, KM_PER_DEGREE, haversine_km, round_km
from .projection import nearest_point_on_route, project_onto_segment, route_length_km
from .codec import (
    coordinates_from_polyline,
    route_from_geojson,
    route_from_polyline,
    route_to_geojson,
    route_to_polyline,
)

__all__ = [
    "GeoPoint",
    "LngLat",
    "RoutePath",
    "RoutePathError",
    "RouteProjection",
    "EARTH_RADIUS_KM",
    "KM_PER_DEGREE",
    "haversine_km",
    "round_km",
    "nearest_point_on_route",
    "project_onto_segment",
    "route_length_km",
    "coordinates_from_polyline",
    "route_from_geojson",
    "route_from_polyline",
    "route_to_geojson",
    "route_to_polyline",
]
