"""
Purpose: Convert stored / transported route geometry into RoutePath.
What it does:
- GeoJSON LineString dicts ({"type": "LineString", "coordinates": [[lng, lat], ...]})
- Google encoded polylines (precision 5, the format OSRM and Google Directions return)

Both directions are provided so rides can be written back the way they came in.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

import polyline

from .models import LngLat, RoutePath, RoutePathError

POLYLINE_PRECISION = 5


def route_from_geojson(geometry: Mapping[str, Any]) -> RoutePath:
    if not isinstance(geometry, Mapping):
        raise RoutePathError("route geometry must be a GeoJSON object")

    if geometry.get("type") != "LineString":
        raise RoutePathError(f"unsupported geometry type: {geometry.get('type')!r}")

    return RoutePath.from_coordinates(geometry.get("coordinates"))


def route_to_geojson(route: RoutePath) -> Dict[str, Any]:
    return {
        "type": "LineString",
        "coordinates": [list(coordinate) for coordinate in route.coordinates()],
    }


def coordinates_from_polyline(encoded: str, precision: int = POLYLINE_PRECISION) -> List[LngLat]:
    """
    Decode an encoded polyline into raw (lng, lat) pairs, without checking
    that they form a usable route. polyline.decode yields (lat, lng) pairs,
    geojson=True flips them.
    """
    if not encoded:
        raise RoutePathError("empty polyline")

    try:
        return [tuple(pair) for pair in polyline.decode(encoded, precision, geojson=True)]
    except (ValueError, IndexError, TypeError) as e:
        raise RoutePathError(f"invalid polyline: {e}") from e


def route_from_polyline(encoded: str, precision: int = POLYLINE_PRECISION) -> RoutePath:
    return RoutePath.from_coordinates(coordinates_from_polyline(encoded, precision))


def route_to_polyline(route: RoutePath, precision: int = POLYLINE_PRECISION) -> str:
    return polyline.encode(route.coordinates(), precision, geojson=True)
