"""
Purpose: Core geometry types for route matching.
What it does:
Defines the point, path and projection structures the matcher works with.
No distance math here, see geometry.distance and geometry.projection.

Coordinate order:
- GeoPoint is (lat, lng), the way riders and ride endpoints are stored.
- RoutePath coordinates are (lng, lat) pairs, the GeoJSON LineString order
  the directions provider hands back and the database stores.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

LngLat = Tuple[float, float]


class RoutePathError(ValueError):
    """Raised when a route cannot be used as a polyline."""
    pass


def _is_finite_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


@dataclass(frozen=True)
class GeoPoint:
    """
    A (latitude, longitude) pair in decimal degrees.
    """
    lat: float
    lng: float

    def is_valid(self) -> bool:
        return (
            _is_finite_number(self.lat)
            and _is_finite_number(self.lng)
            and -90.0 <= self.lat <= 90.0
            and -180.0 <= self.lng <= 180.0
        )

    def as_lng_lat(self) -> LngLat:
        return (self.lng, self.lat)

    @classmethod
    def from_lng_lat(cls, coordinate: Sequence[float]) -> GeoPoint:
        lng, lat = coordinate
        return cls(lat=float(lat), lng=float(lng))


@dataclass(frozen=True)
class RoutePath:
    """
    Ordered polyline of a driver's planned path, origin first.

    Always holds at least two valid points. Build it with
    `RoutePath.from_coordinates` so degenerate input is rejected up front.
    """
    points: Tuple[GeoPoint, ...]

    @classmethod
    def from_coordinates(cls, coordinates: Iterable[Sequence[float]]) -> RoutePath:
        """
        Build a path from (lng, lat) positions. Extra elements such as an
        altitude are ignored, as GeoJSON allows them.

        Raises RoutePathError for fewer than 2 points or for any position
        whose lng/lat are not finite, in-range numbers.
        """
        if coordinates is None:
            raise RoutePathError("route has no coordinates")

        points: List[GeoPoint] = []
        for index, coordinate in enumerate(coordinates):
            if not isinstance(coordinate, (list, tuple)) or len(coordinate) < 2:
                raise RoutePathError(f"coordinate {index} is not a (lng, lat) position")

            lng, lat = coordinate[0], coordinate[1]
            if not (_is_finite_number(lng) and _is_finite_number(lat)):
                raise RoutePathError(f"coordinate {index} is not numeric")

            point = GeoPoint(lat=float(lat), lng=float(lng))
            if not point.is_valid():
                raise RoutePathError(f"coordinate {index} is out of range: {coordinate!r}")
            points.append(point)

        if len(points) < 2:
            raise RoutePathError(f"route needs at least 2 points, got {len(points)}")

        return cls(points=tuple(points))

    @property
    def segments(self) -> List[Tuple[GeoPoint, GeoPoint]]:
        return list(zip(self.points[:-1], self.points[1:]))

    def coordinates(self) -> List[LngLat]:
        return [point.as_lng_lat() for point in self.points]

    def __len__(self) -> int:
        return len(self.points)


@dataclass(frozen=True)
class RouteProjection:
    """
    Where a query point lands on a RoutePath.

    offset_km: distance from the query point to `nearest`.
    arc_km: path length from the first point to `nearest`, 0 <= arc_km <= total length.
    segment_index: index of the segment `nearest` lies on.
    """
    nearest: GeoPoint
    offset_km: float
    arc_km: float
    segment_index: int
