"""
Purpose: Nearest-point-on-line and arc-length for a RoutePath.
What it does:
- projects a query point onto each segment of the path (clamped to the ends)
- keeps the segment / point with the smallest great-circle offset
- reports how far along the path that point is (cumulative km from the start)

The projection parameter comes from a local equirectangular plane centred on
the query point; every reported distance is haversine so offsets and arc
positions are measured the same way.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from .distance import haversine_km, local_scale_km
from .models import GeoPoint, RoutePath, RouteProjection


@dataclass(frozen=True)
class SegmentProjection:
    """
    Projection of a point onto one segment.
    fraction is in [0, 1]: 0 is the segment start, 1 the segment end.
    """
    nearest: GeoPoint
    fraction: float
    offset_km: float


def project_onto_segment(point: GeoPoint, start: GeoPoint, end: GeoPoint) -> SegmentProjection:
    """
    Closest point to `point` on the segment start -> end.
    """
    km_per_lng, km_per_lat = local_scale_km(point.lat)

    # segment ends relative to the query point, in km
    ax = (start.lng - point.lng) * km_per_lng
    ay = (start.lat - point.lat) * km_per_lat
    bx = (end.lng - point.lng) * km_per_lng
    by = (end.lat - point.lat) * km_per_lat

    dx = bx - ax
    dy = by - ay
    length_squared = dx * dx + dy * dy

    if length_squared == 0.0:
        fraction = 0.0
    else:
        # query point is the origin, so (P - A) = (-ax, -ay)
        fraction = (-ax * dx - ay * dy) / length_squared
        fraction = max(0.0, min(1.0, fraction))

    nearest = GeoPoint(
        lat=start.lat + fraction * (end.lat - start.lat),
        lng=start.lng + fraction * (end.lng - start.lng),
    )
    return SegmentProjection(
        nearest=nearest,
        fraction=fraction,
        offset_km=haversine_km(point, nearest),
    )


def segment_lengths_km(route: RoutePath) -> List[float]:
    return [haversine_km(start, end) for start, end in route.segments]


def route_length_km(route: RoutePath) -> float:
    return sum(segment_lengths_km(route))


def nearest_point_on_route(route: RoutePath, point: GeoPoint) -> RouteProjection:
    """
    Project `point` onto the whole path.

    On an exact tie between segments (a point on a shared vertex) the earlier
    segment wins; the offset is the same either way.
    """
    lengths = segment_lengths_km(route)

    best: Optional[RouteProjection] = None
    travelled_km = 0.0

    for index, (start, end) in enumerate(route.segments):
        projection = project_onto_segment(point, start, end)

        if best is None or projection.offset_km < best.offset_km:
            best = RouteProjection(
                nearest=projection.nearest,
                offset_km=projection.offset_km,
                arc_km=travelled_km + projection.fraction * lengths[index],
                segment_index=index,
            )

        travelled_km += lengths[index]

    # RoutePath guarantees at least one segment
    assert best is not None
    return best
