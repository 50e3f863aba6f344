"""
Purpose: Cheap bounding-box pre-filters (the storage-facing half of a search).
What it does:
Builds pure predicates made only of numeric range comparisons, so storage
can evaluate them on indexed lat/lng columns without any geometry library.
Storage adapters translate them into their own query language; the
in-memory repository calls `admits_*` directly.

These never run the query themselves.

Typical responsibilities:
- EndpointPrefilter: a ride's origin OR destination near the rider's pickup,
  AND its origin OR destination near the rider's dropoff. A ride whose route
  envelope overlaps both rider boxes also passes, so rides that only drive
  through the rider's area are fetched too.
- RouteEnvelopePrefilter: a post's origin AND destination inside the
  driver's route envelope grown by the margin.

Margins are given in degrees of latitude. Longitude half-widths are widened
by 1/cos(lat) so a box covers the same distance east-west as north-south.

Guarantee: both may admit false positives, never false negatives, as long as
the margin stays materially larger than the search radius (see SearchPolicy).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence

from geometry import GeoPoint, RoutePath, RoutePathError
from rides.models import Ride, RideWanted

# cos(lat) collapses towards the poles, past this the box spans every longitude
MAX_SCALED_LATITUDE = 89.0


def lng_margin_degrees(margin_degrees: float, abs_lat: float) -> float:
    """
    Longitude half-width covering `margin_degrees` worth of distance at
    every latitude up to `abs_lat`.
    """
    if abs_lat >= MAX_SCALED_LATITUDE:
        return 180.0
    return min(margin_degrees / math.cos(math.radians(abs_lat)), 180.0)


@dataclass(frozen=True)
class BoundingBox:
    """
    Inclusive lat/lng range. No antimeridian wrap-around.
    """
    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    @classmethod
    def around(cls, point: GeoPoint, margin_degrees: float) -> BoundingBox:
        lng_margin = lng_margin_degrees(margin_degrees, abs(point.lat) + margin_degrees)
        return cls(
            min_lat=point.lat - margin_degrees,
            max_lat=point.lat + margin_degrees,
            min_lng=point.lng - lng_margin,
            max_lng=point.lng + lng_margin,
        )

    @classmethod
    def enclosing(cls, route: RoutePath, margin_degrees: float = 0.0) -> BoundingBox:
        lats = [point.lat for point in route.points]
        lngs = [point.lng for point in route.points]
        poleward = max(abs(min(lats)), abs(max(lats))) + margin_degrees
        lng_margin = lng_margin_degrees(margin_degrees, poleward) if margin_degrees else 0.0
        return cls(
            min_lat=min(lats) - margin_degrees,
            max_lat=max(lats) + margin_degrees,
            min_lng=min(lngs) - lng_margin,
            max_lng=max(lngs) + lng_margin,
        )

    def contains(self, point: GeoPoint) -> bool:
        return (
            self.min_lat <= point.lat <= self.max_lat
            and self.min_lng <= point.lng <= self.max_lng
        )

    def intersects(self, other: BoundingBox) -> bool:
        return (
            self.min_lat <= other.max_lat
            and self.max_lat >= other.min_lat
            and self.min_lng <= other.max_lng
            and self.max_lng >= other.min_lng
        )


def route_bounds(coordinates: Optional[Sequence[Sequence[float]]]) -> Optional[BoundingBox]:
    """
    Tight envelope of stored (lng, lat) route coordinates.
    None when the route is unusable; the matcher skips those rides anyway.
    """
    try:
        return BoundingBox.enclosing(RoutePath.from_coordinates(coordinates))
    except RoutePathError:
        return None


@dataclass(frozen=True)
class EndpointPrefilter:
    """
    Predicate for a (pickup, dropoff) trip.

    A record passes when
        (origin in pickup_box OR destination in pickup_box)
    AND (origin in dropoff_box OR destination in dropoff_box)

    A ride also passes when its route envelope overlaps both boxes.
    """
    pickup_box: BoundingBox
    dropoff_box: BoundingBox

    @classmethod
    def for_trip(cls, pickup: GeoPoint, dropoff: GeoPoint, margin_degrees: float) -> EndpointPrefilter:
        return cls(
            pickup_box=BoundingBox.around(pickup, margin_degrees),
            dropoff_box=BoundingBox.around(dropoff, margin_degrees),
        )

    def admits_endpoints(self, origin: GeoPoint, destination: GeoPoint) -> bool:
        near_pickup = self.pickup_box.contains(origin) or self.pickup_box.contains(destination)
        near_dropoff = self.dropoff_box.contains(origin) or self.dropoff_box.contains(destination)
        return near_pickup and near_dropoff

    def admits_route(self, bounds: Optional[BoundingBox]) -> bool:
        if bounds is None:
            return False
        return bounds.intersects(self.pickup_box) and bounds.intersects(self.dropoff_box)

    def admits(self, ride: Ride) -> bool:
        if self.admits_endpoints(ride.origin.point, ride.destination.point):
            return True
        return self.admits_route(route_bounds(ride.route))

    def admits_ride_wanted(self, ride_wanted: RideWanted) -> bool:
        return self.admits_endpoints(ride_wanted.origin.point, ride_wanted.destination.point)


@dataclass(frozen=True)
class RouteEnvelopePrefilter:
    """
    Envelope predicate for "who can I pick up along this route".
    A post passes when both its origin and destination are inside `envelope`.
    """
    envelope: BoundingBox

    @classmethod
    def for_route(cls, route: RoutePath, margin_degrees: float) -> RouteEnvelopePrefilter:
        return cls(envelope=BoundingBox.enclosing(route, margin_degrees))

    def admits_endpoints(self, origin: GeoPoint, destination: GeoPoint) -> bool:
        return self.envelope.contains(origin) and self.envelope.contains(destination)

    def admits_ride_wanted(self, ride_wanted: RideWanted) -> bool:
        return self.admits_endpoints(ride_wanted.origin.point, ride_wanted.destination.point)
