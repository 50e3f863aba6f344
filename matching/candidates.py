"""
Purpose: Per-ride geometric projection.
What it does:
For one stored route and a rider's two points, computes the four numbers the
filter/rank step needs: how far each point is from the route (offset) and
how far along the route each point lands (arc position).

Raises RoutePathError when the stored route is not a usable polyline; the
caller decides to skip, this module never swallows it.
"""

from __future__ import annotations

from geometry import GeoPoint, RoutePath, nearest_point_on_route, round_km
from rides.models import MatchCandidate, PassengerMatch, Ride, RideWanted


def project_ride(ride: Ride, pickup: GeoPoint, dropoff: GeoPoint) -> MatchCandidate:
    route = RoutePath.from_coordinates(ride.route)

    pickup_projection = nearest_point_on_route(route, pickup)
    dropoff_projection = nearest_point_on_route(route, dropoff)

    return MatchCandidate(
        ride=ride,
        pickup_offset_km=round_km(pickup_projection.offset_km),
        dropoff_offset_km=round_km(dropoff_projection.offset_km),
        pickup_arc_km=pickup_projection.arc_km,
        dropoff_arc_km=dropoff_projection.arc_km,
    )


def project_ride_wanted(route: RoutePath, ride_wanted: RideWanted) -> PassengerMatch:
    """
    Same projection, with the roles swapped: one driver route, many posts.
    """
    origin_projection = nearest_point_on_route(route, ride_wanted.origin.point)
    destination_projection = nearest_point_on_route(route, ride_wanted.destination.point)

    return PassengerMatch(
        ride_wanted=ride_wanted,
        origin_offset_km=round_km(origin_projection.offset_km),
        destination_offset_km=round_km(destination_projection.offset_km),
        origin_arc_km=origin_projection.arc_km,
        destination_arc_km=destination_projection.arc_km,
    )
