"""
Purpose: Typed search requests and their boundary validation.
What it does:
Each request has a `new(...)` factory that fills defaults from the
SearchPolicy and rejects out-of-bounds input with InvalidSearchRequest.
Requests built through `new` are safe to hand to the matcher, which does
not re-check them.

The reference time is not read from the clock here: `date` stays None
when absent and the caller passes `now` into the search.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Optional, Sequence

from geometry import GeoPoint, RoutePath, RoutePathError
from rides.policy import SearchPolicy, default_search_policy


class InvalidSearchRequest(ValueError):
    """Raised when search input is outside its documented bounds."""
    pass


def _require_point(name: str, point: GeoPoint) -> GeoPoint:
    if not isinstance(point, GeoPoint) or not point.is_valid():
        raise InvalidSearchRequest(f"{name} must be a valid lat/lng, got {point!r}")
    return point


def _bounded_number(name: str, value: Any, minimum: float, maximum: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidSearchRequest(f"{name} must be a number, got {value!r}")
    if not minimum <= value <= maximum:
        raise InvalidSearchRequest(f"{name} must be between {minimum} and {maximum}, got {value}")
    return value


def _bounded_int(name: str, value: Any, minimum: int, maximum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidSearchRequest(f"{name} must be an integer, got {value!r}")
    return int(_bounded_number(name, value, minimum, maximum))


def _require_date(date: Optional[datetime]) -> Optional[datetime]:
    if date is not None and not isinstance(date, datetime):
        raise InvalidSearchRequest(f"date must be a datetime, got {date!r}")
    return date


@dataclass(frozen=True)
class SearchRequest:
    """
    A passenger looking for rides passing near pickup and dropoff.
    """
    pickup: GeoPoint
    dropoff: GeoPoint
    radius_km: float
    limit: int
    min_seats: int = 1
    date: Optional[datetime] = None

    @classmethod
    def new(
        cls,
        pickup: GeoPoint,
        dropoff: GeoPoint,
        *,
        radius_km: Optional[float] = None,
        limit: Optional[int] = None,
        min_seats: Optional[int] = None,
        date: Optional[datetime] = None,
        policy: Optional[SearchPolicy] = None,
    ) -> SearchRequest:
        policy = policy or default_search_policy()

        radius_km = policy.default_radius_km if radius_km is None else radius_km
        limit = policy.default_limit if limit is None else limit
        min_seats = policy.default_min_seats if min_seats is None else min_seats

        return cls(
            pickup=_require_point("pickup", pickup),
            dropoff=_require_point("dropoff", dropoff),
            radius_km=float(_bounded_number("radius_km", radius_km, policy.min_radius_km, policy.max_radius_km)),
            limit=_bounded_int("limit", limit, policy.min_limit, policy.max_limit),
            min_seats=_bounded_int("min_seats", min_seats, 1, policy.max_min_seats),
            date=_require_date(date),
        )


@dataclass(frozen=True)
class PassengerSearchRequest:
    """
    A driver looking for ride-wanted posts along their own route.
    """
    route: RoutePath
    radius_km: float
    limit: int
    date: Optional[datetime] = None

    @classmethod
    def new(
        cls,
        route_coordinates: Iterable[Sequence[float]],
        *,
        radius_km: Optional[float] = None,
        limit: Optional[int] = None,
        date: Optional[datetime] = None,
        policy: Optional[SearchPolicy] = None,
    ) -> PassengerSearchRequest:
        policy = policy or default_search_policy()

        # here the route is caller input, so a bad one is a bad request
        try:
            route = RoutePath.from_coordinates(route_coordinates)
        except RoutePathError as e:
            raise InvalidSearchRequest(f"route is not a valid polyline: {e}") from e

        radius_km = policy.default_radius_km if radius_km is None else radius_km
        limit = policy.default_limit if limit is None else limit

        return cls(
            route=route,
            radius_km=float(_bounded_number("radius_km", radius_km, policy.min_radius_km, policy.max_radius_km)),
            limit=_bounded_int("limit", limit, policy.min_limit, policy.max_limit),
            date=_require_date(date),
        )


@dataclass(frozen=True)
class RideWantedSearchRequest:
    """
    A driver looking for ride-wanted posts whose endpoints sit near their own.
    """
    origin: GeoPoint
    destination: GeoPoint
    radius_km: float
    limit: int
    date: Optional[datetime] = None

    @classmethod
    def new(
        cls,
        origin: GeoPoint,
        destination: GeoPoint,
        *,
        radius_km: Optional[float] = None,
        limit: Optional[int] = None,
        date: Optional[datetime] = None,
        policy: Optional[SearchPolicy] = None,
    ) -> RideWantedSearchRequest:
        policy = policy or default_search_policy()

        radius_km = policy.default_ride_wanted_radius_km if radius_km is None else radius_km
        limit = policy.default_limit if limit is None else limit

        return cls(
            origin=_require_point("origin", origin),
            destination=_require_point("destination", destination),
            radius_km=float(
                _bounded_number("radius_km", radius_km, policy.min_radius_km, policy.max_ride_wanted_radius_km)
            ),
            limit=_bounded_int("limit", limit, policy.min_limit, policy.max_limit),
            date=_require_date(date),
        )
