"""
Purpose: Domain models for the rides marketplace.
What it does:
Defines Ride and RideWanted the way the matcher sees them, independent of
the Django ORM, plus the per-search match records the matcher produces.

Rule: No storage calls, no geometry math. Models only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional, Sequence, Tuple

from geometry import GeoPoint, LngLat


class RideStatus(str, Enum):
    ACTIVE = "active"
    FULL = "full"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class RideWantedStatus(str, Enum):
    ACTIVE = "active"
    FULFILLED = "fulfilled"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


@dataclass(frozen=True)
class Place:
    """
    A named ride endpoint (origin or destination).
    place_id is the geocoding provider's id, kept for linking back.
    """
    name: str
    point: GeoPoint
    address: Optional[str] = None
    place_id: Optional[str] = None


@dataclass(frozen=True)
class Ride:
    """
    A ride offered by a driver.

    `route` is the stored (lng, lat) geometry exactly as persisted. It is not
    validated here: a broken route still loads, the matcher skips it.
    """
    id: str
    driver_id: str
    origin: Place
    destination: Place
    route: Tuple[LngLat, ...]
    departure_time: datetime
    status: RideStatus = RideStatus.ACTIVE

    total_seats: int = 3
    available_seats: int = 3
    price_per_seat: Optional[int] = None  # cents
    distance_km: Optional[float] = None
    duration_minutes: Optional[int] = None
    description: Optional[str] = None
    driver_name: Optional[str] = None

    @classmethod
    def new(
        cls,
        ride_id: str,
        driver_id: str,
        origin: Place,
        destination: Place,
        route: Sequence[Sequence[float]],
        departure_time: datetime,
        status: str | RideStatus = RideStatus.ACTIVE,
        **details: Any,
    ) -> Ride:
        if isinstance(status, str):
            status = RideStatus(status)

        return cls(
            id=ride_id,
            driver_id=driver_id,
            origin=origin,
            destination=destination,
            route=tuple(tuple(coordinate) for coordinate in route),
            departure_time=departure_time,
            status=status,
            **details,
        )


@dataclass(frozen=True)
class RideWanted:
    """
    A passenger's "looking for a ride" post.
    """
    id: str
    passenger_id: str
    origin: Place
    destination: Place
    departure_time: datetime
    status: RideWantedStatus = RideWantedStatus.ACTIVE

    seats_needed: int = 1
    flexibility_minutes: int = 30
    max_price_per_seat: Optional[int] = None  # cents
    description: Optional[str] = None
    passenger_name: Optional[str] = None


@dataclass(frozen=True)
class MatchCandidate:
    """
    A Ride plus its geometry against one rider's pickup / dropoff.

    Created fresh per search and discarded with the response. The ride
    itself is never modified.
    Offsets are rounded to 0.1 km; arc positions are raw km from the route start.
    """
    ride: Ride
    pickup_offset_km: float
    dropoff_offset_km: float
    pickup_arc_km: float
    dropoff_arc_km: float


@dataclass(frozen=True)
class PassengerMatch:
    """
    A RideWanted post positioned along a driver's route.
    """
    ride_wanted: RideWanted
    origin_offset_km: float
    destination_offset_km: float
    origin_arc_km: float
    destination_arc_km: float


@dataclass(frozen=True)
class RideWantedMatch:
    """
    A RideWanted post scored by straight-line endpoint distance.
    """
    ride_wanted: RideWanted
    origin_distance_km: float
    destination_distance_km: float


@dataclass
class SearchStats:
    """
    Counters for one search run, for logging.
    """
    fetched: int = 0
    skipped_invalid_route: int = 0
    projected: int = 0
    returned: int = 0
    skipped_ride_ids: List[str] = field(default_factory=list)
