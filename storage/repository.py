"""
Purpose: The storage collaborator the searches talk to.
What it does:
- RideRepository: the queries a search needs (status, departure time,
  seats and a pre-filter predicate). Any backend implements these.
- InMemoryRideRepository: list-backed implementation used by tests, the
  simulation script and anything that loads rides from CSV.

Rule: Storage applies the cheap filters only. Geometry stays in matching/.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Union

from matching.prefilter import EndpointPrefilter, RouteEnvelopePrefilter
from rides.models import Ride, RideStatus, RideWanted, RideWantedStatus

RideWantedPrefilter = Union[EndpointPrefilter, RouteEnvelopePrefilter]


class RideRepository:
    """
    Interface for ride storage. Errors raised by implementations propagate
    to the caller untouched; searches never retry.
    """

    def find_active_rides(
        self,
        prefilter: EndpointPrefilter,
        *,
        departing_after: datetime,
        min_seats: int = 1,
    ) -> List[Ride]:
        """
        Active rides departing at or after `departing_after` with at least
        `min_seats` free seats that pass `prefilter`, earliest departure first.
        Each ride carries its full stored route.
        """
        raise NotImplementedError

    def find_active_ride_wanted(
        self,
        prefilter: RideWantedPrefilter,
        *,
        departing_after: datetime,
    ) -> List[RideWanted]:
        """
        Active ride-wanted posts departing at or after `departing_after`
        that pass `prefilter`, earliest departure first.
        """
        raise NotImplementedError


@dataclass
class InMemoryRideRepository(RideRepository):
    """
    Keeps rides and posts in lists. Returned lists are fresh copies, so a
    search can never disturb the stored snapshot.
    """
    rides: List[Ride] = field(default_factory=list)
    ride_wanted: List[RideWanted] = field(default_factory=list)

    def add_ride(self, ride: Ride) -> None:
        self.rides.append(ride)

    def add_ride_wanted(self, ride_wanted: RideWanted) -> None:
        self.ride_wanted.append(ride_wanted)

    def find_active_rides(
        self,
        prefilter: EndpointPrefilter,
        *,
        departing_after: datetime,
        min_seats: int = 1,
    ) -> List[Ride]:
        found = [
            ride for ride in self.rides
            if ride.status == RideStatus.ACTIVE
            and ride.departure_time >= departing_after
            and ride.available_seats >= min_seats
            and prefilter.admits(ride)
        ]
        found.sort(key=lambda ride: ride.departure_time)
        return found

    def find_active_ride_wanted(
        self,
        prefilter: RideWantedPrefilter,
        *,
        departing_after: datetime,
    ) -> List[RideWanted]:
        found = [
            post for post in self.ride_wanted
            if post.status == RideWantedStatus.ACTIVE
            and post.departure_time >= departing_after
            and prefilter.admits_ride_wanted(post)
        ]
        found.sort(key=lambda post: post.departure_time)
        return found
