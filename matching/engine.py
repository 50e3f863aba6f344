"""
Purpose: The search orchestrators (single entry points).
What it does:

Coordinates each search end-to-end:

- builds the bounding-box pre-filter from the request (prefilter.py)
- asks storage once for the candidate snapshot (the only I/O)
- projects every candidate onto its route (candidates.py), skipping rides
  whose stored route is not a usable polyline
- filters, sorts and truncates (ranking.py)

Each call is stateless: nothing is shared between searches and the same
inputs over the same snapshot always give the same ordered output. Storage
errors propagate unchanged.

The reference time is always passed in (`now`); nothing here reads the clock.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Iterable, List, Optional

from geometry import GeoPoint, RoutePathError, haversine_km, round_km
from rides.models import (
    MatchCandidate,
    PassengerMatch,
    Ride,
    RideStatus,
    RideWantedMatch,
    SearchStats,
)
from rides.policy import SearchPolicy, default_search_policy

from .candidates import project_ride, project_ride_wanted
from .prefilter import EndpointPrefilter, RouteEnvelopePrefilter
from .ranking import rank_candidates, rank_passenger_matches, rank_ride_wanted_matches
from .request import PassengerSearchRequest, RideWantedSearchRequest, SearchRequest

if TYPE_CHECKING:
    from storage.repository import RideRepository

logger = logging.getLogger(__name__)


def match_rides(
    rides: Iterable[Ride],
    pickup: GeoPoint,
    dropoff: GeoPoint,
    *,
    radius_km: float,
    limit: int,
    stats: Optional[SearchStats] = None,
) -> List[MatchCandidate]:
    """
    Exact filter and rank over an already fetched candidate set (pure).

    A ride with a degenerate or malformed route is logged and left out; it
    never fails the search.
    """
    stats = stats if stats is not None else SearchStats()
    candidates: List[MatchCandidate] = []

    for ride in rides:
        stats.fetched += 1

        if ride.status != RideStatus.ACTIVE:
            continue

        try:
            candidate = project_ride(ride, pickup, dropoff)
        except RoutePathError as e:
            stats.skipped_invalid_route += 1
            stats.skipped_ride_ids.append(ride.id)
            logger.warning("Skipping ride %s: unusable route (%s)", ride.id, e)
            continue

        candidates.append(candidate)

    ranked = rank_candidates(candidates, radius_km=radius_km, limit=limit)
    stats.projected = len(candidates)
    stats.returned = len(ranked)
    return ranked


def search_rides(
    request: SearchRequest,
    repository: RideRepository,
    *,
    now: datetime,
    policy: Optional[SearchPolicy] = None,
) -> List[MatchCandidate]:
    """
    Find active rides whose route passes near both the pickup and the
    dropoff, in the rider's direction, closest pickup first.

    An empty list is a normal outcome.
    """
    policy = policy or default_search_policy()

    prefilter = EndpointPrefilter.for_trip(
        request.pickup,
        request.dropoff,
        policy.prefilter_margin_degrees,
    )
    departing_after = request.date or now

    rides = repository.find_active_rides(
        prefilter,
        departing_after=departing_after,
        min_seats=request.min_seats,
    )

    stats = SearchStats()
    matches = match_rides(
        rides,
        request.pickup,
        request.dropoff,
        radius_km=request.radius_km,
        limit=request.limit,
        stats=stats,
    )

    logger.debug(
        "Ride search: %d fetched, %d skipped (bad route), %d returned",
        stats.fetched,
        stats.skipped_invalid_route,
        stats.returned,
    )
    return matches


def find_passengers(
    request: PassengerSearchRequest,
    repository: RideRepository,
    *,
    now: datetime,
    policy: Optional[SearchPolicy] = None,
) -> List[PassengerMatch]:
    """
    Find ride-wanted posts a driver could serve along their route, in the
    order the driver would reach them.
    """
    policy = policy or default_search_policy()

    prefilter = RouteEnvelopePrefilter.for_route(request.route, policy.prefilter_margin_degrees)
    posts = repository.find_active_ride_wanted(prefilter, departing_after=request.date or now)

    matches = [project_ride_wanted(request.route, post) for post in posts]
    ranked = rank_passenger_matches(matches, radius_km=request.radius_km, limit=request.limit)

    logger.debug("Passenger search: %d fetched, %d returned", len(posts), len(ranked))
    return ranked


def search_ride_wanted(
    request: RideWantedSearchRequest,
    repository: RideRepository,
    *,
    now: datetime,
    policy: Optional[SearchPolicy] = None,
) -> List[RideWantedMatch]:
    """
    Find ride-wanted posts whose origin is near the driver's origin and whose
    destination is near the driver's destination (straight-line distance).
    """
    policy = policy or default_search_policy()

    prefilter = EndpointPrefilter.for_trip(
        request.origin,
        request.destination,
        policy.ride_wanted_margin_degrees,
    )
    posts = repository.find_active_ride_wanted(prefilter, departing_after=request.date or now)

    matches = [
        RideWantedMatch(
            ride_wanted=post,
            origin_distance_km=round_km(haversine_km(request.origin, post.origin.point)),
            destination_distance_km=round_km(haversine_km(request.destination, post.destination.point)),
        )
        for post in posts
    ]
    ranked = rank_ride_wanted_matches(matches, radius_km=request.radius_km, limit=request.limit)

    logger.debug("Ride-wanted search: %d fetched, %d returned", len(posts), len(ranked))
    return ranked
