"""
Purpose: Filter & rank (the "who is best" layer).
What it does:
Takes projected candidates and produces the final ordered result list.

Filter (all must hold):
- pickup offset <= radius (inclusive)
- dropoff offset <= radius (inclusive)
- pickup arc position < dropoff arc position (same direction as the driver)

Rank: closest pickup first, then closest dropoff, then earliest departure,
then ride id, so equal offsets never fall back to storage order.

Truncation to `limit` always happens after sorting.
"""

from __future__ import annotations

from typing import Iterable, List

from rides.models import MatchCandidate, PassengerMatch, RideWantedMatch


def passes_filter(candidate: MatchCandidate, radius_km: float) -> bool:
    if candidate.pickup_offset_km > radius_km:
        return False
    if candidate.dropoff_offset_km > radius_km:
        return False
    # pickup must come before dropoff along the driver's direction of travel
    if candidate.pickup_arc_km >= candidate.dropoff_arc_km:
        return False
    return True


def ride_sort_key(candidate: MatchCandidate):
    return (
        candidate.pickup_offset_km,
        candidate.dropoff_offset_km,
        candidate.ride.departure_time,
        candidate.ride.id,
    )


def rank_candidates(
    candidates: Iterable[MatchCandidate],
    *,
    radius_km: float,
    limit: int,
) -> List[MatchCandidate]:
    passing = [candidate for candidate in candidates if passes_filter(candidate, radius_km)]
    passing.sort(key=ride_sort_key)
    return passing[:limit]


def passenger_passes_filter(match: PassengerMatch, radius_km: float) -> bool:
    if match.origin_offset_km > radius_km:
        return False
    if match.destination_offset_km > radius_km:
        return False
    if match.origin_arc_km >= match.destination_arc_km:
        return False
    return True


def rank_passenger_matches(
    matches: Iterable[PassengerMatch],
    *,
    radius_km: float,
    limit: int,
) -> List[PassengerMatch]:
    """
    Order by pickup sequence along the route: whoever the driver reaches first.
    """
    passing = [match for match in matches if passenger_passes_filter(match, radius_km)]
    passing.sort(key=lambda match: (match.origin_arc_km, match.origin_offset_km, match.ride_wanted.id))
    return passing[:limit]


def rank_ride_wanted_matches(
    matches: Iterable[RideWantedMatch],
    *,
    radius_km: float,
    limit: int,
) -> List[RideWantedMatch]:
    passing = [
        match for match in matches
        if match.origin_distance_km <= radius_km and match.destination_distance_km <= radius_km
    ]
    passing.sort(
        key=lambda match: (match.origin_distance_km, match.destination_distance_km, match.ride_wanted.id)
    )
    return passing[:limit]
