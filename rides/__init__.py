"""
Rides domain package.

Public API:
- Domain models: Ride, RideWanted, Place, RideStatus, RideWantedStatus
- Match records: MatchCandidate, PassengerMatch, RideWantedMatch
- SearchPolicy, default_search_policy
"""
from .models import (
    MatchCandidate,
    PassengerMatch,
    Place,
    Ride,
    RideStatus,
    RideWanted,
    RideWantedMatch,
    RideWantedStatus,
    SearchStats,
)
from .policy import SearchPolicy, default_search_policy

__all__ = [
    "MatchCandidate",
    "PassengerMatch",
    "Place",
    "Ride",
    "RideStatus",
    "RideWanted",
    "RideWantedMatch",
    "RideWantedStatus",
    "SearchStats",
    "SearchPolicy",
    "default_search_policy",
]
