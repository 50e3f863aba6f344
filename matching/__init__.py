"""
Route matcher package.

Expose the high-level pipeline pieces:
- Pre-filters (storage-facing bounding boxes)
- Projection / filter / rank
- Search orchestrators (the "one call" entry points)
"""
from .prefilter import BoundingBox, EndpointPrefilter, RouteEnvelopePrefilter, route_bounds
from .request import InvalidSearchRequest, PassengerSearchRequest, RideWantedSearchRequest, SearchRequest
from .candidates import project_ride, project_ride_wanted
from .ranking import passes_filter, rank_candidates
from .engine import find_passengers, match_rides, search_ride_wanted, search_rides

__all__ = [
    "BoundingBox",
    "EndpointPrefilter",
    "RouteEnvelopePrefilter",
    "route_bounds",
    "InvalidSearchRequest",
    "PassengerSearchRequest",
    "RideWantedSearchRequest",
    "SearchRequest",
    "project_ride",
    "project_ride_wanted",
    "passes_filter",
    "rank_candidates",
    "find_passengers",
    "match_rides",
    "search_ride_wanted",
    "search_rides",
]
