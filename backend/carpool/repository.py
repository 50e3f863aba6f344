"""
Purpose: RideRepository backed by the Django ORM.
What it does:
Translates the bounding-box pre-filters into Q objects on the indexed
from_/to_ lat/lng columns (and, for rides, the route_ envelope columns),
runs one query per search and hands the rows to the matcher as domain records.

Database errors are not caught here; the view decides what the client sees.
"""

from __future__ import annotations

from datetime import datetime
from typing import List

from django.db.models import Q

from matching.prefilter import BoundingBox, EndpointPrefilter, RouteEnvelopePrefilter
from rides.models import Ride as RideRecord
from rides.models import RideWanted as RideWantedRecord
from storage.repository import RideRepository, RideWantedPrefilter

from .models import Ride, RideWanted


def box_q(prefix: str, box: BoundingBox) -> Q:
    """`prefix` is "from" or "to"."""
    return Q(**{
        f"{prefix}_lat__gte": box.min_lat,
        f"{prefix}_lat__lte": box.max_lat,
        f"{prefix}_lng__gte": box.min_lng,
        f"{prefix}_lng__lte": box.max_lng,
    })


def endpoint_q(prefilter: EndpointPrefilter) -> Q:
    near_pickup = box_q("from", prefilter.pickup_box) | box_q("to", prefilter.pickup_box)
    near_dropoff = box_q("from", prefilter.dropoff_box) | box_q("to", prefilter.dropoff_box)
    return near_pickup & near_dropoff


def overlaps_q(box: BoundingBox) -> Q:
    """Stored route envelope overlaps `box`. Rows without an envelope never match."""
    return Q(
        route_min_lat__lte=box.max_lat,
        route_max_lat__gte=box.min_lat,
        route_min_lng__lte=box.max_lng,
        route_max_lng__gte=box.min_lng,
    )


def ride_q(prefilter: EndpointPrefilter) -> Q:
    passes_through = overlaps_q(prefilter.pickup_box) & overlaps_q(prefilter.dropoff_box)
    return endpoint_q(prefilter) | passes_through


def envelope_q(prefilter: RouteEnvelopePrefilter) -> Q:
    return box_q("from", prefilter.envelope) & box_q("to", prefilter.envelope)


def prefilter_q(prefilter: RideWantedPrefilter) -> Q:
    if isinstance(prefilter, RouteEnvelopePrefilter):
        return envelope_q(prefilter)
    return endpoint_q(prefilter)


class DjangoRideRepository(RideRepository):

    def find_active_rides(
        self,
        prefilter: EndpointPrefilter,
        *,
        departing_after: datetime,
        min_seats: int = 1,
    ) -> List[RideRecord]:
        rows = (
            Ride.objects
            .select_related("driver")
            .filter(
                ride_q(prefilter),
                status=Ride.Status.ACTIVE,
                departure_time__gte=departing_after,
                available_seats__gte=min_seats,
            )
            .order_by("departure_time")
        )
        return [row.to_record() for row in rows]

    def find_active_ride_wanted(
        self,
        prefilter: RideWantedPrefilter,
        *,
        departing_after: datetime,
    ) -> List[RideWantedRecord]:
        rows = (
            RideWanted.objects
            .select_related("passenger")
            .filter(
                prefilter_q(prefilter),
                status=RideWanted.Status.ACTIVE,
                departure_time__gte=departing_after,
            )
            .order_by("departure_time")
        )
        return [row.to_record() for row in rows]
