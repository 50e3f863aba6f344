import pytest
from datetime import datetime, timedelta, timezone

from geometry import GeoPoint
from rides.models import Place, Ride, RideWanted

# Fixed reference time for every search in the suite
NOW = datetime(2026, 3, 2, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_ride():
    """
    Factory for rides. Endpoints default to the first / last route
    coordinate; pass origin / destination for degenerate routes.
    """
    def _make_ride(ride_id, route, *, origin=None, destination=None, departure=None, **details):
        if origin is None:
            origin = GeoPoint.from_lng_lat(route[0])
        if destination is None:
            destination = GeoPoint.from_lng_lat(route[-1])

        return Ride.new(
            ride_id=ride_id,
            driver_id=f"driver_{ride_id}",
            origin=Place(name=f"{ride_id} origin", point=origin),
            destination=Place(name=f"{ride_id} destination", point=destination),
            route=route,
            departure_time=departure or NOW + timedelta(hours=2),
            **details,
        )
    return _make_ride


@pytest.fixture
def make_ride_wanted():
    def _make_ride_wanted(post_id, origin, destination, *, departure=None, **details):
        return RideWanted(
            id=post_id,
            passenger_id=f"passenger_{post_id}",
            origin=Place(name=f"{post_id} origin", point=origin),
            destination=Place(name=f"{post_id} destination", point=destination),
            departure_time=departure or NOW + timedelta(hours=3),
            **details,
        )
    return _make_ride_wanted
