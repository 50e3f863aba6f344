import pytest
from datetime import datetime, timezone

from geometry import GeoPoint
from matching import InvalidSearchRequest, PassengerSearchRequest, RideWantedSearchRequest, SearchRequest

PICKUP = GeoPoint(45.5017, -73.5673)
DROPOFF = GeoPoint(45.4215, -75.6972)


def test_defaults_come_from_policy():
    request = SearchRequest.new(PICKUP, DROPOFF)

    assert request.radius_km == 10.0
    assert request.limit == 20
    assert request.min_seats == 1
    assert request.date is None


def test_bounds_are_inclusive():
    request = SearchRequest.new(PICKUP, DROPOFF, radius_km=50, limit=50, min_seats=10)
    assert (request.radius_km, request.limit, request.min_seats) == (50.0, 50, 10)

    request = SearchRequest.new(PICKUP, DROPOFF, radius_km=1, limit=1)
    assert (request.radius_km, request.limit) == (1.0, 1)


@pytest.mark.parametrize(
    "options",
    [
        {"radius_km": 0.5},
        {"radius_km": 51},
        {"radius_km": "10"},
        {"limit": 0},
        {"limit": 51},
        {"limit": 2.5},
        {"limit": True},
        {"min_seats": 0},
        {"min_seats": 11},
        {"date": "2026-03-02"},
    ],
)
def test_out_of_bounds_options_are_rejected(options):
    with pytest.raises(InvalidSearchRequest):
        SearchRequest.new(PICKUP, DROPOFF, **options)


@pytest.mark.parametrize(
    "point",
    [
        GeoPoint(91.0, 0.0),
        GeoPoint(0.0, -180.5),
        GeoPoint(float("nan"), 0.0),
        (45.5, -73.5),
    ],
)
def test_invalid_coordinates_are_rejected(point):
    with pytest.raises(InvalidSearchRequest):
        SearchRequest.new(point, DROPOFF)
    with pytest.raises(InvalidSearchRequest):
        SearchRequest.new(PICKUP, point)


def test_date_is_kept_as_given():
    date = datetime(2026, 4, 1, 12, 0, tzinfo=timezone.utc)
    assert SearchRequest.new(PICKUP, DROPOFF, date=date).date == date


def test_passenger_request_needs_a_real_route():
    request = PassengerSearchRequest.new([(-73.5673, 45.5017), (-75.6972, 45.4215)])
    assert len(request.route) == 2
    assert request.radius_km == 10.0

    with pytest.raises(InvalidSearchRequest):
        PassengerSearchRequest.new([(-73.5673, 45.5017)])
    with pytest.raises(InvalidSearchRequest):
        PassengerSearchRequest.new([(-73.5673, 45.5017), (-275.0, 45.4)])
    with pytest.raises(InvalidSearchRequest):
        PassengerSearchRequest.new([(-73.5673, 45.5017), (-75.6972, 45.4215)], radius_km=60)


def test_ride_wanted_request_allows_wider_radius():
    assert RideWantedSearchRequest.new(PICKUP, DROPOFF).radius_km == 25.0
    assert RideWantedSearchRequest.new(PICKUP, DROPOFF, radius_km=100).radius_km == 100.0

    with pytest.raises(InvalidSearchRequest):
        RideWantedSearchRequest.new(PICKUP, DROPOFF, radius_km=101)
