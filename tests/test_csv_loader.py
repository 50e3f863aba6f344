import pandas as pd
import polyline
import pytest

from geometry import GeoPoint
from matching import SearchRequest, search_rides
from rides.models import RideStatus
from storage import InMemoryRideRepository, load_rides_csv

# (lng, lat)
MONTREAL_TO_KINGSTON = [(-73.5673, 45.5017), (-74.7303, 45.0213), (-75.6843, 44.5895), (-76.4860, 44.2312)]


def _row(ride_id, route_polyline, **overrides):
    row = {
        "ride_id": ride_id,
        "driver_id": f"d_{ride_id}",
        "from_name": "Montreal",
        "from_lat": 45.5017,
        "from_lng": -73.5673,
        "to_name": "Kingston",
        "to_lat": 44.2312,
        "to_lng": -76.4860,
        "departure_time": "2026-03-02T12:00:00+00:00",
        "route_polyline": route_polyline,
    }
    row.update(overrides)
    return row


@pytest.fixture
def rides_csv(tmp_path):
    path = tmp_path / "rides.csv"
    pd.DataFrame([
        _row("r1", polyline.encode(MONTREAL_TO_KINGSTON, 5, geojson=True), total_seats=4, available_seats=2, price_per_seat=3500),
        _row("r2", "", status="full"),
        _row("r3", polyline.encode(MONTREAL_TO_KINGSTON[:1], 5, geojson=True)),
    ]).to_csv(path, index=False)
    return path


def test_loads_rides_with_routes(rides_csv):
    rides = {ride.id: ride for ride in load_rides_csv(str(rides_csv))}

    assert set(rides) == {"r1", "r2", "r3"}

    r1 = rides["r1"]
    assert r1.origin.point == GeoPoint(45.5017, -73.5673)
    assert len(r1.route) == 4
    assert r1.route[0] == pytest.approx((-73.5673, 45.5017))
    assert r1.departure_time.tzinfo is not None
    assert (r1.total_seats, r1.available_seats, r1.price_per_seat) == (4, 2, 3500)
    assert r1.status == RideStatus.ACTIVE


def test_unreadable_route_still_loads(rides_csv):
    rides = {ride.id: ride for ride in load_rides_csv(str(rides_csv))}

    assert rides["r2"].route == ()
    assert rides["r2"].status == RideStatus.FULL
    # single point decodes fine, the matcher is the one to reject it
    assert len(rides["r3"].route) == 1


def test_loaded_rides_are_searchable(rides_csv, now):
    repository = InMemoryRideRepository(rides=load_rides_csv(str(rides_csv)))
    request = SearchRequest.new(GeoPoint(45.5088, -73.5540), GeoPoint(44.5895, -75.6843))

    matches = search_rides(request, repository, now=now)

    assert [match.ride.id for match in matches] == ["r1"]


def test_missing_columns_are_reported(tmp_path):
    path = tmp_path / "broken.csv"
    pd.DataFrame([{"ride_id": "r1", "from_lat": 45.5}]).to_csv(path, index=False)

    with pytest.raises(ValueError, match="route_polyline"):
        load_rides_csv(str(path))
