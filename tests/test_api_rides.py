import pytest
from datetime import timedelta
from unittest import mock

from django.urls import resolve
from django.utils import timezone
from rest_framework.test import APIRequestFactory, force_authenticate

from carpool.models import Ride
from geometry import RoutePath
from routing import OSRMError, RouteResult

pytestmark = pytest.mark.django_db

# (lng, lat)
MONTREAL_TO_KINGSTON = [(-73.5673, 45.5017), (-74.7303, 45.0213), (-75.6843, 44.5895), (-76.4860, 44.2312)]

RIDES = "/api/v1/rides/"


def _call(method, path, user=None, body=None):
    match = resolve(path)
    request = getattr(APIRequestFactory(), method)(path, body, format="json")
    if user is not None:
        force_authenticate(request, user=user)
    return match.func(request, *match.args, **match.kwargs)


@pytest.fixture
def driver(django_user_model):
    return django_user_model.objects.create_user(username="maxime", password="not-a-real-password")


@pytest.fixture
def stranger(django_user_model):
    return django_user_model.objects.create_user(username="sophie", password="not-a-real-password")


@pytest.fixture
def new_ride():
    return {
        "from_place_id": "p1", "from_name": "Montreal", "from_lat": 45.5017, "from_lng": -73.5673,
        "to_place_id": "p2", "to_name": "Kingston", "to_lat": 44.2312, "to_lng": -76.4860,
        "departure_time": (timezone.now() + timedelta(days=1)).isoformat(),
        "total_seats": 4,
        "price_per_seat": 3000,
    }


@pytest.fixture
def osrm():
    with mock.patch("carpool.views.OSRMClient") as client_cls:
        client_cls.return_value.compute_route.return_value = RouteResult(
            route=RoutePath.from_coordinates(MONTREAL_TO_KINGSTON),
            distance_km=287.4,
            duration_minutes=171,
        )
        yield client_cls.return_value


def test_posted_ride_gets_its_route_from_the_provider(driver, new_ride, osrm):
    response = _call("post", RIDES, driver, new_ride)

    assert response.status_code == 201, response.data
    ride = Ride.objects.get(pk=response.data["id"])
    assert ride.driver == driver
    assert ride.route_geometry["coordinates"][0] == [-73.5673, 45.5017]
    assert (ride.distance_km, ride.duration_minutes) == (287.4, 171)
    # every seat starts free
    assert ride.available_seats == ride.total_seats == 4
    assert ride.status == Ride.Status.ACTIVE
    assert ride.route_min_lng == -76.4860

    [points] = osrm.compute_route.call_args.args
    assert (points[0].lat, points[-1].lat) == (45.5017, 44.2312)


def test_posted_route_geometry_skips_the_provider(driver, new_ride, osrm):
    body = {**new_ride, "route_geometry": {"type": "LineString", "coordinates": MONTREAL_TO_KINGSTON}}

    response = _call("post", RIDES, driver, body)

    assert response.status_code == 201, response.data
    osrm.compute_route.assert_not_called()


def test_provider_failure_is_a_bad_gateway(driver, new_ride, osrm):
    osrm.compute_route.side_effect = OSRMError("OSRM request failed: timeout")

    response = _call("post", RIDES, driver, new_ride)

    assert response.status_code == 502
    assert not Ride.objects.exists()


def test_missing_route_without_provider_is_a_bad_request(driver, new_ride, settings, monkeypatch):
    settings.OSRM_BASE_URL = ""
    monkeypatch.delenv("OSRM_BASE_URL", raising=False)

    response = _call("post", RIDES, driver, new_ride)

    assert response.status_code == 400
    assert "route_geometry" in response.data


def test_anonymous_cannot_post(new_ride, osrm):
    response = _call("post", RIDES, None, new_ride)

    assert response.status_code == 403


@pytest.fixture
def ride(driver):
    return Ride.objects.create(
        driver=driver,
        from_place_id="p1", from_name="Montreal", from_lat=45.5017, from_lng=-73.5673,
        to_place_id="p2", to_name="Kingston", to_lat=44.2312, to_lng=-76.4860,
        departure_time=timezone.now() + timedelta(days=1),
        route_geometry={"type": "LineString", "coordinates": [list(c) for c in MONTREAL_TO_KINGSTON]},
    )


def test_driver_cancels_once(driver, ride):
    path = f"{RIDES}{ride.pk}/cancel/"

    response = _call("post", path, driver)
    assert response.status_code == 200
    assert response.data == {"status": "Ride Cancelled"}
    ride.refresh_from_db()
    assert ride.status == Ride.Status.CANCELLED

    again = _call("post", path, driver)
    assert again.status_code == 400


def test_full_ride_can_be_cancelled(driver, ride):
    Ride.objects.filter(pk=ride.pk).update(status=Ride.Status.FULL, available_seats=0)

    response = _call("post", f"{RIDES}{ride.pk}/cancel/", driver)

    assert response.status_code == 200


def test_completed_ride_cannot_be_cancelled(driver, ride):
    Ride.objects.filter(pk=ride.pk).update(status=Ride.Status.COMPLETED)

    response = _call("post", f"{RIDES}{ride.pk}/cancel/", driver)

    assert response.status_code == 400
    ride.refresh_from_db()
    assert ride.status == Ride.Status.COMPLETED


def test_only_the_driver_cancels(stranger, ride):
    response = _call("post", f"{RIDES}{ride.pk}/cancel/", stranger)

    assert response.status_code == 403
    ride.refresh_from_db()
    assert ride.status == Ride.Status.ACTIVE


def test_listing_hides_inactive_rides(driver, ride):
    Ride.objects.create(
        driver=driver,
        from_place_id="p1", from_name="Montreal", from_lat=45.5017, from_lng=-73.5673,
        to_place_id="p2", to_name="Kingston", to_lat=44.2312, to_lng=-76.4860,
        departure_time=timezone.now() + timedelta(days=1),
        route_geometry={"type": "LineString", "coordinates": [list(c) for c in MONTREAL_TO_KINGSTON]},
        status=Ride.Status.CANCELLED,
    )

    response = _call("get", RIDES)

    assert response.status_code == 200
    assert [item["id"] for item in response.data] == [ride.pk]
