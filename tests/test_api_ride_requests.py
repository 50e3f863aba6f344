import pytest
from datetime import timedelta

from django.urls import resolve
from django.utils import timezone
from rest_framework.test import APIRequestFactory, force_authenticate

from carpool.models import Ride, RideRequest

pytestmark = pytest.mark.django_db

REQUESTS = "/api/v1/ride-requests/"


def _call(method, path, user, body=None):
    match = resolve(path.split("?")[0])
    request = getattr(APIRequestFactory(), method)(path, body, format="json")
    force_authenticate(request, user=user)
    return match.func(request, *match.args, **match.kwargs)


def _user(django_user_model, username):
    return django_user_model.objects.create_user(username=username, password="not-a-real-password")


@pytest.fixture
def driver(django_user_model):
    return _user(django_user_model, "maxime")


@pytest.fixture
def passenger(django_user_model):
    return _user(django_user_model, "sophie")


@pytest.fixture
def other_passenger(django_user_model):
    return _user(django_user_model, "karim")


@pytest.fixture
def ride(driver):
    return Ride.objects.create(
        driver=driver,
        from_place_id="p1", from_name="Montreal", from_lat=45.5017, from_lng=-73.5673,
        to_place_id="p2", to_name="Kingston", to_lat=44.2312, to_lng=-76.4860,
        departure_time=timezone.now() + timedelta(days=1),
        route_geometry={"type": "LineString", "coordinates": [[-73.5673, 45.5017], [-76.4860, 44.2312]]},
        total_seats=3,
        available_seats=3,
    )


def _request_seats(user, ride, seats=1, **extra):
    return _call("post", REQUESTS, user, {"ride": ride.pk, "seats_requested": seats, **extra})


def _act(user, ride_request_id, verb):
    return _call("post", f"{REQUESTS}{ride_request_id}/{verb}/", user)


def test_passenger_requests_seats(passenger, ride):
    response = _request_seats(passenger, ride, 2, message="Two of us, small bags", pickup_name="Berri-UQAM")

    assert response.status_code == 201, response.data
    assert response.data["status"] == RideRequest.Status.PENDING
    ride_request = RideRequest.objects.get(pk=response.data["id"])
    assert ride_request.passenger == passenger
    assert ride_request.pickup_name == "Berri-UQAM"
    # nothing is taken until the driver accepts
    ride.refresh_from_db()
    assert ride.available_seats == 3


def test_request_is_refused_when_it_cannot_be_honoured(driver, passenger, ride):
    # own ride
    assert _request_seats(driver, ride).status_code == 400
    # more seats than the ride has left
    assert _request_seats(passenger, ride, 4).status_code == 400

    assert _request_seats(passenger, ride).status_code == 201
    # second pending request for the same ride
    assert _request_seats(passenger, ride).status_code == 409


def test_full_or_cancelled_ride_takes_no_requests(passenger, ride):
    Ride.objects.filter(pk=ride.pk).update(status=Ride.Status.FULL, available_seats=0)

    response = _request_seats(passenger, ride)

    assert response.status_code == 400
    assert "ride" in response.data


def test_accepting_takes_seats_until_the_ride_is_full(driver, passenger, other_passenger, ride):
    first = _request_seats(passenger, ride, 2).data["id"]
    second = _request_seats(other_passenger, ride, 1).data["id"]

    response = _act(driver, first, "accept")
    assert response.status_code == 200
    assert response.data["available_seats"] == 1
    ride.refresh_from_db()
    assert (ride.available_seats, ride.status) == (1, Ride.Status.ACTIVE)

    assert _act(driver, second, "accept").status_code == 200
    ride.refresh_from_db()
    assert (ride.available_seats, ride.status) == (0, Ride.Status.FULL)

    accepted = RideRequest.objects.get(pk=first)
    assert accepted.status == RideRequest.Status.ACCEPTED
    assert accepted.responded_at is not None


def test_accept_needs_enough_seats_left(driver, passenger, other_passenger, ride):
    first = _request_seats(passenger, ride, 2).data["id"]
    second = _request_seats(other_passenger, ride, 2).data["id"]
    _act(driver, first, "accept")

    response = _act(driver, second, "accept")

    assert response.status_code == 400
    assert RideRequest.objects.get(pk=second).status == RideRequest.Status.PENDING
    ride.refresh_from_db()
    assert ride.available_seats == 1


def test_only_the_driver_answers_and_only_once(driver, passenger, ride):
    request_id = _request_seats(passenger, ride).data["id"]

    assert _act(passenger, request_id, "accept").status_code == 403
    assert _act(passenger, request_id, "reject").status_code == 403

    assert _act(driver, request_id, "reject").status_code == 200
    assert RideRequest.objects.get(pk=request_id).status == RideRequest.Status.REJECTED

    assert _act(driver, request_id, "accept").status_code == 400
    ride.refresh_from_db()
    assert ride.available_seats == 3


def test_cancelling_an_accepted_request_gives_seats_back(driver, passenger, ride):
    request_id = _request_seats(passenger, ride, 3).data["id"]
    _act(driver, request_id, "accept")
    ride.refresh_from_db()
    assert ride.status == Ride.Status.FULL

    response = _act(passenger, request_id, "cancel")

    assert response.status_code == 200
    ride.refresh_from_db()
    assert (ride.available_seats, ride.status) == (3, Ride.Status.ACTIVE)
    assert RideRequest.objects.get(pk=request_id).status == RideRequest.Status.CANCELLED

    assert _act(passenger, request_id, "cancel").status_code == 400


def test_cancelling_a_pending_request_leaves_seats_alone(driver, passenger, ride):
    request_id = _request_seats(passenger, ride, 2).data["id"]

    assert _act(driver, request_id, "cancel").status_code == 403
    assert _act(passenger, request_id, "cancel").status_code == 200

    ride.refresh_from_db()
    assert ride.available_seats == 3


def test_requests_are_visible_to_the_two_parties_only(driver, passenger, other_passenger, ride):
    request_id = _request_seats(passenger, ride).data["id"]

    assert [item["id"] for item in _call("get", REQUESTS, passenger).data] == [request_id]
    assert [item["id"] for item in _call("get", f"{REQUESTS}?ride={ride.pk}", driver).data] == [request_id]
    assert _call("get", REQUESTS, other_passenger).data == []
    assert _act(other_passenger, request_id, "cancel").status_code == 404
