import polyline
import pytest
import requests
from unittest import mock

from geometry import GeoPoint
from routing import OSRMClient, OSRMError

MONTREAL = GeoPoint(45.5017, -73.5673)
OTTAWA = GeoPoint(45.4215, -75.6972)


def _response(payload):
    response = mock.Mock()
    response.json.return_value = payload
    return response


@pytest.fixture
def client():
    return OSRMClient(base_url="http://osrm.test/")


def test_compute_route_decodes_geometry(client):
    payload = {
        "code": "Ok",
        "routes": [{
            # polyline.encode takes (lat, lng) pairs by default
            "geometry": polyline.encode([(45.5017, -73.5673), (45.4007, -74.0305), (45.4215, -75.6972)], 5),
            "distance": 198765.0,
            "duration": 7260.0,
        }],
    }

    with mock.patch("routing.osrm_client.requests.get", return_value=_response(payload)) as get:
        result = client.compute_route([MONTREAL, OTTAWA])

    url = get.call_args[0][0]
    assert url == "http://osrm.test/route/v1/driving/-73.5673,45.5017;-75.6972,45.4215"
    assert get.call_args[1]["params"] == {"overview": "full", "geometries": "polyline"}
    assert get.call_args[1]["timeout"] == 5

    assert len(result.route) == 3
    assert result.route.points[0].lat == pytest.approx(45.5017)
    assert result.route.points[0].lng == pytest.approx(-73.5673)
    assert result.distance_km == 198.8
    assert result.duration_minutes == 121


def test_no_route_is_an_error(client):
    payload = {"code": "NoRoute", "message": "Impossible route between points"}

    with mock.patch("routing.osrm_client.requests.get", return_value=_response(payload)):
        with pytest.raises(OSRMError, match="Impossible route"):
            client.compute_route([MONTREAL, OTTAWA])


def test_network_failure_is_an_error(client):
    with mock.patch("routing.osrm_client.requests.get", side_effect=requests.Timeout("timed out")):
        with pytest.raises(OSRMError):
            client.compute_route([MONTREAL, OTTAWA])


def test_single_point_geometry_is_an_error(client):
    payload = {"code": "Ok", "routes": [{"geometry": polyline.encode([(45.5, -73.5)], 5), "distance": 0.0, "duration": 0.0}]}

    with mock.patch("routing.osrm_client.requests.get", return_value=_response(payload)):
        with pytest.raises(OSRMError):
            client.compute_route([MONTREAL, OTTAWA])


def test_needs_two_points(client):
    with pytest.raises(ValueError):
        client.compute_route([MONTREAL])


def test_base_url_is_required(monkeypatch):
    monkeypatch.delenv("OSRM_BASE_URL", raising=False)
    with pytest.raises(ValueError):
        OSRMClient()

    monkeypatch.setenv("OSRM_BASE_URL", "http://osrm.env")
    assert OSRMClient().base_url == "http://osrm.env"
