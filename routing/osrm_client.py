#Purpose: The OSRM "adapter/client" (the external directions provider).
#Sole responsibility: talk to OSRM via HTTP and return normalized outputs.
#Encapsulates OSRM-specific details:
#coordinate formatting (lng,lat)
#URL construction (/route)
#timeouts and error handling
#decoding the route geometry into a RoutePath
#It is only used when a driver posts a ride without its own geometry.
#It should not contain matching rules or ranking.


from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List, Optional

import requests
from dotenv import load_dotenv

from geometry import GeoPoint, RoutePath, RoutePathError, route_from_polyline

# Read OSRM base URL from environment
# Example in .env:
# OSRM_BASE_URL=http://router.project-osrm.org
load_dotenv()

logger = logging.getLogger(__name__)


class OSRMError(Exception):
    """Raised when OSRM cannot be reached or returns an unusable answer."""
    pass


@dataclass(frozen=True)
class RouteResult:
    """
    Normalized /route answer.
    """
    route: RoutePath
    distance_km: float
    duration_minutes: int


class OSRMClient:
    """
    OSRM Adapter / Client

    Sole responsibility:
    - Talk to OSRM via HTTP
    - Convert internal GeoPoint (lat, lng) -> OSRM (lng,lat)
    - Return normalized outputs
    """
    def __init__(self, base_url: Optional[str] = None, profile: str = "driving", timeout: int = 5):
        self.base_url = (base_url or os.getenv("OSRM_BASE_URL") or "").rstrip("/")
        self.timeout = timeout  # seconds to wait for OSRM before giving up
        self.profile = profile  # driving, walking, cycling

        if not self.base_url:
            raise ValueError("OSRM base URL not set. Please set OSRM_BASE_URL in the .env file.")

    #----------------
    # Internal helpers
    #----------------
    def format_coordinates(self, points: List[GeoPoint]) -> str:
        """Convert points to OSRM format 'lng,lat;lng,lat;...'"""
        return ";".join(f"{point.lng},{point.lat}" for point in points)

    #----------------
    # Public methods
    #----------------
    def compute_route(self, points: List[GeoPoint]) -> RouteResult:
        """
        Calls the OSRM /route endpoint through the given points (origin,
        optional stops, destination) and returns the full route geometry
        with its length and duration.
        """
        if len(points) < 2:
            raise ValueError("At least two points are required to compute a route.")

        url = f"{self.base_url}/route/v1/{self.profile}/{self.format_coordinates(points)}"

        try:
            response = requests.get(
                url,
                params={
                    "overview": "full",  # full geometry, not simplified
                    "geometries": "polyline",
                },
                timeout=self.timeout,
            )
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise OSRMError(f"OSRM request failed: {e}") from e

        if data.get("code") != "Ok" or not data.get("routes"):
            raise OSRMError(f"OSRM error: {data.get('message', data.get('code', 'Unknown error'))}")

        route = data["routes"][0]  # OSRM may return alternatives, first is best

        try:
            path = route_from_polyline(route["geometry"])
        except RoutePathError as e:
            raise OSRMError(f"OSRM returned an unusable geometry: {e}") from e

        logger.debug("OSRM route: %d points, %.1f m", len(path), route["distance"])

        return RouteResult(
            route=path,
            distance_km=round(route["distance"] / 1000.0, 1),
            duration_minutes=int(round(route["duration"] / 60.0)),
        )
