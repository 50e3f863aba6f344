"""
Purpose: Central configuration for ride searches.
What it does:

Stores all tunable thresholds for the route-proximity searches:

PREFILTER_MARGIN_DEGREES = 0.9   (~100 km)

RIDE_WANTED_MARGIN_DEGREES = 1.4 (~156 km)

RADIUS_KM = 10 (1..50)

LIMIT = 20 (1..50)

Rule: No logic here, just parameters (and their sanity checks) so the
searches can be tuned without touching matching code.
"""

from __future__ import annotations

from dataclasses import dataclass

from geometry import KM_PER_DEGREE


@dataclass(frozen=True)
class SearchPolicy:
    """
    Thresholds shared by the request boundary, the pre-filter and the matcher.
    """

    # --- Bounding-box pre-filter ---
    # Half-width of the box around each rider point, in degrees of latitude.
    # Longitude is widened by 1/cos(lat) when the box is built.
    # Must stay well above the largest search radius or the pre-filter
    # starts dropping rides the exact filter would accept.
    prefilter_margin_degrees: float = 0.9

    # Required ratio between a margin (in km along a meridian) and the largest
    # radius it has to cover.
    margin_safety_ratio: float = 1.5

    # --- Route search radius (km, perpendicular offset from the route) ---
    default_radius_km: float = 10.0
    min_radius_km: float = 1.0
    max_radius_km: float = 50.0

    # --- Result size ---
    default_limit: int = 20
    min_limit: int = 1
    max_limit: int = 50

    # --- Seats ---
    default_min_seats: int = 1
    max_min_seats: int = 10

    # --- Ride-wanted endpoint search (straight-line km between endpoints) ---
    default_ride_wanted_radius_km: float = 25.0
    max_ride_wanted_radius_km: float = 100.0

    # Ride-wanted radii reach further than route radii, so their boxes do too.
    ride_wanted_margin_degrees: float = 1.4

    @property
    def prefilter_margin_km(self) -> float:
        """Margin expressed in km along a meridian."""
        return self.prefilter_margin_degrees * KM_PER_DEGREE

    @property
    def ride_wanted_margin_km(self) -> float:
        return self.ride_wanted_margin_degrees * KM_PER_DEGREE

    def validate(self) -> None:
        """
        Basic sanity checks. Call once at startup.
        """
        if self.prefilter_margin_degrees <= 0 or self.ride_wanted_margin_degrees <= 0:
            raise ValueError("prefilter margins must be > 0")

        if not 0 < self.min_radius_km <= self.default_radius_km <= self.max_radius_km:
            raise ValueError("radius bounds must satisfy 0 < min <= default <= max")

        if not 0 < self.min_limit <= self.default_limit <= self.max_limit:
            raise ValueError("limit bounds must satisfy 0 < min <= default <= max")

        if not 1 <= self.default_min_seats <= self.max_min_seats:
            raise ValueError("seat bounds must satisfy 1 <= default <= max")

        if not self.min_radius_km <= self.default_ride_wanted_radius_km <= self.max_ride_wanted_radius_km:
            raise ValueError("ride-wanted radius bounds are inconsistent")

        if self.prefilter_margin_km < self.margin_safety_ratio * self.max_radius_km:
            raise ValueError(
                f"prefilter margin ({self.prefilter_margin_km:.1f} km) must be at least "
                f"{self.margin_safety_ratio}x max_radius_km ({self.max_radius_km} km)"
            )

        if self.ride_wanted_margin_km < self.margin_safety_ratio * self.max_ride_wanted_radius_km:
            raise ValueError(
                f"ride-wanted margin ({self.ride_wanted_margin_km:.1f} km) must be at least "
                f"{self.margin_safety_ratio}x max_ride_wanted_radius_km ({self.max_ride_wanted_radius_km} km)"
            )


def default_search_policy() -> SearchPolicy:
    """
    Convenience factory for the default policy.
    """
    p = SearchPolicy()
    p.validate()
    return p
