"""
Purpose: Load sample rides from CSV (the format scripts/generate_mock_rides.py writes).
What it does:
Reads the file with pandas, decodes each encoded route polyline and builds
Ride objects for the in-memory repository.

A row whose polyline cannot be decoded still loads, with an empty route,
so the matcher's skip path is exercised the same way as with real data.
"""

from __future__ import annotations

import logging
from typing import List

import pandas as pd

from geometry import GeoPoint, RoutePathError, coordinates_from_polyline
from rides.models import Place, Ride, RideStatus

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = [
    "ride_id",
    "driver_id",
    "from_name",
    "from_lat",
    "from_lng",
    "to_name",
    "to_lat",
    "to_lng",
    "departure_time",
    "route_polyline",
]


def _optional_int(value):
    if pd.isna(value):
        return None
    return int(value)


def load_rides_csv(path: str) -> List[Ride]:
    df = pd.read_csv(path, dtype={"ride_id": str, "driver_id": str, "route_polyline": str})

    missing = [column for column in REQUIRED_COLUMNS if column not in df.columns]
    if missing:
        raise ValueError(f"{path} is missing columns: {', '.join(missing)}")

    df["departure_time"] = pd.to_datetime(df["departure_time"], utc=True)

    rides: List[Ride] = []
    for _, row in df.iterrows():
        try:
            encoded = row["route_polyline"]
            route = coordinates_from_polyline("" if pd.isna(encoded) else encoded)
        except RoutePathError as e:
            logger.warning("Ride %s has an unreadable route (%s); loading it without one", row["ride_id"], e)
            route = []

        status = row.get("status")
        status = RideStatus.ACTIVE if status is None or pd.isna(status) else RideStatus(status)

        total_seats = _optional_int(row.get("total_seats"))
        total_seats = 3 if total_seats is None else total_seats
        available_seats = _optional_int(row.get("available_seats"))

        rides.append(
            Ride.new(
                ride_id=row["ride_id"],
                driver_id=row["driver_id"],
                origin=Place(name=row["from_name"], point=GeoPoint(float(row["from_lat"]), float(row["from_lng"]))),
                destination=Place(name=row["to_name"], point=GeoPoint(float(row["to_lat"]), float(row["to_lng"]))),
                route=route,
                departure_time=row["departure_time"].to_pydatetime(),
                status=status,
                total_seats=total_seats,
                available_seats=total_seats if available_seats is None else available_seats,
                price_per_seat=_optional_int(row.get("price_per_seat")),
            )
        )

    return rides
