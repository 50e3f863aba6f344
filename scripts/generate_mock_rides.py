import pandas as pd
import numpy as np
import polyline
import uuid
from datetime import datetime, timezone, timedelta

# Cities along the Quebec City - Windsor corridor, where most intercity carpooling happens
CITIES = [
    {"name": "Montreal", "lat": 45.501690, "lng": -73.567253},
    {"name": "Ottawa", "lat": 45.421532, "lng": -75.697189},
    {"name": "Toronto", "lat": 43.653225, "lng": -79.383186},
    {"name": "Kingston", "lat": 44.231172, "lng": -76.485954},
    {"name": "Quebec City", "lat": 46.813878, "lng": -71.207981},
    {"name": "Sherbrooke", "lat": 45.404170, "lng": -71.892913},
    {"name": "Trois-Rivieres", "lat": 46.343200, "lng": -72.543400},
]


def mock_route(origin, destination, num_points=40, wobble=0.03):
    """
    A road-like (lng, lat) path: straight interpolation between the endpoints
    with a little lateral noise on the inner points.
    """
    fractions = np.linspace(0.0, 1.0, num_points)
    lats = origin["lat"] + fractions * (destination["lat"] - origin["lat"])
    lngs = origin["lng"] + fractions * (destination["lng"] - origin["lng"])

    noise = np.random.uniform(-wobble, wobble, size=(2, num_points))
    noise[:, 0] = 0.0
    noise[:, -1] = 0.0

    return [(float(lng), float(lat)) for lng, lat in zip(lngs + noise[1], lats + noise[0])]


def generate_mock_rides(num_rides=500, broken_ratio=0.02, output_file="rides_generated.csv"):
    """
    Generates intercity rides with encoded route polylines, for the in-memory
    repository and the search simulation. A small share of rides get a
    single-point route so the matcher's skip path shows up in the logs.
    """
    data = []
    now = datetime.now(timezone.utc)

    for ride_index in range(num_rides):
        origin, destination = np.random.choice(CITIES, size=2, replace=False)

        route = mock_route(origin, destination)
        if np.random.random() < broken_ratio:
            route = route[:1]

        total_seats = int(np.random.randint(1, 5))

        data.append({
            "ride_id": f"r_{str(ride_index+1).zfill(6)}",
            "driver_id": f"d_{str(uuid.uuid4())[:8]}",
            "from_name": origin["name"],
            "from_lat": np.round(origin["lat"], 6),
            "from_lng": np.round(origin["lng"], 6),
            "to_name": destination["name"],
            "to_lat": np.round(destination["lat"], 6),
            "to_lng": np.round(destination["lng"], 6),
            # departures spread over the next two weeks, on the quarter hour
            "departure_time": (now + timedelta(minutes=15 * int(np.random.randint(4, 4 * 24 * 14)))).isoformat(),
            "route_polyline": polyline.encode(route, 5, geojson=True),
            "status": np.random.choice(["active", "full", "cancelled"], p=[0.85, 0.1, 0.05]),
            "total_seats": total_seats,
            "available_seats": int(np.random.randint(0, total_seats + 1)),
            "price_per_seat": int(np.random.randint(15, 60)) * 100,
        })

    df = pd.DataFrame(data)
    df.to_csv(output_file, index=False)
    print(f"✅ Generated {num_rides} rides and saved to '{output_file}'")

    print("\nTop 5 Corridors:")
    counts = (df["from_name"] + " -> " + df["to_name"]).value_counts().head(5)
    for corridor, count in counts.items():
        print(f"  {corridor}: {count} rides")


if __name__ == "__main__":
    generate_mock_rides(num_rides=500)
