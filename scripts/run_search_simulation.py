import argparse
import logging
import os
import time
from datetime import datetime, timezone

from geometry import GeoPoint
from matching import SearchRequest, search_rides
from storage import InMemoryRideRepository, load_rides_csv


def run_simulation(filepath, pickup, dropoff, radius_km=None, min_seats=None, limit=None):
    print("=== STARTING RIDE SEARCH SIMULATION ===")

    # 1. Load Data
    base_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    absolute_path = filepath if os.path.isabs(filepath) else os.path.join(base_dir, filepath)
    repository = InMemoryRideRepository(rides=load_rides_csv(absolute_path))
    print(f"Loaded {len(repository.rides)} Rides.\n")

    # 2. Search
    request = SearchRequest.new(pickup, dropoff, radius_km=radius_km, limit=limit, min_seats=min_seats)
    print(f"Searching {pickup.lat:.4f},{pickup.lng:.4f} -> {dropoff.lat:.4f},{dropoff.lng:.4f} "
          f"within {request.radius_km} km (min {request.min_seats} seat(s))...")

    start_time = time.time()
    matches = search_rides(request, repository, now=datetime.now(timezone.utc))
    print(f"Search returned {len(matches)} rides in {time.time() - start_time:.3f}s.\n")

    # 3. Report
    print("--- Matches ---")
    for match in matches:
        ride = match.ride
        print(
            f"{ride.id}  {ride.origin.name} -> {ride.destination.name}  "
            f"{ride.departure_time:%Y-%m-%d %H:%M}  "
            f"pickup +{match.pickup_offset_km} km, dropoff +{match.dropoff_offset_km} km  "
            f"seats {ride.available_seats}/{ride.total_seats}"
        )

    print("\n=== SIMULATION COMPLETE ===")
    return matches


def parse_point(text):
    lat, lng = (float(part) for part in text.split(","))
    return GeoPoint(lat, lng)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run a ride search over a generated CSV.")
    parser.add_argument("--file", default="rides_generated.csv")
    # Defaults: downtown Montreal -> Kingston, which sits on the Montreal - Toronto corridor
    parser.add_argument("--pickup", type=parse_point, default=GeoPoint(45.5017, -73.5673))
    parser.add_argument("--dropoff", type=parse_point, default=GeoPoint(44.2312, -76.4860))
    parser.add_argument("--radius", type=float, default=None)
    parser.add_argument("--seats", type=int, default=None)
    parser.add_argument("--limit", type=int, default=None)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    run_simulation(args.file, args.pickup, args.dropoff, radius_km=args.radius, min_seats=args.seats, limit=args.limit)
