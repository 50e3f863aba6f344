"""
Storage collaborator for searches.

Public API:
- RideRepository (interface), InMemoryRideRepository
- load_rides_csv
"""
from .repository import InMemoryRideRepository, RideRepository
from .csv_loader import load_rides_csv

__all__ = [
    "InMemoryRideRepository",
    "RideRepository",
    "load_rides_csv",
]
