from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from geometry import GeoPoint
from matching.prefilter import route_bounds
from rides.models import Place, RideStatus, RideWantedStatus
from rides.models import Ride as RideRecord
from rides.models import RideWanted as RideWantedRecord


def stored_coordinates(geometry):
    """
    Pull the coordinate list out of a stored GeoJSON LineString.
    Anything malformed comes back as-is (or empty) for the matcher to reject.
    """
    if not isinstance(geometry, dict):
        return ()
    coordinates = geometry.get("coordinates")
    if not isinstance(coordinates, (list, tuple)):
        return ()
    return tuple(tuple(c) if isinstance(c, (list, tuple)) else c for c in coordinates)


class Ride(models.Model):
    """
    A ride offered by a driver.
    Lifecycle: Active -> Full / Cancelled / Completed.
    Only active rides departing in the future show up in searches.
    """
    class Status(models.TextChoices):
        ACTIVE = "active", "Active"
        FULL = "full", "Full"
        CANCELLED = "cancelled", "Cancelled"
        COMPLETED = "completed", "Completed"

    class LuggageSize(models.TextChoices):
        SMALL = "small", "Small"
        MEDIUM = "medium", "Medium"
        LARGE = "large", "Large"

    driver = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='rides')

    # Origin (place ids come from the geocoding provider)
    from_place_id = models.CharField(max_length=256)
    from_name = models.CharField(max_length=256)
    from_address = models.TextField(blank=True, null=True)
    from_lat = models.FloatField()
    from_lng = models.FloatField()

    # Destination
    to_place_id = models.CharField(max_length=256)
    to_name = models.CharField(max_length=256)
    to_address = models.TextField(blank=True, null=True)
    to_lat = models.FloatField()
    to_lng = models.FloatField()

    departure_time = models.DateTimeField()
    distance_km = models.FloatField(blank=True, null=True)
    duration_minutes = models.PositiveIntegerField(blank=True, null=True)

    # GeoJSON LineString: {"type": "LineString", "coordinates": [[lng, lat], ...]}
    route_geometry = models.JSONField()
    # Envelope of route_geometry, kept in sync by save(). Null when the route is unusable.
    route_min_lat = models.FloatField(blank=True, null=True, editable=False)
    route_max_lat = models.FloatField(blank=True, null=True, editable=False)
    route_min_lng = models.FloatField(blank=True, null=True, editable=False)
    route_max_lng = models.FloatField(blank=True, null=True, editable=False)

    total_seats = models.PositiveSmallIntegerField(default=3, validators=[MinValueValidator(1), MaxValueValidator(10)])
    available_seats = models.PositiveSmallIntegerField(default=3)
    price_per_seat = models.PositiveIntegerField(blank=True, null=True, help_text="In cents")

    description = models.TextField(blank=True, max_length=1000)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.ACTIVE)

    # Preferences shown on the ride card
    luggage_size = models.CharField(max_length=16, choices=LuggageSize.choices, blank=True, null=True)
    allows_pets = models.BooleanField(default=False)
    allows_bikes = models.BooleanField(default=False)
    has_winter_tires = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['departure_time']
        indexes = [
            models.Index(fields=['status', 'departure_time']),
            # bounding-box pre-filter columns
            models.Index(fields=['from_lat', 'from_lng']),
            models.Index(fields=['to_lat', 'to_lng']),
            models.Index(fields=['route_min_lat', 'route_max_lat']),
            models.Index(fields=['route_min_lng', 'route_max_lng']),
        ]

    def save(self, *args, **kwargs):
        self.refresh_route_bounds()
        super().save(*args, **kwargs)

    def refresh_route_bounds(self):
        bounds = route_bounds(stored_coordinates(self.route_geometry))
        if bounds is None:
            self.route_min_lat = self.route_max_lat = None
            self.route_min_lng = self.route_max_lng = None
        else:
            self.route_min_lat, self.route_max_lat = bounds.min_lat, bounds.max_lat
            self.route_min_lng, self.route_max_lng = bounds.min_lng, bounds.max_lng

    def to_record(self) -> RideRecord:
        """
        Matcher-side view of this row. The stored geometry is passed through
        as-is; an invalid one is the matcher's to skip.
        """
        return RideRecord(
            id=str(self.pk),
            driver_id=str(self.driver_id),
            origin=Place(
                name=self.from_name,
                point=GeoPoint(self.from_lat, self.from_lng),
                address=self.from_address,
                place_id=self.from_place_id,
            ),
            destination=Place(
                name=self.to_name,
                point=GeoPoint(self.to_lat, self.to_lng),
                address=self.to_address,
                place_id=self.to_place_id,
            ),
            route=stored_coordinates(self.route_geometry),
            departure_time=self.departure_time,
            status=RideStatus(self.status),
            total_seats=self.total_seats,
            available_seats=self.available_seats,
            price_per_seat=self.price_per_seat,
            distance_km=self.distance_km,
            duration_minutes=self.duration_minutes,
            description=self.description or None,
            driver_name=str(self.driver) if self.driver_id else None,
        )

    def take_seats(self, seats):
        """Book `seats` seats; the ride turns full when none are left. Caller saves."""
        self.available_seats -= seats
        if self.available_seats == 0:
            self.status = self.Status.FULL

    def release_seats(self, seats):
        self.available_seats = min(self.available_seats + seats, self.total_seats)
        if self.status == self.Status.FULL and self.available_seats > 0:
            self.status = self.Status.ACTIVE

    def __str__(self):
        return f"Ride #{self.pk} {self.from_name} -> {self.to_name} ({self.status})"


class RideWanted(models.Model):
    """
    A passenger's "looking for a ride" post. Drivers find these along
    their route and send offers.
    """
    class Status(models.TextChoices):
        ACTIVE = "active", "Active"
        FULFILLED = "fulfilled", "Fulfilled"
        CANCELLED = "cancelled", "Cancelled"
        EXPIRED = "expired", "Expired"

    passenger = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='rides_wanted')

    from_place_id = models.CharField(max_length=256)
    from_name = models.CharField(max_length=256)
    from_address = models.TextField(blank=True, null=True)
    from_lat = models.FloatField()
    from_lng = models.FloatField()

    to_place_id = models.CharField(max_length=256)
    to_name = models.CharField(max_length=256)
    to_address = models.TextField(blank=True, null=True)
    to_lat = models.FloatField()
    to_lng = models.FloatField()

    departure_time = models.DateTimeField()
    # How far either side of departure_time the passenger can move
    flexibility_minutes = models.PositiveIntegerField(default=30)

    seats_needed = models.PositiveSmallIntegerField(default=1, validators=[MinValueValidator(1), MaxValueValidator(10)])
    max_price_per_seat = models.PositiveIntegerField(blank=True, null=True, help_text="In cents")

    description = models.TextField(blank=True, max_length=1000)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.ACTIVE)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['departure_time']
        indexes = [
            models.Index(fields=['status', 'departure_time']),
            models.Index(fields=['from_lat', 'from_lng']),
            models.Index(fields=['to_lat', 'to_lng']),
        ]

    def to_record(self) -> RideWantedRecord:
        return RideWantedRecord(
            id=str(self.pk),
            passenger_id=str(self.passenger_id),
            origin=Place(
                name=self.from_name,
                point=GeoPoint(self.from_lat, self.from_lng),
                address=self.from_address,
                place_id=self.from_place_id,
            ),
            destination=Place(
                name=self.to_name,
                point=GeoPoint(self.to_lat, self.to_lng),
                address=self.to_address,
                place_id=self.to_place_id,
            ),
            departure_time=self.departure_time,
            status=RideWantedStatus(self.status),
            seats_needed=self.seats_needed,
            flexibility_minutes=self.flexibility_minutes,
            max_price_per_seat=self.max_price_per_seat,
            description=self.description or None,
            passenger_name=str(self.passenger) if self.passenger_id else None,
        )

    def __str__(self):
        return f"Ride wanted #{self.pk} {self.from_name} -> {self.to_name} ({self.status})"


class RideRequest(models.Model):
    """
    A passenger asking the driver for seats on a ride.
    Lifecycle: Pending -> Accepted / Rejected, and the passenger can cancel
    at any point. Accepting takes seats from the ride, cancelling an
    accepted request gives them back.
    """
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        ACCEPTED = "accepted", "Accepted"
        REJECTED = "rejected", "Rejected"
        CANCELLED = "cancelled", "Cancelled"

    ride = models.ForeignKey(Ride, on_delete=models.CASCADE, related_name='requests')
    passenger = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='ride_requests')

    # Where the passenger wants to be picked up / dropped off, if not the ride's endpoints
    pickup_place_id = models.CharField(max_length=256, blank=True, null=True)
    pickup_name = models.CharField(max_length=256, blank=True, null=True)
    pickup_lat = models.FloatField(blank=True, null=True)
    pickup_lng = models.FloatField(blank=True, null=True)

    dropoff_place_id = models.CharField(max_length=256, blank=True, null=True)
    dropoff_name = models.CharField(max_length=256, blank=True, null=True)
    dropoff_lat = models.FloatField(blank=True, null=True)
    dropoff_lng = models.FloatField(blank=True, null=True)

    seats_requested = models.PositiveSmallIntegerField(default=1, validators=[MinValueValidator(1), MaxValueValidator(10)])
    message = models.TextField(blank=True, max_length=500)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING)
    responded_at = models.DateTimeField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['ride', 'status']),
            models.Index(fields=['passenger', 'status']),
        ]

    def __str__(self):
        return f"Request #{self.pk} for ride #{self.ride_id} ({self.status})"
