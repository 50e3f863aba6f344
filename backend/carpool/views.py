import logging

from django.conf import settings
from django.db import DatabaseError, transaction
from django.db.models import Q
from django.utils import timezone
from rest_framework import mixins, permissions, serializers, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import APIException
from rest_framework.response import Response

from geometry import GeoPoint, route_to_geojson
from matching import find_passengers, search_ride_wanted, search_rides
from routing import OSRMClient, OSRMError

from .models import Ride, RideRequest, RideWanted
from .repository import DjangoRideRepository
from .serializers import (
    PassengerMatchSerializer,
    PassengerSearchSerializer,
    RideMatchSerializer,
    RideRequestSerializer,
    RideSearchSerializer,
    RideSerializer,
    RideWantedMatchSerializer,
    RideWantedSearchSerializer,
    RideWantedSerializer,
)

logger = logging.getLogger(__name__)

SEARCH_FAILED = {"error": "Search failed"}


class RouteUnavailable(APIException):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "Could not get a route for this ride from the directions provider."
    default_code = "route_unavailable"


class Conflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflicts with the current state of the resource."
    default_code = "conflict"


class IsOwnerOrReadOnly(permissions.BasePermission):
    """
    `owner_field` on the view names the user FK ("driver" or "passenger").
    """
    def has_object_permission(self, request, view, obj):
        if request.method in permissions.SAFE_METHODS:
            return True
        return getattr(obj, view.owner_field) == request.user


class SearchMixin:
    """
    Runs a matcher search against the database with the clock injected here.
    Storage failures become a generic 503; nothing else is caught.
    """

    def get_search_repository(self):
        return DjangoRideRepository()

    def run_search(self, search, input_serializer_class, output_serializer_class, request):
        serializer = input_serializer_class(data=request.data)
        serializer.is_valid(raise_exception=True)
        search_request = serializer.to_search_request()

        try:
            matches = search(search_request, self.get_search_repository(), now=timezone.now())
        except DatabaseError:
            logger.exception("%s failed", search.__name__)
            return Response(SEARCH_FAILED, status=status.HTTP_503_SERVICE_UNAVAILABLE)

        return Response({
            "count": len(matches),
            "results": output_serializer_class(matches, many=True).data,
        })


class RideViewSet(SearchMixin, viewsets.ModelViewSet):
    """
    Rides offered by drivers.
    - Public: List/Retrieve, search
    - Driver: Create/Update/Delete, cancel
    """
    queryset = Ride.objects.select_related('driver')
    serializer_class = RideSerializer
    permission_classes = [permissions.IsAuthenticatedOrReadOnly, IsOwnerOrReadOnly]
    owner_field = "driver"

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.request.query_params.get('mine') and self.request.user.is_authenticated:
            return queryset.filter(driver=self.request.user)
        # only browsing hides inactive records
        if self.action != 'list':
            return queryset
        return queryset.filter(status=Ride.Status.ACTIVE, departure_time__gte=timezone.now())

    def perform_create(self, serializer):
        data = serializer.validated_data
        extra = {"driver": self.request.user, "available_seats": data.get('total_seats', 3)}

        if data.get('route_geometry') is None:
            extra.update(self.route_from_provider(data))

        serializer.save(**extra)

    def route_from_provider(self, data):
        try:
            client = OSRMClient(base_url=settings.OSRM_BASE_URL or None)
        except ValueError:
            raise serializers.ValidationError(
                {"route_geometry": ["This field is required when no directions provider is configured."]}
            )

        try:
            result = client.compute_route([
                GeoPoint(data['from_lat'], data['from_lng']),
                GeoPoint(data['to_lat'], data['to_lng']),
            ])
        except OSRMError as e:
            logger.warning("Route lookup failed for new ride: %s", e)
            raise RouteUnavailable()

        return {
            "route_geometry": route_to_geojson(result.route),
            "distance_km": result.distance_km,
            "duration_minutes": result.duration_minutes,
        }

    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        ride = self.get_object()
        if ride.status != Ride.Status.ACTIVE and ride.status != Ride.Status.FULL:
            return Response({"error": f"Ride is already {ride.status}"}, status=status.HTTP_400_BAD_REQUEST)
        ride.status = Ride.Status.CANCELLED
        ride.save(update_fields=['status', 'updated_at'])
        return Response({"status": "Ride Cancelled"})

    @action(detail=False, methods=['post'], permission_classes=[permissions.AllowAny])
    def search(self, request):
        """
        Rides whose route passes near the pickup and the dropoff, in that order.
        """
        return self.run_search(search_rides, RideSearchSerializer, RideMatchSerializer, request)


class RideWantedViewSet(SearchMixin, viewsets.ModelViewSet):
    """
    Passengers' "looking for a ride" posts.
    """
    queryset = RideWanted.objects.select_related('passenger')
    serializer_class = RideWantedSerializer
    permission_classes = [permissions.IsAuthenticatedOrReadOnly, IsOwnerOrReadOnly]
    owner_field = "passenger"

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.request.query_params.get('mine') and self.request.user.is_authenticated:
            return queryset.filter(passenger=self.request.user)
        # only browsing hides inactive records
        if self.action != 'list':
            return queryset
        return queryset.filter(status=RideWanted.Status.ACTIVE, departure_time__gte=timezone.now())

    def perform_create(self, serializer):
        serializer.save(passenger=self.request.user)

    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        post = self.get_object()
        if post.status != RideWanted.Status.ACTIVE:
            return Response({"error": f"Post is already {post.status}"}, status=status.HTTP_400_BAD_REQUEST)
        post.status = RideWanted.Status.CANCELLED
        post.save(update_fields=['status', 'updated_at'])
        return Response({"status": "Post Cancelled"})

    @action(detail=False, methods=['post'], permission_classes=[permissions.AllowAny])
    def search(self, request):
        """
        Posts whose origin and destination are near the driver's own.
        """
        return self.run_search(search_ride_wanted, RideWantedSearchSerializer, RideWantedMatchSerializer, request)

    @action(detail=False, methods=['post'], url_path='along-route', permission_classes=[permissions.AllowAny])
    def along_route(self, request):
        """
        Posts a driver can serve along their route, in pickup order.
        """
        return self.run_search(find_passengers, PassengerSearchSerializer, PassengerMatchSerializer, request)


class RideRequestViewSet(mixins.CreateModelMixin,
                         mixins.ListModelMixin,
                         mixins.RetrieveModelMixin,
                         viewsets.GenericViewSet):
    """
    Seat requests on rides.
    - Passenger: create, cancel
    - Driver: accept, reject
    Users only see requests they made or requests on their own rides.
    """
    serializer_class = RideRequestSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        user = self.request.user
        queryset = (
            RideRequest.objects.select_related('ride', 'passenger')
            .filter(Q(passenger=user) | Q(ride__driver=user))
        )
        ride_id = self.request.query_params.get('ride')
        if ride_id:
            queryset = queryset.filter(ride_id=ride_id)
        return queryset

    def perform_create(self, serializer):
        ride = serializer.validated_data['ride']
        seats = serializer.validated_data.get('seats_requested', 1)

        if ride.status != Ride.Status.ACTIVE:
            raise serializers.ValidationError({"ride": ["This ride is no longer accepting requests."]})
        if ride.driver_id == self.request.user.pk:
            raise serializers.ValidationError({"ride": ["You cannot request your own ride."]})
        if RideRequest.objects.filter(ride=ride, passenger=self.request.user, status=RideRequest.Status.PENDING).exists():
            raise Conflict("You already have a pending request for this ride.")
        if ride.available_seats < seats:
            raise serializers.ValidationError(
                {"seats_requested": [f"Only {ride.available_seats} seats available."]}
            )

        serializer.save(passenger=self.request.user)

    def _respond(self, ride_request, new_status):
        ride_request.status = new_status
        ride_request.responded_at = timezone.now()
        ride_request.save(update_fields=['status', 'responded_at', 'updated_at'])

    @action(detail=True, methods=['post'])
    def accept(self, request, pk=None):
        """
        Driver action: confirm the passenger and take their seats.
        """
        ride_request = self.get_object()
        if ride_request.ride.driver_id != request.user.pk:
            return Response({"error": "Only the driver can accept requests"}, status=status.HTTP_403_FORBIDDEN)
        if ride_request.status != RideRequest.Status.PENDING:
            return Response({"error": "Request is no longer pending"}, status=status.HTTP_400_BAD_REQUEST)

        with transaction.atomic():
            ride = Ride.objects.select_for_update().get(pk=ride_request.ride_id)
            if ride.available_seats < ride_request.seats_requested:
                return Response({"error": "Not enough seats available"}, status=status.HTTP_400_BAD_REQUEST)
            ride.take_seats(ride_request.seats_requested)
            ride.save(update_fields=['available_seats', 'status', 'updated_at'])
            self._respond(ride_request, RideRequest.Status.ACCEPTED)

        logger.info("Ride %s: request %s accepted, %d seats left", ride.pk, ride_request.pk, ride.available_seats)
        return Response({"status": "Request Accepted", "available_seats": ride.available_seats})

    @action(detail=True, methods=['post'])
    def reject(self, request, pk=None):
        ride_request = self.get_object()
        if ride_request.ride.driver_id != request.user.pk:
            return Response({"error": "Only the driver can reject requests"}, status=status.HTTP_403_FORBIDDEN)
        if ride_request.status != RideRequest.Status.PENDING:
            return Response({"error": "Request is no longer pending"}, status=status.HTTP_400_BAD_REQUEST)

        self._respond(ride_request, RideRequest.Status.REJECTED)
        return Response({"status": "Request Rejected"})

    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        """
        Passenger action. Cancelling an accepted request gives the seats back.
        """
        ride_request = self.get_object()
        if ride_request.passenger_id != request.user.pk:
            return Response({"error": "Only the passenger can cancel a request"}, status=status.HTTP_403_FORBIDDEN)
        if ride_request.status == RideRequest.Status.CANCELLED:
            return Response({"error": "Request is already cancelled"}, status=status.HTTP_400_BAD_REQUEST)

        with transaction.atomic():
            if ride_request.status == RideRequest.Status.ACCEPTED:
                ride = Ride.objects.select_for_update().get(pk=ride_request.ride_id)
                ride.release_seats(ride_request.seats_requested)
                ride.save(update_fields=['available_seats', 'status', 'updated_at'])
            ride_request.status = RideRequest.Status.CANCELLED
            ride_request.save(update_fields=['status', 'updated_at'])

        return Response({"status": "Request Cancelled"})
