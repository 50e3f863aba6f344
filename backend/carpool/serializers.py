from rest_framework import serializers

from geometry import GeoPoint, RoutePathError, route_from_geojson, route_from_polyline, route_to_geojson
from matching import InvalidSearchRequest, PassengerSearchRequest, RideWantedSearchRequest, SearchRequest
from rides.policy import default_search_policy
from users.serializers import PublicUserSerializer

from .models import Ride, RideRequest, RideWanted

POLICY = default_search_policy()


# ----------------
# Stored records
# ----------------
class RideSerializer(serializers.ModelSerializer):
    driver = PublicUserSerializer(read_only=True)
    # Optional on create: the view asks the directions provider when absent
    route_geometry = serializers.JSONField(required=False)

    class Meta:
        model = Ride
        fields = '__all__'
        read_only_fields = ['driver', 'available_seats', 'status', 'created_at', 'updated_at']

    def validate_route_geometry(self, value):
        try:
            route = route_from_geojson(value)
        except RoutePathError as e:
            raise serializers.ValidationError(str(e))
        # store it normalized so the matcher never sees extra keys
        return route_to_geojson(route)


class RideWantedSerializer(serializers.ModelSerializer):
    passenger = PublicUserSerializer(read_only=True)

    class Meta:
        model = RideWanted
        fields = '__all__'
        read_only_fields = ['passenger', 'status', 'created_at', 'updated_at']


class RideRequestSerializer(serializers.ModelSerializer):
    passenger = PublicUserSerializer(read_only=True)
    ride = serializers.PrimaryKeyRelatedField(queryset=Ride.objects.all())

    class Meta:
        model = RideRequest
        fields = '__all__'
        read_only_fields = ['passenger', 'status', 'responded_at', 'created_at', 'updated_at']


# ----------------
# Search input
# ----------------
class LatLngSerializer(serializers.Serializer):
    lat = serializers.FloatField(min_value=-90.0, max_value=90.0)
    lng = serializers.FloatField(min_value=-180.0, max_value=180.0)


def _point(data) -> GeoPoint:
    return GeoPoint(lat=data['lat'], lng=data['lng'])


def _as_validation_error(e: InvalidSearchRequest) -> serializers.ValidationError:
    return serializers.ValidationError({"non_field_errors": [str(e)]})


class RideSearchSerializer(serializers.Serializer):
    """
    Passenger search: rides passing near pickup and dropoff.
    """
    pickup = LatLngSerializer()
    dropoff = LatLngSerializer()
    radius_km = serializers.FloatField(
        required=False, min_value=POLICY.min_radius_km, max_value=POLICY.max_radius_km
    )
    limit = serializers.IntegerField(required=False, min_value=POLICY.min_limit, max_value=POLICY.max_limit)
    min_seats = serializers.IntegerField(required=False, min_value=1, max_value=POLICY.max_min_seats)
    date = serializers.DateTimeField(required=False, allow_null=True)

    def to_search_request(self) -> SearchRequest:
        data = self.validated_data
        try:
            return SearchRequest.new(
                _point(data['pickup']),
                _point(data['dropoff']),
                radius_km=data.get('radius_km'),
                limit=data.get('limit'),
                min_seats=data.get('min_seats'),
                date=data.get('date'),
                policy=POLICY,
            )
        except InvalidSearchRequest as e:
            raise _as_validation_error(e)


class PassengerSearchSerializer(serializers.Serializer):
    """
    Driver search: ride-wanted posts along the driver's route.
    The route comes either as a GeoJSON LineString or an encoded polyline.
    """
    route_geometry = serializers.JSONField(required=False)
    route_polyline = serializers.CharField(required=False, allow_blank=False)
    radius_km = serializers.FloatField(
        required=False, min_value=POLICY.min_radius_km, max_value=POLICY.max_radius_km
    )
    limit = serializers.IntegerField(required=False, min_value=POLICY.min_limit, max_value=POLICY.max_limit)
    date = serializers.DateTimeField(required=False, allow_null=True)

    def validate(self, attrs):
        has_geometry = attrs.get('route_geometry') is not None
        has_polyline = bool(attrs.get('route_polyline'))
        if has_geometry == has_polyline:
            raise serializers.ValidationError("Provide exactly one of route_geometry or route_polyline.")

        try:
            if has_geometry:
                attrs['route'] = route_from_geojson(attrs['route_geometry'])
            else:
                attrs['route'] = route_from_polyline(attrs['route_polyline'])
        except RoutePathError as e:
            raise serializers.ValidationError({"route": [str(e)]})
        return attrs

    def to_search_request(self) -> PassengerSearchRequest:
        data = self.validated_data
        try:
            return PassengerSearchRequest.new(
                data['route'].coordinates(),
                radius_km=data.get('radius_km'),
                limit=data.get('limit'),
                date=data.get('date'),
                policy=POLICY,
            )
        except InvalidSearchRequest as e:
            raise _as_validation_error(e)


class RideWantedSearchSerializer(serializers.Serializer):
    """
    Driver search: ride-wanted posts whose endpoints sit near the driver's.
    """
    origin = LatLngSerializer()
    destination = LatLngSerializer()
    radius_km = serializers.FloatField(
        required=False, min_value=POLICY.min_radius_km, max_value=POLICY.max_ride_wanted_radius_km
    )
    limit = serializers.IntegerField(required=False, min_value=POLICY.min_limit, max_value=POLICY.max_limit)
    date = serializers.DateTimeField(required=False, allow_null=True)

    def to_search_request(self) -> RideWantedSearchRequest:
        data = self.validated_data
        try:
            return RideWantedSearchRequest.new(
                _point(data['origin']),
                _point(data['destination']),
                radius_km=data.get('radius_km'),
                limit=data.get('limit'),
                date=data.get('date'),
                policy=POLICY,
            )
        except InvalidSearchRequest as e:
            raise _as_validation_error(e)


# ----------------
# Search output (domain records, not model rows)
# ----------------
class PlaceSerializer(serializers.Serializer):
    name = serializers.CharField()
    address = serializers.CharField(allow_null=True)
    place_id = serializers.CharField(allow_null=True)
    lat = serializers.FloatField(source='point.lat')
    lng = serializers.FloatField(source='point.lng')


class RideMatchSerializer(serializers.Serializer):
    """
    A matched ride with its pickup / dropoff offsets. Ride attributes are
    passed through unchanged.
    """
    id = serializers.CharField(source='ride.id')
    driver_id = serializers.CharField(source='ride.driver_id')
    driver_name = serializers.CharField(source='ride.driver_name', allow_null=True)
    origin = PlaceSerializer(source='ride.origin')
    destination = PlaceSerializer(source='ride.destination')
    departure_time = serializers.DateTimeField(source='ride.departure_time')
    price_per_seat = serializers.IntegerField(source='ride.price_per_seat', allow_null=True)
    total_seats = serializers.IntegerField(source='ride.total_seats')
    available_seats = serializers.IntegerField(source='ride.available_seats')
    distance_km = serializers.FloatField(source='ride.distance_km', allow_null=True)
    duration_minutes = serializers.IntegerField(source='ride.duration_minutes', allow_null=True)
    description = serializers.CharField(source='ride.description', allow_null=True)
    pickup_offset_km = serializers.FloatField()
    dropoff_offset_km = serializers.FloatField()


class RideWantedRecordSerializer(serializers.Serializer):
    id = serializers.CharField()
    passenger_id = serializers.CharField()
    passenger_name = serializers.CharField(allow_null=True)
    origin = PlaceSerializer()
    destination = PlaceSerializer()
    departure_time = serializers.DateTimeField()
    flexibility_minutes = serializers.IntegerField()
    seats_needed = serializers.IntegerField()
    max_price_per_seat = serializers.IntegerField(allow_null=True)
    description = serializers.CharField(allow_null=True)


class PassengerMatchSerializer(serializers.Serializer):
    ride_wanted = RideWantedRecordSerializer()
    origin_offset_km = serializers.FloatField()
    destination_offset_km = serializers.FloatField()


class RideWantedMatchSerializer(serializers.Serializer):
    ride_wanted = RideWantedRecordSerializer()
    origin_distance_km = serializers.FloatField()
    destination_distance_km = serializers.FloatField()
