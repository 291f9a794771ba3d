"""
Serializers for buses and trips.
"""
from rest_framework import serializers

from .inventory import available_seats
from .models import MaintenanceStatus, TripStatus


class BusSerializer(serializers.Serializer):
    """Bus document."""
    id = serializers.CharField(read_only=True)
    name = serializers.CharField(max_length=100)
    plate_number = serializers.CharField(max_length=20)
    capacity = serializers.IntegerField(min_value=1)
    maintenance_status = serializers.ChoiceField(
        choices=MaintenanceStatus.choices, default=MaintenanceStatus.OPERATIONAL.value
    )
    assigned_driver_id = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    image_url = serializers.URLField(required=False, allow_blank=True)

    def validate_plate_number(self, value):
        """Normalize plate number."""
        return value.strip().upper()


class TripSerializer(serializers.Serializer):
    """Trip document with its seat inventory."""
    id = serializers.CharField(read_only=True)
    origin = serializers.CharField(max_length=100)
    destination = serializers.CharField(max_length=100)
    departure = serializers.DateTimeField()
    bus_id = serializers.CharField()
    driver_id = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    ticket_price = serializers.FloatField(min_value=0.01)
    status = serializers.ChoiceField(choices=TripStatus.choices, required=False)
    total_seats = serializers.IntegerField(read_only=True)
    booked_seats = serializers.ListField(child=serializers.IntegerField(), read_only=True)
    available_seat_count = serializers.SerializerMethodField()

    def get_available_seat_count(self, obj):
        return len(available_seats(obj))

    def validate(self, attrs):
        """Validate the route."""
        origin = attrs.get('origin')
        destination = attrs.get('destination')
        if origin is not None:
            attrs['origin'] = origin = origin.strip().title()
        if destination is not None:
            attrs['destination'] = destination = destination.strip().title()

        if origin and destination and origin == destination:
            raise serializers.ValidationError({
                'destination': "Origin and destination cannot be the same."
            })
        return attrs


class SeatMapSerializer(serializers.Serializer):
    trip_id = serializers.CharField()
    total_seats = serializers.IntegerField()
    available_seats = serializers.ListField(child=serializers.IntegerField())
