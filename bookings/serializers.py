"""
Serializers for ticket bookings.
"""
from rest_framework import serializers

from .models import BookingStatus


class BookingSerializer(serializers.Serializer):
    """Serializer for viewing bookings."""
    id = serializers.CharField(read_only=True)
    trip_id = serializers.CharField()
    customer_name = serializers.CharField()
    id_number = serializers.CharField()
    seat_number = serializers.IntegerField()
    price = serializers.FloatField()
    booking_date = serializers.DateTimeField()
    status = serializers.CharField()
    customer_photo_url = serializers.CharField(required=False)


class BookingCreateSerializer(serializers.Serializer):
    """Serializer for creating a booking."""
    trip_id = serializers.CharField()
    customer_name = serializers.CharField(max_length=255)
    id_number = serializers.CharField(max_length=50)
    seat_number = serializers.IntegerField(min_value=1)
    customer_photo_url = serializers.URLField(required=False, allow_blank=True)

    def validate_customer_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Customer name cannot be blank.")
        return value


class BookingUpdateSerializer(serializers.Serializer):
    """Partial update: reassignment, status change or customer details."""
    trip_id = serializers.CharField(required=False)
    customer_name = serializers.CharField(max_length=255, required=False)
    id_number = serializers.CharField(max_length=50, required=False)
    seat_number = serializers.IntegerField(min_value=1, required=False)
    status = serializers.ChoiceField(choices=BookingStatus.choices, required=False)
    customer_photo_url = serializers.URLField(required=False, allow_blank=True)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("No changes supplied.")
        return attrs
