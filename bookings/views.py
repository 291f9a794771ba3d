"""Views for booking management."""
from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiExample
from rest_framework import serializers as drf_serializers

from utils.mongo import get_gateway
from .ledger import BookingLedger
from .models import BookingStatus
from .serializers import BookingCreateSerializer, BookingSerializer, BookingUpdateSerializer


# Response serializers for Swagger
class BookingResponseSerializer(drf_serializers.Serializer):
    message = drf_serializers.CharField()
    booking = BookingSerializer()


class BookingListResponseSerializer(drf_serializers.Serializer):
    count = drf_serializers.IntegerField()
    results = BookingSerializer(many=True)


class BookingListView(APIView):
    """List bookings or create a new one."""

    @extend_schema(
        summary="List bookings",
        description="Bookings ordered by booking date, newest first.",
        parameters=[
            OpenApiParameter(name='trip_id', type=str, required=False, description='Only bookings on this trip'),
            OpenApiParameter(name='status', type=str, required=False, enum=BookingStatus.values,
                             description='Filter by booking status'),
        ],
        responses={200: BookingListResponseSerializer},
        tags=["Bookings"]
    )
    def get(self, request):
        bookings = BookingLedger(get_gateway()).list_bookings(
            trip_id=request.query_params.get('trip_id'),
            status=request.query_params.get('status'),
        )
        return Response({
            'count': len(bookings),
            'results': BookingSerializer(bookings, many=True).data
        })

    @extend_schema(
        summary="Book a seat on a trip",
        description="Reserves the seat, records a Confirmed booking at the trip's ticket price "
                    "and logs the ticket sale as income. Returns 409 if the seat was taken meanwhile.",
        request=BookingCreateSerializer,
        responses={201: BookingResponseSerializer},
        examples=[
            OpenApiExample(
                "Book seat 12",
                value={
                    "trip_id": "665f1c2e9b1e8a3d4c2b1a10",
                    "customer_name": "Alice Moreau",
                    "id_number": "ID-448812",
                    "seat_number": 12
                },
                request_only=True
            )
        ],
        tags=["Bookings"]
    )
    def post(self, request):
        serializer = BookingCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        booking = BookingLedger(get_gateway()).create_booking(**serializer.validated_data)
        return Response({
            'message': 'Booking confirmed successfully',
            'booking': BookingSerializer(booking).data
        }, status=status.HTTP_201_CREATED)


class BookingDetailView(APIView):
    """Get, reassign or delete a booking."""

    @extend_schema(summary="Get booking", responses={200: BookingSerializer}, tags=["Bookings"])
    def get(self, request, booking_id):
        booking = BookingLedger(get_gateway()).get_booking(booking_id)
        return Response(BookingSerializer(booking).data)

    @extend_schema(
        summary="Update booking",
        description="Moving a booking to another trip or seat frees the old seat and reserves the new one. "
                    "Cancelling frees the seat.",
        request=BookingUpdateSerializer,
        responses={200: BookingResponseSerializer},
        tags=["Bookings"]
    )
    def patch(self, request, booking_id):
        serializer = BookingUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        booking = BookingLedger(get_gateway()).update_booking(booking_id, serializer.validated_data)
        return Response({
            'message': 'Booking updated successfully',
            'booking': BookingSerializer(booking).data
        })

    @extend_schema(
        summary="Delete booking",
        description="Removes the booking and frees its seat if the trip still exists.",
        responses={204: None},
        tags=["Bookings"]
    )
    def delete(self, request, booking_id):
        BookingLedger(get_gateway()).delete_booking(booking_id)
        return Response(status=status.HTTP_204_NO_CONTENT)
