"""Views for bus and trip management."""
from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiExample
from rest_framework import serializers as drf_serializers

from bookings.ledger import BookingLedger
from core.permissions import IsManagerOrReadOnly
from utils.mongo import get_gateway
from .inventory import TripInventory
from .models import MaintenanceStatus, TripStatus
from .serializers import BusSerializer, SeatMapSerializer, TripSerializer
from .services import BusService, TripService


# Response serializers for Swagger
class BusListResponseSerializer(drf_serializers.Serializer):
    count = drf_serializers.IntegerField()
    results = BusSerializer(many=True)


class TripListResponseSerializer(drf_serializers.Serializer):
    count = drf_serializers.IntegerField()
    results = TripSerializer(many=True)


class BusListView(APIView):
    permission_classes = [IsManagerOrReadOnly]

    @extend_schema(
        summary="List buses",
        description="All buses ordered by name, optionally filtered by maintenance status.",
        parameters=[
            OpenApiParameter(name='maintenance_status', type=str, required=False,
                             enum=MaintenanceStatus.values, description='Filter by maintenance status'),
        ],
        responses={200: BusListResponseSerializer},
        tags=["Fleet"]
    )
    def get(self, request):
        buses = BusService(get_gateway()).list_buses(request.query_params.get('maintenance_status'))
        return Response({'count': len(buses), 'results': BusSerializer(buses, many=True).data})

    @extend_schema(
        summary="Add a bus (Admin/Manager)",
        request=BusSerializer,
        responses={201: BusSerializer},
        examples=[
            OpenApiExample(
                "Create Bus",
                value={
                    "name": "City Express 1",
                    "plate_number": "BUS-1042",
                    "capacity": 40,
                    "maintenance_status": "Operational"
                },
                request_only=True
            )
        ],
        tags=["Fleet"]
    )
    def post(self, request):
        serializer = BusSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        bus = BusService(get_gateway()).create_bus(serializer.validated_data)
        return Response(BusSerializer(bus).data, status=status.HTTP_201_CREATED)


class BusDetailView(APIView):
    permission_classes = [IsManagerOrReadOnly]

    @extend_schema(summary="Get bus", responses={200: BusSerializer}, tags=["Fleet"])
    def get(self, request, bus_id):
        bus = BusService(get_gateway()).get_bus(bus_id)
        return Response(BusSerializer(bus).data)

    @extend_schema(summary="Update bus (Admin/Manager)", request=BusSerializer, responses={200: BusSerializer}, tags=["Fleet"])
    def patch(self, request, bus_id):
        serializer = BusSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        bus = BusService(get_gateway()).update_bus(bus_id, serializer.validated_data)
        return Response(BusSerializer(bus).data)

    @extend_schema(summary="Delete bus (Admin/Manager)", responses={204: None}, tags=["Fleet"])
    def delete(self, request, bus_id):
        BusService(get_gateway()).delete_bus(bus_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class TripListView(APIView):
    permission_classes = [IsManagerOrReadOnly]

    @extend_schema(
        summary="List trips",
        description="Trips ordered by departure, newest first.",
        parameters=[
            OpenApiParameter(name='status', type=str, required=False,
                             enum=TripStatus.values, description='Filter by trip status'),
        ],
        responses={200: TripListResponseSerializer},
        tags=["Trips"]
    )
    def get(self, request):
        trips = TripService(get_gateway()).list_trips(request.query_params.get('status'))
        return Response({'count': len(trips), 'results': TripSerializer(trips, many=True).data})

    @extend_schema(
        summary="Schedule a trip (Admin/Manager)",
        description="Seat capacity is taken from the assigned bus.",
        request=TripSerializer,
        responses={201: TripSerializer},
        examples=[
            OpenApiExample(
                "Schedule Trip",
                value={
                    "origin": "Springfield",
                    "destination": "Shelbyville",
                    "departure": "2026-11-02T08:30:00Z",
                    "bus_id": "665f1c2e9b1e8a3d4c2b1a00",
                    "driver_id": "665f1c2e9b1e8a3d4c2b1a01",
                    "ticket_price": 25.0
                },
                request_only=True
            )
        ],
        tags=["Trips"]
    )
    def post(self, request):
        serializer = TripSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        trip = TripService(get_gateway()).create_trip(serializer.validated_data)
        return Response(TripSerializer(trip).data, status=status.HTTP_201_CREATED)


class TripDetailView(APIView):
    permission_classes = [IsManagerOrReadOnly]

    @extend_schema(summary="Get trip", responses={200: TripSerializer}, tags=["Trips"])
    def get(self, request, trip_id):
        trip = TripService(get_gateway()).get_trip(trip_id)
        return Response(TripSerializer(trip).data)

    @extend_schema(
        summary="Update trip (Admin/Manager)",
        description="Changing the bus resizes the trip to the new bus capacity.",
        request=TripSerializer,
        responses={200: TripSerializer},
        tags=["Trips"]
    )
    def patch(self, request, trip_id):
        serializer = TripSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        trip = TripService(get_gateway()).update_trip(trip_id, serializer.validated_data)
        return Response(TripSerializer(trip).data)

    @extend_schema(
        summary="Delete trip (Admin/Manager)",
        description="Bookings on the trip are not removed.",
        responses={204: None},
        tags=["Trips"]
    )
    def delete(self, request, trip_id):
        TripService(get_gateway()).delete_trip(trip_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class TripSeatsView(APIView):

    @extend_schema(
        summary="Available seats on a trip",
        description="Seats open for booking. Pass the booking being edited to keep its own seat selectable.",
        parameters=[
            OpenApiParameter(name='booking', type=str, required=False, description='Booking id being edited'),
        ],
        responses={200: SeatMapSerializer},
        tags=["Trips"]
    )
    def get(self, request, trip_id):
        gateway = get_gateway()
        inventory = TripInventory(gateway)
        booking = None
        booking_id = request.query_params.get('booking')
        if booking_id:
            booking = BookingLedger(gateway, inventory=inventory).get_booking(booking_id)

        trip = inventory.find_trip(trip_id)
        return Response({
            'trip_id': trip_id,
            'total_seats': trip.get('total_seats', 0) if trip else 0,
            'available_seats': inventory.seats_for(trip_id, booking=booking),
        })
