"""
Tests for fleet app.
Tests cover: Seat availability, Trip inventory mutations, Trip scheduling rules, Bus/Trip API.
"""
from datetime import timedelta

from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APITestCase
from rest_framework import status

from bookings.ledger import BookingLedger
from core.models import User
from fleet.inventory import TripInventory, available_seats
from fleet.services import TripService
from utils.exceptions import NotFoundError, SeatUnavailableError, ValidationError
from utils.mongo import BOOKINGS, TRIPS
from utils.testing import MongoTestMixin, make_user


# UNIT TESTS - Seat availability

class AvailableSeatsTests(TestCase):
    """Test the pure seat availability query."""

    def test_all_seats_free(self):
        trip = {'total_seats': 4, 'booked_seats': []}
        self.assertEqual(available_seats(trip), [1, 2, 3, 4])

    def test_booked_seats_removed_in_ascending_order(self):
        trip = {'total_seats': 6, 'booked_seats': [5, 2, 3]}
        self.assertEqual(available_seats(trip), [1, 4, 6])

    def test_editing_booking_keeps_its_own_seat(self):
        trip = {'total_seats': 4, 'booked_seats': [1, 2, 3]}
        self.assertEqual(available_seats(trip, exclude_booking_seat=2), [2, 4])

    def test_fully_booked_trip(self):
        trip = {'total_seats': 2, 'booked_seats': [1, 2]}
        self.assertEqual(available_seats(trip), [])

    def test_zero_capacity(self):
        self.assertEqual(available_seats({'total_seats': 0, 'booked_seats': []}), [])

    def test_missing_trip(self):
        self.assertEqual(available_seats(None), [])

    def test_missing_booked_seats_field(self):
        self.assertEqual(available_seats({'total_seats': 3}), [1, 2, 3])


# UNIT TESTS - Trip inventory

class TripInventoryTests(MongoTestMixin, TestCase):
    """Test seat claims and releases against the document store."""

    def setUp(self):
        super().setUp()
        self.inventory = TripInventory(self.gateway)
        self.trip_id = self.make_trip(total_seats=3)

    def test_claim_seat_adds_it(self):
        self.inventory.claim_seat(self.trip_id, 2)
        self.assertEqual(self.booked_seats(self.trip_id), [2])

    def test_claim_taken_seat_rejected(self):
        self.inventory.claim_seat(self.trip_id, 2)

        with self.assertRaises(SeatUnavailableError):
            self.inventory.claim_seat(self.trip_id, 2)

        self.assertEqual(self.booked_seats(self.trip_id), [2])

    def test_claim_out_of_range_rejected(self):
        for seat in (0, 4):
            with self.assertRaises(ValidationError):
                self.inventory.claim_seat(self.trip_id, seat)
        self.assertEqual(self.booked_seats(self.trip_id), [])

    def test_claim_on_missing_trip(self):
        with self.assertRaises(NotFoundError):
            self.inventory.claim_seat('000000000000000000000000', 1)

    def test_claim_with_stale_trip_snapshot_still_rejected(self):
        """A seat taken after the caller read the trip is caught by the conditional update."""
        stale = self.gateway.get(TRIPS, self.trip_id)
        self.inventory.claim_seat(self.trip_id, 1)

        with self.assertRaises(SeatUnavailableError):
            self.inventory.claim_seat(self.trip_id, 1, trip=stale)

    def test_release_seat(self):
        self.inventory.claim_seat(self.trip_id, 1)
        self.inventory.claim_seat(self.trip_id, 3)

        self.assertTrue(self.inventory.release_seat(self.trip_id, 1))
        self.assertEqual(self.booked_seats(self.trip_id), [3])

    def test_release_on_missing_trip_is_soft(self):
        self.assertFalse(self.inventory.release_seat('000000000000000000000000', 1))

    def test_seats_for_keeps_edited_booking_seat(self):
        self.inventory.claim_seat(self.trip_id, 1)
        self.inventory.claim_seat(self.trip_id, 2)
        booking = {'trip_id': self.trip_id, 'seat_number': 2, 'status': 'Confirmed'}

        self.assertEqual(self.inventory.seats_for(self.trip_id, booking=booking), [2, 3])

    def test_seats_for_cancelled_booking_does_not_offer_rebooked_seat(self):
        ledger = BookingLedger(self.gateway)
        alice = ledger.create_booking(self.trip_id, 'Alice', 'ID-1', 1)
        alice = ledger.update_booking(alice['id'], {'status': 'Cancelled'})
        ledger.create_booking(self.trip_id, 'Bob', 'ID-2', 1)

        offered = self.inventory.seats_for(self.trip_id, booking=alice)

        self.assertNotIn(1, offered)
        self.assertEqual(offered, [2, 3])

    def test_seats_for_other_trip_ignores_booking_seat(self):
        other_trip = self.make_trip(total_seats=3, booked_seats=[2])
        booking = {'trip_id': self.trip_id, 'seat_number': 2, 'status': 'Confirmed'}

        self.assertEqual(self.inventory.seats_for(other_trip, booking=booking), [1, 3])

    def test_seats_for_missing_trip(self):
        self.assertEqual(self.inventory.seats_for('not-an-id'), [])


# UNIT TESTS - Trip scheduling

class TripServiceTests(MongoTestMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.service = TripService(self.gateway)
        self.driver_id = self.make_employee()
        self.bus_id = self.make_bus(capacity=30)

    def trip_data(self, **overrides):
        data = {
            'origin': 'Springfield',
            'destination': 'Shelbyville',
            'departure': timezone.now() + timedelta(days=2),
            'bus_id': self.bus_id,
            'driver_id': self.driver_id,
            'ticket_price': 20.0,
        }
        data.update(overrides)
        return data

    def test_create_trip_takes_bus_capacity(self):
        trip = self.service.create_trip(self.trip_data())

        self.assertEqual(trip['total_seats'], 30)
        self.assertEqual(trip['booked_seats'], [])
        self.assertEqual(trip['status'], 'Scheduled')

    def test_create_trip_unknown_bus(self):
        with self.assertRaises(ValidationError):
            self.service.create_trip(self.trip_data(bus_id='000000000000000000000000'))

    def test_create_trip_unknown_driver(self):
        with self.assertRaises(ValidationError):
            self.service.create_trip(self.trip_data(driver_id='000000000000000000000000'))

    def test_changing_bus_resizes_trip(self):
        trip = self.service.create_trip(self.trip_data())
        bigger = self.make_bus(capacity=50, plate_number='TST-050')

        updated = self.service.update_trip(trip['id'], {'bus_id': bigger})

        self.assertEqual(updated['total_seats'], 50)

    def test_smaller_bus_rejected_when_seats_would_fall_outside(self):
        trip = self.service.create_trip(self.trip_data())
        TripInventory(self.gateway).claim_seat(trip['id'], 25)
        small = self.make_bus(capacity=20, plate_number='TST-020')

        with self.assertRaises(ValidationError):
            self.service.update_trip(trip['id'], {'bus_id': small})

        self.assertEqual(self.service.get_trip(trip['id'])['total_seats'], 30)

    def test_update_cannot_overwrite_booked_seats(self):
        trip = self.service.create_trip(self.trip_data())
        TripInventory(self.gateway).claim_seat(trip['id'], 4)

        updated = self.service.update_trip(trip['id'], {'booked_seats': [], 'ticket_price': 22.0})

        self.assertEqual(updated['booked_seats'], [4])
        self.assertEqual(updated['ticket_price'], 22.0)

    def test_partial_update_cannot_make_route_circular(self):
        trip = self.service.create_trip(self.trip_data())

        with self.assertRaises(ValidationError) as ctx:
            self.service.update_trip(trip['id'], {'origin': 'Shelbyville'})

        self.assertEqual(ctx.exception.field, 'destination')
        self.assertEqual(self.service.get_trip(trip['id'])['origin'], 'Springfield')

    def test_delete_trip_with_active_bookings_is_allowed_and_logged(self):
        trip = self.service.create_trip(self.trip_data())
        self.gateway.create(BOOKINGS, {'trip_id': trip['id'], 'seat_number': 1, 'status': 'Confirmed'})

        with self.assertLogs('fleet.services', level='WARNING') as logs:
            self.service.delete_trip(trip['id'])

        self.assertIsNone(self.gateway.get(TRIPS, trip['id']))
        self.assertIn('1 active booking', logs.output[0])

    def test_delete_missing_trip(self):
        with self.assertRaises(NotFoundError):
            self.service.delete_trip('000000000000000000000000')


# INTEGRATION TESTS - API

class FleetAPITests(MongoTestMixin, APITestCase):

    def setUp(self):
        super().setUp()
        self.manager = make_user(User.Role.MANAGER)
        self.clerk = make_user(User.Role.EMPLOYEE)
        self.client.force_authenticate(user=self.manager)

    def test_create_and_list_buses(self):
        response = self.client.post('/api/buses/', {
            'name': 'City Express',
            'plate_number': ' bus-42 ',
            'capacity': 40,
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['plate_number'], 'BUS-42')
        self.assertEqual(response.data['maintenance_status'], 'Operational')

        response = self.client.get('/api/buses/')
        self.assertEqual(response.data['count'], 1)

    def test_invalid_capacity_rejected(self):
        response = self.client.post('/api/buses/', {
            'name': 'Broken', 'plate_number': 'X-1', 'capacity': 0,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_clerk_can_read_but_not_write(self):
        self.client.force_authenticate(user=self.clerk)

        self.assertEqual(self.client.get('/api/buses/').status_code, status.HTTP_200_OK)
        response = self.client.post('/api/buses/', {
            'name': 'Nope', 'plate_number': 'N-1', 'capacity': 10,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_schedule_trip(self):
        bus_id = self.make_bus(capacity=12)
        response = self.client.post('/api/trips/', {
            'origin': 'springfield',
            'destination': 'Capital City',
            'departure': '2026-11-02T08:30:00Z',
            'bus_id': bus_id,
            'ticket_price': 30,
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['origin'], 'Springfield')
        self.assertEqual(response.data['total_seats'], 12)
        self.assertEqual(response.data['available_seat_count'], 12)

    def test_same_origin_and_destination_rejected(self):
        response = self.client.post('/api/trips/', {
            'origin': 'Springfield',
            'destination': 'springfield',
            'departure': '2026-11-02T08:30:00Z',
            'bus_id': self.make_bus(),
            'ticket_price': 30,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_patch_origin_to_stored_destination_rejected(self):
        trip_id = self.make_trip(origin='Springfield', destination='Shelbyville')

        response = self.client.patch(f'/api/trips/{trip_id}/', {'origin': 'shelbyville'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['field'], 'destination')

    def test_trip_seats_endpoint(self):
        trip_id = self.make_trip(total_seats=4, booked_seats=[1, 3])

        response = self.client.get(f'/api/trips/{trip_id}/seats/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['available_seats'], [2, 4])
        self.assertEqual(response.data['total_seats'], 4)

    def test_unknown_trip_returns_404(self):
        response = self.client.get('/api/trips/000000000000000000000000/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertIn('error', response.data)

    def test_unauthenticated_rejected(self):
        self.client.force_authenticate(user=None)
        response = self.client.get('/api/trips/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
