"""
Comprehensive tests for bookings app.
Tests cover: Booking creation, Reassignment, Cancellation, Deletion, Seat consistency, Booking API.
"""
from unittest.mock import patch

from django.test import TestCase
from rest_framework.test import APITestCase
from rest_framework import status

from bookings.ledger import BookingLedger
from core.models import User
from fleet.inventory import TripInventory, available_seats
from utils.exceptions import NotFoundError, PersistenceError, SeatUnavailableError, ValidationError
from utils.mongo import BOOKINGS, FINANCE_RECORDS, TRIPS
from utils.testing import MongoTestMixin, make_user


# =============================================================================
# UNIT TESTS - Booking ledger
# =============================================================================

class BookingCreationTests(MongoTestMixin, TestCase):
    """Test booking creation and its effects on the trip and the finance ledger."""

    def setUp(self):
        super().setUp()
        self.ledger = BookingLedger(self.gateway)
        self.trip_id = self.make_trip(total_seats=10, ticket_price=25.0)

    def test_create_booking(self):
        """Creating a booking adds the seat and one Confirmed booking."""
        booking = self.ledger.create_booking(self.trip_id, 'Alice', 'ID-1', 4)

        self.assertEqual(booking['status'], 'Confirmed')
        self.assertEqual(booking['seat_number'], 4)
        self.assertEqual(booking['price'], 25.0)
        self.assertIsNotNone(booking['booking_date'])
        self.assertEqual(self.booked_seats(self.trip_id), [4])
        self.assertEqual(self.gateway.count(BOOKINGS), 1)

    def test_create_booking_records_ticket_sale(self):
        booking = self.ledger.create_booking(self.trip_id, 'Alice', 'ID-1', 4)

        records = self.gateway.query(FINANCE_RECORDS)
        self.assertEqual(len(records), 1)
        self.assertEqual(records[0]['type'], 'Income')
        self.assertEqual(records[0]['category'], 'Ticket Sale')
        self.assertEqual(records[0]['amount'], 25.0)
        self.assertEqual(records[0]['booking_id'], booking['id'])

    def test_price_is_snapshotted(self):
        booking = self.ledger.create_booking(self.trip_id, 'Alice', 'ID-1', 1)
        self.gateway.update(TRIPS, self.trip_id, {'ticket_price': 99.0})

        self.assertEqual(self.ledger.get_booking(booking['id'])['price'], 25.0)

    def test_missing_fields_rejected_before_any_write(self):
        for args in (
            (self.trip_id, '', 'ID-1', 1),
            (self.trip_id, 'Alice', '  ', 1),
            (self.trip_id, 'Alice', 'ID-1', None),
            (None, 'Alice', 'ID-1', 1),
        ):
            with self.assertRaises(ValidationError):
                self.ledger.create_booking(*args)

        self.assertEqual(self.gateway.count(BOOKINGS), 0)
        self.assertEqual(self.booked_seats(self.trip_id), [])

    def test_trip_not_open_for_booking_rejected(self):
        for trip_status in ('Cancelled', 'Completed', 'In Progress'):
            trip_id = self.make_trip(total_seats=3, status=trip_status)

            with self.assertRaises(ValidationError) as ctx:
                self.ledger.create_booking(trip_id, 'Alice', 'ID-1', 1)

            self.assertEqual(ctx.exception.field, 'trip_id')
            self.assertEqual(self.booked_seats(trip_id), [])

        self.assertEqual(self.gateway.count(BOOKINGS), 0)
        self.assertEqual(self.gateway.count(FINANCE_RECORDS), 0)

    def test_boolean_seat_number_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            self.ledger.create_booking(self.trip_id, 'Alice', 'ID-1', True)

        self.assertEqual(ctx.exception.field, 'seat_number')
        self.assertEqual(self.booked_seats(self.trip_id), [])

    def test_non_text_customer_details_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            self.ledger.create_booking(self.trip_id, 42, 'ID-1', 1)
        self.assertEqual(ctx.exception.field, 'customer_name')

        with self.assertRaises(ValidationError):
            self.ledger.create_booking(self.trip_id, 'Alice', 12345, 1)

        self.assertEqual(self.gateway.count(BOOKINGS), 0)

    def test_unknown_trip_rejected(self):
        with self.assertRaises(NotFoundError):
            self.ledger.create_booking('000000000000000000000000', 'Alice', 'ID-1', 1)
        self.assertEqual(self.gateway.count(BOOKINGS), 0)

    def test_seat_outside_capacity_rejected(self):
        with self.assertRaises(ValidationError):
            self.ledger.create_booking(self.trip_id, 'Alice', 'ID-1', 11)
        self.assertEqual(self.gateway.count(BOOKINGS), 0)

    def test_double_booking_same_seat_rejected(self):
        """A second writer picking a seat from a stale availability list is refused."""
        self.ledger.create_booking(self.trip_id, 'Alice', 'ID-1', 3)

        with self.assertRaises(SeatUnavailableError):
            self.ledger.create_booking(self.trip_id, 'Bob', 'ID-2', 3)

        self.assertEqual(self.gateway.count(BOOKINGS), 1)
        self.assertEqual(self.gateway.count(FINANCE_RECORDS), 1)
        self.assertEqual(self.booked_seats(self.trip_id), [3])

    def test_failed_booking_write_releases_claimed_seat(self):
        original_create = self.gateway.create

        def failing_create(collection, document):
            if collection == BOOKINGS:
                raise PersistenceError("Could not write ticket_bookings.")
            return original_create(collection, document)

        with patch.object(self.gateway, 'create', side_effect=failing_create):
            with self.assertRaises(PersistenceError):
                self.ledger.create_booking(self.trip_id, 'Alice', 'ID-1', 5)

        self.assertEqual(self.booked_seats(self.trip_id), [])
        self.assertEqual(self.gateway.count(FINANCE_RECORDS), 0)


class BookingUpdateTests(MongoTestMixin, TestCase):
    """Test reassignment and status changes."""

    def setUp(self):
        super().setUp()
        self.ledger = BookingLedger(self.gateway)
        self.trip1 = self.make_trip(total_seats=5, ticket_price=20.0)
        self.trip2 = self.make_trip(total_seats=5, ticket_price=35.0)
        self.booking = self.ledger.create_booking(self.trip1, 'Alice', 'ID-1', 1)

    def test_same_trip_and_seat_leaves_inventory_unchanged(self):
        with patch.object(self.ledger.inventory, 'claim_seat') as claim, \
                patch.object(self.ledger.inventory, 'release_seat') as release:
            updated = self.ledger.update_booking(self.booking['id'], {
                'trip_id': self.trip1, 'seat_number': 1, 'customer_name': 'Alice Smith',
            })

        claim.assert_not_called()
        release.assert_not_called()
        self.assertEqual(updated['customer_name'], 'Alice Smith')
        self.assertEqual(self.booked_seats(self.trip1), [1])
        self.assertEqual(self.booked_seats(self.trip2), [])

    def test_change_seat_on_same_trip(self):
        self.ledger.update_booking(self.booking['id'], {'seat_number': 4})

        self.assertEqual(self.booked_seats(self.trip1), [4])

    def test_move_to_another_trip(self):
        updated = self.ledger.update_booking(self.booking['id'], {'trip_id': self.trip2, 'seat_number': 2})

        self.assertEqual(self.booked_seats(self.trip1), [])
        self.assertEqual(self.booked_seats(self.trip2), [2])
        self.assertEqual(updated['trip_id'], self.trip2)
        self.assertEqual(updated['price'], 35.0)

    def test_move_to_taken_seat_changes_nothing(self):
        self.ledger.create_booking(self.trip2, 'Bob', 'ID-2', 2)

        with self.assertRaises(SeatUnavailableError):
            self.ledger.update_booking(self.booking['id'], {'trip_id': self.trip2, 'seat_number': 2})

        self.assertEqual(self.ledger.get_booking(self.booking['id'])['trip_id'], self.trip1)
        self.assertEqual(self.booked_seats(self.trip1), [1])
        self.assertEqual(self.booked_seats(self.trip2), [2])

    def test_move_to_unknown_trip_rejected(self):
        with self.assertRaises(NotFoundError):
            self.ledger.update_booking(self.booking['id'], {'trip_id': '000000000000000000000000'})

        self.assertEqual(self.booked_seats(self.trip1), [1])

    def test_move_to_trip_not_open_for_booking_rejected(self):
        closed = self.make_trip(total_seats=5, status='Completed')

        with self.assertRaises(ValidationError) as ctx:
            self.ledger.update_booking(self.booking['id'], {'trip_id': closed, 'seat_number': 2})

        self.assertEqual(ctx.exception.field, 'trip_id')
        self.assertEqual(self.ledger.get_booking(self.booking['id'])['trip_id'], self.trip1)
        self.assertEqual(self.booked_seats(self.trip1), [1])
        self.assertEqual(self.booked_seats(closed), [])

    def test_old_trip_deleted_before_reassignment(self):
        self.gateway.delete(TRIPS, self.trip1)

        updated = self.ledger.update_booking(self.booking['id'], {'trip_id': self.trip2, 'seat_number': 3})

        self.assertEqual(updated['trip_id'], self.trip2)
        self.assertEqual(self.booked_seats(self.trip2), [3])

    def test_cancel_releases_seat(self):
        updated = self.ledger.update_booking(self.booking['id'], {'status': 'Cancelled'})

        self.assertEqual(updated['status'], 'Cancelled')
        self.assertEqual(self.booked_seats(self.trip1), [])

    def test_reinstating_cancelled_booking_reclaims_seat(self):
        self.ledger.update_booking(self.booking['id'], {'status': 'Cancelled'})
        self.ledger.update_booking(self.booking['id'], {'status': 'Pending'})

        self.assertEqual(self.booked_seats(self.trip1), [1])

    def test_reinstating_fails_when_seat_was_rebooked(self):
        self.ledger.update_booking(self.booking['id'], {'status': 'Cancelled'})
        self.ledger.create_booking(self.trip1, 'Bob', 'ID-2', 1)

        with self.assertRaises(SeatUnavailableError):
            self.ledger.update_booking(self.booking['id'], {'status': 'Confirmed'})

        self.assertEqual(self.ledger.get_booking(self.booking['id'])['status'], 'Cancelled')

    def test_unknown_status_rejected(self):
        with self.assertRaises(ValidationError):
            self.ledger.update_booking(self.booking['id'], {'status': 'Lost'})

    def test_unknown_booking(self):
        with self.assertRaises(NotFoundError):
            self.ledger.update_booking('000000000000000000000000', {'seat_number': 2})


class BookingDeletionTests(MongoTestMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.ledger = BookingLedger(self.gateway)
        self.trip_id = self.make_trip(total_seats=5)

    def test_delete_releases_seat(self):
        booking = self.ledger.create_booking(self.trip_id, 'Alice', 'ID-1', 2)

        self.ledger.delete_booking(booking['id'])

        self.assertEqual(self.booked_seats(self.trip_id), [])
        self.assertIsNone(self.gateway.get(BOOKINGS, booking['id']))

    def test_delete_when_trip_is_gone(self):
        booking = self.ledger.create_booking(self.trip_id, 'Alice', 'ID-1', 2)
        self.gateway.delete(TRIPS, self.trip_id)

        self.ledger.delete_booking(booking['id'])

        self.assertIsNone(self.gateway.get(BOOKINGS, booking['id']))

    def test_deleting_cancelled_booking_keeps_rebooked_seat(self):
        old = self.ledger.create_booking(self.trip_id, 'Alice', 'ID-1', 2)
        self.ledger.update_booking(old['id'], {'status': 'Cancelled'})
        self.ledger.create_booking(self.trip_id, 'Bob', 'ID-2', 2)

        self.ledger.delete_booking(old['id'])

        self.assertEqual(self.booked_seats(self.trip_id), [2])

    def test_delete_unknown_booking(self):
        with self.assertRaises(NotFoundError):
            self.ledger.delete_booking('000000000000000000000000')


class SeatConsistencyTests(MongoTestMixin, TestCase):
    """Seat inventory stays in step with active bookings across mixed operations."""

    def setUp(self):
        super().setUp()
        self.ledger = BookingLedger(self.gateway)
        self.inventory = TripInventory(self.gateway)

    def test_two_seat_scenario(self):
        trip = self.make_trip(total_seats=2)

        alice = self.ledger.create_booking(trip, 'Alice', 'ID-A', 1)
        self.assertEqual(self.booked_seats(trip), [1])

        self.ledger.create_booking(trip, 'Bob', 'ID-B', 2)
        self.assertEqual(self.booked_seats(trip), [1, 2])
        self.assertEqual(self.inventory.seats_for(trip), [])

        self.ledger.delete_booking(alice['id'])
        self.assertEqual(self.booked_seats(trip), [2])
        self.assertEqual(self.inventory.seats_for(trip), [1])

    def test_booked_seats_match_active_bookings(self):
        trip_a = self.make_trip(total_seats=6)
        trip_b = self.make_trip(total_seats=4)

        b1 = self.ledger.create_booking(trip_a, 'P1', 'ID-1', 1)
        b2 = self.ledger.create_booking(trip_a, 'P2', 'ID-2', 2)
        b3 = self.ledger.create_booking(trip_b, 'P3', 'ID-3', 1)
        self.ledger.update_booking(b1['id'], {'seat_number': 5})
        self.ledger.update_booking(b2['id'], {'trip_id': trip_b, 'seat_number': 2})
        self.ledger.update_booking(b3['id'], {'status': 'Cancelled'})
        b4 = self.ledger.create_booking(trip_b, 'P4', 'ID-4', 1)
        self.ledger.create_booking(trip_a, 'P5', 'ID-5', 1)
        self.ledger.delete_booking(b4['id'])

        for trip in (trip_a, trip_b):
            active = [
                b['seat_number'] for b in self.ledger.list_bookings(trip_id=trip)
                if b['status'] != 'Cancelled'
            ]
            self.assertEqual(len(active), len(set(active)))
            self.assertEqual(sorted(active), self.booked_seats(trip))

        self.assertEqual(self.booked_seats(trip_a), [1, 5])
        self.assertEqual(self.booked_seats(trip_b), [2])

    def test_edit_form_offers_own_seat(self):
        trip = self.make_trip(total_seats=3)
        booking = self.ledger.create_booking(trip, 'Alice', 'ID-A', 2)
        self.ledger.create_booking(trip, 'Bob', 'ID-B', 3)

        offered = self.inventory.seats_for(trip, booking=booking)

        self.assertIn(2, offered)
        self.assertEqual(offered, [1, 2])
        self.assertEqual(available_seats(self.gateway.get(TRIPS, trip)), [1])


# =============================================================================
# INTEGRATION TESTS - Booking API
# =============================================================================

class BookingAPITests(MongoTestMixin, APITestCase):
    """Integration tests for booking flow."""

    def setUp(self):
        super().setUp()
        make_user(User.Role.EMPLOYEE, email='clerk@example.com', password='ClerkPass123!')
        self.trip_id = self.make_trip(total_seats=10, ticket_price=500.0)

        # Login
        response = self.client.post('/api/login/', {
            'email': 'clerk@example.com',
            'password': 'ClerkPass123!'
        }, format='json')
        self.token = response.data['tokens']['access']
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {self.token}')

    def book(self, seat, name='John Doe'):
        return self.client.post('/api/bookings/', {
            'trip_id': self.trip_id,
            'customer_name': name,
            'id_number': 'ID-9',
            'seat_number': seat,
        }, format='json')

    def test_create_booking_success(self):
        response = self.book(7)

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['booking']['status'], 'Confirmed')
        self.assertEqual(response.data['booking']['seat_number'], 7)
        self.assertEqual(response.data['booking']['price'], 500.0)
        self.assertEqual(self.booked_seats(self.trip_id), [7])

    def test_taken_seat_returns_conflict(self):
        self.book(7)
        response = self.book(7, name='Jane Doe')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['field'], 'seat_number')

    def test_invalid_payload(self):
        response = self.client.post('/api/bookings/', {
            'trip_id': self.trip_id,
            'customer_name': 'John Doe',
            'seat_number': 0,
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('id_number', response.data)
        self.assertIn('seat_number', response.data)

    def test_list_bookings_for_trip(self):
        self.book(1)
        self.book(2, name='Jane Doe')
        other = self.make_trip(total_seats=4)
        BookingLedger(self.gateway).create_booking(other, 'Elsewhere', 'ID-X', 1)

        response = self.client.get('/api/bookings/', {'trip_id': self.trip_id})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 2)

    def test_reassign_seat(self):
        booking_id = self.book(1).data['booking']['id']

        response = self.client.patch(f'/api/bookings/{booking_id}/', {'seat_number': 9}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['booking']['seat_number'], 9)
        self.assertEqual(self.booked_seats(self.trip_id), [9])

    def test_empty_update_rejected(self):
        booking_id = self.book(1).data['booking']['id']
        response = self.client.patch(f'/api/bookings/{booking_id}/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_booking(self):
        booking_id = self.book(3).data['booking']['id']

        response = self.client.delete(f'/api/bookings/{booking_id}/')

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(self.booked_seats(self.trip_id), [])

    def test_seats_endpoint_keeps_edited_booking_seat(self):
        booking_id = self.book(1).data['booking']['id']
        self.book(2, name='Jane Doe')

        response = self.client.get(f'/api/trips/{self.trip_id}/seats/', {'booking': booking_id})

        self.assertEqual(response.data['available_seats'], [1, 3, 4, 5, 6, 7, 8, 9, 10])

    def test_unknown_booking(self):
        response = self.client.get('/api/bookings/000000000000000000000000/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_booking_unauthenticated(self):
        self.client.credentials()
        response = self.book(1)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_database_unavailable_returns_503(self):
        with patch('utils.mongo.get_mongo_db', side_effect=PersistenceError("Document database is unavailable.")):
            response = self.client.get('/api/bookings/')

        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(response.data['error'], 'Document database is unavailable.')
