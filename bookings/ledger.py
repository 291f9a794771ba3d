"""
Booking ledger: create, reassign and delete ticket bookings while keeping
each trip's ``booked_seats`` in step with the bookings that hold them.

A booking holds ``(trip_id, seat_number)`` while it is Confirmed or Pending.
Every mutation claims the new seat before writing the booking and releases
the old seat after it, so a failed write never leaves a seat double-counted:

* the claim is a single conditional update on the trip document, which
  rejects a seat another writer took after the caller's availability query;
* if the booking write fails after a claim, the claimed seat is released
  again before the error is raised.

There is no multi-document transaction; a failure while releasing the old
seat (the last step) can leave that seat marked as booked.
"""
import logging

from django.utils import timezone

from bookings.models import BookingStatus, holds_seat
from finance.ledger import FinanceLedger
from finance.models import RecordCategory, RecordType
from fleet.inventory import TripInventory
from fleet.models import TripStatus
from utils.exceptions import NotFoundError, PersistenceError, ValidationError
from utils.mongo import BOOKINGS

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ('trip_id', 'customer_name', 'id_number', 'seat_number')
EDITABLE_FIELDS = REQUIRED_FIELDS + ('status', 'customer_photo_url')
TEXT_FIELDS = ('trip_id', 'customer_name', 'id_number')


def _held_seat(booking):
    if holds_seat(booking.get('status')):
        return booking.get('trip_id'), booking.get('seat_number')
    return None


def _check_required(values):
    for field in REQUIRED_FIELDS:
        value = values.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError(f"'{field}' is required.", field=field)
    for field in TEXT_FIELDS:
        if not isinstance(values[field], str):
            raise ValidationError(f"'{field}' must be a string.", field=field)
    seat = values['seat_number']
    if isinstance(seat, bool) or not isinstance(seat, int) or seat < 1:
        raise ValidationError("Seat number must be a positive integer.", field='seat_number')


def _require_scheduled(trip):
    if trip.get('status') != TripStatus.SCHEDULED:
        raise ValidationError(
            f"Trip '{trip['id']}' is {trip.get('status')}; only Scheduled trips take bookings.",
            field='trip_id',
        )


class BookingLedger:

    def __init__(self, gateway, inventory=None, finance=None):
        self.gateway = gateway
        self.inventory = inventory or TripInventory(gateway)
        self.finance = finance or FinanceLedger(gateway)

    def get_booking(self, booking_id):
        booking = self.gateway.get(BOOKINGS, booking_id)
        if booking is None:
            raise NotFoundError('Booking', booking_id)
        return booking

    def list_bookings(self, trip_id=None, status=None):
        filters = {}
        if trip_id:
            filters['trip_id'] = trip_id
        if status:
            filters['status'] = status
        return self.gateway.query(BOOKINGS, filters, ordering=['-booking_date'])

    def create_booking(self, trip_id, customer_name, id_number, seat_number, customer_photo_url=None):
        """
        Reserve ``seat_number`` on the trip and record a Confirmed booking
        priced at the trip's current ticket price, plus its ticket-sale
        income record.
        """
        _check_required({
            'trip_id': trip_id,
            'customer_name': customer_name,
            'id_number': id_number,
            'seat_number': seat_number,
        })
        trip = self.inventory.get_trip(trip_id)
        _require_scheduled(trip)

        self.inventory.claim_seat(trip_id, seat_number, trip=trip)

        booking = {
            'trip_id': trip_id,
            'customer_name': customer_name.strip(),
            'id_number': id_number.strip(),
            'seat_number': seat_number,
            'price': trip['ticket_price'],
            'booking_date': timezone.now(),
            'status': BookingStatus.CONFIRMED.value,
        }
        if customer_photo_url:
            booking['customer_photo_url'] = customer_photo_url

        try:
            booking_id = self.gateway.create(BOOKINGS, booking)
        except PersistenceError:
            logger.warning("Booking write failed; releasing seat %s on trip %s", seat_number, trip_id)
            self.inventory.release_seat(trip_id, seat_number)
            raise
        logger.info("Booked seat %s on trip %s for %s (%s)", seat_number, trip_id, booking['customer_name'], booking_id)

        self.finance.record(
            RecordType.INCOME.value,
            RecordCategory.TICKET_SALE.value,
            booking['price'],
            f"Ticket sale for {booking['customer_name']} on trip {trip_id}",
            date=booking['booking_date'],
            booking_id=booking_id,
        )
        return self.get_booking(booking_id)

    def update_booking(self, booking_id, changes):
        """
        Apply field changes; when the held (trip, seat) pair changes, the new
        seat is claimed first and the old one released last.
        """
        current = self.get_booking(booking_id)
        changes = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS}

        merged = {**current, **changes}
        _check_required(merged)
        if merged.get('status') not in BookingStatus.values:
            raise ValidationError(f"Unknown booking status '{merged.get('status')}'.", field='status')

        trip_changed = merged['trip_id'] != current['trip_id']
        new_trip = None
        if trip_changed:
            new_trip = self.inventory.get_trip(merged['trip_id'])
            _require_scheduled(new_trip)
            changes['price'] = new_trip['ticket_price']

        old_hold = _held_seat(current)
        new_hold = _held_seat(merged)

        if new_hold == old_hold:
            self._write(booking_id, changes)
            return self.get_booking(booking_id)

        if new_hold is not None:
            trip_id, seat = new_hold
            trip = new_trip if trip_changed else self.inventory.find_trip(trip_id)
            if trip is not None:
                self.inventory.claim_seat(trip_id, seat, trip=trip)
            else:
                logger.warning("Trip %s not found, seat %s claim skipped", trip_id, seat)

        try:
            self._write(booking_id, changes)
        except (PersistenceError, NotFoundError):
            if new_hold is not None:
                logger.warning("Booking %s update failed; releasing seat %s on trip %s", booking_id, new_hold[1], new_hold[0])
                self.inventory.release_seat(*new_hold)
            raise

        if old_hold is not None:
            self.inventory.release_seat(*old_hold)

        logger.info("Updated booking %s: %s -> %s", booking_id, old_hold, new_hold)
        return self.get_booking(booking_id)

    def delete_booking(self, booking_id):
        """Remove the booking and return its seat to the trip, if the trip still exists."""
        booking = self.get_booking(booking_id)
        if not self.gateway.delete(BOOKINGS, booking_id):
            raise NotFoundError('Booking', booking_id)
        logger.info("Deleted booking %s", booking_id)

        held = _held_seat(booking)
        if held is not None:
            self.inventory.release_seat(*held)

    def _write(self, booking_id, changes):
        if not self.gateway.update(BOOKINGS, booking_id, changes):
            raise NotFoundError('Booking', booking_id)
