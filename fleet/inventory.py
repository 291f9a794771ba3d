"""
Trip seat inventory.

A trip document carries ``total_seats`` and the list of ``booked_seats``.
Seats are only ever added through ``TripInventory.claim_seat``, which does a
single conditional update, so the list stays free of duplicates and
out-of-range numbers.
"""
import logging

from bookings.models import holds_seat
from utils.exceptions import NotFoundError, SeatUnavailableError, ValidationError
from utils.mongo import TRIPS

logger = logging.getLogger(__name__)


def available_seats(trip, exclude_booking_seat=None):
    """
    Seat numbers a user may pick on ``trip``, ascending.

    ``exclude_booking_seat`` is the seat held by a booking being edited on
    this same trip; it stays selectable even though it is booked.
    """
    if not trip:
        return []
    total = trip.get('total_seats') or 0
    booked = set(trip.get('booked_seats') or [])
    if exclude_booking_seat is not None:
        booked.discard(exclude_booking_seat)
    return [seat for seat in range(1, total + 1) if seat not in booked]


class TripInventory:
    """Reads trips and mutates their booked-seat sets."""

    def __init__(self, gateway):
        self.gateway = gateway

    def find_trip(self, trip_id):
        return self.gateway.get(TRIPS, trip_id)

    def get_trip(self, trip_id):
        trip = self.find_trip(trip_id)
        if trip is None:
            raise NotFoundError('Trip', trip_id)
        return trip

    def seats_for(self, trip_id, booking=None):
        """Available seats on a trip, keeping the seat ``booking`` still holds on it."""
        trip = self.find_trip(trip_id)
        keep = None
        if booking is not None and booking.get('trip_id') == trip_id and holds_seat(booking.get('status')):
            keep = booking.get('seat_number')
        return available_seats(trip, exclude_booking_seat=keep)

    def claim_seat(self, trip_id, seat_number, trip=None):
        trip = trip or self.get_trip(trip_id)
        total = trip.get('total_seats') or 0
        if not 1 <= seat_number <= total:
            raise ValidationError(
                f"Seat {seat_number} is outside 1-{total} for trip '{trip_id}'.",
                field='seat_number',
            )

        if self.gateway.add_to_set(TRIPS, trip_id, 'booked_seats', seat_number):
            logger.info("Claimed seat %s on trip %s", seat_number, trip_id)
            return

        if self.find_trip(trip_id) is None:
            raise NotFoundError('Trip', trip_id)
        raise SeatUnavailableError(trip_id, seat_number)

    def release_seat(self, trip_id, seat_number):
        """Return a seat to the pool. A trip that no longer exists is skipped."""
        if self.gateway.pull(TRIPS, trip_id, 'booked_seats', seat_number):
            logger.info("Released seat %s on trip %s", seat_number, trip_id)
            return True
        logger.warning("Trip %s not found, seat %s release skipped", trip_id, seat_number)
        return False
