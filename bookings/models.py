"""Booking document vocabulary."""
from django.db import models


class BookingStatus(models.TextChoices):
    CONFIRMED = 'Confirmed', 'Confirmed'
    PENDING = 'Pending', 'Pending'
    CANCELLED = 'Cancelled', 'Cancelled'


# Statuses under which a booking keeps its seat in the trip's booked set.
SEAT_HOLDING_STATUSES = frozenset({BookingStatus.CONFIRMED.value, BookingStatus.PENDING.value})


def holds_seat(status):
    return status in SEAT_HOLDING_STATUSES
