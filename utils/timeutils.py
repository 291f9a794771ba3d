"""Datetime helpers for values read back from the document store."""
from datetime import datetime, timezone as dt_timezone

from django.utils import timezone


def as_aware(value):
    """Documents store UTC; a naive value read back is interpreted as UTC."""
    if value is None:
        return None
    if isinstance(value, datetime) and timezone.is_naive(value):
        return timezone.make_aware(value, dt_timezone.utc)
    return value


def local_date(value):
    """Calendar date of a datetime in the active time zone; dates pass through."""
    if isinstance(value, datetime):
        return timezone.localtime(as_aware(value)).date()
    return value
