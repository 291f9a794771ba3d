"""
Domain error taxonomy and the DRF exception handler that turns it into responses.
"""
import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class DomainError(Exception):
    """Base class for errors raised by the booking, fleet and payroll logic."""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message, field=None):
        super().__init__(message)
        self.message = message
        self.field = field


class ValidationError(DomainError):
    """A request failed a precondition. Raised before any write."""


class NotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, collection, document_id):
        super().__init__(f"{collection} '{document_id}' not found.")
        self.collection = collection
        self.document_id = document_id


class SeatUnavailableError(DomainError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, trip_id, seat_number):
        super().__init__(f"Seat {seat_number} on trip '{trip_id}' is already booked.", field='seat_number')
        self.trip_id = trip_id
        self.seat_number = seat_number


class PersistenceError(DomainError):
    """The document store rejected a read or write."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


def api_exception_handler(exc, context):
    """Convert domain errors into JSON error responses; defer everything else to DRF."""
    if isinstance(exc, DomainError):
        if isinstance(exc, PersistenceError):
            logger.error("Persistence failure in %s: %s", context.get('view').__class__.__name__, exc.message)
        body = {'error': exc.message}
        if exc.field:
            body['field'] = exc.field
        return Response(body, status=exc.status_code)
    return drf_exception_handler(exc, context)
