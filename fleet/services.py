"""Bus and trip management on top of the document store."""
import logging

from bookings.models import BookingStatus
from fleet.models import TripStatus
from utils.exceptions import NotFoundError, ValidationError
from utils.mongo import BOOKINGS, BUSES, EMPLOYEES, TRIPS

logger = logging.getLogger(__name__)


class BusService:

    def __init__(self, gateway):
        self.gateway = gateway

    def list_buses(self, maintenance_status=None):
        filters = {'maintenance_status': maintenance_status} if maintenance_status else None
        return self.gateway.query(BUSES, filters, ordering=['name'])

    def get_bus(self, bus_id):
        bus = self.gateway.get(BUSES, bus_id)
        if bus is None:
            raise NotFoundError('Bus', bus_id)
        return bus

    def create_bus(self, data):
        if data.get('assigned_driver_id'):
            _require_employee(self.gateway, data['assigned_driver_id'], 'assigned_driver_id')
        bus_id = self.gateway.create(BUSES, data)
        logger.info("Created bus %s (%s)", bus_id, data.get('plate_number'))
        return self.get_bus(bus_id)

    def update_bus(self, bus_id, changes):
        self.get_bus(bus_id)
        if changes.get('assigned_driver_id'):
            _require_employee(self.gateway, changes['assigned_driver_id'], 'assigned_driver_id')
        if not self.gateway.update(BUSES, bus_id, changes):
            raise NotFoundError('Bus', bus_id)
        return self.get_bus(bus_id)

    def delete_bus(self, bus_id):
        if not self.gateway.delete(BUSES, bus_id):
            raise NotFoundError('Bus', bus_id)
        logger.info("Deleted bus %s", bus_id)


class TripService:
    """
    Trip scheduling. ``total_seats`` always mirrors the assigned bus capacity
    at the time the bus was assigned; ``booked_seats`` is left to the
    booking ledger.
    """

    def __init__(self, gateway):
        self.gateway = gateway

    def list_trips(self, status=None):
        filters = {'status': status} if status else None
        return self.gateway.query(TRIPS, filters, ordering=['-departure'])

    def get_trip(self, trip_id):
        trip = self.gateway.get(TRIPS, trip_id)
        if trip is None:
            raise NotFoundError('Trip', trip_id)
        return trip

    def create_trip(self, data):
        bus = self._require_bus(data['bus_id'])
        if data.get('driver_id'):
            _require_employee(self.gateway, data['driver_id'])

        document = dict(data)
        document['total_seats'] = bus['capacity']
        document['booked_seats'] = []
        document.setdefault('status', TripStatus.SCHEDULED.value)

        trip_id = self.gateway.create(TRIPS, document)
        logger.info("Scheduled trip %s: %s -> %s on bus %s",
                    trip_id, document.get('origin'), document.get('destination'), bus['id'])
        return self.get_trip(trip_id)

    def update_trip(self, trip_id, changes):
        trip = self.get_trip(trip_id)
        changes = dict(changes)
        changes.pop('booked_seats', None)
        changes.pop('total_seats', None)

        origin = changes.get('origin', trip.get('origin'))
        destination = changes.get('destination', trip.get('destination'))
        if origin and destination and origin.strip().lower() == destination.strip().lower():
            raise ValidationError("Origin and destination cannot be the same.", field='destination')

        if changes.get('driver_id'):
            _require_employee(self.gateway, changes['driver_id'])

        if changes.get('bus_id') and changes['bus_id'] != trip.get('bus_id'):
            bus = self._require_bus(changes['bus_id'])
            highest = max(trip.get('booked_seats') or [0])
            if highest > bus['capacity']:
                raise ValidationError(
                    f"Bus capacity {bus['capacity']} is below booked seat {highest}.",
                    field='bus_id',
                )
            changes['total_seats'] = bus['capacity']

        if not self.gateway.update(TRIPS, trip_id, changes):
            raise NotFoundError('Trip', trip_id)
        return self.get_trip(trip_id)

    def delete_trip(self, trip_id):
        # Bookings referencing the trip are left in place; their seat
        # releases become no-ops once the trip is gone.
        active = self.gateway.count(BOOKINGS, {
            'trip_id': trip_id,
            'status': {'$ne': BookingStatus.CANCELLED.value},
        })
        if not self.gateway.delete(TRIPS, trip_id):
            raise NotFoundError('Trip', trip_id)
        if active:
            logger.warning("Deleted trip %s with %d active booking(s)", trip_id, active)
        else:
            logger.info("Deleted trip %s", trip_id)

    def _require_bus(self, bus_id):
        bus = self.gateway.get(BUSES, bus_id)
        if bus is None:
            raise ValidationError(f"Bus '{bus_id}' does not exist.", field='bus_id')
        return bus


def _require_employee(gateway, employee_id, field='driver_id'):
    employee = gateway.get(EMPLOYEES, employee_id)
    if employee is None:
        raise ValidationError(f"Employee '{employee_id}' does not exist.", field=field)
    return employee
