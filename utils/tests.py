"""
Tests for shared utilities.
Tests cover: MongoDB gateway, Error responses, Time helpers.
"""
from datetime import date, datetime, timezone as dt_timezone
from unittest.mock import MagicMock, patch

from django.test import TestCase, override_settings
from pymongo.errors import PyMongoError, ServerSelectionTimeoutError
from rest_framework import status
from rest_framework.exceptions import NotAuthenticated

from utils import mongo
from utils.exceptions import (
    NotFoundError, PersistenceError, SeatUnavailableError, ValidationError, api_exception_handler,
)
from utils.mongo import BUSES, TRIPS, MongoGateway
from utils.testing import MongoTestMixin
from utils.timeutils import as_aware, local_date


# =============================================================================
# UNIT TESTS - Gateway
# =============================================================================

class MongoGatewayTests(MongoTestMixin, TestCase):

    def test_create_and_get(self):
        bus_id = self.gateway.create(BUSES, {'name': 'City Express', 'capacity': 40})

        bus = self.gateway.get(BUSES, bus_id)

        self.assertIsInstance(bus_id, str)
        self.assertEqual(bus['id'], bus_id)
        self.assertEqual(bus['capacity'], 40)
        self.assertNotIn('_id', bus)

    def test_create_ignores_supplied_id(self):
        bus_id = self.gateway.create(BUSES, {'id': 'mine', 'name': 'X'})
        self.assertNotEqual(bus_id, 'mine')

    def test_malformed_id_is_missing(self):
        self.assertIsNone(self.gateway.get(BUSES, 'not-an-object-id'))
        self.assertFalse(self.gateway.update(BUSES, 'not-an-object-id', {'name': 'X'}))
        self.assertFalse(self.gateway.delete(BUSES, None))

    def test_update(self):
        bus_id = self.gateway.create(BUSES, {'name': 'Old', 'capacity': 40})

        self.assertTrue(self.gateway.update(BUSES, bus_id, {'name': 'New', 'id': 'ignored'}))

        self.assertEqual(self.gateway.get(BUSES, bus_id)['name'], 'New')
        self.assertFalse(self.gateway.update(BUSES, '000000000000000000000000', {'name': 'X'}))

    def test_empty_update_checks_existence(self):
        bus_id = self.gateway.create(BUSES, {'name': 'Old'})
        self.assertTrue(self.gateway.update(BUSES, bus_id, {}))
        self.assertFalse(self.gateway.update(BUSES, '000000000000000000000000', {}))

    def test_delete(self):
        bus_id = self.gateway.create(BUSES, {'name': 'Gone'})

        self.assertTrue(self.gateway.delete(BUSES, bus_id))
        self.assertFalse(self.gateway.delete(BUSES, bus_id))

    def test_query_filters_orders_and_limits(self):
        for name, capacity in (('B', 30), ('A', 50), ('C', 40)):
            self.gateway.create(BUSES, {'name': name, 'capacity': capacity, 'maintenance_status': 'Operational'})
        self.gateway.create(BUSES, {'name': 'D', 'capacity': 10, 'maintenance_status': 'Maintenance'})

        names = [b['name'] for b in self.gateway.query(BUSES, {'maintenance_status': 'Operational'}, ['name'])]
        self.assertEqual(names, ['A', 'B', 'C'])

        top = self.gateway.query(BUSES, ordering=['-capacity'], limit=2)
        self.assertEqual([b['capacity'] for b in top], [50, 40])

        self.assertEqual(self.gateway.count(BUSES, {'maintenance_status': 'Maintenance'}), 1)

    def test_add_to_set_is_conditional(self):
        trip_id = self.gateway.create(TRIPS, {'booked_seats': [1]})

        self.assertTrue(self.gateway.add_to_set(TRIPS, trip_id, 'booked_seats', 2))
        self.assertFalse(self.gateway.add_to_set(TRIPS, trip_id, 'booked_seats', 2))
        self.assertFalse(self.gateway.add_to_set(TRIPS, '000000000000000000000000', 'booked_seats', 3))

        self.assertEqual(self.gateway.get(TRIPS, trip_id)['booked_seats'], [1, 2])

    def test_pull(self):
        trip_id = self.gateway.create(TRIPS, {'booked_seats': [1, 2]})

        self.assertTrue(self.gateway.pull(TRIPS, trip_id, 'booked_seats', 1))
        self.assertTrue(self.gateway.pull(TRIPS, trip_id, 'booked_seats', 9))
        self.assertFalse(self.gateway.pull(TRIPS, '000000000000000000000000', 'booked_seats', 1))

        self.assertEqual(self.gateway.get(TRIPS, trip_id)['booked_seats'], [2])


class GatewayFailureTests(TestCase):

    def setUp(self):
        self.collection = MagicMock()
        db = MagicMock()
        db.__getitem__.return_value = self.collection
        self.gateway = MongoGateway(db)

    def test_write_failure_raises_persistence_error(self):
        self.collection.insert_one.side_effect = PyMongoError('disk full')

        with self.assertLogs('utils.mongo', level='ERROR'):
            with self.assertRaises(PersistenceError):
                self.gateway.create(BUSES, {'name': 'X'})

    def test_read_failure_raises_persistence_error(self):
        self.collection.find.side_effect = PyMongoError('connection reset')

        with self.assertRaises(PersistenceError):
            self.gateway.query(BUSES)

    def test_conditional_update_failure(self):
        self.collection.find_one_and_update.side_effect = PyMongoError('timeout')

        with self.assertRaises(PersistenceError):
            self.gateway.add_to_set(TRIPS, '000000000000000000000000', 'booked_seats', 1)


class ConnectionTests(TestCase):

    def setUp(self):
        patcher = patch.multiple(mongo, _mongo_client=None, _mongo_db=None)
        patcher.start()
        self.addCleanup(patcher.stop)

    @override_settings(MONGODB_URI='mongodb://unreachable:27017', MONGODB_TIMEOUT_MS=10)
    def test_unreachable_server(self):
        with patch('utils.mongo.MongoClient') as client_class:
            client_class.return_value.admin.command.side_effect = ServerSelectionTimeoutError('no servers')

            with self.assertRaises(PersistenceError):
                mongo.get_mongo_db()

        self.assertIsNone(mongo._mongo_db)

    def test_connection_is_reused(self):
        with patch('utils.mongo.MongoClient') as client_class:
            first = mongo.get_mongo_db()
            second = mongo.get_mongo_db()

        self.assertIs(first, second)
        client_class.assert_called_once()


# =============================================================================
# UNIT TESTS - Error responses
# =============================================================================

class ExceptionHandlerTests(TestCase):

    context = {'view': None}

    def test_validation_error(self):
        response = api_exception_handler(ValidationError('Bad value.', field='capacity'), self.context)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data, {'error': 'Bad value.', 'field': 'capacity'})

    def test_not_found(self):
        response = api_exception_handler(NotFoundError('Trip', 'abc'), self.context)

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {'error': "Trip 'abc' not found."})

    def test_seat_unavailable(self):
        response = api_exception_handler(SeatUnavailableError('abc', 3), self.context)

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['field'], 'seat_number')

    def test_persistence_error(self):
        response = api_exception_handler(PersistenceError('Could not write trips.'), self.context)
        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)

    def test_other_errors_fall_through_to_drf(self):
        response = api_exception_handler(NotAuthenticated(), self.context)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

        self.assertIsNone(api_exception_handler(KeyError('x'), self.context))


# =============================================================================
# UNIT TESTS - Time helpers
# =============================================================================

class TimeHelperTests(TestCase):

    def test_naive_values_read_as_utc(self):
        value = as_aware(datetime(2026, 3, 1, 12, 0))
        self.assertEqual(value, datetime(2026, 3, 1, 12, 0, tzinfo=dt_timezone.utc))

    def test_aware_and_missing_values_pass_through(self):
        value = datetime(2026, 3, 1, 12, 0, tzinfo=dt_timezone.utc)
        self.assertIs(as_aware(value), value)
        self.assertIsNone(as_aware(None))

    def test_local_date(self):
        self.assertEqual(local_date(datetime(2026, 3, 1, 23, 30)), date(2026, 3, 1))
        self.assertEqual(local_date(date(2026, 3, 1)), date(2026, 3, 1))
        self.assertIsNone(local_date(None))
