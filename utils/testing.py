"""
Test helpers: an in-memory MongoDB (mongomock) wired in place of the real
connection, plus small document factories.
"""
from datetime import timedelta
from unittest.mock import patch

import mongomock
from django.contrib.auth import get_user_model
from django.utils import timezone

from utils.mongo import BUSES, EMPLOYEES, TRIPS, MongoGateway

User = get_user_model()


class MongoTestMixin:
    """
    Gives each test a fresh mongomock database and routes ``get_gateway()``
    to it. Mix in before ``TestCase``/``APITestCase``.
    """

    def setUp(self):
        super().setUp()
        self.mongo_client = mongomock.MongoClient(tz_aware=True)
        self.db = self.mongo_client['busops_test']
        patcher = patch('utils.mongo.get_mongo_db', return_value=self.db)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.gateway = MongoGateway(self.db)

    def make_bus(self, capacity=40, **fields):
        document = {
            'name': 'Test Bus',
            'plate_number': 'TST-001',
            'capacity': capacity,
            'maintenance_status': 'Operational',
        }
        document.update(fields)
        return self.gateway.create(BUSES, document)

    def make_employee(self, **fields):
        document = {
            'full_name': 'Test Driver',
            'role': 'Driver',
            'contact_info': 'driver@example.com',
            'salary': 3000.0,
            'salary_payday': 15,
        }
        document.update(fields)
        return self.gateway.create(EMPLOYEES, document)

    def make_trip(self, total_seats=10, booked_seats=None, ticket_price=25.0, **fields):
        document = {
            'origin': 'Springfield',
            'destination': 'Shelbyville',
            'departure': timezone.now() + timedelta(days=3),
            'bus_id': None,
            'driver_id': None,
            'ticket_price': ticket_price,
            'total_seats': total_seats,
            'booked_seats': list(booked_seats or []),
            'status': 'Scheduled',
        }
        document.update(fields)
        return self.gateway.create(TRIPS, document)

    def booked_seats(self, trip_id):
        return sorted(self.gateway.get(TRIPS, trip_id)['booked_seats'])


def make_user(role=User.Role.MANAGER, email=None, password='StaffPass123!'):
    return User.objects.create_user(
        email=email or f'{role.lower()}@example.com',
        password=password,
        name=f'Test {role}',
        role=role,
    )
