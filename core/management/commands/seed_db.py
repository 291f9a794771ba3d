"""
Management command to seed the databases with sample data.

Usage:
    python manage.py seed_db           # Seed with default data
    python manage.py seed_db --clear   # Clear existing data first
"""
from datetime import timedelta
from django.core.management.base import BaseCommand
from django.utils import timezone

from bookings.ledger import BookingLedger
from core.models import User
from fleet.services import BusService, TripService
from staff.services import EmployeeService
from utils.mongo import BOOKINGS, BUSES, EMPLOYEES, FINANCE_RECORDS, TRIPS, get_gateway


class Command(BaseCommand):
    help = 'Seed the databases with sample data for testing'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Clear existing data before seeding',
        )

    def handle(self, *args, **options):
        gateway = get_gateway()

        if options['clear']:
            self.stdout.write('Clearing existing data...')
            self.clear_data(gateway)

        self.stdout.write('Seeding databases...')

        self.create_users()
        employees = self.create_employees(gateway)
        buses = self.create_buses(gateway, employees)
        trips = self.create_trips(gateway, buses, employees)
        self.create_sample_bookings(gateway, trips)

        self.stdout.write(self.style.SUCCESS('✓ Databases seeded successfully!'))
        self.print_summary(gateway)

    def clear_data(self, gateway):
        for collection in (BOOKINGS, FINANCE_RECORDS, TRIPS, BUSES, EMPLOYEES):
            gateway.db[collection].delete_many({})
        User.objects.filter(is_superuser=False).delete()
        self.stdout.write(self.style.WARNING('  Cleared all documents and non-superuser accounts'))

    def create_users(self):
        accounts = [
            ('admin@busops.local', 'Admin User', User.Role.ADMIN, 'Admin@123'),
            ('manager@busops.local', 'Morgan Manager', User.Role.MANAGER, 'Manager@123'),
            ('clerk@busops.local', 'Casey Clerk', User.Role.EMPLOYEE, 'Clerk@123'),
        ]
        for email, name, role, password in accounts:
            user, created = User.objects.get_or_create(
                email=email,
                defaults={'name': name, 'role': role, 'is_staff': role == User.Role.ADMIN},
            )
            if created:
                user.set_password(password)
                user.save()
                self.stdout.write(f'  Created {role.lower()}: {email} / {password}')

    def create_employees(self, gateway):
        service = EmployeeService(gateway)
        employees = [
            {'full_name': 'Marta Keller', 'role': 'Driver', 'contact_info': 'marta@busops.local',
             'salary': 3200.0, 'salary_payday': 25},
            {'full_name': 'Omar Haddad', 'role': 'Driver', 'contact_info': 'omar@busops.local',
             'salary': 3100.0, 'salary_payday': 25},
            {'full_name': 'Lena Brooks', 'role': 'Manager', 'contact_info': 'lena@busops.local',
             'salary': 4500.0, 'salary_payday': 1},
        ]
        created = [service.create_employee(data) for data in employees]
        self.stdout.write(f'  Created {len(created)} employees')
        return created

    def create_buses(self, gateway, employees):
        service = BusService(gateway)
        drivers = [e for e in employees if e['role'] == 'Driver']
        buses = [
            {'name': 'City Express 1', 'plate_number': 'BUS-1001', 'capacity': 40,
             'maintenance_status': 'Operational', 'assigned_driver_id': drivers[0]['id']},
            {'name': 'City Express 2', 'plate_number': 'BUS-1002', 'capacity': 32,
             'maintenance_status': 'Operational', 'assigned_driver_id': drivers[1]['id']},
            {'name': 'Coastal Liner', 'plate_number': 'BUS-2001', 'capacity': 50,
             'maintenance_status': 'Maintenance'},
        ]
        created = [service.create_bus(data) for data in buses]
        self.stdout.write(f'  Created {len(created)} buses')
        return created

    def create_trips(self, gateway, buses, employees):
        service = TripService(gateway)
        drivers = [e for e in employees if e['role'] == 'Driver']
        now = timezone.now().replace(minute=0, second=0, microsecond=0)
        routes = [
            ('Springfield', 'Shelbyville', 25.0),
            ('Shelbyville', 'Capital City', 40.0),
            ('Capital City', 'Ogdenville', 18.5),
        ]
        trips = []
        for day, (origin, destination, price) in enumerate(routes, start=1):
            trips.append(service.create_trip({
                'origin': origin,
                'destination': destination,
                'departure': now + timedelta(days=day),
                'bus_id': buses[day % 2]['id'],
                'driver_id': drivers[day % 2]['id'],
                'ticket_price': price,
            }))
        self.stdout.write(f'  Created {len(trips)} trips')
        return trips

    def create_sample_bookings(self, gateway, trips):
        ledger = BookingLedger(gateway)
        customers = [('Alice Moreau', 'ID-448812'), ('Bob Ito', 'ID-119034'), ('Chen Wu', 'ID-775201')]
        count = 0
        for trip in trips[:2]:
            for seat, (name, id_number) in enumerate(customers, start=1):
                ledger.create_booking(trip['id'], name, id_number, seat)
                count += 1
        self.stdout.write(f'  Created {count} sample bookings')

    def print_summary(self, gateway):
        self.stdout.write('\n' + '=' * 50)
        self.stdout.write('DATABASE SUMMARY')
        self.stdout.write('=' * 50)
        self.stdout.write(f'  Users:           {User.objects.count()}')
        self.stdout.write(f'  Employees:       {gateway.count(EMPLOYEES)}')
        self.stdout.write(f'  Buses:           {gateway.count(BUSES)}')
        self.stdout.write(f'  Trips:           {gateway.count(TRIPS)}')
        self.stdout.write(f'  Bookings:        {gateway.count(BOOKINGS)}')
        self.stdout.write(f'  Finance records: {gateway.count(FINANCE_RECORDS)}')
        self.stdout.write('=' * 50)
        self.stdout.write('\nTest Credentials:')
        self.stdout.write('  Admin:   admin@busops.local / Admin@123')
        self.stdout.write('  Manager: manager@busops.local / Manager@123')
        self.stdout.write('  Clerk:   clerk@busops.local / Clerk@123')
