"""
Tests for finance app.
Tests cover: Date range presets, Summaries, Monthly overview, Dashboard KPIs, Finance API.
"""
from datetime import datetime, timedelta, timezone as dt_timezone

from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APITestCase
from rest_framework import status

from bookings.ledger import BookingLedger
from core.models import User
from finance.ledger import (
    FinanceLedger, dashboard_kpis, date_range, filter_by_range, monthly_overview, summarize,
)
from utils.exceptions import NotFoundError, ValidationError
from utils.mongo import BOOKINGS, FINANCE_RECORDS
from utils.testing import MongoTestMixin, make_user


def utc(*args):
    return datetime(*args, tzinfo=dt_timezone.utc)


def record(type, amount, when, category=None):
    return {
        'type': type,
        'category': category or ('Ticket Sale' if type == 'Income' else 'Other'),
        'amount': amount,
        'date': when,
    }


# =============================================================================
# UNIT TESTS - Date ranges and aggregations
# =============================================================================

class DateRangeTests(TestCase):
    # Wednesday
    now = utc(2026, 3, 18, 14, 30)

    def test_all_has_no_bounds(self):
        self.assertEqual(date_range('all', now=self.now), (None, None))

    def test_today(self):
        start, end = date_range('today', now=self.now)
        self.assertEqual(start, utc(2026, 3, 18))
        self.assertEqual(end.date(), self.now.date())
        self.assertEqual((end.hour, end.minute, end.second), (23, 59, 59))

    def test_week_starts_monday(self):
        start, end = date_range('week', now=self.now)
        self.assertEqual(start, utc(2026, 3, 16))
        self.assertEqual(end.date(), utc(2026, 3, 22).date())

    def test_month(self):
        start, end = date_range('month', now=self.now)
        self.assertEqual(start, utc(2026, 3, 1))
        self.assertEqual(end.date(), utc(2026, 3, 31).date())

    def test_february_month_end(self):
        start, end = date_range('month', now=utc(2028, 2, 10))
        self.assertEqual(end.date(), utc(2028, 2, 29).date())

    def test_year(self):
        start, end = date_range('year', now=self.now)
        self.assertEqual(start, utc(2026, 1, 1))
        self.assertEqual(end.date(), utc(2026, 12, 31).date())

    def test_unknown_preset(self):
        with self.assertRaises(ValidationError):
            date_range('fortnight', now=self.now)


class AggregationTests(TestCase):

    def setUp(self):
        self.records = [
            record('Income', 100.0, utc(2026, 3, 18, 9, 0)),
            record('Income', 50.0, utc(2026, 1, 5, 9, 0)),
            record('Expense', 30.0, utc(2026, 3, 2, 9, 0), category='Maintenance'),
            record('Expense', 500.0, utc(2025, 12, 31, 23, 0), category='Salary'),
        ]

    def test_filter_by_range_is_inclusive(self):
        start, end = utc(2026, 3, 2, 9, 0), utc(2026, 3, 18, 9, 0)
        self.assertEqual(len(filter_by_range(self.records, start, end)), 2)

    def test_filter_without_bounds_keeps_everything(self):
        self.assertEqual(len(filter_by_range(self.records, None, None)), 4)

    def test_filter_accepts_naive_stored_dates(self):
        records = [record('Income', 10.0, datetime(2026, 3, 18, 9, 0))]
        start, end = date_range('today', now=utc(2026, 3, 18, 12, 0))
        self.assertEqual(len(filter_by_range(records, start, end)), 1)

    def test_summarize(self):
        summary = summarize(self.records)
        self.assertEqual(summary['total_income'], 150.0)
        self.assertEqual(summary['total_expenses'], 530.0)
        self.assertEqual(summary['net_balance'], -380.0)

    def test_summarize_empty(self):
        self.assertEqual(summarize([]), {'total_income': 0, 'total_expenses': 0, 'net_balance': 0})

    def test_monthly_overview(self):
        rows = monthly_overview(self.records, 2026)

        self.assertEqual(len(rows), 12)
        self.assertEqual(rows[0], {'month': 'Jan', 'income': 50.0, 'expense': 0})
        self.assertEqual(rows[2], {'month': 'Mar', 'income': 100.0, 'expense': 30.0})
        self.assertEqual(sum(row['expense'] for row in rows), 30.0)


# =============================================================================
# UNIT TESTS - Ledger and dashboard
# =============================================================================

class FinanceLedgerTests(MongoTestMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.ledger = FinanceLedger(self.gateway)

    def test_record_defaults_date_to_now(self):
        created = self.ledger.record('Expense', 'Rent', 800.0, 'Depot rent')
        self.assertIsNotNone(created['date'])
        self.assertEqual(created['category'], 'Rent')

    def test_invalid_records_rejected(self):
        with self.assertRaises(ValidationError):
            self.ledger.record('Refund', 'Other', 10.0, '')
        with self.assertRaises(ValidationError):
            self.ledger.record('Income', 'Lottery', 10.0, '')
        with self.assertRaises(ValidationError):
            self.ledger.record('Income', 'Other', 0, '')
        self.assertEqual(self.gateway.count(FINANCE_RECORDS), 0)

    def test_list_newest_first(self):
        self.ledger.record('Income', 'Other', 1.0, 'old', date=utc(2026, 1, 1))
        self.ledger.record('Income', 'Other', 2.0, 'new', date=utc(2026, 2, 1))

        self.assertEqual([r['description'] for r in self.ledger.list_records()], ['new', 'old'])

    def test_update_and_delete(self):
        created = self.ledger.record('Expense', 'Maintenance', 120.0, 'Brake pads')

        self.assertEqual(self.ledger.update_record(created['id'], {'amount': 150.0})['amount'], 150.0)

        self.ledger.delete_record(created['id'])
        with self.assertRaises(NotFoundError):
            self.ledger.get_record(created['id'])


class DashboardTests(MongoTestMixin, TestCase):

    def test_dashboard_kpis(self):
        now = timezone.now()
        self.make_bus(maintenance_status='Operational')
        self.make_bus(maintenance_status='Operational', plate_number='TST-002')
        self.make_bus(maintenance_status='Maintenance', plate_number='TST-003')
        trip_id = self.make_trip(total_seats=5, ticket_price=40.0, departure=now)
        self.make_trip(departure=now.replace(day=1) - timedelta(days=1))

        ledger = BookingLedger(self.gateway)
        first = ledger.create_booking(trip_id, 'Alice', 'ID-1', 1)
        ledger.create_booking(trip_id, 'Bob', 'ID-2', 2)
        ledger.update_booking(first['id'], {'status': 'Pending'})
        FinanceLedger(self.gateway).record('Expense', 'Rent', 500.0, 'Depot rent')

        kpis = dashboard_kpis(self.gateway, now=now)

        self.assertEqual(kpis['total_revenue'], 80.0)
        self.assertEqual(kpis['total_passengers'], 2)
        self.assertEqual(kpis['confirmed_bookings'], 1)
        self.assertEqual(kpis['active_buses'], 2)
        self.assertEqual(kpis['buses_in_maintenance'], 1)
        self.assertEqual(kpis['trips_this_month'], 1)
        self.assertEqual(len(kpis['recent_bookings']), 2)

    def test_recent_bookings_limited_to_five(self):
        for seat in range(1, 8):
            self.gateway.create(BOOKINGS, {
                'trip_id': 'x', 'seat_number': seat, 'status': 'Confirmed',
                'booking_date': utc(2026, 3, seat, 9, 0),
            })

        recent = dashboard_kpis(self.gateway)['recent_bookings']

        self.assertEqual([b['seat_number'] for b in recent], [7, 6, 5, 4, 3])


# =============================================================================
# INTEGRATION TESTS - Finance API
# =============================================================================

class FinanceAPITests(MongoTestMixin, APITestCase):

    def setUp(self):
        super().setUp()
        self.manager = make_user(User.Role.MANAGER)
        self.clerk = make_user(User.Role.EMPLOYEE)
        self.client.force_authenticate(user=self.manager)
        ledger = FinanceLedger(self.gateway)
        ledger.record('Income', 'Ticket Sale', 300.0, 'Sales')
        ledger.record('Expense', 'Salary', 120.0, 'Wages')
        ledger.record('Expense', 'Maintenance', 30.0, 'Oil change')
        ledger.record('Income', 'Other', 999.0, 'Old grant', date=timezone.now() - timedelta(days=800))

    def test_create_record(self):
        response = self.client.post('/api/finance/records/', {
            'type': 'Expense', 'category': 'Rent', 'amount': 450, 'description': 'Depot rent',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['amount'], 450.0)

    def test_invalid_record_rejected(self):
        response = self.client.post('/api/finance/records/', {
            'type': 'Income', 'category': 'Ticket Sale', 'amount': -5,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_records_with_range(self):
        response = self.client.get('/api/finance/records/', {'range': 'year'})
        self.assertEqual(response.data['count'], 3)

        response = self.client.get('/api/finance/records/', {'type': 'Expense'})
        self.assertEqual(response.data['count'], 2)

    def test_unknown_range_rejected(self):
        response = self.client.get('/api/finance/summary/', {'range': 'decade'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['field'], 'range')

    def test_summary(self):
        response = self.client.get('/api/finance/summary/', {'range': 'today'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_income'], 300.0)
        self.assertEqual(response.data['total_expenses'], 150.0)
        self.assertEqual(response.data['net_balance'], 150.0)
        self.assertEqual(response.data['salaries'], 120.0)
        self.assertEqual(response.data['maintenance'], 30.0)

    def test_summary_all_time(self):
        response = self.client.get('/api/finance/summary/')
        self.assertEqual(response.data['total_income'], 1299.0)
        self.assertIsNone(response.data['start'])

    def test_monthly_overview(self):
        year = timezone.localdate().year
        response = self.client.get('/api/finance/overview/', {'year': year})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['results']), 12)
        self.assertEqual(sum(row['income'] for row in response.data['results']), 300.0)

    def test_bad_year(self):
        response = self.client.get('/api/finance/overview/', {'year': 'soon'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_clerk_cannot_read_finance(self):
        self.client.force_authenticate(user=self.clerk)
        response = self.client.get('/api/finance/summary/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_dashboard_open_to_all_staff(self):
        self.client.force_authenticate(user=self.clerk)

        response = self.client.get('/api/dashboard/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_revenue'], 1299.0)
        self.assertEqual(response.data['recent_bookings'], [])
