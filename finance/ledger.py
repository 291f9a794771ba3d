"""
Finance records: the income/expense ledger and the read-only aggregations
behind the finance page and the dashboard.
"""
import calendar
import logging
from datetime import datetime, time, timedelta

from django.utils import timezone

from bookings.models import BookingStatus
from finance.models import RangePreset, RecordCategory, RecordType
from fleet.models import MaintenanceStatus
from utils.exceptions import NotFoundError, ValidationError
from utils.mongo import BOOKINGS, BUSES, FINANCE_RECORDS, TRIPS
from utils.timeutils import as_aware

logger = logging.getLogger(__name__)

RECENT_BOOKINGS_LIMIT = 5


class FinanceLedger:
    """Creates and reads finance records."""

    def __init__(self, gateway):
        self.gateway = gateway

    def record(self, type, category, amount, description, date=None, **links):
        if type not in RecordType.values:
            raise ValidationError(f"Unknown record type '{type}'.", field='type')
        if category not in RecordCategory.values:
            raise ValidationError(f"Unknown category '{category}'.", field='category')
        if amount is None or amount <= 0:
            raise ValidationError("Amount must be greater than zero.", field='amount')

        document = {
            'type': type,
            'category': category,
            'amount': amount,
            'date': date or timezone.now(),
            'description': description,
        }
        document.update({k: v for k, v in links.items() if v is not None})
        record_id = self.gateway.create(FINANCE_RECORDS, document)
        logger.info("Recorded %s/%s of %s (%s)", type, category, amount, record_id)
        return self.get_record(record_id)

    def get_record(self, record_id):
        record = self.gateway.get(FINANCE_RECORDS, record_id)
        if record is None:
            raise NotFoundError('Finance record', record_id)
        return record

    def list_records(self, type=None, category=None):
        filters = {}
        if type:
            filters['type'] = type
        if category:
            filters['category'] = category
        return self.gateway.query(FINANCE_RECORDS, filters, ordering=['-date'])

    def update_record(self, record_id, changes):
        if 'amount' in changes and changes['amount'] <= 0:
            raise ValidationError("Amount must be greater than zero.", field='amount')
        if not self.gateway.update(FINANCE_RECORDS, record_id, changes):
            raise NotFoundError('Finance record', record_id)
        return self.get_record(record_id)

    def delete_record(self, record_id):
        if not self.gateway.delete(FINANCE_RECORDS, record_id):
            raise NotFoundError('Finance record', record_id)
        logger.info("Deleted finance record %s", record_id)


def date_range(preset, now=None):
    """
    Inclusive ``(start, end)`` bounds for a range preset, in the active time
    zone. ``all`` has no bounds and returns ``(None, None)``. Weeks start on
    Monday.
    """
    if preset == RangePreset.ALL:
        return None, None
    if preset not in RangePreset.values:
        raise ValidationError(f"Unknown date range '{preset}'.", field='range')

    now = timezone.localtime(now or timezone.now())
    today = now.date()

    if preset == RangePreset.TODAY:
        first, last = today, today
    elif preset == RangePreset.WEEK:
        first = today - timedelta(days=today.weekday())
        last = first + timedelta(days=6)
    elif preset == RangePreset.MONTH:
        first = today.replace(day=1)
        last = today.replace(day=calendar.monthrange(today.year, today.month)[1])
    else:
        first = today.replace(month=1, day=1)
        last = today.replace(month=12, day=31)

    return (
        timezone.make_aware(datetime.combine(first, time.min)),
        timezone.make_aware(datetime.combine(last, time.max)),
    )


def filter_by_range(records, start, end):
    if start is None and end is None:
        return list(records)
    return [r for r in records if start <= as_aware(r['date']) <= end]


def summarize(records):
    income = sum(r['amount'] for r in records if r['type'] == RecordType.INCOME)
    expenses = sum(r['amount'] for r in records if r['type'] == RecordType.EXPENSE)
    return {
        'total_income': income,
        'total_expenses': expenses,
        'net_balance': income - expenses,
    }


def monthly_overview(records, year):
    """Income and expense totals per calendar month of ``year``."""
    rows = [
        {'month': calendar.month_abbr[m], 'income': 0, 'expense': 0}
        for m in range(1, 13)
    ]
    for record in records:
        when = timezone.localtime(as_aware(record['date']))
        if when.year != year:
            continue
        key = 'income' if record['type'] == RecordType.INCOME else 'expense'
        rows[when.month - 1][key] += record['amount']
    return rows


def dashboard_kpis(gateway, now=None):
    now = timezone.localtime(now or timezone.now())
    start_of_month = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

    income = gateway.query(FINANCE_RECORDS, {'type': RecordType.INCOME.value})
    buses = gateway.query(BUSES)
    trips = gateway.query(TRIPS)
    recent = gateway.query(BOOKINGS, ordering=['-booking_date'], limit=RECENT_BOOKINGS_LIMIT)

    return {
        'total_revenue': sum(r['amount'] for r in income),
        'total_passengers': gateway.count(BOOKINGS),
        'confirmed_bookings': gateway.count(BOOKINGS, {'status': BookingStatus.CONFIRMED.value}),
        'active_buses': sum(1 for b in buses if b.get('maintenance_status') == MaintenanceStatus.OPERATIONAL),
        'buses_in_maintenance': sum(1 for b in buses if b.get('maintenance_status') == MaintenanceStatus.MAINTENANCE),
        'trips_this_month': sum(
            1 for t in trips
            if t.get('departure') and as_aware(t['departure']) >= start_of_month
        ),
        'recent_bookings': recent,
    }
