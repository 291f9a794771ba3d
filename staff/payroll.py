"""
Payroll-due computation and salary payment.

An employee is due once the current day of the month has reached their
``salary_payday`` and they have not been paid yet this calendar month.
"""
import logging

from django.utils import timezone

from finance.ledger import FinanceLedger
from finance.models import RecordCategory, RecordType
from utils.exceptions import NotFoundError, ValidationError
from utils.mongo import EMPLOYEES
from utils.timeutils import local_date

logger = logging.getLogger(__name__)


def is_payroll_due(employee, today):
    """
    ``today`` is a date. Paydays past the end of a short month (e.g. 31 in
    April) are not reached that month.
    """
    payday = employee.get('salary_payday')
    if not payday or payday > today.day:
        return False

    last_paid = local_date(employee.get('last_paid_date'))
    if last_paid is None:
        return True
    return (last_paid.year, last_paid.month) < (today.year, today.month)


def due_employees(employees, today):
    return [employee for employee in employees if is_payroll_due(employee, today)]


class PayrollService:

    def __init__(self, gateway, finance=None):
        self.gateway = gateway
        self.finance = finance or FinanceLedger(gateway)

    def due_now(self, now=None):
        today = timezone.localdate(now)
        employees = self.gateway.query(EMPLOYEES, ordering=['full_name'])
        return due_employees(employees, today)

    def mark_paid(self, employee_id, now=None):
        """Stamp ``last_paid_date`` and book the salary as an expense."""
        now = now or timezone.now()
        employee = self.gateway.get(EMPLOYEES, employee_id)
        if employee is None:
            raise NotFoundError('Employee', employee_id)
        if not is_payroll_due(employee, timezone.localdate(now)):
            raise ValidationError(f"{employee['full_name']} is not due for payment.")

        if not self.gateway.update(EMPLOYEES, employee_id, {'last_paid_date': now}):
            raise NotFoundError('Employee', employee_id)

        self.finance.record(
            RecordType.EXPENSE.value,
            RecordCategory.SALARY.value,
            employee['salary'],
            f"Salary payment for {employee['full_name']}",
            date=now,
            employee_id=employee_id,
        )
        logger.info("Paid salary of %s to employee %s", employee['salary'], employee_id)
        return self.gateway.get(EMPLOYEES, employee_id)
