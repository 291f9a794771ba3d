"""
Tests for staff app.
Tests cover: Payroll due rule, Salary payment, Employee records, Staff API.
"""
from datetime import date, datetime, timezone as dt_timezone

from django.test import TestCase
from rest_framework.test import APITestCase
from rest_framework import status

from core.models import User
from staff.payroll import PayrollService, due_employees, is_payroll_due
from staff.services import EmployeeService
from utils.exceptions import NotFoundError, ValidationError
from utils.mongo import EMPLOYEES, FINANCE_RECORDS
from utils.testing import MongoTestMixin, make_user


def utc(*args):
    return datetime(*args, tzinfo=dt_timezone.utc)


# =============================================================================
# UNIT TESTS - Payroll due rule
# =============================================================================

class PayrollDueRuleTests(TestCase):

    def test_not_due_before_payday(self):
        employee = {'salary_payday': 15, 'last_paid_date': None}
        self.assertFalse(is_payroll_due(employee, date(2026, 3, 10)))

    def test_due_on_payday(self):
        employee = {'salary_payday': 15, 'last_paid_date': None}
        self.assertTrue(is_payroll_due(employee, date(2026, 3, 15)))

    def test_due_after_payday(self):
        employee = {'salary_payday': 15}
        self.assertTrue(is_payroll_due(employee, date(2026, 3, 28)))

    def test_paid_this_month_not_due(self):
        employee = {'salary_payday': 15, 'last_paid_date': utc(2026, 3, 15, 9, 0)}
        self.assertFalse(is_payroll_due(employee, date(2026, 3, 20)))

    def test_paid_last_month_is_due(self):
        employee = {'salary_payday': 15, 'last_paid_date': utc(2026, 2, 15, 9, 0)}
        self.assertTrue(is_payroll_due(employee, date(2026, 3, 15)))

    def test_paid_same_month_last_year_is_due(self):
        employee = {'salary_payday': 1, 'last_paid_date': utc(2025, 3, 1, 9, 0)}
        self.assertTrue(is_payroll_due(employee, date(2026, 3, 1)))

    def test_paid_in_december_due_in_january(self):
        employee = {'salary_payday': 5, 'last_paid_date': utc(2025, 12, 5, 9, 0)}
        self.assertTrue(is_payroll_due(employee, date(2026, 1, 5)))

    def test_naive_payment_date_read_as_utc(self):
        employee = {'salary_payday': 15, 'last_paid_date': datetime(2026, 3, 15, 9, 0)}
        self.assertFalse(is_payroll_due(employee, date(2026, 3, 31)))

    def test_payday_31_not_reached_in_30_day_month(self):
        employee = {'salary_payday': 31, 'last_paid_date': None}
        self.assertFalse(is_payroll_due(employee, date(2026, 4, 30)))
        self.assertTrue(is_payroll_due(employee, date(2026, 5, 31)))

    def test_due_employees_filters_list(self):
        employees = [
            {'full_name': 'A', 'salary_payday': 1},
            {'full_name': 'B', 'salary_payday': 20},
            {'full_name': 'C', 'salary_payday': 5, 'last_paid_date': utc(2026, 3, 5, 8, 0)},
        ]
        due = due_employees(employees, date(2026, 3, 10))
        self.assertEqual([e['full_name'] for e in due], ['A'])


# =============================================================================
# UNIT TESTS - Salary payment
# =============================================================================

class PayrollServiceTests(MongoTestMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.service = PayrollService(self.gateway)
        self.employee_id = self.make_employee(full_name='Marta Keller', salary=3200.0, salary_payday=15)

    def test_due_now(self):
        self.make_employee(full_name='Later Payday', salary_payday=25)

        due = self.service.due_now(now=utc(2026, 3, 16, 12, 0))

        self.assertEqual([e['id'] for e in due], [self.employee_id])

    def test_mark_paid_stamps_date_and_records_expense(self):
        now = utc(2026, 3, 16, 12, 0)

        employee = self.service.mark_paid(self.employee_id, now=now)

        self.assertEqual(employee['last_paid_date'].replace(tzinfo=dt_timezone.utc), now)
        records = self.gateway.query(FINANCE_RECORDS)
        self.assertEqual(len(records), 1)
        self.assertEqual(records[0]['type'], 'Expense')
        self.assertEqual(records[0]['category'], 'Salary')
        self.assertEqual(records[0]['amount'], 3200.0)
        self.assertEqual(records[0]['employee_id'], self.employee_id)
        self.assertEqual(self.service.due_now(now=now), [])

    def test_mark_paid_twice_in_a_month_rejected(self):
        self.service.mark_paid(self.employee_id, now=utc(2026, 3, 16, 12, 0))

        with self.assertRaises(ValidationError):
            self.service.mark_paid(self.employee_id, now=utc(2026, 3, 20, 12, 0))

        self.assertEqual(self.gateway.count(FINANCE_RECORDS), 1)

    def test_mark_paid_before_payday_rejected(self):
        with self.assertRaises(ValidationError):
            self.service.mark_paid(self.employee_id, now=utc(2026, 3, 2, 12, 0))

    def test_due_again_next_month(self):
        self.service.mark_paid(self.employee_id, now=utc(2026, 3, 16, 12, 0))

        due = self.service.due_now(now=utc(2026, 4, 15, 8, 0))

        self.assertEqual(len(due), 1)

    def test_mark_paid_unknown_employee(self):
        with self.assertRaises(NotFoundError):
            self.service.mark_paid('000000000000000000000000')


# =============================================================================
# UNIT TESTS - Employee records
# =============================================================================

class EmployeeServiceTests(MongoTestMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.service = EmployeeService(self.gateway)

    def test_create_employee_defaults_payday(self):
        employee = self.service.create_employee({
            'full_name': 'Omar Haddad', 'role': 'Driver',
            'contact_info': 'omar@example.com', 'salary': 3100.0,
        })
        self.assertEqual(employee['salary_payday'], 1)

    def test_create_employee_missing_field(self):
        with self.assertRaises(ValidationError) as ctx:
            self.service.create_employee({'full_name': 'No Salary', 'role': 'Driver', 'contact_info': 'x'})
        self.assertEqual(ctx.exception.field, 'salary')

    def test_invalid_payday_rejected(self):
        for payday in (0, 32):
            with self.assertRaises(ValidationError):
                self.service.create_employee({
                    'full_name': 'Bad Payday', 'role': 'Driver', 'contact_info': 'x',
                    'salary': 100.0, 'salary_payday': payday,
                })
        self.assertEqual(self.gateway.count(EMPLOYEES), 0)

    def test_list_sorted_by_name(self):
        self.make_employee(full_name='Zoe')
        self.make_employee(full_name='Adam')
        self.assertEqual([e['full_name'] for e in self.service.list_employees()], ['Adam', 'Zoe'])

    def test_update_and_delete(self):
        employee_id = self.make_employee()

        updated = self.service.update_employee(employee_id, {'salary': 3500.0})
        self.assertEqual(updated['salary'], 3500.0)

        self.service.delete_employee(employee_id)
        with self.assertRaises(NotFoundError):
            self.service.get_employee(employee_id)


# =============================================================================
# INTEGRATION TESTS - Staff API
# =============================================================================

class StaffAPITests(MongoTestMixin, APITestCase):

    def setUp(self):
        super().setUp()
        self.manager = make_user(User.Role.MANAGER)
        self.clerk = make_user(User.Role.EMPLOYEE)
        self.client.force_authenticate(user=self.manager)

    def test_create_employee(self):
        response = self.client.post('/api/employees/', {
            'full_name': 'Marta Keller',
            'role': 'Driver',
            'contact_info': 'marta@example.com',
            'salary': 3200,
            'salary_payday': 25,
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['salary_payday'], 25)
        self.assertIsNone(response.data['last_paid_date'])

    def test_invalid_payday_rejected(self):
        response = self.client.post('/api/employees/', {
            'full_name': 'X', 'role': 'Driver', 'contact_info': 'x', 'salary': 10, 'salary_payday': 40,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_payroll_due_and_mark_paid(self):
        employee_id = self.make_employee(salary_payday=1)

        response = self.client.get('/api/employees/payroll-due/')
        self.assertEqual(response.data['count'], 1)

        response = self.client.post(f'/api/employees/{employee_id}/mark-paid/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNotNone(response.data['last_paid_date'])

        response = self.client.get('/api/employees/payroll-due/')
        self.assertEqual(response.data['count'], 0)

        response = self.client.post(f'/api/employees/{employee_id}/mark-paid/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('error', response.data)

    def test_clerk_cannot_see_payroll(self):
        self.client.force_authenticate(user=self.clerk)

        self.assertEqual(self.client.get('/api/employees/').status_code, status.HTTP_200_OK)
        response = self.client.get('/api/employees/payroll-due/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_unknown_employee(self):
        response = self.client.get('/api/employees/000000000000000000000000/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
