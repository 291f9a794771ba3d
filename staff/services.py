"""Employee records."""
import logging

from staff.models import MAX_PAYDAY, MIN_PAYDAY
from utils.exceptions import NotFoundError, ValidationError
from utils.mongo import EMPLOYEES

logger = logging.getLogger(__name__)


def _check_pay_terms(values):
    if 'salary' in values and (values['salary'] is None or values['salary'] <= 0):
        raise ValidationError("Salary must be greater than zero.", field='salary')
    if 'salary_payday' in values and not MIN_PAYDAY <= (values['salary_payday'] or 0) <= MAX_PAYDAY:
        raise ValidationError(
            f"Salary payday must be between {MIN_PAYDAY} and {MAX_PAYDAY}.",
            field='salary_payday',
        )


class EmployeeService:

    def __init__(self, gateway):
        self.gateway = gateway

    def list_employees(self, role=None):
        filters = {'role': role} if role else None
        return self.gateway.query(EMPLOYEES, filters, ordering=['full_name'])

    def get_employee(self, employee_id):
        employee = self.gateway.get(EMPLOYEES, employee_id)
        if employee is None:
            raise NotFoundError('Employee', employee_id)
        return employee

    def create_employee(self, data):
        for field in ('full_name', 'role', 'contact_info', 'salary'):
            if not data.get(field):
                raise ValidationError(f"'{field}' is required.", field=field)
        data = {'salary_payday': MIN_PAYDAY, **data}
        _check_pay_terms(data)

        employee_id = self.gateway.create(EMPLOYEES, data)
        logger.info("Created employee %s (%s)", employee_id, data['full_name'])
        return self.get_employee(employee_id)

    def update_employee(self, employee_id, changes):
        _check_pay_terms(changes)
        if not self.gateway.update(EMPLOYEES, employee_id, changes):
            raise NotFoundError('Employee', employee_id)
        return self.get_employee(employee_id)

    def delete_employee(self, employee_id):
        if not self.gateway.delete(EMPLOYEES, employee_id):
            raise NotFoundError('Employee', employee_id)
        logger.info("Deleted employee %s", employee_id)
