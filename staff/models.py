"""Employee document vocabulary."""
from django.db import models


class EmployeeRole(models.TextChoices):
    ADMIN = 'Admin', 'Admin'
    MANAGER = 'Manager', 'Manager'
    DRIVER = 'Driver', 'Driver'
    EMPLOYEE = 'Employee', 'Employee'


MIN_PAYDAY = 1
MAX_PAYDAY = 31
