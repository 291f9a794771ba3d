"""Finance record vocabulary."""
from django.db import models


class RecordType(models.TextChoices):
    INCOME = 'Income', 'Income'
    EXPENSE = 'Expense', 'Expense'


class RecordCategory(models.TextChoices):
    TICKET_SALE = 'Ticket Sale', 'Ticket Sale'
    SALARY = 'Salary', 'Salary'
    MAINTENANCE = 'Maintenance', 'Maintenance'
    RENT = 'Rent', 'Rent'
    OTHER = 'Other', 'Other'


class RangePreset(models.TextChoices):
    ALL = 'all', 'All time'
    TODAY = 'today', 'Today'
    WEEK = 'week', 'This week'
    MONTH = 'month', 'This month'
    YEAR = 'year', 'This year'
