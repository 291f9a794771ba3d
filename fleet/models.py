"""
Fleet document vocabulary.

Buses and trips are stored as MongoDB documents, not ORM rows; this module
holds the choices their fields are validated against.
"""
from django.db import models


class MaintenanceStatus(models.TextChoices):
    OPERATIONAL = 'Operational', 'Operational'
    MAINTENANCE = 'Maintenance', 'Maintenance'
    OUT_OF_SERVICE = 'Out of Service', 'Out of Service'


class TripStatus(models.TextChoices):
    SCHEDULED = 'Scheduled', 'Scheduled'
    IN_PROGRESS = 'In Progress', 'In Progress'
    COMPLETED = 'Completed', 'Completed'
    CANCELLED = 'Cancelled', 'Cancelled'
