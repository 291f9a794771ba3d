"""
Serializers for employees and payroll.
"""
from rest_framework import serializers

from .models import MAX_PAYDAY, MIN_PAYDAY, EmployeeRole


class EmployeeSerializer(serializers.Serializer):
    """Employee document."""
    id = serializers.CharField(read_only=True)
    full_name = serializers.CharField(max_length=255)
    role = serializers.ChoiceField(choices=EmployeeRole.choices)
    contact_info = serializers.CharField(max_length=255)
    salary = serializers.FloatField(min_value=0.01)
    salary_payday = serializers.IntegerField(min_value=MIN_PAYDAY, max_value=MAX_PAYDAY, default=MIN_PAYDAY)
    last_paid_date = serializers.DateTimeField(read_only=True, allow_null=True)
    profile_photo_url = serializers.URLField(required=False, allow_blank=True)
