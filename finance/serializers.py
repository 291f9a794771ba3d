"""
Serializers for finance records and reports.
"""
from rest_framework import serializers

from bookings.serializers import BookingSerializer
from .models import RecordCategory, RecordType


class FinanceRecordSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    type = serializers.ChoiceField(choices=RecordType.choices)
    category = serializers.ChoiceField(choices=RecordCategory.choices)
    amount = serializers.FloatField(min_value=0.01)
    date = serializers.DateTimeField(required=False)
    description = serializers.CharField(max_length=500, allow_blank=True, default='')
    booking_id = serializers.CharField(read_only=True)
    employee_id = serializers.CharField(read_only=True)


class FinanceSummarySerializer(serializers.Serializer):
    range = serializers.CharField()
    start = serializers.DateTimeField(allow_null=True)
    end = serializers.DateTimeField(allow_null=True)
    total_income = serializers.FloatField()
    total_expenses = serializers.FloatField()
    net_balance = serializers.FloatField()
    salaries = serializers.FloatField()
    maintenance = serializers.FloatField()


class MonthlyOverviewRowSerializer(serializers.Serializer):
    month = serializers.CharField()
    income = serializers.FloatField()
    expense = serializers.FloatField()


class DashboardSerializer(serializers.Serializer):
    total_revenue = serializers.FloatField()
    total_passengers = serializers.IntegerField()
    confirmed_bookings = serializers.IntegerField()
    active_buses = serializers.IntegerField()
    buses_in_maintenance = serializers.IntegerField()
    trips_this_month = serializers.IntegerField()
    recent_bookings = BookingSerializer(many=True)
