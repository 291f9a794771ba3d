"""
Views for finance records, reports and the dashboard.
"""
from django.utils import timezone
from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from rest_framework import serializers as drf_serializers

from core.permissions import IsAdminOrManager
from utils.mongo import get_gateway
from .ledger import FinanceLedger, dashboard_kpis, date_range, filter_by_range, monthly_overview, summarize
from .models import RangePreset, RecordCategory, RecordType
from .serializers import (
    DashboardSerializer, FinanceRecordSerializer, FinanceSummarySerializer, MonthlyOverviewRowSerializer,
)


class FinanceRecordListResponseSerializer(drf_serializers.Serializer):
    count = drf_serializers.IntegerField()
    results = FinanceRecordSerializer(many=True)


class FinanceRecordListView(APIView):
    permission_classes = [IsAdminOrManager]

    @extend_schema(
        summary="List finance records (Admin/Manager)",
        parameters=[
            OpenApiParameter(name='type', type=str, required=False, enum=RecordType.values),
            OpenApiParameter(name='category', type=str, required=False, enum=RecordCategory.values),
            OpenApiParameter(name='range', type=str, required=False, enum=RangePreset.values,
                             description='Date range preset (default: all)'),
        ],
        responses={200: FinanceRecordListResponseSerializer},
        tags=["Finance"]
    )
    def get(self, request):
        records = FinanceLedger(get_gateway()).list_records(
            type=request.query_params.get('type'),
            category=request.query_params.get('category'),
        )
        start, end = date_range(request.query_params.get('range', RangePreset.ALL.value))
        records = filter_by_range(records, start, end)
        return Response({'count': len(records), 'results': FinanceRecordSerializer(records, many=True).data})

    @extend_schema(
        summary="Add a finance record (Admin/Manager)",
        request=FinanceRecordSerializer,
        responses={201: FinanceRecordSerializer},
        tags=["Finance"]
    )
    def post(self, request):
        serializer = FinanceRecordSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        data = serializer.validated_data
        record = FinanceLedger(get_gateway()).record(
            data['type'], data['category'], data['amount'], data['description'], date=data.get('date'),
        )
        return Response(FinanceRecordSerializer(record).data, status=status.HTTP_201_CREATED)


class FinanceRecordDetailView(APIView):
    permission_classes = [IsAdminOrManager]

    @extend_schema(summary="Get finance record", responses={200: FinanceRecordSerializer}, tags=["Finance"])
    def get(self, request, record_id):
        record = FinanceLedger(get_gateway()).get_record(record_id)
        return Response(FinanceRecordSerializer(record).data)

    @extend_schema(summary="Update finance record", request=FinanceRecordSerializer,
                   responses={200: FinanceRecordSerializer}, tags=["Finance"])
    def patch(self, request, record_id):
        serializer = FinanceRecordSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        record = FinanceLedger(get_gateway()).update_record(record_id, serializer.validated_data)
        return Response(FinanceRecordSerializer(record).data)

    @extend_schema(summary="Delete finance record", responses={204: None}, tags=["Finance"])
    def delete(self, request, record_id):
        FinanceLedger(get_gateway()).delete_record(record_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class FinanceSummaryView(APIView):
    permission_classes = [IsAdminOrManager]

    @extend_schema(
        summary="Income and expense totals (Admin/Manager)",
        description="Totals over a date range preset. Weeks start on Monday.",
        parameters=[
            OpenApiParameter(name='range', type=str, required=False, enum=RangePreset.values,
                             description='Date range preset (default: all)'),
        ],
        responses={200: FinanceSummarySerializer},
        tags=["Finance"]
    )
    def get(self, request):
        preset = request.query_params.get('range', RangePreset.ALL.value)
        start, end = date_range(preset)
        records = filter_by_range(FinanceLedger(get_gateway()).list_records(), start, end)

        expenses = [r for r in records if r['type'] == RecordType.EXPENSE]
        summary = summarize(records)
        summary.update({
            'range': preset,
            'start': start,
            'end': end,
            'salaries': sum(r['amount'] for r in expenses if r['category'] == RecordCategory.SALARY),
            'maintenance': sum(r['amount'] for r in expenses if r['category'] == RecordCategory.MAINTENANCE),
        })
        return Response(FinanceSummarySerializer(summary).data)


class MonthlyOverviewView(APIView):
    permission_classes = [IsAdminOrManager]

    @extend_schema(
        summary="Monthly income vs. expenses (Admin/Manager)",
        parameters=[
            OpenApiParameter(name='year', type=int, required=False, description='Calendar year (default: current)'),
        ],
        responses={200: MonthlyOverviewRowSerializer(many=True)},
        tags=["Finance"]
    )
    def get(self, request):
        try:
            year = int(request.query_params.get('year', timezone.localdate().year))
        except ValueError:
            return Response({'error': 'Year must be an integer.'}, status=status.HTTP_400_BAD_REQUEST)

        rows = monthly_overview(FinanceLedger(get_gateway()).list_records(), year)
        return Response({'year': year, 'results': MonthlyOverviewRowSerializer(rows, many=True).data})


class DashboardView(APIView):

    @extend_schema(
        summary="Dashboard KPIs",
        description="Revenue, passenger count, fleet status, trips this month and the latest bookings.",
        responses={200: DashboardSerializer},
        tags=["Dashboard"]
    )
    def get(self, request):
        return Response(DashboardSerializer(dashboard_kpis(get_gateway())).data)
