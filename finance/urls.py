"""
URL configuration for finance app.
"""
from django.urls import path
from .views import (
    FinanceRecordDetailView, FinanceRecordListView, FinanceSummaryView, MonthlyOverviewView,
)

urlpatterns = [
    path('records/', FinanceRecordListView.as_view(), name='finance_record_list'),
    path('records/<str:record_id>/', FinanceRecordDetailView.as_view(), name='finance_record_detail'),
    path('summary/', FinanceSummaryView.as_view(), name='finance_summary'),
    path('overview/', MonthlyOverviewView.as_view(), name='finance_overview'),
]
