"""
URL configuration for staff app.
"""
from django.urls import path
from .views import EmployeeDetailView, EmployeeListView, MarkPaidView, PayrollDueView

urlpatterns = [
    path('', EmployeeListView.as_view(), name='employee_list'),
    path('payroll-due/', PayrollDueView.as_view(), name='payroll_due'),
    path('<str:employee_id>/', EmployeeDetailView.as_view(), name='employee_detail'),
    path('<str:employee_id>/mark-paid/', MarkPaidView.as_view(), name='employee_mark_paid'),
]
