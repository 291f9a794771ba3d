"""Views for employee records and payroll."""
from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiExample
from rest_framework import serializers as drf_serializers

from core.permissions import IsAdminOrManager, IsManagerOrReadOnly
from utils.mongo import get_gateway
from .models import EmployeeRole
from .payroll import PayrollService
from .serializers import EmployeeSerializer
from .services import EmployeeService


class EmployeeListResponseSerializer(drf_serializers.Serializer):
    count = drf_serializers.IntegerField()
    results = EmployeeSerializer(many=True)


class EmployeeListView(APIView):
    permission_classes = [IsManagerOrReadOnly]

    @extend_schema(
        summary="List employees",
        parameters=[
            OpenApiParameter(name='role', type=str, required=False, enum=EmployeeRole.values,
                             description='Filter by role'),
        ],
        responses={200: EmployeeListResponseSerializer},
        tags=["Staff"]
    )
    def get(self, request):
        employees = EmployeeService(get_gateway()).list_employees(request.query_params.get('role'))
        return Response({'count': len(employees), 'results': EmployeeSerializer(employees, many=True).data})

    @extend_schema(
        summary="Add an employee (Admin/Manager)",
        request=EmployeeSerializer,
        responses={201: EmployeeSerializer},
        examples=[
            OpenApiExample(
                "Create Driver",
                value={
                    "full_name": "Marta Keller",
                    "role": "Driver",
                    "contact_info": "marta.keller@example.com",
                    "salary": 3200,
                    "salary_payday": 25
                },
                request_only=True
            )
        ],
        tags=["Staff"]
    )
    def post(self, request):
        serializer = EmployeeSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        employee = EmployeeService(get_gateway()).create_employee(serializer.validated_data)
        return Response(EmployeeSerializer(employee).data, status=status.HTTP_201_CREATED)


class EmployeeDetailView(APIView):
    permission_classes = [IsManagerOrReadOnly]

    @extend_schema(summary="Get employee", responses={200: EmployeeSerializer}, tags=["Staff"])
    def get(self, request, employee_id):
        employee = EmployeeService(get_gateway()).get_employee(employee_id)
        return Response(EmployeeSerializer(employee).data)

    @extend_schema(summary="Update employee (Admin/Manager)", request=EmployeeSerializer,
                   responses={200: EmployeeSerializer}, tags=["Staff"])
    def patch(self, request, employee_id):
        serializer = EmployeeSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        employee = EmployeeService(get_gateway()).update_employee(employee_id, serializer.validated_data)
        return Response(EmployeeSerializer(employee).data)

    @extend_schema(summary="Delete employee (Admin/Manager)", responses={204: None}, tags=["Staff"])
    def delete(self, request, employee_id):
        EmployeeService(get_gateway()).delete_employee(employee_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class PayrollDueView(APIView):
    permission_classes = [IsAdminOrManager]

    @extend_schema(
        summary="Employees due for salary (Admin/Manager)",
        description="Employees whose payday has been reached this month and who have not been paid this month.",
        responses={200: EmployeeListResponseSerializer},
        tags=["Staff"]
    )
    def get(self, request):
        due = PayrollService(get_gateway()).due_now()
        return Response({'count': len(due), 'results': EmployeeSerializer(due, many=True).data})


class MarkPaidView(APIView):
    permission_classes = [IsAdminOrManager]

    @extend_schema(
        summary="Mark salary as paid (Admin/Manager)",
        description="Stamps the payment date and records the salary as an expense.",
        request=None,
        responses={200: EmployeeSerializer},
        tags=["Staff"]
    )
    def post(self, request, employee_id):
        employee = PayrollService(get_gateway()).mark_paid(employee_id)
        return Response(EmployeeSerializer(employee).data)
