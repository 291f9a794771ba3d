"""
URL configuration for busops_backend project.
"""
from django.contrib import admin
from django.urls import path, include
from django.http import JsonResponse
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView, SpectacularRedocView

from finance.views import DashboardView


def api_root(request):
    """Root API endpoint showing available endpoints."""
    return JsonResponse({
        'message': 'Welcome to the Bus Operations API',
        'version': '1.0',
        'documentation': {
            'swagger_ui': '/api/docs/',
            'redoc': '/api/docs/redoc/',
            'openapi_schema': '/api/schema/',
        },
        'endpoints': {
            'auth': '/api/login/, /api/token/refresh/, /api/profile/, /api/users/',
            'fleet': '/api/buses/, /api/trips/, /api/trips/<id>/seats/',
            'staff': '/api/employees/, /api/employees/payroll-due/',
            'bookings': '/api/bookings/',
            'finance': '/api/finance/records/, /api/finance/summary/, /api/finance/overview/',
            'dashboard': '/api/dashboard/',
        }
    })


urlpatterns = [
    path('', api_root, name='api_root'),
    path('admin/', admin.site.urls),

    # API Documentation (Swagger UI)
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('api/docs/redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),

    # API Endpoints
    path('api/', include('core.urls')),
    path('api/', include('fleet.urls')),
    path('api/employees/', include('staff.urls')),
    path('api/bookings/', include('bookings.urls')),
    path('api/finance/', include('finance.urls')),
    path('api/dashboard/', DashboardView.as_view(), name='dashboard'),
]
