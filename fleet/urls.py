"""
URL configuration for fleet app.
"""
from django.urls import path
from .views import BusDetailView, BusListView, TripDetailView, TripListView, TripSeatsView

urlpatterns = [
    path('buses/', BusListView.as_view(), name='bus_list'),
    path('buses/<str:bus_id>/', BusDetailView.as_view(), name='bus_detail'),
    path('trips/', TripListView.as_view(), name='trip_list'),
    path('trips/<str:trip_id>/', TripDetailView.as_view(), name='trip_detail'),
    path('trips/<str:trip_id>/seats/', TripSeatsView.as_view(), name='trip_seats'),
]
