"""
URL configuration for bookings app.
"""
from django.urls import path
from .views import BookingDetailView, BookingListView

urlpatterns = [
    path('', BookingListView.as_view(), name='booking_list'),
    path('<str:booking_id>/', BookingDetailView.as_view(), name='booking_detail'),
]
