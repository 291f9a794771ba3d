"""
URL configuration for staff accounts.
"""
from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from .views import LoginView, StaffAccountDetailView, StaffAccountListView, UserProfileView

urlpatterns = [
    path('login/', LoginView.as_view(), name='login'),
    path('token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('profile/', UserProfileView.as_view(), name='profile'),
    path('users/', StaffAccountListView.as_view(), name='staff_account_list'),
    path('users/<int:user_id>/', StaffAccountDetailView.as_view(), name='staff_account_detail'),
]
