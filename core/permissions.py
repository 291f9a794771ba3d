"""Role-based permissions for the back-office API."""
from rest_framework.permissions import SAFE_METHODS, BasePermission


class IsAdminOrManager(BasePermission):
    """Only Admin and Manager users may change data."""
    message = 'Admin or Manager role required.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_manager)


class IsManagerOrReadOnly(BasePermission):
    """Any staff user may read; writes need the Admin or Manager role."""
    message = 'Admin or Manager role required to modify this resource.'

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        return request.method in SAFE_METHODS or user.is_manager


class IsAdmin(BasePermission):
    """Account administration is limited to the Admin role."""
    message = 'Admin role required.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.role == user.Role.ADMIN)
