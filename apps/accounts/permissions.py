from rest_framework.permissions import BasePermission, SAFE_METHODS

from .roles import get_role, MANAGER_ROLES


class IsManager(BasePermission):
    """Associates, admins and superusers."""
    message = "Insufficient permissions"

    def has_permission(self, request, view):
        return get_role(request.user) in MANAGER_ROLES


class IsManagerOrReadOnly(IsManager):
    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return bool(request.user and request.user.is_authenticated)
        return super().has_permission(request, view)
