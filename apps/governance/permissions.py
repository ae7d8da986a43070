import hmac

from django.conf import settings
from rest_framework.permissions import BasePermission

from apps.accounts.roles import get_role, MANAGER_ROLES


class IsManagerOrCron(BasePermission):
    """Managers, or a scheduler presenting the X-Cron-Secret header."""

    def has_permission(self, request, view):
        secret = settings.CRON_SECRET
        supplied = request.headers.get("X-Cron-Secret") or ""
        if secret and hmac.compare_digest(supplied, secret):
            return True
        return get_role(request.user) in MANAGER_ROLES
