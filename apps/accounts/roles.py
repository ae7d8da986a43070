"""Role rules shared by views, permissions and services."""
from .models import Profile

Role = Profile.Role

ROLE_HIERARCHY = {
    Role.ASSOCIATE.value: 4,
    Role.ADMIN.value: 3,
    Role.REGULAR.value: 2,
    Role.DRIVER.value: 1,
}

MANAGER_ROLES = {Role.ASSOCIATE.value, Role.ADMIN.value}


def get_profile(user):
    if not user or not getattr(user, "is_authenticated", False):
        return None
    try:
        return user.profile
    except Profile.DoesNotExist:
        return None


def get_role(user) -> str | None:
    """Superusers act as associates; users without a profile as regular."""
    if not user or not getattr(user, "is_authenticated", False):
        return None
    if getattr(user, "is_superuser", False):
        return Role.ASSOCIATE.value
    profile = get_profile(user)
    return str(profile.role) if profile else Role.REGULAR.value


def get_store_id(user):
    profile = get_profile(user)
    return profile.store_id if profile else None


def can_manage_role(manager_role, target_role) -> bool:
    """Managers may manage roles at or below their own level."""
    manager_role, target_role = str(manager_role), str(target_role)
    if manager_role not in MANAGER_ROLES or target_role not in ROLE_HIERARCHY:
        return False
    return ROLE_HIERARCHY[target_role] <= ROLE_HIERARCHY[manager_role]


def can_view_costs(role) -> bool:
    return role in MANAGER_ROLES
