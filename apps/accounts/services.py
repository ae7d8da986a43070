import logging
import secrets
import string

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.mail import send_mail
from django.db import transaction
from rest_framework.exceptions import PermissionDenied, ValidationError

from apps.governance.services import audit
from apps.stores.models import Store
from .models import Profile
from .roles import can_manage_role, get_role

logger = logging.getLogger(__name__)

User = get_user_model()

TEMP_PASSWORD_ALPHABET = string.ascii_lowercase + string.digits


def generate_temp_password() -> str:
    """PharmSync + 8 random lowercase alphanumerics + "!"; users change it on first login."""
    suffix = "".join(secrets.choice(TEMP_PASSWORD_ALPHABET) for _ in range(8))
    return f"PharmSync{suffix}!"


def send_welcome_email(email: str, full_name: str, temp_password: str) -> bool:
    subject = "Welcome to PharmSync - Your Account Details"
    message = (
        f"Hi {full_name},\n\n"
        "Your PharmSync account has been created.\n\n"
        f"Email: {email}\n"
        f"Temporary password: {temp_password}\n\n"
        "You will be required to change your password when you first log in.\n"
        f"Log in at {settings.FRONTEND_LOGIN_URL}\n"
    )
    try:
        send_mail(subject, message, settings.DEFAULT_FROM_EMAIL, [email], fail_silently=False)
    except OSError:
        logger.exception("Welcome email to %s failed", email)
        return False
    return True


def provision_user(actor, *, email: str, full_name: str, role: str, store_id=None):
    """
    Create a login user with its profile and a temporary password.

    Returns (user, temp_password). The user row is rolled back if the profile
    cannot be written.
    """
    email = (email or "").strip().lower()
    full_name = (full_name or "").strip()
    if not email or not full_name or not role:
        raise ValidationError({"detail": "Email, name, and role are required"})
    if role not in Profile.Role.values:
        raise ValidationError({"detail": "Invalid role"})

    actor_role = get_role(actor)
    if not can_manage_role(actor_role, role):
        raise PermissionDenied(f"A {actor_role} cannot create {role} users")

    if User.objects.filter(email__iexact=email).exists() or User.objects.filter(username__iexact=email).exists():
        raise ValidationError({"detail": "A user with this email already exists"})

    store = None
    if store_id:
        store = Store.objects.filter(pk=store_id).first()
        if store is None:
            raise ValidationError({"detail": "Store not found"})

    temp_password = generate_temp_password()
    parts = full_name.split()

    with transaction.atomic():
        user = User.objects.create_user(
            username=email,
            email=email,
            password=temp_password,
            first_name=parts[0] if parts else "",
            last_name=" ".join(parts[1:]),
        )
        Profile.objects.create(
            user=user,
            full_name=full_name,
            role=role,
            store=store,
            must_change_password=True,
            created_by=actor if getattr(actor, "pk", None) else None,
        )
        audit(actor, "profiles", user.id, "CREATE_USER", after={"email": email, "role": role, "store_id": store_id})

    logger.info("User %s created with role %s", email, role)
    send_welcome_email(email, full_name, temp_password)
    return user, temp_password
