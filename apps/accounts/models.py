from django.conf import settings
from django.db import models


class Profile(models.Model):
    class Role(models.TextChoices):
        ASSOCIATE = "associate", "Associate"
        ADMIN = "admin", "Admin"
        REGULAR = "regular", "Regular"
        DRIVER = "driver", "Driver"

    class NotificationMethod(models.TextChoices):
        EMAIL = "email", "Email"
        POPUP = "popup", "Popup"
        BOTH = "both", "Both"
        NONE = "none", "None"

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
    )
    full_name = models.CharField(max_length=200, blank=True)
    phone = models.CharField(max_length=32, blank=True, null=True)
    role = models.CharField(max_length=16, choices=Role.choices, default=Role.REGULAR, db_index=True)
    store = models.ForeignKey(
        "stores.Store",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="profiles",
    )
    notification_preference = models.CharField(
        max_length=8, choices=NotificationMethod.choices, default=NotificationMethod.POPUP
    )
    must_change_password = models.BooleanField(default=False)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_profiles",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.user.email or self.user.get_username()} ({self.role})"
