from django.conf import settings
from django.db import models


class Store(models.Model):
    name = models.CharField(max_length=200)
    code = models.CharField(max_length=32, unique=True)
    address = models.TextField(blank=True, null=True)
    phone = models.CharField(max_length=32, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return f"{self.code} - {self.name}"


class Driver(models.Model):
    class ShiftStatus(models.TextChoices):
        ON_DUTY = "on_duty", "On Duty"
        OFF_DUTY = "off_duty", "Off Duty"
        ON_DELIVERY = "on_delivery", "On Delivery"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="driver_records",
    )
    store = models.ForeignKey(Store, on_delete=models.CASCADE, related_name="drivers")
    name = models.CharField(max_length=200)
    phone = models.CharField(max_length=32)
    is_available = models.BooleanField(default=True)
    shift_status = models.CharField(
        max_length=16, choices=ShiftStatus.choices, default=ShiftStatus.OFF_DUTY, db_index=True
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["store", "is_available", "shift_status"], name="idx_driver_store_avail"),
        ]
        ordering = ["name"]

    def __str__(self) -> str:
        return f"{self.name} ({self.store.code})"
