from django.conf import settings
from django.db import models
from django.utils import timezone


class Notification(models.Model):
    class Type(models.TextChoices):
        REQUEST_RECEIVED = "request_received", "Request Received"
        REQUEST_ACCEPTED = "request_accepted", "Request Accepted"
        REQUEST_DECLINED = "request_declined", "Request Declined"
        COUNTER_OFFER = "counter_offer", "Counter Offer"
        REQUEST_COMPLETED = "request_completed", "Request Completed"
        REQUEST_CANCELLED = "request_cancelled", "Request Cancelled"
        DRIVER_NOTIFIED = "driver_notified", "Driver Notified"
        INVENTORY_UPDATED = "inventory_updated", "Inventory Updated"
        SYSTEM = "system", "System"

    class DeliveryMethod(models.TextChoices):
        EMAIL = "email", "Email"
        POPUP = "popup", "Popup"
        SMS = "sms", "SMS"
        BOTH = "both", "Email and Popup"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, null=True, blank=True, related_name="notifications"
    )
    store = models.ForeignKey(
        "stores.Store", on_delete=models.CASCADE, null=True, blank=True, related_name="notifications"
    )
    type = models.CharField(max_length=32, choices=Type.choices, default=Type.SYSTEM)
    title = models.CharField(max_length=255)
    message = models.TextField()
    data = models.JSONField(blank=True, null=True)
    delivery_method = models.CharField(max_length=8, choices=DeliveryMethod.choices, default=DeliveryMethod.POPUP)
    related_request = models.ForeignKey(
        "transfers.MedicationRequest", on_delete=models.SET_NULL, null=True, blank=True, related_name="notifications"
    )
    is_read = models.BooleanField(default=False, db_index=True)
    is_sent = models.BooleanField(default=False)
    sent_at = models.DateTimeField(null=True, blank=True)
    error = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        indexes = [
            models.Index(fields=["user", "is_read", "created_at"], name="idx_notif_user_read"),
            models.Index(fields=["store", "is_read", "created_at"], name="idx_notif_store_read"),
        ]
        ordering = ["-created_at"]

    def __str__(self):
        target = f"user {self.user_id}" if self.user_id else f"store {self.store_id}"
        return f"{self.type} -> {target}"
