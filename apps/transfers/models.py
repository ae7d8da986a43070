from django.conf import settings
from django.db import models


class MedicationRequest(models.Model):
    """A store asking another store for stock of one medication."""

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        ACCEPTED = "accepted", "Accepted"
        DECLINED = "declined", "Declined"
        COUNTER_OFFER = "counter_offer", "Counter Offer"
        COMPLETED = "completed", "Completed"
        CANCELLED = "cancelled", "Cancelled"

    class Urgency(models.TextChoices):
        LOW = "low", "Low"
        MEDIUM = "medium", "Medium"
        HIGH = "high", "High"
        CRITICAL = "critical", "Critical"

    # requesting store
    from_store = models.ForeignKey(
        'stores.Store',
        on_delete=models.PROTECT,
        related_name='outgoing_requests'
    )
    # supplying store
    to_store = models.ForeignKey(
        'stores.Store',
        on_delete=models.PROTECT,
        related_name='incoming_requests'
    )
    din_number = models.CharField(max_length=32)
    upc = models.CharField(max_length=32, blank=True, null=True)
    medication_name = models.CharField(max_length=512)
    requested_quantity = models.PositiveIntegerField()
    offered_quantity = models.PositiveIntegerField(null=True, blank=True)

    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True
    )
    urgency = models.CharField(max_length=8, choices=Urgency.choices, default=Urgency.MEDIUM)

    driver = models.ForeignKey(
        'stores.Driver',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='pickups'
    )
    message = models.TextField(blank=True, null=True)
    response_message = models.TextField(blank=True, null=True)
    requested_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='medication_requests'
    )
    responded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='responded_medication_requests'
    )
    driver_notified_at = models.DateTimeField(null=True, blank=True)
    driver_confirmed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['status', 'created_at'], name='idx_medreq_status_created'),
            models.Index(fields=['to_store', 'status'], name='idx_medreq_to_status'),
            models.Index(fields=['from_store', 'status'], name='idx_medreq_from_status'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"Request {self.pk} {self.from_store_id} <- {self.to_store_id}: {self.medication_name}"

    @property
    def quantity(self) -> int:
        return self.offered_quantity or self.requested_quantity
