from django.contrib import admin
from .models import MedicationRequest


@admin.register(MedicationRequest)
class MedicationRequestAdmin(admin.ModelAdmin):
    list_display = ("id", "from_store", "to_store", "medication_name", "requested_quantity", "status", "urgency", "created_at")
    list_filter = ("status", "urgency")
    search_fields = ("medication_name", "din_number")
