from django.contrib import admin
from .models import InventoryItem


@admin.register(InventoryItem)
class InventoryItemAdmin(admin.ModelAdmin):
    list_display = ("id", "store", "item_code", "din_number", "description", "total_quantity", "days_aging")
    list_filter = ("store", "marketing_status", "order_control")
    search_fields = ("description", "din_number", "upc", "item_code")
