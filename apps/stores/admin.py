from django.contrib import admin
from .models import Store, Driver


@admin.register(Store)
class StoreAdmin(admin.ModelAdmin):
    list_display = ("id", "code", "name", "phone")
    search_fields = ("code", "name")


@admin.register(Driver)
class DriverAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "store", "phone", "is_available", "shift_status")
    list_filter = ("shift_status", "is_available")
    search_fields = ("name", "phone")
