from django.contrib import admin
from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("id", "type", "user", "store", "delivery_method", "is_read", "is_sent", "created_at")
    list_filter = ("type", "delivery_method", "is_read", "is_sent")
