from django.contrib import admin
from .models import AuditLog, RequestLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("id", "actor_user", "action", "table_name", "record_id", "created_at")
    list_filter = ("action", "table_name")


@admin.register(RequestLog)
class RequestLogAdmin(admin.ModelAdmin):
    list_display = ("id", "method", "path", "status_code", "user", "created_at", "expires_at")
    list_filter = ("method", "status_code")
