from django.urls import path
from .views import HealthView, AuditLogListView, LogsCleanupView, LogStatsView


urlpatterns = [
    path('', HealthView.as_view(), name='governance-root'),
    path('audit-logs/', AuditLogListView.as_view(), name='audit-logs'),
    path('logs/cleanup/', LogsCleanupView.as_view(), name='logs-cleanup'),
    path('logs/stats/', LogStatsView.as_view(), name='logs-stats'),
]
