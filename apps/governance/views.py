from rest_framework import serializers, status, permissions
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.accounts.permissions import IsManager
from .permissions import IsManagerOrCron
from .models import AuditLog
from . import services


class HealthView(APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        return Response({"ok": True})


class AuditLogListSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    actor_user_id = serializers.IntegerField(allow_null=True)
    action = serializers.CharField()
    table_name = serializers.CharField()
    record_id = serializers.CharField()
    created_at = serializers.DateTimeField()


class AuditLogListView(APIView):
    permission_classes = [IsManager]

    def get(self, request):
        qs = AuditLog.objects.all()
        table = request.query_params.get("table")
        record_id = request.query_params.get("record_id")
        if table:
            qs = qs.filter(table_name=table)
        if record_id:
            qs = qs.filter(record_id=str(record_id))
        data = list(
            qs.order_by("-created_at").values(
                "id", "actor_user_id", "action", "table_name", "record_id", "created_at"
            )[:500]
        )
        return Response(AuditLogListSerializer(data, many=True).data)


class LogsCleanupView(APIView):
    """Remove expired request logs; called by a scheduler or a manager."""
    permission_classes = [IsManagerOrCron]

    def post(self, request):
        deleted = services.cleanup_expired_request_logs()
        return Response({"success": True, "deleted_count": deleted}, status=status.HTTP_200_OK)


class LogStatsView(APIView):
    permission_classes = [IsManagerOrCron]

    def get(self, request):
        return Response(services.request_log_stats())
