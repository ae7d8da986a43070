from rest_framework import viewsets, mixins, status
from rest_framework.decorators import action
from rest_framework.response import Response

from .serializers import NotificationSerializer
from . import services


class NotificationViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Notifications addressed to the caller or to the caller's store."""
    serializer_class = NotificationSerializer
    filter_backends = []

    def get_queryset(self):
        qs = services.notifications_for(self.request.user).select_related("related_request")
        if str(self.request.query_params.get("unread_only", "")).lower() in ("1", "true", "yes"):
            qs = qs.filter(is_read=False)
        return qs.order_by("-created_at")

    @action(detail=False, methods=["get"], url_path="unread-count")
    def unread_count(self, request):
        return Response({"unread_count": services.unread_count(request.user)})

    @action(detail=True, methods=["post"], url_path="mark-read")
    def mark_read(self, request, pk=None):
        notif = self.get_object()
        if not notif.is_read:
            notif.is_read = True
            notif.save(update_fields=["is_read"])
        return Response(self.get_serializer(notif).data, status=status.HTTP_200_OK)

    @action(detail=False, methods=["post"], url_path="mark-all-read")
    def mark_all_read(self, request):
        updated = services.mark_all_read(request.user)
        return Response({"updated": updated}, status=status.HTTP_200_OK)
