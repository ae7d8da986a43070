import logging

from django.core.exceptions import ValidationError
from django.db.models import Q
from rest_framework import viewsets, mixins, status
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.accounts.roles import MANAGER_ROLES, get_role, get_store_id
from apps.notifications.services import SmsError
from .models import MedicationRequest
from .serializers import MedicationRequestSerializer, MedicationRequestCreateSerializer, RespondSerializer
from . import services

logger = logging.getLogger(__name__)


def _error(exc):
    return Response({"detail": "; ".join(exc.messages)}, status=status.HTTP_400_BAD_REQUEST)


class MedicationRequestViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, mixins.CreateModelMixin,
                               viewsets.GenericViewSet):
    serializer_class = MedicationRequestSerializer
    filter_backends = []

    def get_queryset(self):
        user = self.request.user
        params = self.request.query_params
        qs = MedicationRequest.objects.select_related("from_store", "to_store", "driver")

        if get_role(user) in MANAGER_ROLES:
            store_id = params.get("store_id")
        else:
            store_id = get_store_id(user)
            qs = qs.filter(Q(from_store_id=store_id) | Q(to_store_id=store_id))

        direction = params.get("direction")
        if direction and store_id:
            if direction == "incoming":
                qs = qs.filter(to_store_id=store_id)
            elif direction == "outgoing":
                qs = qs.filter(from_store_id=store_id)
        status_f = params.get("status")
        if status_f:
            qs = qs.filter(status__in=[s.strip() for s in status_f.split(",") if s.strip()])
        return qs.order_by("-created_at")

    def create(self, request, *args, **kwargs):
        serializer = MedicationRequestCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            req = services.create_request(request.user, **serializer.validated_data)
        except ValidationError as e:
            return _error(e)
        return Response(MedicationRequestSerializer(req).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path="respond")
    def respond(self, request, pk=None):
        req = self.get_object()
        serializer = RespondSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            req = services.respond_to_request(request.user, req.id, **serializer.validated_data)
        except ValidationError as e:
            return _error(e)
        return Response(MedicationRequestSerializer(req).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"], url_path="complete")
    def complete(self, request, pk=None):
        req = self.get_object()
        try:
            req = services.complete_request(request.user, req.id)
        except ValidationError as e:
            return _error(e)
        return Response(MedicationRequestSerializer(req).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request, pk=None):
        req = self.get_object()
        try:
            req = services.cancel_request(request.user, req.id)
        except ValidationError as e:
            return _error(e)
        return Response(MedicationRequestSerializer(req).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"], url_path="notify-driver")
    def notify_driver(self, request, pk=None):
        req = self.get_object()
        try:
            res = services.notify_driver(req.id)
        except ValidationError as e:
            return _error(e)
        except services.NoDriverAvailable as e:
            return Response({"detail": str(e)}, status=status.HTTP_404_NOT_FOUND)
        except SmsError as e:
            logger.error("Driver SMS failed for request %s: %s", req.id, e)
            return Response({"detail": str(e)}, status=status.HTTP_502_BAD_GATEWAY)
        return Response(res, status=status.HTTP_200_OK)
