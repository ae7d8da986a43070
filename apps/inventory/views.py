import logging

from drf_spectacular.utils import extend_schema, OpenApiTypes, OpenApiParameter
from rest_framework import permissions
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.accounts.permissions import IsManager
from core.utils.fetch_all import FetchError, TableSource, fetch_all_inventory_items
from .serializers import AgingMatchesQuerySerializer, InventoryUnavailable
from . import services

logger = logging.getLogger(__name__)


class HealthView(APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        return Response({"ok": True})


def _load_items(store_id):
    try:
        return fetch_all_inventory_items(TableSource(), store_id=store_id)
    except FetchError as exc:
        logger.error("Inventory load failed for store %s: %s", store_id, exc)
        raise InventoryUnavailable()


class InventoryItemsView(APIView):
    @extend_schema(
        tags=["Inventory"],
        summary="All inventory items, filtered in memory",
        parameters=[
            OpenApiParameter("store_id", OpenApiTypes.INT, OpenApiParameter.QUERY),
            OpenApiParameter("search", OpenApiTypes.STR, OpenApiParameter.QUERY),
            OpenApiParameter("marketing_status", OpenApiTypes.STR, OpenApiParameter.QUERY, description="comma separated"),
            OpenApiParameter("order_control", OpenApiTypes.STR, OpenApiParameter.QUERY, description="comma separated"),
            OpenApiParameter("min_days_aging", OpenApiTypes.INT, OpenApiParameter.QUERY),
            OpenApiParameter("max_days_aging", OpenApiTypes.INT, OpenApiParameter.QUERY),
            OpenApiParameter("min_quantity", OpenApiTypes.INT, OpenApiParameter.QUERY),
            OpenApiParameter("max_quantity", OpenApiTypes.INT, OpenApiParameter.QUERY),
            OpenApiParameter("duplicates_only", OpenApiTypes.BOOL, OpenApiParameter.QUERY),
            OpenApiParameter("ordering", OpenApiTypes.STR, OpenApiParameter.QUERY, description="field or -field"),
        ],
        responses={200: OpenApiTypes.OBJECT, 503: OpenApiTypes.OBJECT},
    )
    def get(self, request):
        params = request.query_params
        store_id = services.scoped_store_id(request.user, services.int_param(params, "store_id"))
        rows = _load_items(store_id)
        total = len(rows)
        services.mark_duplicates(rows)
        rows = services.filter_inventory_rows(rows, params)
        rows = services.sort_inventory_rows(rows, params.get("ordering"))
        services.strip_costs(rows, request.user)
        return Response({"count": len(rows), "total": total, "results": rows})


class DuplicatesView(APIView):
    @extend_schema(
        tags=["Inventory"],
        summary="Items grouped by chemical and strength",
        parameters=[
            OpenApiParameter("store_id", OpenApiTypes.INT, OpenApiParameter.QUERY),
            OpenApiParameter("true_only", OpenApiTypes.BOOL, OpenApiParameter.QUERY),
        ],
        responses={200: OpenApiTypes.OBJECT, 503: OpenApiTypes.OBJECT},
    )
    def get(self, request):
        params = request.query_params
        store_id = services.scoped_store_id(request.user, services.int_param(params, "store_id"))
        rows = services.strip_costs(_load_items(store_id), request.user)
        true_only = str(params.get("true_only", "")).lower() in ("1", "true", "yes")
        groups = services.duplicate_groups_payload(rows, true_only=true_only)
        return Response({
            "group_count": len(groups),
            "true_duplicate_count": sum(1 for g in groups if g["is_true_duplicate"]),
            "groups": groups,
        })


class AgingAnalyticsView(APIView):
    @extend_schema(
        tags=["Inventory"],
        summary="Aging brackets, store summaries and recommendations",
        parameters=[OpenApiParameter("store_id", OpenApiTypes.INT, OpenApiParameter.QUERY)],
        responses={200: OpenApiTypes.OBJECT, 503: OpenApiTypes.OBJECT},
    )
    def get(self, request):
        store_id = services.scoped_store_id(request.user, services.int_param(request.query_params, "store_id"))
        try:
            data = services.aging_analytics(TableSource(), store_id=store_id)
        except FetchError as exc:
            logger.error("Aging analytics failed: %s", exc)
            raise InventoryUnavailable()
        return Response(data)


class AgingMatchesView(APIView):
    permission_classes = [IsManager]

    @extend_schema(
        tags=["Inventory"],
        summary="Transfer suggestions for aging stock",
        parameters=[
            OpenApiParameter("min_aging_days", OpenApiTypes.INT, OpenApiParameter.QUERY),
            OpenApiParameter("max_transfer_quantity", OpenApiTypes.INT, OpenApiParameter.QUERY),
        ],
        responses={200: OpenApiTypes.OBJECT, 403: OpenApiTypes.OBJECT, 503: OpenApiTypes.OBJECT},
    )
    def get(self, request):
        query = AgingMatchesQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        try:
            data = services.aging_matches(TableSource(), **query.validated_data)
        except FetchError as exc:
            logger.error("Aging matcher failed: %s", exc)
            raise InventoryUnavailable()
        return Response(data)
