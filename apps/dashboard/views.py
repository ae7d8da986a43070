from __future__ import annotations

import logging

from dateutil.relativedelta import relativedelta
from django.utils import timezone
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_spectacular.utils import extend_schema, OpenApiTypes, OpenApiParameter

from apps.accounts.roles import can_view_costs, get_role
from apps.inventory import services as inventory_services
from apps.inventory.services_duplicates import get_true_duplicate_keys
from apps.notifications.services import unread_count
from apps.stores.models import Store
from apps.transfers.models import MedicationRequest
from core.utils.fetch_all import INVENTORY_TABLE, FetchFilter, FetchOrder, TableSource, fetch_all_rows

logger = logging.getLogger(__name__)

SUMMARY_COLUMNS = ["description", "manufacturer_code", "total_quantity", "cost", "days_aging"]


class BaseDashboardView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def _resolve_store_id(self, request) -> int | None:
        raw = request.query_params.get("store_id")
        requested = None
        if raw:
            try:
                requested = int(raw)
            except (TypeError, ValueError):
                raise ValueError("store_id must be an integer")
        return inventory_services.scoped_store_id(request.user, requested)


class DashboardSummaryView(BaseDashboardView):
    @extend_schema(
        tags=["Dashboard"],
        summary="Dashboard summary metrics",
        parameters=[
            OpenApiParameter(
                "store_id",
                OpenApiTypes.INT,
                OpenApiParameter.QUERY,
                description="Optional store context (managers only)",
            )
        ],
        responses={200: OpenApiTypes.OBJECT, 400: OpenApiTypes.OBJECT},
    )
    def get(self, request):
        try:
            store_id = self._resolve_store_id(request)
        except ValueError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        store = Store.objects.filter(id=store_id).first() if store_id else None

        filters = [FetchFilter("store_id", "eq", store_id)] if store_id else []
        rows, error = fetch_all_rows(
            TableSource(), INVENTORY_TABLE, select=SUMMARY_COLUMNS, filters=filters, order=FetchOrder("id")
        )
        warnings = []
        if error is not None:
            logger.warning("Dashboard inventory is partial (%s rows): %s", len(rows), error)
            warnings.append("Inventory figures may be incomplete, try again")

        inventory = {
            "item_count": len(rows),
            "total_quantity": sum(r.get("total_quantity") or 0 for r in rows),
            "aging_items": sum(
                1 for r in rows
                if r.get("days_aging") is not None and r["days_aging"] >= inventory_services.AGING_THRESHOLD_DAYS
            ),
            "true_duplicate_groups": len(get_true_duplicate_keys(rows)),
        }
        if can_view_costs(get_role(request.user)):
            inventory["total_value"] = sum(float((r.get("total_quantity") or 0) * (r.get("cost") or 0)) for r in rows)

        data = {
            "store": {"id": store.id, "name": store.name, "code": store.code} if store else None,
            "inventory": inventory,
            "requests": self._request_counts(store_id),
            "unread_notifications": unread_count(request.user),
            "recent_requests": self._recent_requests(store_id, limit=5),
            "warnings": warnings,
        }
        return Response(data)

    def _request_counts(self, store_id: int | None) -> dict:
        qs = MedicationRequest.objects.all()
        pending = qs.filter(status=MedicationRequest.Status.PENDING)
        month_ago = timezone.now() - relativedelta(months=1)
        completed = qs.filter(status=MedicationRequest.Status.COMPLETED, updated_at__gte=month_ago)
        if store_id:
            return {
                "pending_incoming": pending.filter(to_store_id=store_id).count(),
                "pending_outgoing": pending.filter(from_store_id=store_id).count(),
                "completed_last_month": completed.filter(to_store_id=store_id).count()
                + completed.filter(from_store_id=store_id).count(),
            }
        return {
            "pending_incoming": pending.count(),
            "pending_outgoing": pending.count(),
            "completed_last_month": completed.count(),
        }

    def _recent_requests(self, store_id: int | None, limit: int):
        qs = MedicationRequest.objects.select_related("from_store", "to_store")
        if store_id:
            qs = qs.filter(from_store_id=store_id) | qs.filter(to_store_id=store_id)
        rows = []
        for req in qs.order_by("-created_at")[:limit]:
            rows.append(
                {
                    "id": req.id,
                    "medication_name": req.medication_name,
                    "from_store": req.from_store.name,
                    "to_store": req.to_store.name,
                    "quantity": req.quantity,
                    "status": req.status,
                    "urgency": req.urgency,
                    "created_at": req.created_at,
                }
            )
        return rows
