from __future__ import annotations

import logging
from datetime import timedelta
from decimal import Decimal

from django.db.models import Sum, Count
from django.db.models.functions import Coalesce
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from apps.accounts.roles import MANAGER_ROLES, can_view_costs, get_role, get_store_id
from core.utils.fetch_all import INVENTORY_TABLE, FetchFilter, FetchOrder, fetch_all_or_raise
from .services_duplicates import find_duplicate_groups, get_duplicate_key, get_true_duplicate_keys

logger = logging.getLogger(__name__)

AGING_THRESHOLD_DAYS = 180
CRITICAL_AGING_DAYS = 271
HIGH_RISK_AGING_DAYS = 181
MEDIUM_RISK_AGING_DAYS = 91

# (label, min_days, max_days); first match wins
AGING_BRACKETS = [
    ("0-30 days", 0, 30),
    ("31-90 days", 31, 90),
    ("91-180 days", 91, 180),
    ("181-270 days", 181, 270),
    ("271-365 days", 271, 365),
    ("365+ days", 365, None),
]

COST_FIELDS = ("cost",)

SEARCH_FIELDS = ("description", "item_code", "manufacturer_code", "din_number", "upc")

SORTABLE_FIELDS = {
    "description", "item_code", "din_number", "manufacturer_code", "marketing_status",
    "order_control", "on_hand", "backroom_stock", "total_quantity", "cost", "days_aging",
    "report_date",
}


def int_param(params, name: str, default: int | None = None) -> int | None:
    raw = params.get(name)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationError({"detail": f"{name} must be an integer"})


def list_param(params, name: str) -> list[str]:
    """Repeated (?x=a&x=b) or comma separated (?x=a,b) values."""
    values = params.getlist(name) if hasattr(params, "getlist") else [params.get(name) or ""]
    out = []
    for value in values:
        out.extend(v.strip() for v in (value or "").split(",") if v.strip())
    return out


def scoped_store_id(user, requested=None):
    """Non-managers only ever see their own store."""
    if get_role(user) in MANAGER_ROLES:
        return requested or None
    return get_store_id(user)


def strip_costs(rows: list[dict], user) -> list[dict]:
    if can_view_costs(get_role(user)):
        return rows
    for row in rows:
        for name in COST_FIELDS:
            row.pop(name, None)
    return rows


def mark_duplicates(rows: list[dict]) -> set[str]:
    keys = get_true_duplicate_keys(rows)
    for row in rows:
        row["is_duplicate"] = get_duplicate_key(row.get("description")) in keys
    return keys


def filter_inventory_rows(rows: list[dict], params) -> list[dict]:
    search = (params.get("search") or "").strip().lower()
    marketing = set(list_param(params, "marketing_status"))
    order_control = set(list_param(params, "order_control"))
    min_aging = int_param(params, "min_days_aging")
    max_aging = int_param(params, "max_days_aging")
    min_qty = int_param(params, "min_quantity")
    max_qty = int_param(params, "max_quantity")
    duplicates_only = str(params.get("duplicates_only", "")).lower() in ("1", "true", "yes")

    out = []
    for row in rows:
        if search and not any(search in str(row.get(f) or "").lower() for f in SEARCH_FIELDS):
            continue
        if marketing and row.get("marketing_status") not in marketing:
            continue
        if order_control and row.get("order_control") not in order_control:
            continue
        aging = row.get("days_aging")
        if min_aging is not None and (aging is None or aging < min_aging):
            continue
        if max_aging is not None and (aging is None or aging > max_aging):
            continue
        qty = row.get("total_quantity") or 0
        if min_qty is not None and qty < min_qty:
            continue
        if max_qty is not None and qty > max_qty:
            continue
        if duplicates_only and not row.get("is_duplicate"):
            continue
        out.append(row)
    return out


def sort_inventory_rows(rows: list[dict], ordering: str | None) -> list[dict]:
    """Sort by ``field`` or ``-field``; empty values always sort last."""
    if not ordering:
        return rows
    field = ordering.lstrip("-")
    if field not in SORTABLE_FIELDS:
        raise ValidationError({"detail": f"Cannot sort by {field}"})
    reverse = ordering.startswith("-")
    present = [r for r in rows if r.get(field) is not None]
    missing = [r for r in rows if r.get(field) is None]
    present.sort(key=lambda r: r[field], reverse=reverse)
    return present + missing


def duplicate_groups_payload(rows: list[dict], true_only: bool = False) -> list[dict]:
    out = []
    for key, group in find_duplicate_groups(rows).items():
        if true_only and not group.is_true_duplicate:
            continue
        chemical, strength = key.split("|", 1)
        out.append({
            "key": key,
            "chemical": chemical,
            "strength": strength,
            "count": group.count,
            "manufacturer_codes": sorted(c for c in group.mfr_codes if c is not None),
            "is_true_duplicate": group.is_true_duplicate,
            "items": group.items,
        })
    return out


def _value(row) -> float:
    return float((row.get("total_quantity") or 0) * (row.get("cost") or Decimal("0")))


def _recommendations(total_aging_value: float, summaries: list[dict]) -> list[dict]:
    recs = []
    if total_aging_value > 50000:
        recs.append({
            "priority": "high",
            "message": f"Critical: ${total_aging_value:.2f} in aging inventory (>180 days). Immediate action required.",
        })
    critical = [s for s in summaries if s["critical_items"] > 10]
    if critical:
        names = ", ".join(s["store_name"] for s in critical[:3])
        recs.append({
            "priority": "high",
            "message": f"{len(critical)} stores have 10+ items aging >270 days. Focus on: {names}",
        })
    if summaries and summaries[0]["total_aging_value"] > 10000:
        top = summaries[0]
        recs.append({
            "priority": "medium",
            "message": f"{top['store_name']} has the highest aging value: ${top['total_aging_value']:.2f}",
        })
    return recs


def transfer_metrics(days: int = 30) -> dict:
    from apps.transfers.models import MedicationRequest

    since = timezone.now() - timedelta(days=days)
    agg = (
        MedicationRequest.objects.filter(created_at__gte=since, status=MedicationRequest.Status.COMPLETED)
        .aggregate(
            completed=Count("id"),
            units=Sum(Coalesce("offered_quantity", "requested_quantity")),
        )
    )
    return {
        "completed_transfers": agg["completed"] or 0,
        "total_units_transferred": agg["units"] or 0,
        "period": f"{days} days",
    }


def aging_analytics(source, store_id=None) -> dict:
    """Aging brackets, per-store aging summaries and recommendations for stocked items."""
    filters = [FetchFilter("total_quantity", "gt", 0)]
    if store_id:
        filters.append(FetchFilter("store_id", "eq", store_id))
    rows = fetch_all_or_raise(
        source,
        INVENTORY_TABLE,
        select=["id", "store_id", "din_number", "description", "total_quantity", "cost", "days_aging", "store__name"],
        filters=filters,
        order=FetchOrder("id"),
    )

    brackets = [
        {"range": label, "min_days": lo, "max_days": hi,
         "item_count": 0, "total_quantity": 0, "total_value": 0.0, "percentage": 0.0}
        for label, lo, hi in AGING_BRACKETS
    ]
    summaries: dict = {}
    total_value = 0.0
    aging_value = 0.0
    with_aging = 0

    for row in rows:
        value = _value(row)
        total_value += value
        days = row.get("days_aging")
        if days is None:
            continue
        with_aging += 1
        for bracket in brackets:
            if days >= bracket["min_days"] and (bracket["max_days"] is None or days <= bracket["max_days"]):
                bracket["item_count"] += 1
                bracket["total_quantity"] += row["total_quantity"]
                bracket["total_value"] += value
                break
        if days < AGING_THRESHOLD_DAYS:
            continue
        aging_value += value
        summary = summaries.setdefault(row["store_id"], {
            "store_id": row["store_id"],
            "store_name": row.get("store__name") or "Unknown",
            "total_aging_value": 0.0,
            "total_aging_items": 0,
            "critical_items": 0,
            "high_risk_items": 0,
            "medium_risk_items": 0,
        })
        summary["total_aging_value"] += value
        summary["total_aging_items"] += 1
        if days >= CRITICAL_AGING_DAYS:
            summary["critical_items"] += 1
        elif days >= HIGH_RISK_AGING_DAYS:
            summary["high_risk_items"] += 1
        elif days >= MEDIUM_RISK_AGING_DAYS:
            summary["medium_risk_items"] += 1

    for bracket in brackets:
        bracket["percentage"] = (bracket["total_value"] / total_value * 100) if total_value > 0 else 0.0

    ranked = sorted(summaries.values(), key=lambda s: s["total_aging_value"], reverse=True)
    return {
        "overview": {
            "total_inventory_value": total_value,
            "total_aging_value": aging_value,
            "aging_percentage": (aging_value / total_value * 100) if total_value > 0 else 0.0,
            # goal is zero aging value
            "goal_progress": ((total_value - aging_value) / total_value * 100) if total_value > 0 else 100.0,
            "total_items": len(rows),
            "items_with_aging_data": with_aging,
        },
        "aging_brackets": brackets,
        "store_summaries": ranked[:10],
        "transfer_metrics": transfer_metrics(),
        "recommendations": _recommendations(aging_value, ranked),
    }


def _needs_stock(row) -> bool:
    days = row.get("days_aging")
    return (days is not None and days < 30) or (row.get("total_quantity") or 0) < 10


def aging_matches(source, min_aging_days: int = AGING_THRESHOLD_DAYS, max_transfer_quantity: int = 100) -> dict:
    """
    Pair aging stock with stores that could use it.

    A store needs a DIN when it stocks it thinly (aging under 30 days or fewer
    than 10 units) or does not stock it at all. Matches are ranked by the cost
    of the stock that could move.
    """
    from apps.stores.models import Store

    rows = fetch_all_or_raise(
        source,
        INVENTORY_TABLE,
        select=["din_number", "description", "store_id", "total_quantity", "cost", "days_aging", "store__name"],
        filters=[FetchFilter("din_number", "not.is", None), FetchFilter("din_number", "neq", "")],
        order=FetchOrder("id"),
    )
    stores = list(Store.objects.order_by("name").values("id", "name"))

    by_din: dict[str, list[dict]] = {}
    for row in rows:
        by_din.setdefault(row["din_number"], []).append(row)

    aging = [
        r for r in rows
        if r.get("days_aging") is not None and r["days_aging"] >= min_aging_days and (r.get("total_quantity") or 0) > 0
    ]
    aging.sort(key=lambda r: r["days_aging"], reverse=True)

    matches = []
    for item in aging:
        din = item["din_number"]
        transferable = min(item["total_quantity"], max_transfer_quantity)
        cost = float(item.get("cost") or 0)
        base = {
            "din_number": din,
            "medication_name": item["description"],
            "aging_store_id": item["store_id"],
            "aging_store_name": item.get("store__name") or "",
            "aging_days": item["days_aging"],
            "aging_quantity": item["total_quantity"],
            "aging_cost": cost,
            "transferable_quantity": transferable,
            "savings_potential": transferable * cost,
        }
        others = [r for r in by_din[din] if r["store_id"] != item["store_id"]]
        stocking = {r["store_id"] for r in others}
        for other in others:
            if _needs_stock(other):
                matches.append({
                    **base,
                    "needed_store_id": other["store_id"],
                    "needed_store_name": other.get("store__name") or "",
                    "needed_quantity": other.get("total_quantity") or 0,
                })
        for store in stores:
            if store["id"] == item["store_id"] or store["id"] in stocking:
                continue
            matches.append({
                **base,
                "needed_store_id": store["id"],
                "needed_store_name": store["name"],
                "needed_quantity": 0,
            })

    matches.sort(key=lambda m: m["savings_potential"], reverse=True)
    logger.debug("Aging matcher produced %s matches from %s aging items", len(matches), len(aging))
    return {
        "matches": matches[:100],
        "summary": {
            "total_matches": len(matches),
            "unique_aging_dins": len({m["din_number"] for m in matches}),
            "total_aging_value": sum(m["aging_quantity"] * m["aging_cost"] for m in matches),
            "total_savings_potential": sum(m["savings_potential"] for m in matches),
        },
    }
