"""
Whole-table reads in fixed windows.

Every read goes through ``PAGE_SIZE`` row windows so a caller can pull a full
result set without one unbounded query. Pages are requested one after another,
each carrying the same filters and ordering, and paging stops at the first
page that comes back short.

Two call shapes exist and both are used:

* ``fetch_all_rows`` never raises for query failures; it returns
  ``(rows_so_far, error)``.
* ``fetch_all_or_raise`` raises ``FetchError`` and the caller sees no rows.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, NamedTuple

from django.apps import apps as django_apps
from django.core.exceptions import FieldError
from django.db import DEFAULT_DB_ALIAS, DatabaseError

logger = logging.getLogger(__name__)

PAGE_SIZE = 1000

INVENTORY_TABLE = "inventory.InventoryItem"

# Errors raised while building or running one page query
FETCH_FAILURES = (DatabaseError, FieldError, LookupError, ValueError, TypeError)


class FetchError(Exception):
    def __init__(self, message: str, table: str | None = None, page: int | None = None):
        super().__init__(message)
        self.table = table
        self.page = page


class FetchFilter(NamedTuple):
    column: str
    op: str  # eq | neq | lt | gt | in | not.is
    value: Any = None


class FetchOrder(NamedTuple):
    column: str
    ascending: bool = True


class TableSource:
    """Resolves table names to querysets on one database alias."""

    def __init__(self, using: str = DEFAULT_DB_ALIAS):
        self.using = using

    def table(self, name: str):
        model = resolve_model(name)
        return model._default_manager.using(self.using).all()


def resolve_model(name: str):
    """Accepts a model label (``inventory.InventoryItem``) or a db_table name."""
    if "." in name:
        try:
            return django_apps.get_model(name)
        except (LookupError, ValueError):
            pass
    for model in django_apps.get_models():
        if model._meta.db_table == name:
            return model
    raise LookupError(f"Unknown table: {name}")


def _coerce_filter(raw) -> FetchFilter:
    if isinstance(raw, FetchFilter):
        return raw
    if isinstance(raw, dict):
        return FetchFilter(raw["column"], raw["op"], raw.get("value"))
    return FetchFilter(*raw)


def _apply_filter(query, flt: FetchFilter):
    column, op, value = flt
    if op == "eq":
        return query.filter(**{column: value})
    if op == "neq":
        return query.exclude(**{column: value})
    if op == "lt":
        return query.filter(**{f"{column}__lt": value})
    if op == "gt":
        return query.filter(**{f"{column}__gt": value})
    if op == "in":
        return query.filter(**{f"{column}__in": list(value)})
    if op == "not.is":
        if value is None:
            return query.exclude(**{f"{column}__isnull": True})
        return query.exclude(**{column: value})
    raise ValueError(f"Unsupported filter operator: {op}")


def _columns(select) -> tuple[str, ...]:
    if select is None:
        return ()
    if isinstance(select, str):
        if select.strip() == "*":
            return ()
        return tuple(c.strip() for c in select.split(",") if c.strip())
    return tuple(select)


def _build_query(source, table: str, columns: tuple[str, ...], filters: list[FetchFilter], order):
    query = source.table(table)
    for flt in filters:
        query = _apply_filter(query, flt)
    if order is not None:
        query = query.order_by(order.column if order.ascending else f"-{order.column}")
    return query.values(*columns)


def _paginate(source, table, select, filters, order, rows: list) -> list:
    """Appends every page to ``rows``; raises FetchError on the first failed page."""
    columns = _columns(select)
    filters = [_coerce_filter(f) for f in (filters or [])]
    page = 0
    while True:
        start = page * PAGE_SIZE
        end = (page + 1) * PAGE_SIZE - 1
        try:
            query = _build_query(source, table, columns, filters, order)
            batch = list(query[start:end + 1])
        except FETCH_FAILURES as exc:
            logger.error("Error fetching %s page %s: %s", table, page, exc)
            raise FetchError(str(exc), table=table, page=page) from exc

        rows.extend(batch)
        logger.debug("Fetched %s rows from %s (page %s)", len(batch), table, page)
        if len(batch) < PAGE_SIZE:
            return rows
        page += 1


def fetch_all_rows(
    source,
    table: str,
    select: str | Iterable[str] | None = None,
    filters: Iterable | None = None,
    order: FetchOrder | None = None,
) -> tuple[list[dict], FetchError | None]:
    rows: list[dict] = []
    try:
        _paginate(source, table, select, filters, order, rows)
    except FetchError as exc:
        return rows, exc
    return rows, None


def fetch_all_or_raise(
    source,
    table: str,
    select: str | Iterable[str] | None = None,
    filters: Iterable | None = None,
    order: FetchOrder | None = None,
) -> list[dict]:
    return _paginate(source, table, select, filters, order, [])


def _inventory_columns() -> tuple[list[str], list[str]]:
    model = django_apps.get_model(INVENTORY_TABLE)
    store_model = model._meta.get_field("store").related_model
    item_cols = [f.attname for f in model._meta.concrete_fields]
    store_cols = [f.attname for f in store_model._meta.concrete_fields]
    return item_cols, store_cols


def fetch_all_inventory_items(source, store_id=None) -> list[dict]:
    """
    Every inventory item joined with its store, ordered by description.

    Each row carries the store under ``row["store"]``. Raises FetchError.
    """
    item_cols, store_cols = _inventory_columns()
    select = item_cols + [f"store__{c}" for c in store_cols]
    filters = [FetchFilter("store_id", "eq", store_id)] if store_id else []

    rows = fetch_all_or_raise(
        source, INVENTORY_TABLE, select=select, filters=filters, order=FetchOrder("description")
    )
    out = []
    for row in rows:
        store = {c: row.pop(f"store__{c}", None) for c in store_cols}
        row["store"] = store
        out.append(row)
    return out
