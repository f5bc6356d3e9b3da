# orders/services/order_queries.py

"""
ORDER READ PATH

Purpose:
- get_order:   one order by business id, read-through cached (order:<id>)
- list_orders: filtered / sorted / paginated list, read-through cached
               under a key built from the normalized query

Hard rules:
- Cache is best-effort. A miss (or a dead cache) always falls back to the store.
- The list cache key is a pure function of the normalized parameters, so
  "?page=1&limit=10" and "?limit=10" share a key, and any differing
  parameter gets its own key.
- Plain shoppers never list orders.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, time
from typing import Any, Mapping, Optional

from django.db.models import Q
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from orders.services import order_store
from orders.services.cache_keys import list_key, order_key
from orders.services.conf import list_cache_ttl, max_page_size, order_cache_ttl, page_size
from orders.services.exceptions import (
    OrderAuthenticationError,
    OrderAuthorizationError,
    OrderNotFoundError,
    OrderValidationError,
)
from permissions.roles import CAP_ORDERS_VIEW_ALL, is_allowed

logger = logging.getLogger(__name__)

SOURCE_CACHE = "cache"
SOURCE_DATABASE = "database"

SORT_FIELDS = {
    "date": "created_at",
    "createdAt": "created_at",
    "total": "total_amount",
    "totalAmount": "total_amount",
    "status": "status",
    "orderId": "order_no",
}
SORT_ORDERS = {"asc", "desc"}


# =========================================================
# SINGLE ORDER
# =========================================================
def get_order(order_id: str, *, cache) -> tuple[dict, str]:
    """
    Returns (snapshot, source) where source is "cache" or "database".
    """
    order_id = str(order_id or "").strip()
    if not order_id:
        raise OrderValidationError("Order ID is required")

    key = order_key(order_id)
    cached = cache.get(key)
    if cached is not None:
        logger.info("order cache hit", extra={"order_id": order_id})
        return cached, SOURCE_CACHE

    logger.info("order cache miss", extra={"order_id": order_id})
    order = order_store.find_one(order_no=order_id)
    if order is None:
        raise OrderNotFoundError()

    snapshot = order_store.snapshot(order)
    cache.set(key, snapshot, order_cache_ttl())
    return snapshot, SOURCE_DATABASE


# =========================================================
# LIST
# =========================================================
def _positive_int(raw: Any, *, name: str, default: int) -> int:
    if raw is None or str(raw).strip() == "":
        return default
    try:
        value = int(str(raw).strip())
    except ValueError:
        raise OrderValidationError(f"{name} must be a positive integer")
    if value < 1:
        raise OrderValidationError(f"{name} must be a positive integer")
    return value


def _parse_bound(raw: Any, *, name: str, end_of_day: bool) -> Optional[datetime]:
    text = str(raw or "").strip()
    if not text:
        return None

    try:
        dt = parse_datetime(text)
        if dt is None:
            d = parse_date(text)
            if d is None:
                raise ValueError(text)
            # a bare endDate covers the whole day
            dt = datetime.combine(d, time.max if end_of_day else time.min)
    except ValueError:
        raise OrderValidationError(f"{name} must be an ISO date or datetime")

    if timezone.is_naive(dt):
        dt = timezone.make_aware(dt, timezone.get_default_timezone())
    return dt


def normalize_list_query(query: Mapping[str, Any]) -> dict:
    """
    Turn raw query params into the canonical parameter dict that both
    drives the store query and keys the cache.
    """
    page = _positive_int(query.get("page"), name="page", default=1)
    limit = min(
        _positive_int(query.get("limit"), name="limit", default=page_size()),
        max_page_size(),
    )

    sort_by = str(query.get("sortBy") or "date").strip()
    if sort_by not in SORT_FIELDS:
        raise OrderValidationError(
            "sortBy must be one of: " + ", ".join(sorted(SORT_FIELDS))
        )

    sort_order = str(query.get("sortOrder") or "desc").strip().lower()
    if sort_order not in SORT_ORDERS:
        raise OrderValidationError("sortOrder must be one of: asc, desc")

    start = _parse_bound(query.get("startDate"), name="startDate", end_of_day=False)
    end = _parse_bound(query.get("endDate"), name="endDate", end_of_day=True)
    if start and end and start > end:
        raise OrderValidationError("startDate must not be after endDate")

    return {
        "page": page,
        "limit": limit,
        "status": str(query.get("status") or "").strip() or None,
        "customer": str(query.get("customer") or "").strip() or None,
        "startDate": start.isoformat() if start else None,
        "endDate": end.isoformat() if end else None,
        "sortBy": SORT_FIELDS[sort_by],
        "sortOrder": sort_order,
    }


def _filter_for(params: dict) -> Q:
    q = Q()
    if params["status"]:
        q &= Q(status=params["status"])
    if params["customer"]:
        term = params["customer"]
        q &= (
            Q(customer_user__id__icontains=term)
            | Q(customer_user__username__icontains=term)
            | Q(customer_name__icontains=term)
            | Q(customer_email__icontains=term)
            | Q(customer_phone__icontains=term)
        )
    if params["startDate"]:
        q &= Q(created_at__gte=datetime.fromisoformat(params["startDate"]))
    if params["endDate"]:
        q &= Q(created_at__lte=datetime.fromisoformat(params["endDate"]))
    return q


def _sort_for(params: dict) -> list[str]:
    field = params["sortBy"]
    prefix = "-" if params["sortOrder"] == "desc" else ""
    # tie-breaker keeps pages stable
    return [f"{prefix}{field}", f"{prefix}order_no"]


def list_orders(query: Mapping[str, Any], *, principal, cache) -> dict:
    """
    Returns {"orders": [...], "pagination": {page, limit, total, pages}}.
    """
    if principal is None or not getattr(principal, "is_authenticated", False):
        raise OrderAuthenticationError()
    if not is_allowed(principal, CAP_ORDERS_VIEW_ALL):
        raise OrderAuthorizationError(
            "Access denied. Users can only view their own orders."
        )

    params = normalize_list_query(query)
    key = list_key(params)

    cached = cache.get(key)
    if cached is not None:
        logger.info("orders list cache hit", extra={"cache_key": key})
        return cached

    logger.info("orders list cache miss", extra={"cache_key": key})
    q = _filter_for(params)
    page, limit = params["page"], params["limit"]

    total = order_store.count(q)
    orders = order_store.find(
        q,
        sort=_sort_for(params),
        skip=(page - 1) * limit,
        limit=limit,
    )

    result = {
        "orders": order_store.snapshot_many(orders),
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": math.ceil(total / limit),
        },
    }
    cache.set(key, result, list_cache_ttl())
    return result
