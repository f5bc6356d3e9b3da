# orders/services/order_store.py

"""
ORDER STORE (Django ORM)

Thin persistence seam used by the order engine:

    find_one(**filter)              -> Order | None
    find(q, sort, skip, limit)      -> list[Order]
    count(q)                        -> int
    find_one_and_update(filter, patch) -> Order | None   (conditional, atomic)
    insert(order, items)            -> Order

Snapshots:
- snapshot(order) is the JSON document handed to clients and cached.
- Items come back ordered, with their denormalized product fields.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from django.db import transaction
from django.db.models import Q, QuerySet
from django.utils import timezone

from orders.models import Order, OrderItem
from orders.serializers import OrderSnapshotSerializer


def _base_queryset() -> QuerySet:
    return Order.objects.all().prefetch_related("items")


def find_one(**filters) -> Optional[Order]:
    return _base_queryset().filter(**filters).first()


def find(
    q: Optional[Q] = None,
    *,
    sort: Iterable[str] = ("-created_at",),
    skip: int = 0,
    limit: int = 10,
) -> list[Order]:
    qs = _base_queryset()
    if q is not None:
        qs = qs.filter(q)
    qs = qs.order_by(*sort)
    return list(qs[skip : skip + limit])


def count(q: Optional[Q] = None) -> int:
    qs = Order.objects.all()
    if q is not None:
        qs = qs.filter(q)
    return qs.count()


def find_one_and_update(filters: dict[str, Any], patch: dict[str, Any]) -> Optional[Order]:
    """
    Single conditional UPDATE ... WHERE <filters>.
    Returns the re-read order, or None when no row matched (the filter
    includes the expected prior status, so None also means "lost the race").
    """
    patch = {**patch, "updated_at": timezone.now()}
    updated = Order.objects.filter(**filters).update(**patch)
    if not updated:
        return None
    return find_one(pk=filters.get("pk", filters.get("id")))


@transaction.atomic
def insert(order: Order, items: list[OrderItem]) -> Order:
    # order_no uniqueness is left to the unique index
    order.full_clean(exclude=["customer_user", "order_no"])
    order.save(force_insert=True)

    for position, item in enumerate(items):
        item.order = order
        item.position = position
    OrderItem.objects.bulk_create(items)

    return find_one(pk=order.pk)


def snapshot(order: Order) -> dict:
    return dict(OrderSnapshotSerializer(order).data)


def snapshot_many(orders: Iterable[Order]) -> list[dict]:
    return [dict(row) for row in OrderSnapshotSerializer(list(orders), many=True).data]
