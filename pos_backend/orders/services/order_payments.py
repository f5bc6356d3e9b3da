# orders/services/order_payments.py

"""
PAYMENT LINK SYNC

Online orders are saved with an unpaid PayMongo link. This pulls the
link's current state back onto the order.

Hard rules:
- Only payment fields move (payment_link_status, payment_status).
  The fulfilment status is the cashier's.
- The write is conditional on the payment_status we read, so a
  concurrent change wins and the sync skips that order.
- A provider failure on one order never stops the batch.
"""

from __future__ import annotations

import logging
from typing import Optional

from django.db.models import QuerySet

from orders.models import Order
from orders.services import order_store
from orders.services.cache_keys import LIST_KEY_PATTERN, order_key
from payments.services.paymongo import PaymentProviderError

logger = logging.getLogger(__name__)

LINK_STATUS_PAID = "paid"


def pending_online_orders() -> QuerySet:
    return (
        Order.objects.filter(
            payment_method=Order.METHOD_ONLINE,
            payment_status=Order.PAYMENT_PENDING,
        )
        .exclude(payment_link_id="")
        .order_by("created_at")
    )


def sync_payment_link(order: Order, *, cache, payment_provider) -> bool:
    """
    Returns True when the order changed. PaymentProviderError propagates.
    """
    link = payment_provider.get_payment_link(order.payment_link_id)

    patch = {}
    if link.status != order.payment_link_status:
        patch["payment_link_status"] = link.status
    if link.status == LINK_STATUS_PAID and order.payment_status != Order.PAYMENT_PAID:
        patch["payment_status"] = Order.PAYMENT_PAID
    if not patch:
        return False

    updated = order_store.find_one_and_update(
        {"pk": order.pk, "payment_status": order.payment_status}, patch
    )
    if updated is None:
        logger.info("payment sync skipped, order changed", extra={"order_no": order.order_no})
        return False

    cache.invalidate(order_key(order.order_no))
    cache.invalidate(LIST_KEY_PATTERN)

    logger.info(
        "payment link synced",
        extra={
            "order_no": order.order_no,
            "link_status": link.status,
            "payment_status": updated.payment_status,
        },
    )
    return True


def sync_pending_payment_links(*, cache, payment_provider, limit: Optional[int] = None) -> dict:
    orders = pending_online_orders()
    if limit:
        orders = orders[:limit]

    checked = updated = failed = 0
    for order in orders:
        checked += 1
        try:
            if sync_payment_link(order, cache=cache, payment_provider=payment_provider):
                updated += 1
        except PaymentProviderError as e:
            failed += 1
            logger.warning(
                "payment link lookup failed",
                extra={"order_no": order.order_no, "error": str(e)},
            )

    return {"checked": checked, "updated": updated, "failed": failed}
