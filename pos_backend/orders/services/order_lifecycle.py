"""
ORDER LIFECYCLE DOMAIN RULES

This module defines the ONLY allowed status transitions for orders and
the one write path that applies them.

STATE MACHINE:
    pending -> received -> preparing -> shipped -> delivered
    cancelled from anything except delivered

    - Forward by exactly one step; no skipping, no going back.
    - Re-applying the current status is an idempotent no-op.
    - confirmed / processing (set at creation for cash / online) sit at
      the same point as pending: the only forward move is to received.
    - delivered and cancelled are terminal. Cancelling a cancelled order
      is a no-op.

WRITE PATH (update_order_status):
    authorize -> validate input -> resolve order -> validate transition
    -> conditional UPDATE (WHERE status = current) -> invalidate cache
    -> audit -> return snapshot
"""

from __future__ import annotations

import logging
import uuid
from typing import Callable, Optional

from django.core.exceptions import ValidationError as DjangoValidationError

from orders.models import Order
from orders.services import order_store
from orders.services.cache_keys import LIST_KEY_PATTERN, order_key
from orders.services.exceptions import (
    ConcurrentOrderUpdateError,
    InvalidOrderTransitionError,
    OrderAuthorizationError,
    OrderNotFoundError,
    OrderServiceError,
    OrderValidationError,
)
from permissions.roles import CAP_ORDERS_UPDATE_STATUS, is_allowed

logger = logging.getLogger(__name__)


# ============================================================
# STATE DEFINITIONS
# ============================================================

STATUS_SEQUENCE = [
    Order.STATUS_PENDING,
    Order.STATUS_RECEIVED,
    Order.STATUS_PREPARING,
    Order.STATUS_SHIPPED,
    Order.STATUS_DELIVERED,
]

UPDATABLE_STATUSES = [*STATUS_SEQUENCE, Order.STATUS_CANCELLED]

TERMINAL_STATES = {
    Order.STATUS_DELIVERED,
    Order.STATUS_CANCELLED,
}

# creation-time statuses that behave like pending
ENTRY_EQUIVALENTS = {
    Order.STATUS_CONFIRMED: Order.STATUS_PENDING,
    Order.STATUS_PROCESSING: Order.STATUS_PENDING,
}

SEQUENCE_TEXT = " → ".join(STATUS_SEQUENCE)


# ============================================================
# DOMAIN RULES
# ============================================================


def can_transition(*, from_status: str, to_status: str) -> bool:
    try:
        validate_transition(current=from_status, requested=to_status)
    except InvalidOrderTransitionError:
        return False
    return True


def validate_transition(*, current: str, requested: str) -> bool:
    """
    Raise InvalidOrderTransitionError if current -> requested is illegal.
    Returns True when the status actually changes, False for a no-op.
    """
    if requested == Order.STATUS_CANCELLED:
        if current == Order.STATUS_DELIVERED:
            raise InvalidOrderTransitionError("Cannot cancel a delivered order")
        return current != Order.STATUS_CANCELLED

    if requested == current:
        return False

    if current in TERMINAL_STATES:
        raise InvalidOrderTransitionError(
            f"Cannot change status of a {current} order to {requested}"
        )

    effective = ENTRY_EQUIVALENTS.get(current, current)
    if (
        effective in STATUS_SEQUENCE
        and requested in STATUS_SEQUENCE
        and STATUS_SEQUENCE.index(requested) == STATUS_SEQUENCE.index(effective) + 1
    ):
        return True

    raise InvalidOrderTransitionError(
        f"Invalid status progression: cannot change from {current} to {requested}. "
        f"Must follow sequential order: {SEQUENCE_TEXT}"
    )


# ============================================================
# LOOKUP
# ============================================================


def _looks_like_surrogate_id(value: str) -> bool:
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


def resolve_order(lookup_key: str) -> Optional[Order]:
    """Surrogate id first when the key has that shape, then business id."""
    if _looks_like_surrogate_id(lookup_key):
        order = order_store.find_one(pk=lookup_key)
        if order is not None:
            return order
    return order_store.find_one(order_no=lookup_key)


# ============================================================
# WRITE PATH
# ============================================================


def _invalidate(cache, *, order: Order, lookup_key: str) -> None:
    cache.invalidate(order_key(order.order_no))
    if lookup_key != order.order_no:
        cache.invalidate(order_key(lookup_key))
    cache.invalidate(LIST_KEY_PATTERN)


def _apply(lookup_key: str, requested: str, *, cache) -> dict:
    if not lookup_key:
        raise OrderValidationError("Order ID is required")
    if not requested:
        raise OrderValidationError("Status is required")
    if requested not in UPDATABLE_STATUSES:
        raise OrderValidationError(
            "Invalid status. Must be one of: " + ", ".join(UPDATABLE_STATUSES)
        )

    order = resolve_order(lookup_key)
    if order is None:
        raise OrderNotFoundError()

    validate_transition(current=order.status, requested=requested)

    # no-op re-application goes through the same conditional write so
    # updated_at refreshes and a concurrent move is still detected
    updated = order_store.find_one_and_update(
        {"pk": order.pk, "status": order.status},
        {"status": requested},
    )
    if updated is None:
        raise ConcurrentOrderUpdateError()

    _invalidate(cache, order=updated, lookup_key=lookup_key)

    logger.info(
        "order status updated",
        extra={"order_no": updated.order_no, "from": order.status, "to": requested},
    )
    return order_store.snapshot(updated)


def update_order_status(
    lookup_key: str,
    requested_status: str,
    *,
    actor,
    cache,
    audit: Optional[Callable[..., None]] = None,
) -> dict:
    """
    Cashier-only status change. Every outcome past authorization is
    handed to `audit(order_key=, update_data=, success=, error=)`.
    """
    if not is_allowed(actor, CAP_ORDERS_UPDATE_STATUS):
        raise OrderAuthorizationError(
            "Access denied. Only cashiers can update order status."
        )

    lookup_key = str(lookup_key or "").strip()
    requested = str(requested_status or "").strip()
    update_data = {"status": requested}

    def _audit(success: bool, error: str = "") -> None:
        if audit is None:
            return
        audit(
            order_key=lookup_key or "unknown",
            update_data=update_data,
            success=success,
            error=error,
        )

    try:
        snapshot = _apply(lookup_key, requested, cache=cache)
    except OrderServiceError as e:
        _audit(False, e.message)
        raise
    except DjangoValidationError as e:
        _audit(False, "; ".join(e.messages))
        raise OrderValidationError("Validation error", errors=e.messages) from e
    except Exception as e:
        logger.exception("order status update failed", extra={"lookup_key": lookup_key})
        _audit(False, str(e))
        raise

    _audit(True)
    return snapshot
