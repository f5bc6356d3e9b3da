# orders/services/order_creation.py

"""
ORDER CREATION ENGINE

Flow:
    validate payload -> resolve fee -> validate + price items
    -> business id -> (online) payment link -> insert -> cache

Hard rules:
- total_amount == subtotal_amount + delivery_fee, subtotal == Σ qty × price
- delivery_fee == 0 unless deliveryType == "delivery"
- Online orders are only persisted once PayMongo has issued a link.
  A provider failure aborts creation and hands back the unsaved draft.
- Catalog lookups are permissive: an unknown product gets a placeholder
  name and empty image, the order still goes through.
"""

from __future__ import annotations

import logging
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

from django.core.exceptions import ValidationError as DjangoValidationError

from orders.models import Order, OrderItem
from orders.serializers import PaymentLinkSummarySerializer
from orders.services import order_store
from orders.services.cache_keys import LIST_KEY_PATTERN, order_key
from orders.services.conf import currency, default_delivery_fee, order_cache_ttl
from orders.services.exceptions import OrderValidationError, PaymentLinkError
from orders.services.order_ids import generate_order_no
from payments.services.paymongo import PaymentProviderError
from products.services.catalog import resolve_item_display

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
# DecimalField(max_digits=12, decimal_places=2)
MAX_AMOUNT = Decimal("9999999999.99")
# PositiveIntegerField upper bound
MAX_QUANTITY = 2147483647
PHONE_RE = re.compile(r"^[\d\s\-+()]+$")

DEFAULT_CUSTOMER_NAME = "Guest Customer"

REQUIRED_FIELDS = ("customer", "items", "deliveryType", "paymentMethod")
DELIVERY_TYPES = {Order.DELIVERY_PICKUP, Order.DELIVERY_DELIVERY}
PAYMENT_METHODS = {Order.METHOD_CASH, Order.METHOD_ONLINE}


def _text(value: Any) -> str:
    return str(value or "").strip()


# =========================================================
# VALIDATION
# =========================================================
def _validate_top_level(payload: Any) -> None:
    if not isinstance(payload, dict):
        raise OrderValidationError("Request body must be a JSON object")

    missing = [f for f in REQUIRED_FIELDS if not payload.get(f)]
    if missing:
        raise OrderValidationError(
            "Missing required fields: " + ", ".join(REQUIRED_FIELDS),
            errors=[f"{f} is required" for f in missing],
        )

    customer = payload["customer"]
    if not isinstance(customer, dict):
        raise OrderValidationError("customer must be an object")

    phone = _text(customer.get("phone") or customer.get("phonenumber"))
    if not customer.get("address") or not phone:
        raise OrderValidationError("Customer address and phone number are required")
    if not isinstance(customer["address"], dict):
        raise OrderValidationError("customer.address must be an object")
    if not PHONE_RE.match(phone):
        raise OrderValidationError("Customer phone number contains invalid characters")

    if payload["deliveryType"] not in DELIVERY_TYPES:
        raise OrderValidationError(
            "deliveryType must be one of: " + ", ".join(sorted(DELIVERY_TYPES))
        )
    if payload["paymentMethod"] not in PAYMENT_METHODS:
        raise OrderValidationError(
            "paymentMethod must be one of: " + ", ".join(sorted(PAYMENT_METHODS))
        )


def to_money(value: Decimal, message: str) -> Decimal:
    """Round to cents; anything the amount columns cannot hold is a validation error."""
    try:
        amount = value.quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise OrderValidationError(message)
    if amount > MAX_AMOUNT:
        raise OrderValidationError(message)
    return amount


def _parse_quantity(raw: Any, idx: int) -> int:
    if isinstance(raw, bool):
        raise OrderValidationError(f"items[{idx}].quantity must be a whole number")
    try:
        value = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        raise OrderValidationError(f"items[{idx}].quantity must be a whole number")
    if not value.is_finite() or value != value.to_integral_value():
        raise OrderValidationError(f"items[{idx}].quantity must be a whole number")

    qty = int(value)
    if qty < 1:
        raise OrderValidationError(f"items[{idx}].quantity must be at least 1")
    if qty > MAX_QUANTITY:
        raise OrderValidationError(f"items[{idx}].quantity is too large")
    return qty


def resolve_delivery_fee(delivery_type: str, raw_fee: Any = None) -> Decimal:
    if delivery_type != Order.DELIVERY_DELIVERY:
        return Decimal("0.00")

    if raw_fee is None or raw_fee == "":
        return default_delivery_fee().quantize(TWOPLACES)

    if isinstance(raw_fee, bool):
        raise OrderValidationError("Invalid delivery fee amount")
    try:
        fee = Decimal(str(raw_fee))
    except (InvalidOperation, ValueError, TypeError):
        raise OrderValidationError("Invalid delivery fee amount")
    if not fee.is_finite() or fee < 0:
        raise OrderValidationError("Invalid delivery fee amount")
    return to_money(fee, "Invalid delivery fee amount")


def build_items(raw_items: Any) -> tuple[list[OrderItem], Decimal]:
    if not isinstance(raw_items, list) or not raw_items:
        raise OrderValidationError("At least one item is required")

    items: list[OrderItem] = []
    subtotal = Decimal("0.00")

    for idx, raw in enumerate(raw_items):
        if not isinstance(raw, dict):
            raise OrderValidationError("Each item must have product, quantity, and price")

        ref = _text(raw.get("product"))
        qty_raw = raw.get("quantity")
        price_raw = raw.get("price")
        if not ref or qty_raw in (None, "") or price_raw in (None, ""):
            raise OrderValidationError("Each item must have product, quantity, and price")

        qty = _parse_quantity(qty_raw, idx)

        try:
            if isinstance(price_raw, bool):
                raise InvalidOperation(price_raw)
            price = Decimal(str(price_raw))
        except (InvalidOperation, ValueError):
            raise OrderValidationError(f"items[{idx}].price must be a number")
        if not price.is_finite() or price < 0:
            raise OrderValidationError(f"items[{idx}].price cannot be negative")
        price = to_money(price, f"items[{idx}].price is too large")

        line_total = to_money(price * qty, f"items[{idx}] line total is too large")
        subtotal = to_money(subtotal + line_total, "Order subtotal is too large")

        display = resolve_item_display(ref)

        items.append(
            OrderItem(
                product_ref=ref,
                product=display.product,
                product_name=display.name,
                product_image=display.image,
                quantity=qty,
                unit_price=price,
                line_total=line_total,
            )
        )

    return items, subtotal.quantize(TWOPLACES)


# =========================================================
# DRAFT
# =========================================================
def _build_order(payload: dict, *, principal, subtotal: Decimal, fee: Decimal) -> Order:
    customer = payload["customer"]
    address = customer.get("address") or {}
    user = principal if getattr(principal, "is_authenticated", False) else None

    return Order(
        order_no=generate_order_no(),
        customer_user=user,
        customer_name=_text(customer.get("name")) or DEFAULT_CUSTOMER_NAME,
        customer_email=_text(customer.get("email")),
        customer_phone=_text(customer.get("phone") or customer.get("phonenumber")),
        address_line1=_text(address.get("line1")),
        address_city=_text(address.get("city")),
        address_state=_text(address.get("state")),
        address_postal_code=_text(address.get("postal_code")),
        address_country=_text(address.get("country")),
        delivery_type=payload["deliveryType"],
        payment_method=payload["paymentMethod"],
        subtotal_amount=subtotal,
        delivery_fee=fee,
        total_amount=to_money(subtotal + fee, "Order total is too large"),
        currency=currency(),
    )


def draft_payload(order: Order, items: list[OrderItem]) -> dict:
    """JSON view of an order that was never saved."""
    return {
        "order_no": order.order_no,
        "customer": {
            "user_id": str(order.customer_user_id) if order.customer_user_id else None,
            "name": order.customer_name,
            "email": order.customer_email,
            "phone": order.customer_phone,
            "address": {
                "line1": order.address_line1,
                "city": order.address_city,
                "state": order.address_state,
                "postal_code": order.address_postal_code,
                "country": order.address_country,
            },
        },
        "items": [
            {
                "product_ref": i.product_ref,
                "name": i.product_name,
                "image": i.product_image,
                "quantity": i.quantity,
                "unit_price": str(i.unit_price),
                "line_total": str(i.line_total),
            }
            for i in items
        ],
        "delivery_type": order.delivery_type,
        "payment_method": order.payment_method,
        "subtotal_amount": str(order.subtotal_amount),
        "delivery_fee": str(order.delivery_fee),
        "total_amount": str(order.total_amount),
        "currency": order.currency,
        "status": order.status,
        "payment_status": order.payment_status,
    }


def _payment_link_summary(link) -> dict:
    return dict(PaymentLinkSummarySerializer(link).data)


# =========================================================
# ENTRYPOINT
# =========================================================
def create_order(payload: Any, *, principal, cache, payment_provider) -> dict:
    """
    Returns {"order": <snapshot>, "payment_link": <summary> | None}.
    """
    _validate_top_level(payload)

    fee = resolve_delivery_fee(payload["deliveryType"], payload.get("deliveryFee"))
    items, subtotal = build_items(payload["items"])
    order = _build_order(payload, principal=principal, subtotal=subtotal, fee=fee)

    link_summary: Optional[dict] = None

    if order.payment_method == Order.METHOD_ONLINE:
        try:
            link = payment_provider.create_payment_link(
                order.total_amount,
                f"Payment for Order {order.order_no}",
                {"oid": order.order_no},
            )
        except PaymentProviderError as e:
            logger.warning(
                "payment link creation failed, order not saved",
                extra={"order_no": order.order_no, "error": str(e)},
            )
            raise PaymentLinkError(
                data={"order": draft_payload(order, items), "payment_error": str(e)},
            ) from e

        order.status = Order.STATUS_PROCESSING
        order.payment_status = Order.PAYMENT_PENDING
        order.payment_link_id = link.id
        order.checkout_url = link.checkout_url
        order.payment_reference = link.reference
        order.payment_link_status = link.status
        link_summary = _payment_link_summary(link)
    else:
        order.status = Order.STATUS_CONFIRMED
        order.payment_status = Order.PAYMENT_PENDING_PAYMENT

    try:
        saved = order_store.insert(order, items)
    except DjangoValidationError as e:
        raise OrderValidationError("Validation error", errors=e.messages) from e

    snapshot = order_store.snapshot(saved)
    cache.set(order_key(saved.order_no), snapshot, order_cache_ttl())
    cache.invalidate(LIST_KEY_PATTERN)

    logger.info(
        "order created",
        extra={
            "order_no": saved.order_no,
            "payment_method": saved.payment_method,
            "total_amount": str(saved.total_amount),
        },
    )
    return {"order": snapshot, "payment_link": link_summary}
