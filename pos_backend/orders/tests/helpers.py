# orders/tests/helpers.py

"""
Shared seeding for order tests.
"""

from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model

from orders.models import Order, OrderItem
from orders.services import order_store
from orders.services.order_ids import generate_order_no
from permissions.roles import Role

User = get_user_model()


def make_user(username: str, role=Role.USER, password: str = "pass"):
    return User.objects.create_user(
        email=f"{username}@example.com",
        username=username,
        password=password,
        role=role,
    )


def order_payload(**overrides) -> dict:
    payload = {
        "customer": {
            "name": "Juan Dela Cruz",
            "email": "juan@example.com",
            "phone": "+63 917 555 0101",
            "address": {
                "line1": "12 Mabini St",
                "city": "Quezon City",
                "state": "Metro Manila",
                "postal_code": "1100",
                "country": "PH",
            },
        },
        "items": [
            {"product": "SKU-1", "quantity": 3, "price": "100.00"},
            {"product": "SKU-2", "quantity": 1, "price": "50.00"},
        ],
        "deliveryType": "delivery",
        "paymentMethod": "cash",
    }
    payload.update(overrides)
    return payload


def make_order(
    *,
    status: str = Order.STATUS_PENDING,
    customer_name: str = "Juan Dela Cruz",
    customer_email: str = "juan@example.com",
    customer_phone: str = "09175550101",
    total: str = "100.00",
    customer_user=None,
) -> Order:
    amount = Decimal(total)
    order = Order(
        order_no=generate_order_no(),
        customer_user=customer_user,
        customer_name=customer_name,
        customer_email=customer_email,
        customer_phone=customer_phone,
        delivery_type=Order.DELIVERY_PICKUP,
        payment_method=Order.METHOD_CASH,
        subtotal_amount=amount,
        delivery_fee=Decimal("0.00"),
        total_amount=amount,
        status=status,
        payment_status=Order.PAYMENT_PENDING_PAYMENT,
    )
    item = OrderItem(
        product_ref="SKU-1",
        product_name="Product SKU-1",
        quantity=1,
        unit_price=amount,
        line_total=amount,
    )
    return order_store.insert(order, [item])


class AuditRecorder:
    """Collects audit callbacks the way update_order_status emits them."""

    def __init__(self):
        self.calls: list[dict] = []

    def __call__(self, **kwargs):
        self.calls.append(kwargs)

    @property
    def last(self) -> dict:
        return self.calls[-1]
