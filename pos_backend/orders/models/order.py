# orders/models/order.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models


class Order(models.Model):
    """
    Customer order.

    Identity:
    - id        -> surrogate key (store internal)
    - order_no  -> business id "ORD-<epoch ms>-<9 base36>", what clients
                   and cashiers use; immutable once written

    Money:
    - total_amount == subtotal_amount + delivery_fee (enforced by the
      creation engine, which is the only writer of these columns)

    Status:
    - pending -> received -> preparing -> shipped -> delivered
    - cancelled from anything but delivered
    - confirmed / processing are creation-time entry states
      (cash / online respectively)
    """

    STATUS_PENDING = "pending"
    STATUS_CONFIRMED = "confirmed"
    STATUS_PROCESSING = "processing"
    STATUS_RECEIVED = "received"
    STATUS_PREPARING = "preparing"
    STATUS_SHIPPED = "shipped"
    STATUS_DELIVERED = "delivered"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_CONFIRMED, "Confirmed"),
        (STATUS_PROCESSING, "Processing"),
        (STATUS_RECEIVED, "Received"),
        (STATUS_PREPARING, "Preparing"),
        (STATUS_SHIPPED, "Shipped"),
        (STATUS_DELIVERED, "Delivered"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    PAYMENT_PENDING = "pending"
    PAYMENT_PENDING_PAYMENT = "pending_payment"
    PAYMENT_PAID = "paid"
    PAYMENT_FAILED = "failed"
    PAYMENT_REFUNDED = "refunded"

    PAYMENT_STATUS_CHOICES = [
        (PAYMENT_PENDING, "Pending"),
        (PAYMENT_PENDING_PAYMENT, "Pending Payment"),
        (PAYMENT_PAID, "Paid"),
        (PAYMENT_FAILED, "Failed"),
        (PAYMENT_REFUNDED, "Refunded"),
    ]

    DELIVERY_PICKUP = "pickup"
    DELIVERY_DELIVERY = "delivery"

    DELIVERY_TYPE_CHOICES = [
        (DELIVERY_PICKUP, "Pickup"),
        (DELIVERY_DELIVERY, "Delivery"),
    ]

    METHOD_CASH = "cash"
    METHOD_ONLINE = "online"

    PAYMENT_METHOD_CHOICES = [
        (METHOD_CASH, "Cash"),
        (METHOD_ONLINE, "Online"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order_no = models.CharField(max_length=64, unique=True, editable=False)

    # ---------------- customer ----------------
    customer_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )
    customer_name = models.CharField(max_length=120, blank=True, default="")
    customer_email = models.EmailField(blank=True, default="")
    customer_phone = models.CharField(max_length=40)

    address_line1 = models.CharField(max_length=255, blank=True, default="")
    address_city = models.CharField(max_length=120, blank=True, default="")
    address_state = models.CharField(max_length=120, blank=True, default="")
    address_postal_code = models.CharField(max_length=20, blank=True, default="")
    address_country = models.CharField(max_length=120, blank=True, default="")

    # ---------------- fulfilment + payment ----------------
    delivery_type = models.CharField(max_length=16, choices=DELIVERY_TYPE_CHOICES)
    payment_method = models.CharField(max_length=16, choices=PAYMENT_METHOD_CHOICES)

    subtotal_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    delivery_fee = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    total_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    currency = models.CharField(max_length=3, default="PHP")

    status = models.CharField(
        max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING
    )
    payment_status = models.CharField(
        max_length=20, choices=PAYMENT_STATUS_CHOICES, default=PAYMENT_PENDING
    )

    # ---------------- payment link (online only) ----------------
    payment_link_id = models.CharField(max_length=64, blank=True, default="")
    checkout_url = models.URLField(max_length=500, blank=True, default="")
    payment_reference = models.CharField(max_length=64, blank=True, default="")
    payment_link_status = models.CharField(max_length=32, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["created_at"], name="orders_created_idx"),
            models.Index(fields=["status", "created_at"], name="orders_status_created_idx"),
            models.Index(fields=["total_amount"], name="orders_total_idx"),
        ]

    def __str__(self):
        return f"{self.order_no} | {self.total_amount} | {self.status}"
