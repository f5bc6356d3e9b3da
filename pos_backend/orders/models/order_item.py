# orders/models/order_item.py

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models


class OrderItem(models.Model):
    """
    One order line.

    product_ref is what the client sent; product is the catalog row it
    resolved to (if any). Name and image are copied at creation time.
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )

    position = models.PositiveIntegerField(default=0)

    product_ref = models.CharField(max_length=128)
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_items",
    )
    product_name = models.CharField(max_length=255)
    product_image = models.CharField(max_length=500, blank=True, default="")

    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    unit_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    line_total = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        ordering = ["position", "id"]

    def __str__(self):
        return f"{self.product_name} x {self.quantity}"
