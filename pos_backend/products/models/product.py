# products/models/product.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models


class Product(models.Model):
    """
    Catalog entry.

    Orders only read name + image from here, at creation time, and copy
    them onto the order item. Catalog edits never rewrite past orders.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sku = models.CharField(max_length=128, unique=True, db_index=True)
    name = models.CharField(max_length=255, db_index=True)
    image_url = models.URLField(max_length=500, blank=True, default="")

    # Current list price (the order line keeps the price the client sent)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.name} ({self.sku})"

    def clean(self):
        if self.unit_price is None or Decimal(self.unit_price) < 0:
            raise ValidationError("Unit price cannot be negative")
