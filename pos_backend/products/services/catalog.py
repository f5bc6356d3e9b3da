"""
PATH: products/services/catalog.py

CATALOG LOOKUP FOR ORDER ITEMS

Purpose:
- Resolve the display fields (name, image) an order item snapshots.

Rules:
- A reference is tried as a product UUID first, then as a SKU.
- Lookup is permissive: an unknown reference, or a lookup that fails,
  yields a placeholder instead of rejecting the order.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from django.db import DatabaseError

from products.models import Product

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ItemDisplay:
    product: Optional[Product]
    name: str
    image: str


def placeholder_name(product_ref: str) -> str:
    return f"Product {product_ref}"


def _as_uuid(value: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return None


def find_product(product_ref: str) -> Optional[Product]:
    ref = str(product_ref or "").strip()
    if not ref:
        return None

    pid = _as_uuid(ref)
    if pid is not None:
        product = Product.objects.filter(id=pid).first()
        if product is not None:
            return product

    return Product.objects.filter(sku=ref).first()


def resolve_item_display(product_ref: str) -> ItemDisplay:
    ref = str(product_ref)
    try:
        product = find_product(ref)
    except DatabaseError as e:
        logger.warning(
            "product lookup failed, using placeholder",
            extra={"product_ref": ref, "error": str(e)},
        )
        product = None
    else:
        if product is None:
            logger.warning("product not found, using placeholder", extra={"product_ref": ref})

    if product is None:
        return ItemDisplay(product=None, name=placeholder_name(ref), image="")

    return ItemDisplay(product=product, name=product.name, image=product.image_url or "")
