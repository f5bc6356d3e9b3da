# products/tests/test_products.py

from decimal import Decimal
from unittest import mock

from django.core.exceptions import ValidationError
from django.db import DatabaseError, IntegrityError
from django.test import TestCase

from products.models import Product
from products.services.catalog import find_product, resolve_item_display


class ProductModelTests(TestCase):
    """
    Product model tests.

    GUARANTEES:
    - SKU uniqueness is enforced
    - Pricing is sane
    """

    def test_sku_must_be_unique(self):
        Product.objects.create(name="Americano", sku="COF-AMER", unit_price=Decimal("120.00"))

        with self.assertRaises(IntegrityError):
            Product.objects.create(
                name="Americano Duplicate",
                sku="COF-AMER",
                unit_price=Decimal("125.00"),
            )

    def test_negative_price_fails_validation(self):
        product = Product(name="Refund", sku="NEG-1", unit_price=Decimal("-1.00"))

        with self.assertRaises(ValidationError):
            product.full_clean()

    def test_product_string_representation(self):
        product = Product.objects.create(
            name="Cafe Latte",
            sku="COF-LATTE",
            unit_price=Decimal("150.00"),
        )

        self.assertIn("Cafe Latte", str(product))


class CatalogLookupTests(TestCase):
    """
    GUARANTEES:
    - References resolve by id, then by SKU
    - Unknown or failing lookups fall back to a placeholder
    """

    def setUp(self):
        self.product = Product.objects.create(
            name="Butter Croissant",
            sku="PAS-CROIS",
            unit_price=Decimal("95.00"),
            image_url="https://cdn.example.com/croissant.png",
        )

    def test_lookup_by_id(self):
        self.assertEqual(find_product(str(self.product.id)), self.product)

    def test_lookup_by_sku(self):
        self.assertEqual(find_product("PAS-CROIS"), self.product)

    def test_known_product_display(self):
        display = resolve_item_display("PAS-CROIS")

        self.assertEqual(display.product, self.product)
        self.assertEqual(display.name, "Butter Croissant")
        self.assertEqual(display.image, "https://cdn.example.com/croissant.png")

    def test_unknown_product_gets_placeholder(self):
        display = resolve_item_display("p-404")

        self.assertIsNone(display.product)
        self.assertEqual(display.name, "Product p-404")
        self.assertEqual(display.image, "")

    def test_lookup_error_gets_placeholder(self):
        with mock.patch(
            "products.services.catalog.find_product",
            side_effect=DatabaseError("boom"),
        ):
            display = resolve_item_display("PAS-CROIS")

        self.assertIsNone(display.product)
        self.assertEqual(display.name, "Product PAS-CROIS")
