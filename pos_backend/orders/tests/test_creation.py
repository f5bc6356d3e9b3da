from decimal import Decimal
from unittest.mock import MagicMock, patch

from django.db import DatabaseError
from django.test import TestCase, override_settings

from caching.gateway import MemoryCacheGateway
from orders.models import Order
from orders.services.cache_keys import list_key, order_key
from orders.services.exceptions import OrderValidationError, PaymentLinkError
from orders.services.order_creation import build_items, create_order, resolve_delivery_fee
from orders.services.order_ids import generate_order_no
from orders.tests.helpers import make_user, order_payload
from payments.services.paymongo import PaymentLink, PaymentProviderError
from products.models import Product


def _link(**overrides):
    fields = {
        "id": "link_abc123",
        "checkout_url": "https://pm.link/org/test/abc123",
        "reference": "AbC123",
        "status": "unpaid",
        "amount_minor": 40000,
        "fee_minor": 1000,
        "currency": "PHP",
    }
    fields.update(overrides)
    return PaymentLink(**fields)


class OrderNumberTests(TestCase):
    def test_format(self):
        order_no = generate_order_no(now_ms=1700000000000)

        prefix, millis, suffix = order_no.split("-")
        self.assertEqual(prefix, "ORD")
        self.assertEqual(millis, "1700000000000")
        self.assertEqual(len(suffix), 9)
        self.assertRegex(suffix, r"^[0-9A-Z]{9}$")


class DeliveryFeeTests(TestCase):
    """
    GUARANTEES:
    - pickup never pays a fee
    - delivery uses the caller's fee, else the configured default
    - negative / non-numeric fees are rejected
    """

    def test_pickup_is_free_even_if_fee_sent(self):
        self.assertEqual(resolve_delivery_fee("pickup", "99"), Decimal("0.00"))

    def test_delivery_default(self):
        self.assertEqual(resolve_delivery_fee("delivery"), Decimal("50.00"))

    @override_settings(ORDERS={"DEFAULT_DELIVERY_FEE": "75.50"})
    def test_delivery_default_from_settings(self):
        self.assertEqual(resolve_delivery_fee("delivery"), Decimal("75.50"))

    def test_delivery_custom_fee(self):
        self.assertEqual(resolve_delivery_fee("delivery", 80), Decimal("80.00"))
        self.assertEqual(resolve_delivery_fee("delivery", "0"), Decimal("0.00"))

    def test_invalid_fee(self):
        for raw in ["-1", "abc", True, "NaN"]:
            with self.subTest(raw=raw):
                with self.assertRaises(OrderValidationError) as ctx:
                    resolve_delivery_fee("delivery", raw)
                self.assertEqual(ctx.exception.message, "Invalid delivery fee amount")


class BuildItemsTests(TestCase):
    def setUp(self):
        self.product = Product.objects.create(
            sku="SKU-1",
            name="Adobo Rice Bowl",
            image_url="https://cdn.example.com/adobo.png",
            unit_price="100.00",
        )

    def test_catalog_fields_are_copied(self):
        items, subtotal = build_items([{"product": "SKU-1", "quantity": 3, "price": "100"}])

        self.assertEqual(items[0].product, self.product)
        self.assertEqual(items[0].product_name, "Adobo Rice Bowl")
        self.assertEqual(items[0].product_image, "https://cdn.example.com/adobo.png")
        self.assertEqual(items[0].line_total, Decimal("300.00"))
        self.assertEqual(subtotal, Decimal("300.00"))

    def test_lookup_by_product_id(self):
        items, _ = build_items([{"product": str(self.product.id), "quantity": 1, "price": 1}])

        self.assertEqual(items[0].product_name, "Adobo Rice Bowl")

    def test_unknown_product_gets_placeholder(self):
        items, _ = build_items([{"product": "SKU-404", "quantity": 1, "price": "10"}])

        self.assertIsNone(items[0].product)
        self.assertEqual(items[0].product_name, "Product SKU-404")
        self.assertEqual(items[0].product_image, "")

    def test_catalog_failure_gets_placeholder(self):
        with patch("products.services.catalog.find_product", side_effect=DatabaseError("down")):
            items, _ = build_items([{"product": "SKU-1", "quantity": 1, "price": "10"}])

        self.assertEqual(items[0].product_name, "Product SKU-1")

    def test_empty_items(self):
        with self.assertRaises(OrderValidationError) as ctx:
            build_items([])

        self.assertEqual(ctx.exception.message, "At least one item is required")

    def test_item_missing_fields(self):
        with self.assertRaises(OrderValidationError) as ctx:
            build_items([{"product": "SKU-1", "quantity": 1}])

        self.assertEqual(ctx.exception.message, "Each item must have product, quantity, and price")

    def test_bad_quantity_and_price(self):
        bad = [
            {"product": "SKU-1", "quantity": 0, "price": "1"},
            {"product": "SKU-1", "quantity": "1.5", "price": "1"},
            {"product": "SKU-1", "quantity": 1, "price": "-1"},
            {"product": "SKU-1", "quantity": 1, "price": "free"},
        ]
        for raw in bad:
            with self.subTest(raw=raw):
                with self.assertRaises(OrderValidationError):
                    build_items([raw])

    def test_integral_quantity_forms_accepted(self):
        for qty in [3, 3.0, "3", "3.0", Decimal("3")]:
            with self.subTest(qty=qty):
                items, subtotal = build_items([{"product": "SKU-1", "quantity": qty, "price": "100"}])

                self.assertEqual(items[0].quantity, 3)
                self.assertEqual(subtotal, Decimal("300.00"))

    def test_oversized_amounts_rejected(self):
        cases = [
            ({"product": "SKU-1", "quantity": 1, "price": "1e30"}, "items[0].price is too large"),
            ({"product": "SKU-1", "quantity": 1, "price": "10000000000"}, "items[0].price is too large"),
            ({"product": "SKU-1", "quantity": 10**30, "price": "1"}, "items[0].quantity is too large"),
            (
                {"product": "SKU-1", "quantity": 2000000, "price": "9999999"},
                "items[0] line total is too large",
            ),
        ]
        for raw, message in cases:
            with self.subTest(raw=raw):
                with self.assertRaises(OrderValidationError) as ctx:
                    build_items([raw])
                self.assertEqual(ctx.exception.message, message)

    def test_oversized_subtotal_rejected(self):
        raw = {"product": "SKU-1", "quantity": 1, "price": "9999999999.99"}

        with self.assertRaises(OrderValidationError) as ctx:
            build_items([raw, raw])

        self.assertEqual(ctx.exception.message, "Order subtotal is too large")


class CreateCashOrderTests(TestCase):
    """
    GUARANTEES:
    - total = Σ quantity × price + delivery fee
    - cash orders are confirmed / pending_payment with no link
    - the new order is cached and list pages are dropped
    """

    def setUp(self):
        self.cache = MemoryCacheGateway()
        self.provider = MagicMock()

    def _create(self, payload, principal=None):
        return create_order(
            payload,
            principal=principal,
            cache=self.cache,
            payment_provider=self.provider,
        )

    def test_delivery_cash_order_totals(self):
        result = self._create(order_payload())
        order = result["order"]

        self.assertEqual(order["subtotal_amount"], "350.00")
        self.assertEqual(order["delivery_fee"], "50.00")
        self.assertEqual(order["total_amount"], "400.00")
        self.assertEqual(order["status"], "confirmed")
        self.assertEqual(order["payment_status"], "pending_payment")
        self.assertIsNone(order["payment_link"])
        self.assertIsNone(result["payment_link"])
        self.provider.create_payment_link.assert_not_called()

        saved = Order.objects.get(order_no=order["order_no"])
        self.assertEqual(saved.total_amount, saved.subtotal_amount + saved.delivery_fee)
        self.assertEqual(saved.items.count(), 2)

    def test_pickup_has_no_fee(self):
        result = self._create(order_payload(deliveryType="pickup", deliveryFee="80"))

        self.assertEqual(result["order"]["delivery_fee"], "0.00")
        self.assertEqual(result["order"]["total_amount"], "350.00")

    def test_items_keep_request_order(self):
        result = self._create(order_payload())

        self.assertEqual([i["product_ref"] for i in result["order"]["items"]], ["SKU-1", "SKU-2"])

    def test_customer_defaults(self):
        payload = order_payload()
        payload["customer"] = {"phone": "0917 555 0101", "address": {"city": "Pasig"}}

        customer = self._create(payload)["order"]["customer"]

        self.assertEqual(customer["name"], "Guest Customer")
        self.assertEqual(customer["email"], "")
        self.assertEqual(customer["address"]["line1"], "")
        self.assertEqual(customer["address"]["city"], "Pasig")
        self.assertIsNone(customer["user_id"])

    def test_authenticated_user_owns_order(self):
        shopper = make_user("shopper")

        order = self._create(order_payload(), principal=shopper)["order"]

        self.assertEqual(order["customer"]["user_id"], str(shopper.id))

    def test_cached_and_lists_invalidated(self):
        stale = list_key({"page": 1})
        self.cache.set(stale, {"orders": []}, 300)

        order = self._create(order_payload())["order"]

        self.assertEqual(self.cache.get(order_key(order["order_no"])), order)
        self.assertIsNone(self.cache.get(stale))

    def test_missing_required_fields(self):
        payload = order_payload()
        del payload["paymentMethod"]

        with self.assertRaises(OrderValidationError) as ctx:
            self._create(payload)

        self.assertEqual(
            ctx.exception.message,
            "Missing required fields: customer, items, deliveryType, paymentMethod",
        )
        self.assertEqual(Order.objects.count(), 0)

    def test_missing_phone_or_address(self):
        for drop in ["phone", "address"]:
            payload = order_payload()
            del payload["customer"][drop]
            with self.subTest(drop=drop):
                with self.assertRaises(OrderValidationError) as ctx:
                    self._create(payload)
                self.assertEqual(
                    ctx.exception.message,
                    "Customer address and phone number are required",
                )

    def test_bad_enums_and_phone(self):
        cases = [
            order_payload(deliveryType="drone"),
            order_payload(paymentMethod="barter"),
        ]
        bad_phone = order_payload()
        bad_phone["customer"]["phone"] = "call me"
        cases.append(bad_phone)

        for payload in cases:
            with self.subTest(payload=payload):
                with self.assertRaises(OrderValidationError):
                    self._create(payload)

    def test_invalid_fee_rejected(self):
        with self.assertRaises(OrderValidationError):
            self._create(order_payload(deliveryFee="-5"))

    def test_oversized_fee_rejected(self):
        for fee in ["1e30", "10000000000"]:
            with self.subTest(fee=fee):
                with self.assertRaises(OrderValidationError) as ctx:
                    self._create(order_payload(deliveryFee=fee))
                self.assertEqual(ctx.exception.message, "Invalid delivery fee amount")

        self.assertEqual(Order.objects.count(), 0)

    def test_oversized_total_rejected(self):
        payload = order_payload(deliveryFee="9999999999.99")
        payload["items"] = [{"product": "SKU-1", "quantity": 1, "price": "1"}]

        with self.assertRaises(OrderValidationError) as ctx:
            self._create(payload)

        self.assertEqual(ctx.exception.message, "Order total is too large")


class CreateOnlineOrderTests(TestCase):
    """
    GUARANTEES:
    - online orders carry the PayMongo link and start processing / pending
    - a provider failure saves nothing and hands back the draft
    """

    def setUp(self):
        self.cache = MemoryCacheGateway()
        self.provider = MagicMock()

    def test_link_attached(self):
        self.provider.create_payment_link.return_value = _link()

        result = create_order(
            order_payload(paymentMethod="online"),
            principal=None,
            cache=self.cache,
            payment_provider=self.provider,
        )
        order = result["order"]

        amount, description, metadata = self.provider.create_payment_link.call_args.args
        self.assertEqual(amount, Decimal("400.00"))
        self.assertEqual(description, f"Payment for Order {order['order_no']}")
        self.assertEqual(metadata, {"oid": order["order_no"]})

        self.assertEqual(order["status"], "processing")
        self.assertEqual(order["payment_status"], "pending")
        self.assertEqual(order["payment_link"]["id"], "link_abc123")
        self.assertEqual(order["payment_link"]["checkout_url"], "https://pm.link/org/test/abc123")
        self.assertEqual(
            result["payment_link"],
            {
                "id": "link_abc123",
                "checkout_url": "https://pm.link/org/test/abc123",
                "reference": "AbC123",
                "amount": "400.00",
                "currency": "PHP",
                "status": "unpaid",
                "fee": "10.00",
                "net_amount": "390.00",
            },
        )

    def test_provider_failure_persists_nothing(self):
        self.provider.create_payment_link.side_effect = PaymentProviderError("API key invalid")

        with self.assertRaises(PaymentLinkError) as ctx:
            create_order(
                order_payload(paymentMethod="online"),
                principal=None,
                cache=self.cache,
                payment_provider=self.provider,
            )

        err = ctx.exception
        self.assertEqual(err.status_code, 400)
        self.assertEqual(err.message, "Failed to create payment link")
        self.assertEqual(err.data["payment_error"], "API key invalid")
        self.assertEqual(err.data["order"]["total_amount"], "400.00")
        self.assertEqual(Order.objects.count(), 0)
        self.assertEqual(len(self.cache), 0)
