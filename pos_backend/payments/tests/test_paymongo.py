import base64
import io
import json
from decimal import Decimal
from unittest import mock
from urllib.error import HTTPError, URLError

from django.test import SimpleTestCase, override_settings

from payments.services.paymongo import (
    LINK_PAYMENT_METHODS,
    PayMongoClient,
    PaymentProviderError,
    from_minor,
    to_minor,
)

LINK_RESPONSE = {
    "data": {
        "id": "link_abc123",
        "type": "link",
        "attributes": {
            "amount": 40000,
            "currency": "PHP",
            "fee": 1000,
            "checkout_url": "https://pm.link/org/abc123",
            "reference_number": "REF123",
            "status": "unpaid",
        },
    }
}


def _ok(payload):
    opened = mock.MagicMock()
    opened.__enter__.return_value.read.return_value = json.dumps(payload).encode("utf-8")
    return opened


class AmountConversionTests(SimpleTestCase):
    def test_to_minor_rounds_half_up(self):
        self.assertEqual(to_minor(Decimal("400.00")), 40000)
        self.assertEqual(to_minor("10.005"), 1001)

    def test_to_minor_rejects_garbage(self):
        with self.assertRaises(PaymentProviderError):
            to_minor("ten")

    def test_from_minor(self):
        self.assertEqual(from_minor(40000), Decimal("400.00"))


class PayMongoClientTests(SimpleTestCase):
    """
    GUARANTEES:
    - Link requests carry Basic auth, centavo amounts and tagged metadata
    - Provider error details are surfaced verbatim
    - Network / config failures become PaymentProviderError
    """

    def setUp(self):
        self.client = PayMongoClient(secret_key="sk_test_123", base_url="https://api.example/v1/")

    @mock.patch("payments.services.paymongo.urlopen")
    def test_create_payment_link_request_shape(self, urlopen):
        urlopen.return_value = _ok(LINK_RESPONSE)

        link = self.client.create_payment_link(
            Decimal("400.00"), "Payment for Order ORD-1", {"oid": "ORD-1"}
        )

        req = urlopen.call_args.args[0]
        self.assertEqual(req.full_url, "https://api.example/v1/links")
        self.assertEqual(req.get_method(), "POST")
        expected_auth = "Basic " + base64.b64encode(b"sk_test_123:").decode("ascii")
        self.assertEqual(req.get_header("Authorization"), expected_auth)

        attrs = json.loads(req.data.decode("utf-8"))["data"]["attributes"]
        self.assertEqual(attrs["amount"], 40000)
        self.assertEqual(attrs["currency"], "PHP")
        self.assertEqual(attrs["description"], "Payment for Order ORD-1")
        self.assertEqual(attrs["metadata"], {"oid": "ORD-1", "source": "ecommerce_api"})
        self.assertEqual(attrs["payment_method_allowed"], LINK_PAYMENT_METHODS)

        self.assertEqual(link.id, "link_abc123")
        self.assertEqual(link.checkout_url, "https://pm.link/org/abc123")
        self.assertEqual(link.reference, "REF123")
        self.assertEqual(link.amount, Decimal("400.00"))
        self.assertEqual(link.fee, Decimal("10.00"))
        self.assertEqual(link.net_amount, Decimal("390.00"))

    @mock.patch("payments.services.paymongo.urlopen")
    def test_provider_error_detail_is_surfaced(self, urlopen):
        body = json.dumps({"errors": [{"code": "parameter_below_minimum", "detail": "amount is too low"}]})
        urlopen.side_effect = HTTPError(
            "https://api.example/v1/links", 400, "Bad Request", {}, io.BytesIO(body.encode("utf-8"))
        )

        with self.assertRaisesMessage(PaymentProviderError, "amount is too low"):
            self.client.create_payment_link(Decimal("1.00"), "x", {})

    @mock.patch("payments.services.paymongo.urlopen")
    def test_network_failure(self, urlopen):
        urlopen.side_effect = URLError("connection refused")

        with self.assertRaises(PaymentProviderError):
            self.client.create_payment_link(Decimal("100.00"), "x", {})

    @mock.patch("payments.services.paymongo.urlopen")
    def test_non_json_response(self, urlopen):
        opened = mock.MagicMock()
        opened.__enter__.return_value.read.return_value = b"<html>oops</html>"
        urlopen.return_value = opened

        with self.assertRaises(PaymentProviderError):
            self.client.get_payment_link("link_abc123")

    @mock.patch("payments.services.paymongo.urlopen")
    def test_get_payment_link(self, urlopen):
        urlopen.return_value = _ok(LINK_RESPONSE)

        link = self.client.get_payment_link("link_abc123")

        req = urlopen.call_args.args[0]
        self.assertEqual(req.full_url, "https://api.example/v1/links/link_abc123")
        self.assertEqual(req.get_method(), "GET")
        self.assertEqual(link.status, "unpaid")

    def test_missing_secret_key(self):
        client = PayMongoClient(secret_key="")

        with self.assertRaises(PaymentProviderError):
            client.create_payment_link(Decimal("100.00"), "x", {})

    @override_settings(
        PAYMENTS={"PAYMONGO": {"SECRET_KEY": "sk_live_x", "BASE_URL": "https://pm.example/v1"}},
        ORDERS={"CURRENCY": "PHP"},
    )
    def test_from_settings(self):
        client = PayMongoClient.from_settings()

        self.assertEqual(client.secret_key, "sk_live_x")
        self.assertEqual(client.base_url, "https://pm.example/v1")
