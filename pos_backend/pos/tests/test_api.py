from django.test import TestCase
from rest_framework.test import APIClient

from caching.apps import get_cache_gateway
from orders.tests.helpers import make_order, make_user
from permissions.roles import Role
from pos.models import Cashier
from pos.services.audit import log_order_status_update
from pos.services.sessions import session_key

LOGIN_URL = "/api/pos/login/"
LOGOUT_URL = "/api/pos/logout/"
FORCE_LOGOUT_URL = "/api/pos/force-logout/"


class PosApiTestCase(TestCase):
    def setUp(self):
        get_cache_gateway().clear()
        self.client = APIClient()
        self.cashier_user = make_user("till1", Role.CASHIER, password="Secret123!")
        self.admin = make_user("boss", Role.ADMIN)
        self.shopper = make_user("shopper", password="Secret123!")

    def _login(self, **extra):
        return self.client.post(
            LOGIN_URL,
            {"username": "till1", "password": "Secret123!"},
            format="json",
            **extra,
        )


class PosLoginApiTests(PosApiTestCase):
    """
    GUARANTEES:
    - Cashier login returns a JWT pair and the cashier profile
    - A second device is refused with 409
    - Non-cashier accounts cannot open a POS session
    """

    def test_login(self):
        res = self._login()

        self.assertEqual(res.status_code, 200)
        self.assertIn("access", res.data["data"])
        self.assertIn("refresh", res.data["data"])
        self.assertEqual(res.data["data"]["cashier"]["user_name"], "till1")
        self.assertTrue(res.data["data"]["cashier"]["active_session"])
        self.assertIsNotNone(get_cache_gateway().get(session_key("till1")))

    def test_token_works_for_status_update(self):
        token = self._login().data["data"]["access"]
        order = make_order()

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        res = self.client.patch(
            f"/api/pos/orders/{order.order_no}/status/", {"status": "received"}, format="json"
        )

        self.assertEqual(res.status_code, 200)

    def test_second_login_conflict(self):
        self._login()

        res = self._login()

        self.assertEqual(res.status_code, 409)
        self.assertEqual(
            res.data["message"],
            "Cashier already logged in from another device. Please logout first.",
        )
        self.assertIn("active_session", res.data["data"])

    def test_wrong_password(self):
        res = self.client.post(LOGIN_URL, {"username": "till1", "password": "nope"}, format="json")

        self.assertEqual(res.status_code, 401)
        self.assertEqual(res.data["message"], "Invalid credentials")

    def test_shopper_cannot_open_pos_session(self):
        res = self.client.post(
            LOGIN_URL, {"username": "shopper", "password": "Secret123!"}, format="json"
        )

        self.assertEqual(res.status_code, 401)

    def test_missing_fields(self):
        res = self.client.post(LOGIN_URL, {"username": "till1"}, format="json")

        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["message"], "Validation error")
        self.assertIn("password: This field is required.", res.data["errors"])


class PosLogoutApiTests(PosApiTestCase):
    def test_cashier_logout(self):
        self._login()
        self.client.force_authenticate(self.cashier_user)

        res = self.client.post(LOGOUT_URL)

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["message"], "Logged out successfully")
        self.assertFalse(Cashier.objects.get(user=self.cashier_user).active_session)
        self.assertIsNone(get_cache_gateway().get(session_key("till1")))

    def test_logout_is_cashier_only(self):
        self.client.force_authenticate(self.shopper)

        self.assertEqual(self.client.post(LOGOUT_URL).status_code, 403)

    def test_logout_requires_auth(self):
        self.assertEqual(self.client.post(LOGOUT_URL).status_code, 401)


class PosForceLogoutApiTests(PosApiTestCase):
    """
    GUARANTEES:
    - Admin-only
    - 400 without userName, 404 for unknown cashier, 400 when not logged in
    - Ends the session so the cashier can log in again
    """

    def test_force_logout(self):
        self._login(REMOTE_ADDR="10.1.1.7")
        self.client.force_authenticate(self.admin)

        res = self.client.post(FORCE_LOGOUT_URL, {"userName": "till1"}, format="json")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["message"], "Cashier till1 has been forcefully logged out")
        self.assertEqual(res.data["data"]["user_name"], "till1")
        self.assertEqual(res.data["data"]["previous_session"]["ip_address"], "10.1.1.7")

        self.client.force_authenticate(None)
        self.assertEqual(self._login().status_code, 200)

    def test_requires_user_name(self):
        self.client.force_authenticate(self.admin)

        res = self.client.post(FORCE_LOGOUT_URL, {}, format="json")

        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["message"], "Username is required")

    def test_unknown_cashier(self):
        self.client.force_authenticate(self.admin)

        res = self.client.post(FORCE_LOGOUT_URL, {"userName": "ghost"}, format="json")

        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.data["message"], "Cashier not found")

    def test_not_logged_in(self):
        Cashier.objects.create(user=self.cashier_user, user_name="till1")
        self.client.force_authenticate(self.admin)

        res = self.client.post(FORCE_LOGOUT_URL, {"userName": "till1"}, format="json")

        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["message"], "Cashier is not currently logged in")

    def test_cashier_cannot_force_logout(self):
        self.client.force_authenticate(self.cashier_user)

        res = self.client.post(FORCE_LOGOUT_URL, {"userName": "till1"}, format="json")

        self.assertEqual(res.status_code, 403)


class CashierOrderHistoryApiTests(PosApiTestCase):
    def test_admin_reads_history(self):
        log_order_status_update(
            self.cashier_user,
            order_key="ORD-1",
            update_data={"status": "received"},
            success=True,
        )
        self.client.force_authenticate(self.admin)

        res = self.client.get("/api/pos/cashiers/till1/order-history/")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["data"]["cashier"]["user_name"], "till1")
        self.assertEqual(res.data["data"]["history"][0]["order_key"], "ORD-1")

    def test_cashier_cannot_read_history(self):
        self.client.force_authenticate(self.cashier_user)

        res = self.client.get("/api/pos/cashiers/till1/order-history/")

        self.assertEqual(res.status_code, 403)

    def test_unknown_cashier(self):
        self.client.force_authenticate(self.admin)

        res = self.client.get("/api/pos/cashiers/ghost/order-history/")

        self.assertEqual(res.status_code, 404)
