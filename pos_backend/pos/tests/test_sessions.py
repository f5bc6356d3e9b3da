from unittest.mock import MagicMock

from django.test import SimpleTestCase, TestCase, override_settings

from caching.gateway import MemoryCacheGateway
from orders.tests.helpers import make_user
from permissions.roles import Role
from pos.models import Cashier, CashierLoginEvent, OrderStatusAudit
from pos.services.audit import AuditDispatcher, log_order_status_update
from pos.services.exceptions import (
    CashierNotFoundError,
    CashierSessionError,
    CashierValidationError,
)
from pos.services.sessions import (
    force_logout,
    get_or_create_cashier,
    logout,
    record_login,
    session_key,
)


class CashierProfileTests(TestCase):
    def test_created_once_for_cashier(self):
        user = make_user("till1", Role.CASHIER)

        first = get_or_create_cashier(user)
        second = get_or_create_cashier(user)

        self.assertEqual(first.pk, second.pk)
        self.assertEqual(first.user_name, "till1")
        self.assertEqual(Cashier.objects.count(), 1)

    def test_non_cashier_has_no_profile(self):
        with self.assertRaises(CashierNotFoundError):
            get_or_create_cashier(make_user("shopper"))


class CashierSessionTests(TestCase):
    """
    GUARANTEES:
    - One live session per cashier
    - Logout always clears the session and the cache mirror
    - Force logout reports the session it ended
    - History is capped
    """

    def setUp(self):
        self.cache = MemoryCacheGateway()
        self.cashier = get_or_create_cashier(make_user("till1", Role.CASHIER))

    def _login(self, ip="10.0.0.5"):
        return record_login(self.cashier, ip_address=ip, user_agent="till-app", cache=self.cache)

    def test_login_opens_session(self):
        cashier = self._login()

        self.assertTrue(cashier.active_session)
        self.assertEqual(cashier.session_ip_address, "10.0.0.5")
        self.assertIsNotNone(cashier.last_login_at)
        self.assertEqual(self.cache.get(session_key("till1"))["ip_address"], "10.0.0.5")
        self.assertEqual(
            list(cashier.login_events.values_list("action", flat=True)),
            [CashierLoginEvent.ACTION_LOGIN],
        )

    def test_second_login_is_conflict(self):
        self._login()

        with self.assertRaises(CashierSessionError) as ctx:
            self._login(ip="10.0.0.9")

        self.assertEqual(ctx.exception.status_code, 409)
        self.assertEqual(ctx.exception.data["active_session"]["ip_address"], "10.0.0.5")

    def test_inactive_cashier_cannot_login(self):
        Cashier.objects.filter(pk=self.cashier.pk).update(is_active=False)

        with self.assertRaises(CashierNotFoundError):
            self._login()

    def test_logout_clears_session(self):
        self._login()

        cashier = logout(self.cashier.user, ip_address="10.0.0.5", cache=self.cache)

        self.assertFalse(cashier.active_session)
        self.assertIsNone(cashier.session_login_time)
        self.assertIsNone(self.cache.get(session_key("till1")))
        self._login()

    def test_logout_without_session_still_succeeds(self):
        cashier = logout(self.cashier.user, cache=self.cache)

        self.assertFalse(cashier.active_session)

    def test_force_logout(self):
        self._login()

        result = force_logout("TILL1", ip_address="10.0.0.1", cache=self.cache)

        self.assertEqual(result["user_name"], "till1")
        self.assertEqual(result["previous_session"]["ip_address"], "10.0.0.5")
        self.assertIsNotNone(result["previous_session"]["login_time"])
        self.cashier.refresh_from_db()
        self.assertFalse(self.cashier.active_session)
        self.assertIsNone(self.cache.get(session_key("till1")))

    def test_force_logout_errors(self):
        with self.assertRaises(CashierValidationError) as ctx:
            force_logout("", cache=self.cache)
        self.assertEqual(ctx.exception.message, "Username is required")

        with self.assertRaises(CashierNotFoundError):
            force_logout("ghost", cache=self.cache)

        with self.assertRaises(CashierSessionError) as ctx:
            force_logout("till1", cache=self.cache)
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(ctx.exception.message, "Cashier is not currently logged in")

    @override_settings(CASHIER_HISTORY_LIMIT=3)
    def test_login_history_is_capped(self):
        for _ in range(4):
            self._login()
            logout(self.cashier.user, cache=self.cache)

        events = list(self.cashier.login_events.all())
        self.assertEqual(len(events), 3)
        self.assertEqual(events[0].action, CashierLoginEvent.ACTION_LOGOUT)

    @override_settings(CASHIER_HISTORY_LIMIT=2)
    def test_order_history_is_capped(self):
        for n in range(5):
            log_order_status_update(
                self.cashier.user,
                order_key=f"ORD-{n}",
                update_data={"status": "received"},
                success=True,
            )

        keys = list(self.cashier.order_history.values_list("order_key", flat=True))
        self.assertEqual(keys, ["ORD-4", "ORD-3"])


class AuditDispatcherTests(SimpleTestCase):
    def test_inline_runs_immediately(self):
        fn = MagicMock()

        AuditDispatcher(asynchronous=False).submit(fn, 1, key="v")

        fn.assert_called_once_with(1, key="v")

    def test_failures_are_dropped(self):
        fn = MagicMock(side_effect=RuntimeError("boom"))

        with self.assertLogs("pos.services.audit", level="WARNING"):
            AuditDispatcher(asynchronous=False).submit(fn)

    def test_async_runs_on_worker(self):
        fn = MagicMock()
        dispatcher = AuditDispatcher(asynchronous=True, max_workers=1)

        dispatcher.submit(fn, "x")
        dispatcher.shutdown(wait=True)

        fn.assert_called_once_with("x")


class AuditWriteTests(TestCase):
    def test_entry_fields(self):
        user = make_user("till1", Role.CASHIER)

        entry = log_order_status_update(
            user,
            order_key="ORD-1",
            update_data={"status": "shipped"},
            success=False,
            error="Order not found",
            ip_address="192.168.1.20",
            user_agent="till-app",
        )

        self.assertEqual(OrderStatusAudit.objects.get(), entry)
        self.assertEqual(entry.cashier.user_name, "till1")
        self.assertEqual(entry.error, "Order not found")
