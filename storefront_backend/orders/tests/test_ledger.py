# orders/tests/test_ledger.py

import hashlib
import hmac
import json
from decimal import Decimal
from unittest.mock import MagicMock, patch
from urllib.error import URLError

from django.test import TestCase, override_settings

from orders.models import Order, OrderGroup
from orders.services.exceptions import LedgerNotifyError
from orders.services.ledger import (
    EVENT_ORDER_CREATED,
    dispatch_orders_created,
    notify_order_status_changed,
    order_ledger_row,
    send_ledger_event,
)
from products.models import Product

LEDGER_ON = {
    "WEBHOOK_URL": "https://ledger.example.com/hook",
    "SECRET": "s3cret",
    "TIMEOUT": 2,
    "MAX_ATTEMPTS": 3,
    "BACKOFF_SECONDS": 0,
}


def _ok_response(status_code=200):
    resp = MagicMock()
    resp.status = status_code
    resp.__enter__.return_value = resp
    resp.__exit__.return_value = False
    return resp


class LedgerTestBase(TestCase):
    def setUp(self):
        self.product = Product.objects.create(name="Kettle", price=Decimal("30.00"), stock=4)
        self.group = OrderGroup.objects.create()
        self.order = Order.objects.create(
            group=self.group,
            customer_name="Omar",
            customer_email="omar@example.com",
            phone="0612",
            city="Fes",
            product=self.product,
            quantity=2,
            product_price=Decimal("30.00"),
            delivery_fee=Decimal("10.00"),
            total=Decimal("70.00"),
        )


class OrderLedgerRowTests(LedgerTestBase):
    def test_row_uses_storefront_field_names(self):
        row = order_ledger_row(self.order)

        self.assertEqual(row["orderId"], str(self.order.id))
        self.assertEqual(row["groupId"], str(self.group.id))
        self.assertEqual(row["productName"], "Kettle")
        self.assertEqual(row["total"], "70.00")
        self.assertEqual(row["status"], Order.STATUS_PENDING)


class SendLedgerEventTests(LedgerTestBase):
    def test_not_configured_is_a_silent_skip(self):
        with patch("orders.services.ledger.urlopen") as urlopen:
            self.assertFalse(send_ledger_event(EVENT_ORDER_CREATED, {"orderId": "x"}))
        urlopen.assert_not_called()

    @override_settings(ORDER_LEDGER=LEDGER_ON)
    def test_posts_signed_json_body(self):
        with patch("orders.services.ledger.urlopen", return_value=_ok_response()) as urlopen:
            self.assertTrue(send_ledger_event(EVENT_ORDER_CREATED, {"orderId": "abc"}))

        req = urlopen.call_args.args[0]
        self.assertEqual(req.full_url, LEDGER_ON["WEBHOOK_URL"])
        self.assertEqual(req.get_method(), "POST")
        self.assertEqual(json.loads(req.data), {"event": "order.created", "data": {"orderId": "abc"}})

        expected = hmac.new(b"s3cret", req.data, hashlib.sha256).hexdigest()
        self.assertEqual(req.get_header("X-ledger-signature"), expected)
        self.assertEqual(urlopen.call_args.kwargs["timeout"], 2)

    @override_settings(ORDER_LEDGER=LEDGER_ON)
    def test_retries_then_succeeds(self):
        with patch(
            "orders.services.ledger.urlopen",
            side_effect=[URLError("refused"), _ok_response()],
        ) as urlopen:
            self.assertTrue(send_ledger_event(EVENT_ORDER_CREATED, {}))
        self.assertEqual(urlopen.call_count, 2)

    @override_settings(ORDER_LEDGER=LEDGER_ON)
    def test_gives_up_after_max_attempts(self):
        with patch("orders.services.ledger.urlopen", side_effect=URLError("refused")) as urlopen:
            with self.assertRaises(LedgerNotifyError):
                send_ledger_event(EVENT_ORDER_CREATED, {})
        self.assertEqual(urlopen.call_count, 3)

    @override_settings(ORDER_LEDGER=LEDGER_ON)
    def test_non_2xx_counts_as_failure(self):
        with patch("orders.services.ledger.urlopen", return_value=_ok_response(302)):
            with self.assertRaises(LedgerNotifyError):
                send_ledger_event(EVENT_ORDER_CREATED, {})


@override_settings(ORDER_LEDGER=LEDGER_ON)
class LedgerNotifierTests(LedgerTestBase):
    """
    GUARANTEES:
    - Notifier failures are swallowed (logged), never raised
    """

    def test_status_change_failure_is_swallowed(self):
        with patch("orders.services.ledger._post_once", side_effect=LedgerNotifyError("down")):
            self.assertFalse(notify_order_status_changed(self.order))

    def test_dispatch_counts_delivered_orders(self):
        with patch("orders.services.ledger._post_once") as post:
            delivered = dispatch_orders_created([self.order.id])

        self.assertEqual(delivered, 1)
        body = json.loads(post.call_args.args[1])
        self.assertEqual(body["event"], EVENT_ORDER_CREATED)
        self.assertEqual(body["data"]["orderId"], str(self.order.id))

    @override_settings(ORDER_LEDGER={"WEBHOOK_URL": ""})
    def test_dispatch_skips_when_not_configured(self):
        with patch("orders.services.ledger._post_once") as post:
            self.assertEqual(dispatch_orders_created([self.order.id]), 0)
        post.assert_not_called()


class FakeClock:
    """Stands in for the time module: sleeping and slow posts advance `now`."""

    def __init__(self):
        self.now = 1000.0

    def monotonic(self):
        return self.now

    def sleep(self, seconds):
        self.now += seconds


@override_settings(
    ORDER_LEDGER={
        "WEBHOOK_URL": "https://ledger.example.com/hook",
        "SECRET": "",
        "TIMEOUT": 10,
        "MAX_ATTEMPTS": 3,
        "BACKOFF_SECONDS": 1,
        "DISPATCH_BUDGET_SECONDS": 5,
    }
)
class LedgerDispatchBudgetTests(LedgerTestBase):
    """
    GUARANTEES:
    - A hanging or failing ledger cannot hold a request longer than the budget
    - Socket timeouts are clamped to the time left in the budget
    """

    def setUp(self):
        super().setUp()
        self.clock = FakeClock()
        self.order_ids = [self.order.id]
        for _ in range(4):
            extra = Order.objects.create(
                group=self.group,
                customer_name="Omar",
                customer_email="omar@example.com",
                phone="0612",
                city="Fes",
                product=self.product,
                quantity=1,
                product_price=Decimal("30.00"),
                delivery_fee=Decimal("0.00"),
                total=Decimal("30.00"),
            )
            self.order_ids.append(extra.id)

    def _hanging_post(self, url, raw_body, *, timeout):
        self.clock.now += timeout
        raise LedgerNotifyError("timed out")

    def test_hanging_ledger_stays_within_budget(self):
        start = self.clock.now

        with patch("orders.services.ledger.time", self.clock), patch(
            "orders.services.ledger._post_once", side_effect=self._hanging_post
        ) as post:
            delivered = dispatch_orders_created(self.order_ids)

        self.assertEqual(delivered, 0)
        self.assertLessEqual(self.clock.now - start, 5)
        for call in post.call_args_list:
            self.assertLessEqual(call.kwargs["timeout"], 5)

    def test_fast_failures_retry_until_budget_then_stop(self):
        start = self.clock.now

        def failing_post(url, raw_body, *, timeout):
            self.clock.now += 0.5
            raise LedgerNotifyError("503")

        with patch("orders.services.ledger.time", self.clock), patch(
            "orders.services.ledger._post_once", side_effect=failing_post
        ) as post:
            delivered = dispatch_orders_created(self.order_ids)

        self.assertEqual(delivered, 0)
        self.assertLessEqual(self.clock.now - start, 5)
        # Without a budget this would be 5 orders x 3 attempts.
        self.assertLess(post.call_count, 15)

    def test_healthy_ledger_delivers_everything(self):
        with patch("orders.services.ledger.time", self.clock), patch(
            "orders.services.ledger._post_once"
        ) as post:
            delivered = dispatch_orders_created(self.order_ids)

        self.assertEqual(delivered, 5)
        self.assertEqual(post.call_count, 5)
