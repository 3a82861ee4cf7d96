# orders/tests/test_reservation.py

from decimal import Decimal
from unittest.mock import patch

from django.db import DatabaseError
from django.test import TestCase, override_settings

from cities.models import City
from orders.models import Order, OrderGroup
from orders.services.checkout_orchestrator import place_orders
from orders.services.checkout_validator import CartLine, ValidatedCart, validate_cart
from orders.services.exceptions import (
    ConcurrentStockExhaustionError,
    EmptyCartError,
    LedgerNotifyError,
    MissingFieldsError,
    PersistenceError,
    ProductsUnavailableError,
)
from orders.services.reservation import CustomerInfo, commit_reservation
from products.models import Product

LEDGER_ON = {
    "WEBHOOK_URL": "https://ledger.example.com/hook",
    "SECRET": "s3cret",
    "TIMEOUT": 1,
    "MAX_ATTEMPTS": 3,
    "BACKOFF_SECONDS": 0,
}


def line(product, qty):
    return CartLine(
        product_id=str(product.id),
        quantity=qty,
        unit_price_at_add_time=product.price,
    )


class ReservationTestBase(TestCase):
    def setUp(self):
        City.objects.create(name="Casablanca", delivery_fee=Decimal("20.00"))

        self.product_a = Product.objects.create(name="Lamp", price=Decimal("100.00"), stock=5)
        self.product_b = Product.objects.create(name="Shade", price=Decimal("50.00"), stock=3)
        self.product_c = Product.objects.create(name="Bulb", price=Decimal("4.50"), stock=10)

        self.customer = CustomerInfo(
            customer_name="Amina Benali",
            customer_email="amina@example.com",
            phone="+212600000000",
            city="Casablanca",
        )

    def assertStock(self, product, expected):
        product.refresh_from_db()
        self.assertEqual(product.stock, expected)


class CommitReservationTests(ReservationTestBase):
    """
    GUARANTEES:
    - One order per cart line, all in one OrderGroup
    - total = catalog price * quantity + fee share
    - Stock decremented by exactly the ordered quantity
    """

    def test_two_line_cart_creates_two_orders(self):
        validated = validate_cart([line(self.product_a, 2), line(self.product_b, 1)])

        orders = commit_reservation(validated, self.customer)

        self.assertEqual(len(orders), 2)
        self.assertEqual(orders[0].total, Decimal("210.00"))
        self.assertEqual(orders[1].total, Decimal("60.00"))
        self.assertEqual(orders[0].delivery_fee + orders[1].delivery_fee, Decimal("20.00"))
        self.assertEqual({o.status for o in orders}, {Order.STATUS_PENDING})

        self.assertStock(self.product_a, 3)
        self.assertStock(self.product_b, 2)

    def test_orders_share_one_group_in_cart_order(self):
        validated = validate_cart(
            [line(self.product_c, 1), line(self.product_a, 1), line(self.product_b, 1)]
        )

        orders = commit_reservation(validated, self.customer)

        self.assertEqual(OrderGroup.objects.count(), 1)
        group = OrderGroup.objects.get()
        self.assertEqual({o.group_id for o in orders}, {group.id})
        self.assertEqual(
            list(group.orders.order_by("line_number").values_list("product__name", flat=True)),
            ["Bulb", "Lamp", "Shade"],
        )

    def test_fee_shares_always_sum_to_city_fee(self):
        City.objects.create(name="Rabat", delivery_fee=Decimal("10.00"))
        customer = CustomerInfo(
            customer_name="Youssef",
            customer_email="y@example.com",
            phone="0600",
            city="Rabat",
        )
        validated = validate_cart(
            [line(self.product_a, 1), line(self.product_b, 1), line(self.product_c, 1)]
        )

        orders = commit_reservation(validated, customer)

        self.assertEqual(
            [o.delivery_fee for o in orders],
            [Decimal("3.34"), Decimal("3.33"), Decimal("3.33")],
        )
        self.assertEqual(sum(o.delivery_fee for o in orders), Decimal("10.00"))

    def test_unknown_city_uses_default_fee(self):
        customer = CustomerInfo(
            customer_name="Sara",
            customer_email="sara@example.com",
            phone="0611",
            city="Unknownville",
        )

        orders = commit_reservation(validate_cart([line(self.product_b, 1)]), customer)

        self.assertEqual(orders[0].delivery_fee, Decimal("10.00"))
        self.assertEqual(orders[0].total, Decimal("60.00"))

    def test_orders_are_priced_from_catalog_not_client(self):
        validated = validate_cart(
            [
                CartLine(
                    product_id=str(self.product_a.id),
                    quantity=1,
                    unit_price_at_add_time=Decimal("99.995"),
                )
            ]
        )

        orders = commit_reservation(validated, self.customer)

        self.assertEqual(orders[0].product_price, Decimal("100.00"))

    def test_missing_customer_fields(self):
        customer = CustomerInfo(customer_name="", customer_email="a@example.com", phone=" ", city="Casablanca")
        validated = validate_cart([line(self.product_a, 1)])

        with self.assertRaises(MissingFieldsError) as ctx:
            commit_reservation(validated, customer)

        self.assertEqual(
            ctx.exception.details, ["customer_name is required", "phone is required"]
        )
        self.assertEqual(Order.objects.count(), 0)

    def test_empty_validated_cart(self):
        with self.assertRaises(EmptyCartError):
            commit_reservation(ValidatedCart(lines=()), self.customer)


class CommitFailureTests(ReservationTestBase):
    """
    GUARANTEES:
    - Any failure during commit leaves zero orders and unchanged stock
    """

    def assertNothingPersisted(self):
        self.assertEqual(Order.objects.count(), 0)
        self.assertEqual(OrderGroup.objects.count(), 0)
        self.assertStock(self.product_a, 5)
        self.assertStock(self.product_b, 3)
        self.assertStock(self.product_c, 10)

    def test_competing_checkout_loses_cleanly(self):
        # Both shoppers validated against stock=3; only one can have all of it.
        first = validate_cart([line(self.product_b, 3)])
        second = validate_cart([line(self.product_b, 2)])

        commit_reservation(first, self.customer)

        with self.assertRaises(ConcurrentStockExhaustionError) as ctx:
            commit_reservation(second, self.customer)

        self.assertEqual(ctx.exception.status_code, 409)
        self.assertEqual(Order.objects.count(), 1)
        self.assertStock(self.product_b, 0)

    def test_failure_on_second_line_rolls_back_first_line(self):
        validated = validate_cart(
            [line(self.product_a, 2), line(self.product_b, 2), line(self.product_c, 1)]
        )
        Product.objects.filter(id=self.product_b.id).update(stock=1)

        with self.assertRaises(ConcurrentStockExhaustionError):
            commit_reservation(validated, self.customer)

        self.assertEqual(Order.objects.count(), 0)
        self.assertEqual(OrderGroup.objects.count(), 0)
        self.assertStock(self.product_a, 5)
        self.assertStock(self.product_b, 1)
        self.assertStock(self.product_c, 10)

    def test_product_hidden_after_validation(self):
        validated = validate_cart([line(self.product_a, 1)])
        Product.objects.filter(id=self.product_a.id).update(visible=False)

        with self.assertRaises(ProductsUnavailableError):
            commit_reservation(validated, self.customer)

        self.assertNothingPersisted()

    def test_storage_failure_maps_to_persistence_error(self):
        validated = validate_cart([line(self.product_a, 1), line(self.product_b, 1)])

        with patch.object(Order.objects, "create", side_effect=DatabaseError("disk full")):
            with self.assertRaises(PersistenceError) as ctx:
                commit_reservation(validated, self.customer)

        self.assertEqual(ctx.exception.status_code, 500)
        self.assertNothingPersisted()


@override_settings(ORDER_LEDGER=LEDGER_ON)
class LedgerDispatchTests(ReservationTestBase):
    """
    GUARANTEES:
    - The ledger is called only after commit, once per order
    - A ledger outage never undoes a committed checkout
    """

    def test_ledger_receives_each_order_after_commit(self):
        with patch("orders.services.ledger._post_once") as post:
            with self.captureOnCommitCallbacks(execute=False) as callbacks:
                result = place_orders(
                    cart_lines=[line(self.product_a, 1), line(self.product_b, 1)],
                    customer=self.customer,
                )
            # Nothing sent while the transaction is still open.
            post.assert_not_called()

            for callback in callbacks:
                callback()

        self.assertEqual(len(callbacks), 1)
        self.assertEqual(post.call_count, 2)
        self.assertEqual(len(result.orders), 2)

    def test_ledger_failure_keeps_orders(self):
        with patch(
            "orders.services.ledger._post_once",
            side_effect=LedgerNotifyError("ledger down"),
        ) as post:
            with self.captureOnCommitCallbacks(execute=True):
                result = place_orders(
                    cart_lines=[line(self.product_a, 2)],
                    customer=self.customer,
                )

        self.assertEqual(post.call_count, 3)
        self.assertEqual(Order.objects.count(), 1)
        self.assertEqual(Order.objects.get().id, result.orders[0].id)
        self.assertStock(self.product_a, 3)

    def test_failed_commit_schedules_no_ledger_call(self):
        validated = validate_cart([line(self.product_a, 1)])
        Product.objects.filter(id=self.product_a.id).update(stock=0)

        with patch("orders.services.ledger._post_once") as post:
            with self.captureOnCommitCallbacks(execute=True) as callbacks:
                with self.assertRaises(ConcurrentStockExhaustionError):
                    commit_reservation(validated, self.customer)

        self.assertEqual(callbacks, [])
        post.assert_not_called()
