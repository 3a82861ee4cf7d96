# orders/tests/test_concurrency.py

import threading
from decimal import Decimal

from django.db import connection
from django.test import TransactionTestCase

from orders.models import Order, OrderGroup
from orders.services.checkout_validator import CartLine, validate_cart
from orders.services.exceptions import CheckoutError
from orders.services.reservation import CustomerInfo, commit_reservation
from products.models import Product


class ConcurrentCheckoutTests(TransactionTestCase):
    """
    Two shoppers race for the last unit on real, separate connections.

    GUARANTEES:
    - Exactly one checkout wins
    - The loser gets ConcurrentStockExhaustionError (not a storage error)
    - Stock ends at zero, never negative; the loser leaves no rows behind
    """

    def setUp(self):
        self.product = Product.objects.create(
            name="Last Lamp", price=Decimal("80.00"), stock=1
        )
        self.customer = CustomerInfo(
            customer_name="Racer",
            customer_email="racer@example.com",
            phone="0600",
            city="Tangier",
        )

    def _commit(self, validated, barrier, results):
        try:
            barrier.wait(timeout=10)
            commit_reservation(validated, self.customer)
            results.append("ok")
        except CheckoutError as exc:
            results.append(exc.code)
        finally:
            connection.close()

    def test_last_unit_has_exactly_one_winner(self):
        line = CartLine(
            product_id=str(self.product.id),
            quantity=1,
            unit_price_at_add_time=Decimal("80.00"),
        )
        # Both carts pass validation while the unit is still in stock.
        carts = [validate_cart([line]), validate_cart([line])]

        barrier = threading.Barrier(len(carts))
        results = []
        threads = [
            threading.Thread(target=self._commit, args=(cart, barrier, results))
            for cart in carts
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=60)

        self.assertEqual(sorted(results), ["ConcurrentStockExhaustionError", "ok"])

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 0)
        self.assertEqual(Order.objects.count(), 1)
        self.assertEqual(OrderGroup.objects.count(), 1)
