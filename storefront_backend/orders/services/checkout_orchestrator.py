# orders/services/checkout_orchestrator.py

"""
CHECKOUT ORCHESTRATOR (APPLICATION SERVICE)

Purpose:
- One entry point for the storefront: validate the cart snapshot, then commit.

Notes:
- Validation is read-only; the committer re-checks stock under row locks.
- No automatic retry on ConcurrentStockExhaustionError: the client re-validates
  (it may now get InsufficientStockError, which is the accurate answer).
"""

from __future__ import annotations

from dataclasses import dataclass

from orders.models import Order
from orders.services.checkout_validator import CartLine, validate_cart
from orders.services.reservation import CustomerInfo, commit_reservation


@dataclass(frozen=True)
class CheckoutResult:
    orders: list

    @property
    def group_id(self):
        return self.orders[0].group_id if self.orders else None


def place_orders(*, cart_lines: list[CartLine], customer: CustomerInfo) -> CheckoutResult:
    validated = validate_cart(cart_lines)
    orders = commit_reservation(validated, customer)
    return CheckoutResult(orders=orders)


def place_single_order(*, line: CartLine, customer: CustomerInfo) -> Order:
    return place_orders(cart_lines=[line], customer=customer).orders[0]
