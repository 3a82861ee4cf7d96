# orders/services/checkout_validator.py

"""
CHECKOUT VALIDATOR (READ-ONLY)

Purpose:
- Check a cart snapshot against the live catalog before anything is written.

Checks (in order):
1) cart not empty
2) every line well-formed (product id, quantity >= 1, unit price present)
3) every product exists AND is visible (one batch read)
4) stock covers the demand (summed per product across lines)
5) client price within tolerance of the catalog price

Hard rules:
- Errors are collected exhaustively (all shortfalls / all mismatches in one
  response), never "first bad line wins".
- The returned ValidatedCart carries the AUTHORITATIVE product rows read here;
  the committer prices orders from them, never from client input.
- No writes. Calling validate_cart() twice on unchanged data gives the same result.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from django.conf import settings

from backend.money import money
from orders.services.exceptions import (
    EmptyCartError,
    InsufficientStockError,
    MalformedLineError,
    PriceChangedError,
    PriceMismatch,
    ProductsUnavailableError,
    StockShortfall,
)
from products.services.inventory import fetch_visible_products


def _price_tolerance() -> Decimal:
    return Decimal(str(getattr(settings, "PRICE_DRIFT_TOLERANCE", "0.01")))


@dataclass(frozen=True)
class CartLine:
    product_id: str
    quantity: int
    unit_price_at_add_time: Decimal | None


@dataclass(frozen=True)
class ValidatedLine:
    line: CartLine
    product: object

    @property
    def unit_price(self) -> Decimal:
        return money(self.product.price)

    @property
    def quantity(self) -> int:
        return int(self.line.quantity)


@dataclass(frozen=True)
class ValidatedCart:
    lines: tuple

    @property
    def product_ids(self) -> list[str]:
        return list(OrderedDict.fromkeys(str(v.product.id) for v in self.lines))

    def __len__(self):
        return len(self.lines)


def _line_problem(idx: int, line) -> str | None:
    product_id = getattr(line, "product_id", None)
    if product_id in (None, ""):
        return f"Item {idx + 1}: productId is required"

    qty = getattr(line, "quantity", None)
    if isinstance(qty, bool) or not isinstance(qty, int):
        return f"Item {idx + 1}: quantity must be a whole number"
    if qty <= 0:
        return f"Item {idx + 1}: quantity must be at least 1"

    price = getattr(line, "unit_price_at_add_time", None)
    if price is None or price == "":
        return f"Item {idx + 1}: productPrice is required"
    try:
        if Decimal(str(price)) < Decimal("0.00"):
            return f"Item {idx + 1}: productPrice cannot be negative"
    except (InvalidOperation, ValueError):
        return f"Item {idx + 1}: productPrice must be a number"

    return None


def validate_cart(cart_lines) -> ValidatedCart:
    lines = list(cart_lines or [])
    if not lines:
        raise EmptyCartError()

    problems = [p for p in (_line_problem(i, line) for i, line in enumerate(lines)) if p]
    if problems:
        raise MalformedLineError(details=problems)

    requested_ids = list(OrderedDict.fromkeys(str(line.product_id) for line in lines))
    products = fetch_visible_products(requested_ids)

    missing = [pid for pid in requested_ids if pid not in products]
    if missing:
        raise ProductsUnavailableError(missing)

    demand: "OrderedDict[str, int]" = OrderedDict()
    for line in lines:
        pid = str(line.product_id)
        demand[pid] = demand.get(pid, 0) + int(line.quantity)

    shortfalls = []
    for pid, wanted in demand.items():
        product = products[pid]
        available = int(product.stock or 0)
        if available < wanted:
            shortfalls.append(StockShortfall(product_name=product.name, available=available))

    if shortfalls:
        raise InsufficientStockError(shortfalls)

    tolerance = _price_tolerance()
    mismatches = []
    flagged = set()
    for line in lines:
        pid = str(line.product_id)
        product = products[pid]
        drift = abs(Decimal(str(product.price)) - Decimal(str(line.unit_price_at_add_time)))
        if drift > tolerance and pid not in flagged:
            flagged.add(pid)
            mismatches.append(PriceMismatch(product_name=product.name))

    if mismatches:
        raise PriceChangedError(mismatches)

    return ValidatedCart(
        lines=tuple(
            ValidatedLine(line=line, product=products[str(line.product_id)])
            for line in lines
        )
    )
