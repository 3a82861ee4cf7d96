# products/services/inventory.py

"""
======================================================
PATH: products/services/inventory.py
======================================================
CATALOG STOCK SERVICES

Purpose:
- Batch read of purchasable (visible) products for checkout validation.
- Row locking of products for the reservation transaction.
- Conditional stock decrement (the only write path for stock during checkout).

Rules:
- Quantities are integer units.
- A decrement is applied ONLY if enough stock remains at UPDATE time:
    UPDATE product SET stock = stock - qty WHERE id = ? AND stock >= qty AND visible
  This is the commit-time re-check; validation reads can be stale.
- Callers MUST run decrement_stock() / lock_products() inside transaction.atomic.
"""

from __future__ import annotations

from typing import Iterable

from django.db import transaction
from django.db.models import F

from products.models import Product


class InsufficientStockError(Exception):
    """Raised when a conditional decrement finds less stock than requested."""

    def __init__(self, *, product_id, requested: int):
        self.product_id = product_id
        self.requested = requested
        super().__init__(
            f"Stock for product {product_id} could not cover {requested} unit(s)"
        )


def _to_int_qty(value) -> int:
    """
    Quantity normalizer.
    HARD RULE: quantities are integer units in this system.
    """
    if isinstance(value, bool):
        raise ValueError("quantity must be a whole integer unit")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        s = value.strip()
        if s.isdigit():
            return int(s)
    raise ValueError("quantity must be a whole integer unit")


def fetch_visible_products(product_ids: Iterable) -> dict:
    """
    One batch read, restricted to visible products.

    Returns {str(product_id): Product}. Missing keys mean the product does
    not exist or is hidden; callers decide how to report that.
    """
    ids = {str(pid) for pid in product_ids}
    if not ids:
        return {}

    qs = Product.objects.filter(id__in=ids, visible=True)
    return {str(p.id): p for p in qs}


def lock_products(product_ids: Iterable) -> dict:
    """
    Lock product rows for the rest of the current transaction.

    Rows are locked in primary-key order so two checkouts touching the same
    products always acquire locks in the same sequence.
    """
    if not transaction.get_connection().in_atomic_block:
        raise RuntimeError("lock_products() must run inside transaction.atomic")

    ids = sorted({str(pid) for pid in product_ids})
    qs = Product.objects.select_for_update().filter(id__in=ids).order_by("id")
    return {str(p.id): p for p in qs}


def decrement_stock(*, product_id, quantity) -> None:
    """
    Atomic conditional decrement.

    Raises InsufficientStockError when the guarded UPDATE touches no row:
    the product ran out (or was hidden) after the caller last read it.
    """
    qty = _to_int_qty(quantity)
    if qty <= 0:
        raise ValueError("quantity must be at least 1")

    if not transaction.get_connection().in_atomic_block:
        raise RuntimeError("decrement_stock() must run inside transaction.atomic")

    updated = Product.objects.filter(
        id=product_id,
        visible=True,
        stock__gte=qty,
    ).update(stock=F("stock") - qty)

    if updated != 1:
        raise InsufficientStockError(product_id=product_id, requested=qty)
