# orders/services/exceptions.py

"""
CHECKOUT ERRORS

Centralized domain errors for order placement.

Every error carries:
- status_code: HTTP status the storefront API answers with
- message:     short human summary
- details:     per-line messages (so the client can fix the whole cart at once)

Taxonomy:
- client input        -> 400 (never retried by the server)
- not found           -> 404
- state conflict      -> 400 (pre-commit validation) / 409 (commit-time re-check)
- infrastructure      -> 500 (nothing persisted)
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class StockShortfall:
    product_name: str
    available: int

    def __str__(self):
        return f"{self.product_name}: Only {self.available} available"


@dataclass(frozen=True)
class PriceMismatch:
    product_name: str

    def __str__(self):
        return f"{self.product_name}: Price has changed"


class CheckoutError(Exception):
    """Base checkout exception"""

    status_code = 400
    default_message = "Checkout failed"

    def __init__(self, message: str | None = None, *, details=None):
        self.message = message or self.default_message
        self.details = [str(d) for d in (details or [])]
        super().__init__(self.message)

    @property
    def code(self) -> str:
        return self.__class__.__name__

    def as_payload(self) -> dict:
        payload = {"error": self.message, "code": self.code}
        if self.details:
            payload["details"] = self.details
        return payload


class MissingFieldsError(CheckoutError):
    default_message = "Missing required fields"


class EmptyCartError(CheckoutError):
    default_message = "Cart is empty"


class MalformedLineError(CheckoutError):
    default_message = "Invalid cart item"


class ProductsUnavailableError(CheckoutError):
    status_code = 404
    default_message = "Some products not found or unavailable"

    def __init__(self, missing_ids, message: str | None = None):
        self.missing_ids = sorted(str(pid) for pid in missing_ids)
        super().__init__(
            message,
            details=[f"Product {pid} is not available" for pid in self.missing_ids],
        )


class InsufficientStockError(CheckoutError):
    default_message = "Insufficient stock"

    def __init__(self, shortfalls, message: str | None = None):
        self.shortfalls = list(shortfalls)
        super().__init__(message, details=self.shortfalls)


class PriceChangedError(CheckoutError):
    default_message = "Price mismatch"

    def __init__(self, mismatches, message: str | None = None):
        self.mismatches = list(mismatches)
        super().__init__(message, details=self.mismatches)


class ConcurrentStockExhaustionError(CheckoutError):
    """
    Commit-time re-check failed: stock was taken by another checkout between
    validation and commit. Safe to retry once after re-validating the cart.
    """

    status_code = 409
    default_message = "Stock changed while placing the order"


class PersistenceError(CheckoutError):
    status_code = 500
    default_message = "Failed to create orders"


class OrderLifecycleError(Exception):
    pass


class InvalidOrderTransitionError(OrderLifecycleError):
    pass


class LedgerNotifyError(Exception):
    """Raised by the ledger client; never surfaced to checkout callers."""
