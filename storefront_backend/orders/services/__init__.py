"""
ORDERS SERVICES EXPORTS
"""

from .checkout_orchestrator import CheckoutResult, place_orders, place_single_order
from .checkout_validator import CartLine, ValidatedCart, validate_cart
from .reservation import CustomerInfo, commit_reservation

__all__ = [
    "CartLine",
    "CheckoutResult",
    "CustomerInfo",
    "ValidatedCart",
    "commit_reservation",
    "place_orders",
    "place_single_order",
    "validate_cart",
]
