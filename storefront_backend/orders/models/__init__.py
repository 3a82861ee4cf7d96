"""
ORDERS MODELS PACKAGE EXPORTS
"""

from .order import Order, OrderGroup

__all__ = [
    "Order",
    "OrderGroup",
]
