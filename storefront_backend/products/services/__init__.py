from .inventory import (
    InsufficientStockError,
    decrement_stock,
    fetch_visible_products,
    lock_products,
)

__all__ = [
    "InsufficientStockError",
    "decrement_stock",
    "fetch_visible_products",
    "lock_products",
]
