# orders/views/__init__.py

"""
Orders views package exports.
"""

from .admin_orders import OrderGroupView, OrderStatusUpdateView
from .bulk_order import BulkOrderView
from .order import OrderCreateView, OrderDetailView

__all__ = [
    "BulkOrderView",
    "OrderCreateView",
    "OrderDetailView",
    "OrderGroupView",
    "OrderStatusUpdateView",
]
