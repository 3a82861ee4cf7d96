from .checkout import (
    BulkOrderInputSerializer,
    CartItemSerializer,
    OrderStatusUpdateSerializer,
    SingleOrderInputSerializer,
)
from .order import OrderDetailSerializer, OrderSerializer

__all__ = [
    "BulkOrderInputSerializer",
    "CartItemSerializer",
    "OrderDetailSerializer",
    "OrderSerializer",
    "OrderStatusUpdateSerializer",
    "SingleOrderInputSerializer",
]
