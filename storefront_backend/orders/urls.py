# orders/urls.py

"""
ORDERS URLS

Base path (mounted in backend/urls.py):
    /api/orders/

Storefront (AllowAny):
- POST /api/orders/                      buy-now single order
- POST /api/orders/bulk/                 cart checkout
- GET  /api/orders/<order_id>/           order confirmation

Admin:
- PUT  /api/orders/<order_id>/status/
- GET  /api/orders/groups/<group_id>/
"""

from django.urls import path

from orders.views import (
    BulkOrderView,
    OrderCreateView,
    OrderDetailView,
    OrderGroupView,
    OrderStatusUpdateView,
)

app_name = "orders"

urlpatterns = [
    path("", OrderCreateView.as_view(), name="order-create"),
    path("bulk/", BulkOrderView.as_view(), name="order-bulk"),
    path("groups/<uuid:group_id>/", OrderGroupView.as_view(), name="order-group"),
    path("<uuid:order_id>/", OrderDetailView.as_view(), name="order-detail"),
    path("<uuid:order_id>/status/", OrderStatusUpdateView.as_view(), name="order-status"),
]
