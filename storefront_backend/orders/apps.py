# orders/apps.py

"""
ORDERS APP CONFIG

Storefront order placement:
- Bulk cart checkout (validate -> reserve stock -> create orders)
- Single product "buy now" orders
- Order status lifecycle (admin)
- Best-effort mirroring to the external order ledger
"""

from django.apps import AppConfig


class OrdersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "orders"
    verbose_name = "Orders"
