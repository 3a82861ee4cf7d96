# orders/admin.py
"""
Admin rules:
- Orders are created ONLY by the storefront checkout (stock is reserved there).
- The admin can read orders and change status; money snapshot fields are read-only.
"""

from django.contrib import admin

from orders.models import Order, OrderGroup


class OrderInline(admin.TabularInline):
    model = Order
    extra = 0
    can_delete = False
    fields = ("line_number", "product", "quantity", "product_price", "delivery_fee", "total", "status")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(OrderGroup)
class OrderGroupAdmin(admin.ModelAdmin):
    list_display = ("id", "created_at")
    readonly_fields = ("id", "created_at")
    inlines = [OrderInline]

    def has_add_permission(self, request):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id", "customer_name", "city", "product", "quantity", "total", "status", "created_at")
    list_filter = ("status", "delivery_type")
    search_fields = ("customer_name", "customer_email", "phone", "city")
    readonly_fields = (
        "id",
        "group",
        "line_number",
        "product",
        "quantity",
        "product_price",
        "delivery_fee",
        "total",
        "created_at",
        "updated_at",
    )

    def has_add_permission(self, request):
        return False
