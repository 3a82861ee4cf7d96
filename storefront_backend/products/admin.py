# products/admin.py
"""
=====================================================
PATH: products/admin.py
=====================================================

Admin rules:
- Products are created and edited here (name, price, stock, visibility).
- Checkout never goes through the admin; stock decrements happen in the
  order reservation committer.
"""

from django.contrib import admin

from products.models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "price", "stock", "visible", "updated_at")
    list_filter = ("visible",)
    search_fields = ("name",)
    readonly_fields = ("id", "created_at", "updated_at")
    ordering = ("name",)
