# cities/admin.py

from django.contrib import admin

from cities.models import City


@admin.register(City)
class CityAdmin(admin.ModelAdmin):
    list_display = ("name", "delivery_fee", "updated_at")
    search_fields = ("name",)
    readonly_fields = ("id", "created_at", "updated_at")
