# cities/urls.py

"""
CITIES URLS

Base path (mounted in backend/urls.py):
    /api/cities/

- GET /api/cities/delivery-fee/?city=<name>
"""

from django.urls import path

from cities.views import DeliveryFeeView

app_name = "cities"

urlpatterns = [
    path("delivery-fee/", DeliveryFeeView.as_view(), name="delivery-fee"),
]
