# cities/models/city.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


class City(models.Model):
    """
    Delivery destination with its flat delivery fee.

    - name is unique and matched exactly at checkout
    - admin-managed master data; checkout only reads it
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=120, unique=True)
    delivery_fee = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "cities"
        constraints = [
            models.CheckConstraint(
                condition=Q(delivery_fee__gte=0),
                name="city_delivery_fee_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.delivery_fee})"

    def clean(self):
        self.name = (self.name or "").strip()
        if not self.name:
            raise ValidationError("name is required")

        if self.delivery_fee is None or Decimal(self.delivery_fee) < Decimal("0.00"):
            raise ValidationError("delivery_fee cannot be negative")
