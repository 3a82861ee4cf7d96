# orders/models/order.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from products.models import Product


class OrderGroup(models.Model):
    """
    One checkout commit.

    Every Order created by the same commit points at the same group, so
    "all orders from this checkout" is a single indexed lookup.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"OrderGroup {self.id}"


class Order(models.Model):
    """
    One product line of a storefront checkout.

    Key rules:
    - exactly one product per order row (an N-line cart -> N sibling rows)
    - product_price / delivery_fee / total are a snapshot taken at commit time
    - total = product_price * quantity + delivery_fee
    - created only by the reservation committer (status PENDING)
    """

    STATUS_PENDING = "PENDING"
    STATUS_PROCESSING = "PROCESSING"
    STATUS_SHIPPED = "SHIPPED"
    STATUS_DELIVERED = "DELIVERED"
    STATUS_CANCELLED = "CANCELLED"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_PROCESSING, "Processing"),
        (STATUS_SHIPPED, "Shipped"),
        (STATUS_DELIVERED, "Delivered"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    DELIVERY_HOME = "HOME_DELIVERY"
    DELIVERY_AGENCY_PICKUP = "LOCAL_AGENCY_PICKUP"

    DELIVERY_TYPE_CHOICES = [
        (DELIVERY_HOME, "Home delivery"),
        (DELIVERY_AGENCY_PICKUP, "Local agency pickup"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    group = models.ForeignKey(
        OrderGroup,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="orders",
    )
    # 0-based position of this line in its checkout cart
    line_number = models.PositiveIntegerField(default=0)

    # Customer info
    customer_name = models.CharField(max_length=120)
    customer_email = models.EmailField()
    phone = models.CharField(max_length=40)
    city = models.CharField(max_length=120)

    delivery_type = models.CharField(
        max_length=32,
        choices=DELIVERY_TYPE_CHOICES,
        default=DELIVERY_HOME,
    )

    status = models.CharField(
        max_length=32,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING,
    )

    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="orders",
    )
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])

    # Money fields (server authoritative snapshot)
    product_price = models.DecimalField(max_digits=10, decimal_places=2)
    delivery_fee = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00")
    )
    total = models.DecimalField(max_digits=12, decimal_places=2)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["created_at"], name="orders_orde_created_5b1f0e_idx"),
            models.Index(fields=["status"], name="orders_orde_status_c3d9a1_idx"),
            models.Index(fields=["group", "line_number"], name="orders_orde_group_i_7a2e44_idx"),
        ]

    def __str__(self):
        return f"Order {self.id} | {self.product_id} x{self.quantity} | {self.status}"

    @property
    def subtotal(self) -> Decimal:
        return (Decimal(self.product_price) * Decimal(self.quantity)).quantize(
            Decimal("0.01")
        )

    def clean(self):
        if self.quantity is None or int(self.quantity) <= 0:
            raise ValidationError("quantity must be >= 1")

        if self.product_price is None or Decimal(self.product_price) < Decimal("0.00"):
            raise ValidationError("product_price cannot be negative")

        if self.delivery_fee is None or Decimal(self.delivery_fee) < Decimal("0.00"):
            raise ValidationError("delivery_fee cannot be negative")

        expected = self.subtotal + Decimal(self.delivery_fee)
        if self.total is None or Decimal(self.total) != expected:
            raise ValidationError(
                f"total must equal product_price * quantity + delivery_fee ({expected})"
            )

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
