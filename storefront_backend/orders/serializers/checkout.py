# PATH: orders/serializers/checkout.py

"""
CHECKOUT INPUT SERIALIZERS (STOREFRONT)

Purpose:
- Strict schema for request bodies BEFORE the checkout validator runs:
  required fields, types, numeric ranges.

Notes:
- These serializers are deliberately "transport layer" only:
  they validate request shapes, not business rules (stock, price drift).
- Field names follow the storefront's camelCase JSON contract.
- deliveryFee / total are accepted for compatibility but never trusted;
  the server recomputes both.
"""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers

from orders.models import Order
from orders.services.checkout_validator import CartLine
from orders.services.reservation import CustomerInfo


class CartItemSerializer(serializers.Serializer):
    productId = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    productPrice = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0.00")
    )


class _CustomerFieldsSerializer(serializers.Serializer):
    customerName = serializers.CharField(max_length=120)
    customerEmail = serializers.EmailField()
    city = serializers.CharField(max_length=120)
    phone = serializers.CharField(max_length=40)
    deliveryType = serializers.ChoiceField(
        choices=Order.DELIVERY_TYPE_CHOICES,
        required=False,
        default=Order.DELIVERY_HOME,
    )

    deliveryFee = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0.00")
    )
    total = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0.00")
    )

    def to_customer(self) -> CustomerInfo:
        data = self.validated_data
        return CustomerInfo(
            customer_name=data["customerName"],
            customer_email=data["customerEmail"],
            phone=data["phone"],
            city=data["city"],
            delivery_type=data.get("deliveryType") or Order.DELIVERY_HOME,
        )


class BulkOrderInputSerializer(_CustomerFieldsSerializer):
    """
    POST /api/orders/bulk/
    An empty items list passes here on purpose: the checkout validator
    reports it as EmptyCartError.
    """

    items = CartItemSerializer(many=True, allow_empty=True)

    def to_cart_lines(self) -> list[CartLine]:
        return [
            CartLine(
                product_id=str(item["productId"]),
                quantity=item["quantity"],
                unit_price_at_add_time=item["productPrice"],
            )
            for item in self.validated_data["items"]
        ]


class SingleOrderInputSerializer(_CustomerFieldsSerializer):
    """
    POST /api/orders/  ("buy now" purchase form, one product)
    """

    productId = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    productPrice = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0.00")
    )

    def to_cart_line(self) -> CartLine:
        data = self.validated_data
        return CartLine(
            product_id=str(data["productId"]),
            quantity=data["quantity"],
            unit_price_at_add_time=data["productPrice"],
        )


class OrderStatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.STATUS_CHOICES)
