# orders/serializers/order.py

from rest_framework import serializers

from orders.models import Order


class OrderSerializer(serializers.ModelSerializer):
    """
    Order row (read-only), camelCase to match the storefront contract.
    """

    orderGroupId = serializers.UUIDField(source="group_id", read_only=True, allow_null=True)
    customerName = serializers.CharField(source="customer_name", read_only=True)
    customerEmail = serializers.EmailField(source="customer_email", read_only=True)
    deliveryType = serializers.CharField(source="delivery_type", read_only=True)
    productId = serializers.UUIDField(source="product_id", read_only=True)
    productName = serializers.CharField(source="product.name", read_only=True)
    productPrice = serializers.DecimalField(
        source="product_price", max_digits=10, decimal_places=2, read_only=True
    )
    deliveryFee = serializers.DecimalField(
        source="delivery_fee", max_digits=10, decimal_places=2, read_only=True
    )
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "orderGroupId",
            "customerName",
            "customerEmail",
            "phone",
            "city",
            "deliveryType",
            "status",
            "quantity",
            "productId",
            "productName",
            "productPrice",
            "deliveryFee",
            "total",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = fields


class OrderDetailSerializer(OrderSerializer):
    """
    Order confirmation payload: adds subtotal and a product summary.
    """

    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    product = serializers.SerializerMethodField()

    class Meta(OrderSerializer.Meta):
        fields = OrderSerializer.Meta.fields + ["subtotal", "product"]
        read_only_fields = fields

    def get_product(self, obj):
        return {"id": str(obj.product_id), "name": obj.product.name}
