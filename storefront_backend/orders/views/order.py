# orders/views/order.py
"""
SINGLE ORDERS (STOREFRONT)

- POST /api/orders/              "buy now" purchase form (one product)
- GET  /api/orders/<order_id>/   order confirmation lookup

The buy-now path is a one-line cart: same validator, same committer,
same atomic stock reservation as the bulk checkout.
"""

from __future__ import annotations

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.parsers import JSONParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.throttling import PublicPollThrottle, PublicWriteThrottle
from orders.models import Order
from orders.serializers import (
    OrderDetailSerializer,
    OrderSerializer,
    SingleOrderInputSerializer,
)
from orders.services.checkout_orchestrator import place_single_order
from orders.services.exceptions import CheckoutError
from orders.views.base import checkout_error_response, serializer_error_response

LINE_FIELDS = ("productId", "quantity", "productPrice")


class OrderCreateView(APIView):
    permission_classes = [AllowAny]
    parser_classes = [JSONParser]
    throttle_classes = [PublicWriteThrottle]

    @extend_schema(
        request=SingleOrderInputSerializer,
        responses={
            201: OrderSerializer,
            400: OpenApiResponse(description="Validation error / stock or price conflict"),
            404: OpenApiResponse(description="Product not found or unavailable"),
            409: OpenApiResponse(description="Stock exhausted by a concurrent checkout"),
            500: OpenApiResponse(description="Failed to create order"),
        },
        description="Buy-now checkout for a single product.",
        tags=["Orders"],
    )
    def post(self, request, *args, **kwargs):
        s = SingleOrderInputSerializer(data=request.data)
        if not s.is_valid():
            return serializer_error_response(s.errors, line_fields=LINE_FIELDS)

        try:
            order = place_single_order(line=s.to_cart_line(), customer=s.to_customer())
        except CheckoutError as exc:
            return checkout_error_response(exc)

        return Response(
            {
                "success": True,
                "order": OrderSerializer(order).data,
                "message": "Order created successfully",
            },
            status=status.HTTP_201_CREATED,
        )


class OrderDetailView(APIView):
    permission_classes = [AllowAny]
    throttle_classes = [PublicPollThrottle]

    @extend_schema(
        responses={
            200: OrderDetailSerializer,
            404: OpenApiResponse(description="Order not found"),
        },
        tags=["Orders"],
    )
    def get(self, request, order_id):
        order = get_object_or_404(Order.objects.select_related("product"), id=order_id)
        return Response(OrderDetailSerializer(order).data, status=status.HTTP_200_OK)
