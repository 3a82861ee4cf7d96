# orders/views/bulk_order.py
"""
BULK CART CHECKOUT (STOREFRONT)

POST /api/orders/bulk/

Flow:
1) strict request schema (serializer)       -> 400 MissingFieldsError / MalformedLineError
2) checkout validator (read-only)           -> 400 / 404 with per-line details
3) reservation committer (one transaction)  -> 409 ConcurrentStockExhaustionError / 500
4) ledger mirroring after commit (best-effort, never changes the response)

Security hardening:
- Throttle (public_write) because it's a write endpoint (abuse target)
"""

from __future__ import annotations

import logging

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.parsers import JSONParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.throttling import PublicWriteThrottle
from orders.serializers import BulkOrderInputSerializer, OrderSerializer
from orders.services.checkout_orchestrator import place_orders
from orders.services.exceptions import CheckoutError
from orders.views.base import checkout_error_response, serializer_error_response

logger = logging.getLogger(__name__)


class BulkOrderView(APIView):
    permission_classes = [AllowAny]
    parser_classes = [JSONParser]
    throttle_classes = [PublicWriteThrottle]

    @extend_schema(
        request=BulkOrderInputSerializer,
        responses={
            201: OrderSerializer(many=True),
            400: OpenApiResponse(description="Missing fields / malformed line / stock or price conflict"),
            404: OpenApiResponse(description="Some products not found or unavailable"),
            409: OpenApiResponse(description="Stock exhausted by a concurrent checkout"),
            429: OpenApiResponse(description="Rate limited"),
            500: OpenApiResponse(description="Failed to create orders"),
        },
        description="Cart checkout: one order per cart line, stock reserved atomically.",
        tags=["Orders"],
    )
    def post(self, request, *args, **kwargs):
        s = BulkOrderInputSerializer(data=request.data)
        if not s.is_valid():
            items = request.data.get("items") if hasattr(request.data, "get") else None
            line_fields = ("items",) if isinstance(items, list) and items else ()
            return serializer_error_response(s.errors, line_fields=line_fields)

        try:
            result = place_orders(cart_lines=s.to_cart_lines(), customer=s.to_customer())
        except CheckoutError as exc:
            logger.info(
                "Bulk checkout rejected",
                extra={"code": exc.code, "details": exc.details},
            )
            return checkout_error_response(exc)

        orders = result.orders
        return Response(
            {
                "success": True,
                "orders": OrderSerializer(orders, many=True).data,
                "orderGroupId": str(result.group_id),
                "message": f"{len(orders)} orders created successfully",
            },
            status=status.HTTP_201_CREATED,
        )
