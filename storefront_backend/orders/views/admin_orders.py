# orders/views/admin_orders.py
"""
ADMIN ORDER ENDPOINTS

- PUT /api/orders/<order_id>/status/   move an order along its lifecycle
- GET /api/orders/groups/<group_id>/   all sibling orders of one checkout

Rules:
- Admin only (authentication itself is handled upstream)
- Status changes obey orders.services.order_lifecycle
- The new status is echoed to the external ledger AFTER commit (best-effort)
"""

from __future__ import annotations

import logging
from functools import partial

from django.db import transaction
from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.parsers import JSONParser
from rest_framework.permissions import IsAdminUser
from rest_framework.response import Response
from rest_framework.views import APIView

from orders.models import Order, OrderGroup
from orders.serializers import OrderSerializer, OrderStatusUpdateSerializer
from orders.services.exceptions import InvalidOrderTransitionError
from orders.services.ledger import notify_order_status_changed
from orders.services.order_lifecycle import validate_transition

logger = logging.getLogger(__name__)


class OrderStatusUpdateView(APIView):
    permission_classes = [IsAdminUser]
    parser_classes = [JSONParser]

    @extend_schema(
        request=OrderStatusUpdateSerializer,
        responses={
            200: OrderSerializer,
            400: OpenApiResponse(description="Invalid order status / illegal transition"),
            404: OpenApiResponse(description="Order not found"),
        },
        tags=["Orders (Admin)"],
    )
    def put(self, request, order_id):
        s = OrderStatusUpdateSerializer(data=request.data)
        if not s.is_valid():
            return Response(
                {"error": "Invalid order status", "details": s.errors},
                status=status.HTTP_400_BAD_REQUEST,
            )
        target = s.validated_data["status"]

        with transaction.atomic():
            order = get_object_or_404(
                Order.objects.select_for_update().select_related("product"),
                id=order_id,
            )

            try:
                validate_transition(order=order, target_status=target)
            except InvalidOrderTransitionError as exc:
                return Response(
                    {"error": str(exc), "code": "InvalidOrderTransitionError"},
                    status=status.HTTP_400_BAD_REQUEST,
                )

            previous = order.status
            order.status = target
            order.save(update_fields=["status", "updated_at"])

            transaction.on_commit(partial(notify_order_status_changed, order), robust=True)

        logger.info(
            "Order status updated",
            extra={"order_id": str(order.id), "from": previous, "to": target},
        )
        return Response(OrderSerializer(order).data, status=status.HTTP_200_OK)


class OrderGroupView(APIView):
    permission_classes = [IsAdminUser]

    @extend_schema(
        responses={
            200: OrderSerializer(many=True),
            404: OpenApiResponse(description="Order group not found"),
        },
        tags=["Orders (Admin)"],
    )
    def get(self, request, group_id):
        group = get_object_or_404(OrderGroup, id=group_id)
        orders = (
            Order.objects.filter(group=group)
            .select_related("product")
            .order_by("line_number")
        )
        return Response(
            {
                "orderGroupId": str(group.id),
                "createdAt": group.created_at,
                "orders": OrderSerializer(orders, many=True).data,
            },
            status=status.HTTP_200_OK,
        )
