# cities/views/delivery_fee.py
"""
DELIVERY FEE LOOKUP (STOREFRONT)

GET /api/cities/delivery-fee/?city=<name>

Rules:
- AllowAny (checkout page calls it before submitting the cart)
- Unknown city is NOT a 404: returns the default fee plus a note
- Missing city param -> 400
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import serializers, status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.throttling import PublicPollThrottle
from cities.services.delivery_fee import resolve_fee_detail

DEFAULT_FEE_NOTE = "Default fee applied, city not found"


class DeliveryFeeResponseSerializer(serializers.Serializer):
    deliveryFee = serializers.DecimalField(max_digits=10, decimal_places=2)
    note = serializers.CharField(required=False)


class DeliveryFeeView(APIView):
    permission_classes = [AllowAny]
    throttle_classes = [PublicPollThrottle]

    @extend_schema(
        tags=["Cities"],
        parameters=[
            OpenApiParameter(
                name="city",
                type=str,
                location=OpenApiParameter.QUERY,
                required=True,
                description="Exact city name.",
            ),
        ],
        responses={
            200: DeliveryFeeResponseSerializer,
            400: OpenApiResponse(description="City name is required"),
        },
        description="Delivery fee for a city; unknown cities get the default fee.",
    )
    def get(self, request, *args, **kwargs):
        city_name = (request.query_params.get("city") or "").strip()
        if not city_name:
            return Response(
                {"error": "City name is required"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        quote = resolve_fee_detail(city_name)

        payload = {"deliveryFee": quote.fee}
        if quote.is_default:
            payload["note"] = DEFAULT_FEE_NOTE

        return Response(
            DeliveryFeeResponseSerializer(payload).data,
            status=status.HTTP_200_OK,
        )
