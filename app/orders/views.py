"""
DRF views for orders app.

Endpoints:
    POST /api/v1/orders/ - Create an order and its checkout
    GET  /api/v1/orders/<id>/ - Order detail

Both endpoints are public; anonymous buyers identify themselves with the
X-Anonymous-Id header, which is stored as the order's created_by.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from orders.serializers import CreateOrderSerializer, OrderSerializer
from orders.services import OrderOrchestrator


class OrderCreateView(APIView):
    """
    Create an order.

    POST /api/v1/orders/

    Request body:
        {
            "customer_email": "buyer@example.com",
            "owner_id": 12,
            "items": [{"product_name": "Pizza", "quantity": 2, "price": "500.00"}]
        }

    Returns:
        The created order, including payment_url for the checkout
    """

    permission_classes = [AllowAny]

    @extend_schema(
        summary="Create order",
        tags=["Orders"],
        request=CreateOrderSerializer,
        parameters=[
            OpenApiParameter(
                "X-Anonymous-Id",
                str,
                OpenApiParameter.HEADER,
                required=False,
                description="Creator reference for anonymous buyers",
            ),
        ],
        responses={
            201: OrderSerializer,
            400: OpenApiResponse(description="Invalid order or checkout rejected"),
            503: OpenApiResponse(description="Payment gateway unavailable"),
        },
    )
    def post(self, request):
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        owner = serializer.validated_data.get("owner_id")
        created_by = request.headers.get("X-Anonymous-Id") or (
            str(request.user.pk) if request.user.is_authenticated else None
        )

        order = OrderOrchestrator().create_order(
            items=serializer.item_inputs(),
            customer_email=serializer.validated_data.get("customer_email"),
            customer_phone=serializer.validated_data.get("customer_phone"),
            owner_id=owner.pk if owner is not None else None,
            created_by=created_by,
        )
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)


class OrderDetailView(APIView):
    """
    Order detail.

    GET /api/v1/orders/<id>/
    """

    permission_classes = [AllowAny]

    @extend_schema(
        summary="Get order",
        tags=["Orders"],
        responses={
            200: OrderSerializer,
            404: OpenApiResponse(description="Order not found"),
        },
    )
    def get(self, request, order_id):
        order = OrderOrchestrator().get_order(order_id)
        return Response(OrderSerializer(order).data)
