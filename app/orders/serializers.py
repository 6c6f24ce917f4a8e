"""
DRF serializers for orders app.

Usage:
    serializer = CreateOrderSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    items = serializer.item_inputs()
"""

from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model
from rest_framework import serializers

from orders.models import Order, OrderItem
from orders.services import OrderItemInput


class OrderItemInputSerializer(serializers.Serializer):
    product_name = serializers.CharField(max_length=255)
    quantity = serializers.IntegerField(min_value=1)
    price = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal("0.01"),
    )
    source_id = serializers.CharField(max_length=64, required=False, allow_blank=True)
    source_type = serializers.CharField(max_length=32, required=False, allow_blank=True)


class CreateOrderSerializer(serializers.Serializer):
    """
    Order creation request.

    Fields:
        customer_email / customer_phone: At least one is required
        owner_id: Seller who receives the funds (optional)
        items: One or more order lines
    """

    customer_email = serializers.EmailField(required=False, allow_blank=True)
    customer_phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    owner_id = serializers.PrimaryKeyRelatedField(
        queryset=get_user_model().objects.all(),
        required=False,
        allow_null=True,
    )
    items = OrderItemInputSerializer(many=True, allow_empty=False)

    def validate(self, attrs):
        if not attrs.get("customer_email") and not attrs.get("customer_phone"):
            raise serializers.ValidationError(
                {"customer_email": ["Provide customer_email or customer_phone."]}
            )
        return attrs

    def item_inputs(self) -> list[OrderItemInput]:
        return [OrderItemInput(**item) for item in self.validated_data["items"]]


class OrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItem
        fields = ["id", "product_name", "quantity", "price", "source_id", "source_type"]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Order serializer for API responses."""

    items = OrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "customer_email",
            "customer_phone",
            "created_by",
            "owner",
            "subtotal",
            "marketplace_fee_percentage",
            "marketplace_fee_amount",
            "total",
            "status",
            "operation_id",
            "payment_url",
            "items",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
