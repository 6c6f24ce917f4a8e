"""
DRF serializers for payments app.

This module provides serializers for:
- PaymentIntent display
- OAuth linking requests and link status
- Payment status / check-in responses
- Marketplace fee percentage

Related files:
    - models/: PaymentIntent, LinkedPayoutAccount
    - views.py: Payment API views

Usage:
    serializer = PaymentIntentSerializer(intent)
    data = serializer.data
"""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers

from payments.models import PaymentIntent


class PaymentIntentSerializer(serializers.ModelSerializer):
    """
    PaymentIntent serializer for API responses.

    Read-only: intents are created by the order flow and updated by
    webhook reconciliation only.
    """

    class Meta:
        model = PaymentIntent
        fields = [
            "id",
            "transaction_id",
            "payer_reference",
            "amount",
            "marketplace_fee_amount",
            "state",
            "checkout_url",
            "order_id",
            "gateway_status",
            "approved_at",
            "refunded_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PaymentIntentDetailSerializer(serializers.Serializer):
    """Stored intent plus the gateway's merchant orders for its checkout."""

    intent = PaymentIntentSerializer(read_only=True)
    gateway_orders = serializers.ListField(
        child=serializers.DictField(),
        read_only=True,
    )


class PaymentCheckInSerializer(serializers.Serializer):
    """Result of a poll-based payment confirmation."""

    payment_intent_id = serializers.UUIDField(read_only=True)
    transaction_id = serializers.CharField(read_only=True)
    merchant_order_id = serializers.CharField(read_only=True, allow_null=True)
    order_status = serializers.CharField(read_only=True)
    paid = serializers.BooleanField(read_only=True)


# =============================================================================
# OAuth
# =============================================================================


class OAuthInitiateSerializer(serializers.Serializer):
    """
    Start linking a MercadoPago account.

    Fields:
        redirect_uri: Where the gateway sends the seller back
            (defaults to MERCADOPAGO_OAUTH_REDIRECT_URI)
        state: Opaque state (defaults to user_<id>_<unix ms>)
    """

    redirect_uri = serializers.URLField(required=False)
    state = serializers.CharField(required=False, max_length=255)


class OAuthInitiateResponseSerializer(serializers.Serializer):
    authorization_url = serializers.URLField()
    state = serializers.CharField()


class OAuthCallbackSerializer(serializers.Serializer):
    """Authorization code returned by the gateway."""

    code = serializers.CharField(max_length=512)
    redirect_uri = serializers.URLField(required=False)


class LinkedAccountStatusSerializer(serializers.Serializer):
    """Linked account summary. Tokens are never serialized."""

    linked = serializers.BooleanField()
    collector_id = serializers.CharField(allow_null=True)
    email = serializers.EmailField(allow_null=True)
    nickname = serializers.CharField(allow_null=True)
    country = serializers.CharField(allow_null=True)
    status = serializers.CharField(allow_null=True)
    token_expires_at = serializers.DateTimeField(allow_null=True)
    token_expiring_soon = serializers.BooleanField()


class OAuthConfigCheckSerializer(serializers.Serializer):
    client_id = serializers.BooleanField()
    client_secret = serializers.BooleanField()
    redirect_uri = serializers.BooleanField()
    configured = serializers.BooleanField()


class MarketplaceFeeSerializer(serializers.Serializer):
    """Marketplace commission percentage (0-100)."""

    percentage = serializers.DecimalField(
        max_digits=9,
        decimal_places=6,
        min_value=Decimal("0"),
        max_value=Decimal("100"),
        coerce_to_string=False,
    )
