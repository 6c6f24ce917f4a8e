"""
Pytest fixtures for webhook tests.

Provides notification bodies in the shapes the gateway sends, a request
factory, and a pending intent with its order.
"""

import json

import pytest
from django.test import RequestFactory

from orders.tests.factories import OrderFactory
from payments.adapters import GatewayPayment
from payments.tests.factories import PaymentIntentFactory


# =============================================================================
# Request Fixtures
# =============================================================================


@pytest.fixture
def rf():
    """Request factory for creating test requests."""
    return RequestFactory()


@pytest.fixture
def make_webhook_request(rf):
    """Build a POST to the webhook endpoint with a JSON body and query string."""

    def _make(body=None, query="", idempotency_key=None, raw_body=None):
        path = "/api/v1/payments/webhooks/mercadopago/"
        if query:
            path = f"{path}?{query}"
        headers = {}
        if idempotency_key:
            headers["HTTP_X_IDEMPOTENCY_KEY"] = idempotency_key
        return rf.post(
            path,
            data=raw_body if raw_body is not None else json.dumps(body or {}),
            content_type="application/json",
            **headers,
        )

    return _make


# =============================================================================
# Payload Fixtures
# =============================================================================


@pytest.fixture
def payment_body():
    """Webhook body of a payment notification."""
    return {
        "action": "payment.updated",
        "api_version": "v1",
        "type": "payment",
        "data": {"id": "1234567890"},
        "live_mode": False,
    }


@pytest.fixture
def merchant_order_body():
    """IPN-style merchant order notification."""
    return {
        "topic": "merchant_order",
        "resource": "https://api.mercadolibre.com/merchant_orders/456",
    }


# =============================================================================
# Gateway Response Fixtures
# =============================================================================


@pytest.fixture
def make_gateway_payment():
    """Build a GatewayPayment for a given reference and status."""

    def _make(external_reference, status="approved", payment_id="1234567890", metadata=None):
        return GatewayPayment(
            id=payment_id,
            status=status,
            external_reference=external_reference or "",
            metadata=metadata or {},
        )

    return _make


# =============================================================================
# Data Fixtures
# =============================================================================


@pytest.fixture
def intent_with_order(db):
    """Pending intent and the pending order it pays for."""
    intent = PaymentIntentFactory()
    order = OrderFactory(operation_id=str(intent.id))
    return intent, order
