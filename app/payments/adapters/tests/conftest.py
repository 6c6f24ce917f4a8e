"""
Pytest fixtures for MercadoPago adapter tests.

The SDK client is replaced by a MagicMock whose calls return SDK-style
results ({"status": <http status>, "response": <body>}); OAuth and
profile calls are made with requests and are patched per test.

Sections:
    - Test Data Fixtures
    - Mock SDK Fixtures
"""

import uuid
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest

from payments.adapters import CheckoutSessionParams, SellerCredentials


# =============================================================================
# Test Data Fixtures
# =============================================================================


@pytest.fixture
def external_reference():
    return str(uuid.uuid4())


@pytest.fixture
def trace_id():
    """Generate a trace ID for testing."""
    return f"trace-{uuid.uuid4().hex[:16]}"


@pytest.fixture
def checkout_params(external_reference):
    """Platform checkout with a single item."""
    return CheckoutSessionParams(
        external_reference=external_reference,
        items=[
            {
                "title": "2 x Pizza",
                "quantity": 1,
                "currency_id": "ARS",
                "unit_price": Decimal("1055.000000"),
            }
        ],
        metadata={"payment_id": external_reference},
        payer_email="buyer@example.com",
    )


@pytest.fixture
def seller_credentials():
    return SellerCredentials(collector_id="777000111", access_token="APP_USR-seller-token")


# =============================================================================
# Mock SDK Fixtures
# =============================================================================


@pytest.fixture
def mock_sdk():
    """Patch MercadoPagoAdapter._sdk and yield (patched _sdk, sdk client)."""
    sdk = MagicMock()
    with patch(
        "payments.adapters.mercadopago_adapter.MercadoPagoAdapter._sdk",
        return_value=sdk,
    ) as mock_factory:
        yield mock_factory, sdk
