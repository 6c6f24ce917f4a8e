"""
Pytest fixtures for order tests.

The gateway is never called: create_checkout_session is patched with
the checkout_session fixture wherever an order is created.
"""

import pytest
from rest_framework.test import APIClient

from payments.adapters import CheckoutSessionResult
from payments.tests.factories import (
    AppSettingFactory,
    LinkedPayoutAccountFactory,
    UserFactory,
)


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def seller(db):
    return UserFactory()


@pytest.fixture
def linked_account(db, seller):
    """Seller with an active linked payout account."""
    return LinkedPayoutAccountFactory(seller=seller)


@pytest.fixture
def fee_setting(db):
    """Marketplace fee of 5.5%."""
    return AppSettingFactory(key="marketplace_fee_percentage", value=5.5)


@pytest.fixture
def checkout_session():
    return CheckoutSessionResult(
        transaction_id="123456789-order-pref",
        init_point="https://www.mercadopago.com.ar/checkout/v1/redirect?pref_id=123456789-order-pref",
        sandbox_init_point="https://sandbox.mercadopago.com.ar/checkout/v1/redirect?pref_id=123456789-order-pref",
    )
