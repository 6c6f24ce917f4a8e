"""
Pytest fixtures for payment tests.

Gateway calls are never made from tests: the fixtures below build the
adapter's return types so tests can patch MercadoPagoAdapter methods
with realistic values.

Usage:
    def test_split_checkout(linked_account, checkout_session):
        with patch(
            "payments.adapters.MercadoPagoAdapter.create_checkout_session",
            return_value=checkout_session,
        ):
            ...
"""

from datetime import timedelta

import pytest
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from payments.adapters import (
    AccountProfile,
    CheckoutSessionResult,
    GatewayPayment,
    OAuthTokens,
)
from payments.tests.factories import (
    AppSettingFactory,
    LinkedPayoutAccountFactory,
    PaymentIntentFactory,
    UserFactory,
)


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def user(db):
    """Create a test user."""
    return UserFactory()


@pytest.fixture
def seller(db):
    """Create a seller (a user who receives funds)."""
    return UserFactory()


@pytest.fixture
def authenticated_client(user) -> APIClient:
    """Return API client authenticated with JWT token."""
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
    return client


@pytest.fixture
def staff_client(db) -> APIClient:
    """API client authenticated as a staff user."""
    client = APIClient()
    refresh = RefreshToken.for_user(UserFactory(is_staff=True))
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
    return client


@pytest.fixture
def api_client() -> APIClient:
    """Anonymous API client."""
    return APIClient()


# =============================================================================
# Linked Account Fixtures
# =============================================================================


@pytest.fixture
def linked_account(db, seller):
    """Active linked account with a token valid for hours."""
    return LinkedPayoutAccountFactory(seller=seller)


@pytest.fixture
def expiring_account(db, seller):
    """Active linked account whose token expires in five minutes."""
    return LinkedPayoutAccountFactory(
        seller=seller,
        token_expires_at=timezone.now() + timedelta(minutes=5),
    )


@pytest.fixture
def fee_setting(db):
    """Marketplace fee of 5.5%."""
    return AppSettingFactory(key="marketplace_fee_percentage", value=5.5)


# =============================================================================
# Payment Intent Fixtures
# =============================================================================


@pytest.fixture
def payment_intent(db):
    """Pending intent created under the platform account."""
    return PaymentIntentFactory()


# =============================================================================
# Gateway Response Fixtures
# =============================================================================


@pytest.fixture
def checkout_session():
    """Checkout session as returned by create_checkout_session."""
    return CheckoutSessionResult(
        transaction_id="123456789-abcdef01-2345-6789-abcd-ef0123456789",
        init_point="https://www.mercadopago.com.ar/checkout/v1/redirect?pref_id=123456789-abcdef01",
        sandbox_init_point="https://sandbox.mercadopago.com.ar/checkout/v1/redirect?pref_id=123456789-abcdef01",
        raw_response={"id": "123456789-abcdef01-2345-6789-abcd-ef0123456789"},
    )


@pytest.fixture
def oauth_tokens():
    """Token set as returned by the OAuth token endpoint."""
    return OAuthTokens(
        access_token="APP_USR-new-access-token",
        refresh_token="TG-new-refresh-token",
        expires_in=21600,
        public_key="APP_USR-public-key",
        user_id="777000111",
        scope="offline_access read write",
    )


@pytest.fixture
def account_profile():
    """Seller profile as returned by /users/me."""
    return AccountProfile(
        collector_id="777000111",
        email="seller@example.com",
        nickname="SELLERSHOP",
        country="AR",
        site_id="MLA",
        first_name="Ana",
        last_name="Seller",
        identification={"type": "DNI", "number": "12345678"},
    )


@pytest.fixture
def make_gateway_payment():
    """Build a GatewayPayment for a given reference and status."""

    def _make(external_reference, status="approved", payment_id="1234567890", metadata=None):
        return GatewayPayment(
            id=payment_id,
            status=status,
            status_detail="accredited" if status == "approved" else "",
            external_reference=external_reference or "",
            metadata=metadata or {},
        )

    return _make
