"""
Tests for payments API views.

Tests cover:
- OAuth linking endpoints (initiate, callback GET/POST, status, unlink,
  refresh, config check)
- Payment intent detail, gateway status and check-in
- Marketplace fee read (public) and update (staff)
- Error rendering through the application exception handler
"""

import uuid
from decimal import Decimal
from unittest.mock import patch

import pytest
from django.test import override_settings
from freezegun import freeze_time
from rest_framework import status

from core.models import AppSetting
from payments.exceptions import GatewayInvalidRequestError, GatewayUnavailableError
from payments.models import LinkedPayoutAccount
from payments.services import PayoutAccountLinker
from payments.tests.factories import LinkedPayoutAccountFactory

EXCHANGE_CODE = "payments.adapters.MercadoPagoAdapter.exchange_authorization_code"
GET_PROFILE = "payments.adapters.MercadoPagoAdapter.get_account_profile"
REFRESH_TOKEN = "payments.adapters.MercadoPagoAdapter.refresh_token"
SEARCH_ORDERS = "payments.adapters.MercadoPagoAdapter.get_merchant_orders_by_preference_id"

OAUTH_URL = "/api/v1/payments/oauth"


# =============================================================================
# OAuth Initiate
# =============================================================================


@pytest.mark.django_db
class TestOAuthInitiateView:
    def test_returns_authorization_url(self, authenticated_client, user):
        """Should return the URL and a signed user_<id>_<ts> state."""
        response = authenticated_client.post(f"{OAUTH_URL}/initiate/", {}, format="json")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["state"].startswith(f"user_{user.pk}_")
        assert PayoutAccountLinker.seller_id_from_state(response.data["state"]) == str(user.pk)
        assert response.data["authorization_url"].startswith(
            "https://auth.mercadopago.com/authorization?"
        )
        assert "client_id=1234567890" in response.data["authorization_url"]

    def test_explicit_state_and_redirect(self, authenticated_client):
        response = authenticated_client.post(
            f"{OAUTH_URL}/initiate/",
            {"redirect_uri": "https://other.example.com/cb", "state": "abc"},
            format="json",
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["state"] == "abc"
        assert "other.example.com" in response.data["authorization_url"]

    @override_settings(MERCADOPAGO_OAUTH_REDIRECT_URI="")
    def test_redirect_uri_required(self, authenticated_client):
        response = authenticated_client.post(f"{OAUTH_URL}/initiate/", {}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "REDIRECT_URI_REQUIRED"

    @override_settings(MERCADOPAGO_CLIENT_ID="")
    def test_not_configured(self, authenticated_client):
        response = authenticated_client.post(f"{OAUTH_URL}/initiate/", {}, format="json")

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.data["error_code"] == "GATEWAY_NOT_CONFIGURED"

    def test_requires_authentication(self, api_client):
        response = api_client.post(f"{OAUTH_URL}/initiate/", {}, format="json")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


# =============================================================================
# OAuth Callback
# =============================================================================


@pytest.mark.django_db
class TestOAuthCallbackPost:
    def test_links_current_user(self, authenticated_client, user, oauth_tokens, account_profile):
        with patch(EXCHANGE_CODE, return_value=oauth_tokens), patch(
            GET_PROFILE, return_value=account_profile
        ):
            response = authenticated_client.post(
                f"{OAUTH_URL}/callback/", {"code": "TG-code"}, format="json"
            )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["linked"] is True
        assert response.data["collector_id"] == "777000111"
        assert "access_token" not in response.data
        assert LinkedPayoutAccount.objects.filter(seller=user, is_active=True).exists()

    def test_already_linked(self, authenticated_client, user):
        LinkedPayoutAccountFactory(seller=user)

        response = authenticated_client.post(
            f"{OAUTH_URL}/callback/", {"code": "TG-code"}, format="json"
        )

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_code_required(self, authenticated_client):
        response = authenticated_client.post(f"{OAUTH_URL}/callback/", {}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestOAuthCallbackGet:
    """The gateway redirects the seller here; no authentication."""

    def test_success(self, api_client, seller, oauth_tokens, account_profile):
        with patch(EXCHANGE_CODE, return_value=oauth_tokens) as mock_exchange, patch(
            GET_PROFILE, return_value=account_profile
        ):
            response = api_client.get(
                f"{OAUTH_URL}/callback/",
                {"code": "TG-code", "state": PayoutAccountLinker.make_state(seller.pk)},
            )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["success"] is True
        assert response.data["redirect_url"] == "https://app.example.com/oauth/success"
        assert response.data["account"]["collector_id"] == "777000111"
        mock_exchange.assert_called_once_with(
            code="TG-code", redirect_uri="https://app.example.com/oauth/callback"
        )
        assert LinkedPayoutAccount.objects.filter(seller=seller).exists()

    def test_gateway_error_param(self, api_client):
        response = api_client.get(f"{OAUTH_URL}/callback/", {"error": "access_denied"})

        assert response.status_code == status.HTTP_200_OK
        assert response.data["success"] is False
        assert response.data["redirect_url"] == (
            "https://app.example.com/oauth/error?error=access_denied"
        )

    def test_missing_code(self, api_client, seller):
        response = api_client.get(
            f"{OAUTH_URL}/callback/", {"state": PayoutAccountLinker.make_state(seller.pk)}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "INVALID_OAUTH_CALLBACK"

    @pytest.mark.parametrize("state", ["garbage", "user_999999_1700000000000", "user_abc_1"])
    def test_invalid_state(self, api_client, state):
        response = api_client.get(f"{OAUTH_URL}/callback/", {"code": "TG-code", "state": state})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "INVALID_OAUTH_STATE"

    def test_unsigned_state_rejected(self, api_client, seller):
        """Should not link a seller named by a state this server did not sign."""
        with patch(EXCHANGE_CODE) as mock_exchange:
            response = api_client.get(
                f"{OAUTH_URL}/callback/",
                {"code": "TG-code", "state": f"user_{seller.pk}_1700000000000"},
            )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "INVALID_OAUTH_STATE"
        mock_exchange.assert_not_called()
        assert not LinkedPayoutAccount.objects.filter(seller=seller).exists()

    def test_tampered_state_rejected(self, api_client, seller, user):
        """Should reject a signed state whose seller id was swapped."""
        signed = PayoutAccountLinker.make_state(user.pk)
        forged = signed.replace(f"user_{user.pk}_", f"user_{seller.pk}_", 1)

        response = api_client.get(f"{OAUTH_URL}/callback/", {"code": "TG-code", "state": forged})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "INVALID_OAUTH_STATE"

    @override_settings(MERCADOPAGO_OAUTH_STATE_MAX_AGE_SECONDS=600)
    def test_expired_state_rejected(self, api_client, seller):
        with freeze_time("2024-06-01 12:00:00"):
            state = PayoutAccountLinker.make_state(seller.pk)

        with freeze_time("2024-06-01 12:10:01"), patch(EXCHANGE_CODE) as mock_exchange:
            response = api_client.get(
                f"{OAUTH_URL}/callback/", {"code": "TG-code", "state": state}
            )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "INVALID_OAUTH_STATE"
        mock_exchange.assert_not_called()

    def test_signed_state_for_unknown_seller(self, api_client):
        state = PayoutAccountLinker.make_state(999999)

        response = api_client.get(f"{OAUTH_URL}/callback/", {"code": "TG-code", "state": state})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "INVALID_OAUTH_STATE"

    def test_linking_failure_reported_in_body(self, api_client, seller):
        with patch(
            EXCHANGE_CODE,
            side_effect=GatewayInvalidRequestError("invalid_grant", gateway_status=400),
        ):
            response = api_client.get(
                f"{OAUTH_URL}/callback/",
                {"code": "TG-used", "state": PayoutAccountLinker.make_state(seller.pk)},
            )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["success"] is False
        assert response.data["redirect_url"] == "https://app.example.com/oauth/error"


# =============================================================================
# OAuth Account Management
# =============================================================================


@pytest.mark.django_db
class TestOAuthAccountViews:
    def test_status_linked(self, authenticated_client, user):
        account = LinkedPayoutAccountFactory(seller=user)

        response = authenticated_client.get(f"{OAUTH_URL}/status/")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["linked"] is True
        assert response.data["collector_id"] == account.collector_id

    def test_status_not_linked(self, authenticated_client):
        response = authenticated_client.get(f"{OAUTH_URL}/status/")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["linked"] is False

    def test_unlink(self, authenticated_client, user):
        account = LinkedPayoutAccountFactory(seller=user)

        response = authenticated_client.post(f"{OAUTH_URL}/unlink/")

        assert response.status_code == status.HTTP_200_OK
        assert LinkedPayoutAccount.objects.get(id=account.id).is_active is False

    def test_unlink_not_linked(self, authenticated_client):
        response = authenticated_client.post(f"{OAUTH_URL}/unlink/")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["error_code"] == "LINKED_ACCOUNT_NOT_FOUND"

    def test_refresh(self, authenticated_client, user, oauth_tokens):
        LinkedPayoutAccountFactory(seller=user)

        with patch(REFRESH_TOKEN, return_value=oauth_tokens):
            response = authenticated_client.post(f"{OAUTH_URL}/refresh-token/")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["token_expires_at"] is not None

    def test_refresh_rejected(self, authenticated_client, user):
        LinkedPayoutAccountFactory(seller=user)

        with patch(REFRESH_TOKEN, side_effect=GatewayInvalidRequestError("invalid_grant")):
            response = authenticated_client.post(f"{OAUTH_URL}/refresh-token/")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "TOKEN_REFRESH_FAILED"

    def test_config_check(self, authenticated_client):
        response = authenticated_client.get(f"{OAUTH_URL}/config-check/")

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {
            "client_id": True,
            "client_secret": True,
            "redirect_uri": True,
            "configured": True,
        }


# =============================================================================
# Payment Intent Views
# =============================================================================


@pytest.mark.django_db
class TestPaymentIntentViews:
    def test_detail(self, api_client, payment_intent):
        response = api_client.get(f"/api/v1/payments/intents/{payment_intent.id}/")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["id"] == str(payment_intent.id)
        assert response.data["state"] == "pending"
        assert response.data["amount"] == "1055.000000"

    def test_detail_not_found(self, api_client):
        response = api_client.get(f"/api/v1/payments/intents/{uuid.uuid4()}/")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["error_code"] == "PAYMENT_NOT_FOUND"

    def test_status_with_gateway_orders(self, api_client, payment_intent):
        with patch(SEARCH_ORDERS, return_value=[{"id": 1, "order_status": "paid"}]):
            response = api_client.get(f"/api/v1/payments/status/{payment_intent.id}/")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["intent"]["id"] == str(payment_intent.id)
        assert response.data["gateway_orders"][0]["order_status"] == "paid"

    def test_status_gateway_unavailable(self, api_client, payment_intent):
        with patch(SEARCH_ORDERS, side_effect=GatewayUnavailableError("down")):
            response = api_client.get(f"/api/v1/payments/status/{payment_intent.id}/")

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE

    def test_checkin_paid(self, api_client, payment_intent):
        with patch(SEARCH_ORDERS, return_value=[{"id": 77, "order_status": "paid"}]):
            response = api_client.post(f"/api/v1/payments/checkin/{payment_intent.id}/")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["paid"] is True
        assert response.data["merchant_order_id"] == "77"

    def test_checkin_not_confirmed(self, api_client, payment_intent):
        with patch(SEARCH_ORDERS, return_value=[]):
            response = api_client.post(f"/api/v1/payments/checkin/{payment_intent.id}/")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "PAYMENT_NOT_CONFIRMED"


# =============================================================================
# Marketplace Fee
# =============================================================================


@pytest.mark.django_db
class TestMarketplaceFeeView:
    URL = "/api/v1/payments/marketplace-fee/"

    def test_get_is_public(self, api_client, fee_setting):
        response = api_client.get(self.URL)

        assert response.status_code == status.HTTP_200_OK
        assert response.data["percentage"] == Decimal("5.5")

    def test_get_without_setting(self, api_client):
        response = api_client.get(self.URL)

        assert response.status_code == status.HTTP_200_OK
        assert response.data["percentage"] == Decimal("0")

    def test_staff_sets_percentage(self, staff_client):
        response = staff_client.post(self.URL, {"percentage": "7.5"}, format="json")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["percentage"] == Decimal("7.5")
        assert AppSetting.objects.get(key="marketplace_fee_percentage").value == "7.500000"

    @pytest.mark.parametrize("percentage", ["-1", "100.5", "abc"])
    def test_out_of_range_rejected(self, staff_client, percentage):
        response = staff_client.post(self.URL, {"percentage": percentage}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "percentage" in response.data
        assert not AppSetting.objects.exists()

    def test_non_staff_forbidden(self, authenticated_client):
        response = authenticated_client.post(self.URL, {"percentage": "7.5"}, format="json")

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_anonymous_cannot_set(self, api_client):
        response = api_client.post(self.URL, {"percentage": "7.5"}, format="json")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
