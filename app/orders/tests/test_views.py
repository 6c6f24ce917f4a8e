"""
Tests for orders API views.

Tests cover:
- Order creation (anonymous and authenticated)
- Request validation
- Gateway failures rendered as 400 / 503
- Order detail
"""

import uuid
from unittest.mock import patch

import pytest
from rest_framework import status
from rest_framework_simplejwt.tokens import RefreshToken

from orders.models import Order
from orders.tests.factories import OrderFactory, OrderItemFactory
from payments.exceptions import GatewayInvalidRequestError, GatewayUnavailableError
from payments.tests.factories import UserFactory

ORDERS_URL = "/api/v1/orders/"

CREATE_SESSION = "payments.adapters.MercadoPagoAdapter.create_checkout_session"


def order_payload(**overrides):
    payload = {
        "customer_email": "buyer@example.com",
        "items": [{"product_name": "Pizza", "quantity": 2, "price": "500.00"}],
    }
    payload.update(overrides)
    return payload


@pytest.mark.django_db
class TestOrderCreateView:
    """Tests for POST /api/v1/orders/."""

    def test_anonymous_order(self, api_client, fee_setting, checkout_session):
        with patch(CREATE_SESSION, return_value=checkout_session):
            response = api_client.post(
                ORDERS_URL,
                order_payload(),
                format="json",
                HTTP_X_ANONYMOUS_ID="anon-123",
            )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["status"] == "pending"
        assert response.data["subtotal"] == "1000.000000"
        assert response.data["marketplace_fee_amount"] == "55.000000"
        assert response.data["total"] == "1055.000000"
        assert response.data["created_by"] == "anon-123"
        assert response.data["payment_url"] == checkout_session.sandbox_init_point
        assert len(response.data["items"]) == 1
        assert Order.objects.count() == 1

    def test_authenticated_creator(self, api_client, checkout_session):
        user = UserFactory()
        api_client.credentials(
            HTTP_AUTHORIZATION=f"Bearer {RefreshToken.for_user(user).access_token}"
        )

        with patch(CREATE_SESSION, return_value=checkout_session):
            response = api_client.post(ORDERS_URL, order_payload(), format="json")

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["created_by"] == str(user.pk)

    def test_with_owner(self, api_client, linked_account, checkout_session):
        with patch(CREATE_SESSION, return_value=checkout_session) as mock_create:
            response = api_client.post(
                ORDERS_URL, order_payload(owner_id=linked_account.seller_id), format="json"
            )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["owner"] == linked_account.seller_id
        assert mock_create.call_args.args[0].seller is not None

    def test_unknown_owner(self, api_client):
        response = api_client.post(ORDERS_URL, order_payload(owner_id=999999), format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "owner_id" in response.data

    @pytest.mark.parametrize(
        "overrides",
        [
            {"items": []},
            {"customer_email": ""},
            {"customer_email": "not-an-email"},
            {"items": [{"product_name": "Pizza", "quantity": 0, "price": "1.00"}]},
            {"items": [{"product_name": "Pizza", "quantity": 1, "price": "0.00"}]},
            {"items": [{"product_name": "Pizza", "quantity": 1, "price": "1.001"}]},
        ],
    )
    def test_invalid_request(self, api_client, overrides):
        with patch(CREATE_SESSION) as mock_create:
            response = api_client.post(ORDERS_URL, order_payload(**overrides), format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        mock_create.assert_not_called()

    def test_phone_only(self, api_client, checkout_session):
        with patch(CREATE_SESSION, return_value=checkout_session):
            response = api_client.post(
                ORDERS_URL,
                order_payload(customer_email="", customer_phone="+5491122334455"),
                format="json",
            )

        assert response.status_code == status.HTTP_201_CREATED

    def test_checkout_rejected(self, api_client):
        with patch(CREATE_SESSION, side_effect=GatewayInvalidRequestError("bad")):
            response = api_client.post(ORDERS_URL, order_payload(), format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "CHECKOUT_CREATION_FAILED"
        assert Order.objects.count() == 0

    def test_gateway_unavailable(self, api_client):
        with patch(CREATE_SESSION, side_effect=GatewayUnavailableError("down")):
            response = api_client.post(ORDERS_URL, order_payload(), format="json")

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.data["error_code"] == "GATEWAY_UNAVAILABLE"


@pytest.mark.django_db
class TestOrderDetailView:
    def test_detail(self, api_client):
        order = OrderFactory()
        OrderItemFactory.create_batch(2, order=order)

        response = api_client.get(f"{ORDERS_URL}{order.id}/")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["id"] == str(order.id)
        assert len(response.data["items"]) == 2

    def test_not_found(self, api_client):
        response = api_client.get(f"{ORDERS_URL}{uuid.uuid4()}/")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["error_code"] == "ORDER_NOT_FOUND"
