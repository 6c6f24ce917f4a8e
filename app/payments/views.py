"""
DRF views for payments app.

This module provides API views for:
- Seller account linking over OAuth (initiate, callback, status, unlink, refresh)
- Payment intent lookup and gateway status
- Poll-based payment confirmation (check-in)
- Marketplace fee percentage

Related files:
    - services/: PayoutAccountLinker, PaymentIntentManager, WebhookReconciler
    - serializers.py: Request/response serializers
    - webhooks/views.py: Gateway webhook endpoint
    - urls.py: URL routing

Endpoints:
    POST /api/v1/payments/oauth/initiate/ - Authorization URL for the current user
    POST /api/v1/payments/oauth/callback/ - Complete linking with a code
    GET  /api/v1/payments/oauth/callback/ - Direct gateway redirect (public)
    GET  /api/v1/payments/oauth/status/ - Linked account summary
    POST /api/v1/payments/oauth/unlink/ - Deactivate the linked account
    POST /api/v1/payments/oauth/refresh-token/ - Force a token refresh
    GET  /api/v1/payments/oauth/config-check/ - Which OAuth settings are present
    GET  /api/v1/payments/intents/<id>/ - Stored payment intent
    GET  /api/v1/payments/status/<id>/ - Intent plus gateway merchant orders
    POST /api/v1/payments/checkin/<id>/ - Confirm payment against the gateway
    GET  /api/v1/payments/marketplace-fee/ - Current commission percentage (public)
    POST /api/v1/payments/marketplace-fee/ - Set commission percentage (staff)

Errors raised by the services are rendered by
core.exception_handler.application_exception_handler.
"""

from __future__ import annotations

import logging
from urllib.parse import urlencode

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework.permissions import AllowAny, IsAdminUser, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import BaseApplicationError

from payments.exceptions import PaymentValidationError
from payments.serializers import (
    LinkedAccountStatusSerializer,
    MarketplaceFeeSerializer,
    OAuthCallbackSerializer,
    OAuthConfigCheckSerializer,
    OAuthInitiateResponseSerializer,
    OAuthInitiateSerializer,
    PaymentCheckInSerializer,
    PaymentIntentDetailSerializer,
    PaymentIntentSerializer,
)
from payments.services import (
    FeeCalculator,
    PaymentIntentManager,
    PayoutAccountLinker,
    WebhookReconciler,
)

logger = logging.getLogger(__name__)


def _oauth_redirect_uri(requested: str | None = None) -> str:
    redirect_uri = requested or getattr(settings, "MERCADOPAGO_OAUTH_REDIRECT_URI", "")
    if not redirect_uri:
        raise PaymentValidationError(
            "redirect_uri is required",
            error_code="REDIRECT_URI_REQUIRED",
            details={"redirect_uri": ["This field is required."]},
        )
    return redirect_uri


# =============================================================================
# OAuth Views
# =============================================================================


class OAuthInitiateView(APIView):
    """
    Start linking the current user's MercadoPago account.

    POST /api/v1/payments/oauth/initiate/

    Request body:
        {"redirect_uri": "https://app.example.com/oauth/callback", "state": "optional"}

    Returns:
        {"authorization_url": "https://auth.mercadopago.com/authorization?...",
         "state": "user_12_1718000000000:1sXk2a:..."}
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Start MercadoPago account linking",
        tags=["Payments - OAuth"],
        request=OAuthInitiateSerializer,
        responses={200: OAuthInitiateResponseSerializer},
    )
    def post(self, request):
        serializer = OAuthInitiateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        linker = PayoutAccountLinker()
        state = serializer.validated_data.get("state") or linker.make_state(request.user.pk)
        url = linker.begin_linking(
            seller_id=request.user.pk,
            redirect_uri=_oauth_redirect_uri(serializer.validated_data.get("redirect_uri")),
            state=state,
        )
        return Response({"authorization_url": url, "state": state})


class OAuthCallbackView(APIView):
    """
    Complete account linking.

    POST /api/v1/payments/oauth/callback/ (authenticated)
        Frontend forwards the code it received for the current user.

    GET /api/v1/payments/oauth/callback/?code=...&state=... (public)
        The gateway redirects the seller here directly. The seller is read
        from the signed state issued by the initiate endpoint. Linking failures are reported in the body with
        success=false rather than as an error status.
    """

    def get_permissions(self):
        if self.request.method == "GET":
            return [AllowAny()]
        return [IsAuthenticated()]

    @extend_schema(
        summary="Complete MercadoPago account linking",
        tags=["Payments - OAuth"],
        request=OAuthCallbackSerializer,
        responses={
            201: LinkedAccountStatusSerializer,
            409: OpenApiResponse(description="Seller already has an active account"),
            500: OpenApiResponse(description="OAuth credentials not configured"),
        },
    )
    def post(self, request):
        serializer = OAuthCallbackSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        linker = PayoutAccountLinker()
        linker.complete_linking(
            seller_id=request.user.pk,
            authorization_code=serializer.validated_data["code"],
            redirect_uri=_oauth_redirect_uri(serializer.validated_data.get("redirect_uri")),
        )
        status_data = linker.get_status(request.user.pk).to_dict()
        return Response(LinkedAccountStatusSerializer(status_data).data, status=201)

    @extend_schema(
        summary="Gateway OAuth redirect target",
        tags=["Payments - OAuth"],
        parameters=[
            OpenApiParameter("code", str, OpenApiParameter.QUERY),
            OpenApiParameter("state", str, OpenApiParameter.QUERY),
            OpenApiParameter("error", str, OpenApiParameter.QUERY),
        ],
        responses={
            200: OpenApiResponse(description="{success, message, redirect_url}"),
            400: OpenApiResponse(description="Missing code/state or invalid state"),
        },
    )
    def get(self, request):
        code = request.query_params.get("code")
        state = request.query_params.get("state")
        error = request.query_params.get("error")
        error_url = getattr(settings, "MERCADOPAGO_OAUTH_ERROR_URL", "/dashboard?oauth=error")
        success_url = getattr(
            settings, "MERCADOPAGO_OAUTH_SUCCESS_URL", "/dashboard?oauth=success"
        )

        if error:
            logger.warning("OAuth error returned by gateway", extra={"error": error})
            separator = "&" if "?" in error_url else "?"
            return Response(
                {
                    "success": False,
                    "message": f"OAuth error: {error}",
                    "redirect_url": f"{error_url}{separator}{urlencode({'error': error})}",
                }
            )

        if not code or not state:
            raise PaymentValidationError(
                "Missing authorization code or state",
                error_code="INVALID_OAUTH_CALLBACK",
            )

        seller = self._seller_from_state(state)
        redirect_uri = getattr(
            settings, "MERCADOPAGO_OAUTH_REDIRECT_URI", ""
        ) or request.build_absolute_uri(request.path)

        try:
            account = PayoutAccountLinker().complete_linking(
                seller_id=seller.pk,
                authorization_code=code,
                redirect_uri=redirect_uri,
            )
        except BaseApplicationError as e:
            logger.warning(
                "OAuth callback could not link account",
                extra={"seller_id": str(seller.pk), "error_code": e.error_code},
            )
            return Response(
                {
                    "success": False,
                    "message": f"Error linking account: {e.message}",
                    "redirect_url": error_url,
                }
            )

        return Response(
            {
                "success": True,
                "message": "Account linked successfully",
                "redirect_url": success_url,
                "account": {
                    "id": str(account.id),
                    "collector_id": account.collector_id,
                },
            }
        )

    @staticmethod
    def _seller_from_state(state: str):
        try:
            seller_id = PayoutAccountLinker.seller_id_from_state(state)
        except PaymentValidationError:
            logger.warning("Invalid OAuth state", extra={"state": state})
            raise

        try:
            seller = get_user_model().objects.filter(pk=seller_id).first()
        except (ValueError, DjangoValidationError):
            seller = None
        if seller is None:
            logger.warning("OAuth state names an unknown seller", extra={"seller_id": seller_id})
            raise PaymentValidationError(
                "Invalid or expired OAuth state",
                error_code="INVALID_OAUTH_STATE",
            )
        return seller


class OAuthStatusView(APIView):
    """
    Linked account summary for the current user.

    GET /api/v1/payments/oauth/status/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="MercadoPago link status",
        tags=["Payments - OAuth"],
        responses={200: LinkedAccountStatusSerializer},
    )
    def get(self, request):
        status_data = PayoutAccountLinker().get_status(request.user.pk).to_dict()
        return Response(LinkedAccountStatusSerializer(status_data).data)


class OAuthUnlinkView(APIView):
    """
    Deactivate the current user's linked account.

    POST /api/v1/payments/oauth/unlink/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Unlink MercadoPago account",
        tags=["Payments - OAuth"],
        request=None,
        responses={
            200: OpenApiResponse(description="Account unlinked"),
            404: OpenApiResponse(description="No linked account"),
        },
    )
    def post(self, request):
        PayoutAccountLinker().unlink(request.user.pk)
        return Response({"message": "MercadoPago account unlinked"})


class OAuthRefreshTokenView(APIView):
    """
    Refresh the current user's access token now.

    POST /api/v1/payments/oauth/refresh-token/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Refresh MercadoPago access token",
        tags=["Payments - OAuth"],
        request=None,
        responses={
            200: OpenApiResponse(description="{message, token_expires_at}"),
            400: OpenApiResponse(description="Gateway refused the refresh"),
            404: OpenApiResponse(description="No linked account"),
        },
    )
    def post(self, request):
        account = PayoutAccountLinker().refresh(request.user.pk)
        return Response(
            {
                "message": "Token refreshed",
                "token_expires_at": account.token_expires_at,
            }
        )


class OAuthConfigCheckView(APIView):
    """
    Which OAuth settings are present. Values are never returned.

    GET /api/v1/payments/oauth/config-check/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Check MercadoPago OAuth configuration",
        tags=["Payments - OAuth"],
        responses={200: OAuthConfigCheckSerializer},
    )
    def get(self, request):
        return Response(OAuthConfigCheckSerializer(PayoutAccountLinker.is_configured()).data)


# =============================================================================
# Payment Intent Views
# =============================================================================


class PaymentIntentDetailView(APIView):
    """
    Stored payment intent.

    GET /api/v1/payments/intents/<id>/
    """

    permission_classes = [AllowAny]

    @extend_schema(
        summary="Get payment intent",
        tags=["Payments"],
        responses={
            200: PaymentIntentSerializer,
            404: OpenApiResponse(description="Payment intent not found"),
        },
    )
    def get(self, request, payment_intent_id):
        intent = PaymentIntentManager().get_by_id(payment_intent_id)
        return Response(PaymentIntentSerializer(intent).data)


class PaymentStatusView(APIView):
    """
    Payment intent plus the gateway's merchant orders for its checkout.

    GET /api/v1/payments/status/<id>/
    """

    permission_classes = [AllowAny]

    @extend_schema(
        summary="Get payment intent with gateway detail",
        tags=["Payments"],
        responses={
            200: PaymentIntentDetailSerializer,
            404: OpenApiResponse(description="Payment intent not found"),
            503: OpenApiResponse(description="Gateway unavailable"),
        },
    )
    def get(self, request, payment_intent_id):
        detail = PaymentIntentManager().get_with_gateway_detail(payment_intent_id)
        return Response(PaymentIntentDetailSerializer(detail).data)


class PaymentCheckInView(APIView):
    """
    Confirm a payment by polling the gateway. Does not change the intent.

    POST /api/v1/payments/checkin/<id>/
    """

    permission_classes = [AllowAny]

    @extend_schema(
        summary="Confirm payment against the gateway",
        tags=["Payments"],
        request=None,
        responses={
            200: PaymentCheckInSerializer,
            400: OpenApiResponse(description="No paid merchant order (PAYMENT_NOT_CONFIRMED)"),
            404: OpenApiResponse(description="Payment intent not found"),
        },
    )
    def post(self, request, payment_intent_id):
        result = WebhookReconciler().check_payment_status(payment_intent_id)
        return Response(PaymentCheckInSerializer(result).data)


# =============================================================================
# Marketplace Fee
# =============================================================================


class MarketplaceFeeView(APIView):
    """
    Marketplace commission percentage.

    GET  /api/v1/payments/marketplace-fee/ - Public, {"percentage": 5.5}
    POST /api/v1/payments/marketplace-fee/ - Staff only, {"percentage": 7.5}
    """

    def get_permissions(self):
        if self.request.method == "GET":
            return [AllowAny()]
        return [IsAdminUser()]

    @extend_schema(
        summary="Get marketplace fee percentage",
        tags=["Payments - Configuration"],
        responses={200: MarketplaceFeeSerializer},
    )
    def get(self, request):
        percentage = FeeCalculator().get_fee_percentage()
        return Response(MarketplaceFeeSerializer({"percentage": percentage}).data)

    @extend_schema(
        summary="Set marketplace fee percentage",
        tags=["Payments - Configuration"],
        request=MarketplaceFeeSerializer,
        responses={
            200: MarketplaceFeeSerializer,
            400: OpenApiResponse(description="Percentage outside 0-100"),
            403: OpenApiResponse(description="Not a staff user"),
        },
    )
    def post(self, request):
        serializer = MarketplaceFeeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        percentage = serializer.validated_data["percentage"]
        FeeCalculator().set_fee_percentage(percentage)
        logger.info(
            "Marketplace fee changed from the API",
            extra={"user_id": request.user.pk, "fee_percentage": str(percentage)},
        )
        return Response(MarketplaceFeeSerializer({"percentage": percentage}).data)
