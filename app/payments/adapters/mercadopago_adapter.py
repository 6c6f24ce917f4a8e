"""
MercadoPago API adapter for payment operations.

This module provides the MercadoPagoAdapter class which encapsulates all
gateway interactions. Every call to MercadoPago goes through this adapter
so that timeouts, error translation and logging are consistent.

Features:
- Configurable timeout on all API calls
- Automatic error translation to domain exceptions
- Structured logging with timing metrics
- Checkout session validation and enrichment before the request is sent

The `mercadopago` SDK covers checkout preferences, payments and merchant
orders. OAuth token exchange and the account profile endpoint are not
wrapped by the SDK and are called with `requests`.

Configuration (via settings):
- MERCADOPAGO_ACCESS_TOKEN: Platform access token (non-split checkouts, lookups)
- MERCADOPAGO_CLIENT_ID / MERCADOPAGO_CLIENT_SECRET: OAuth application credentials
- MERCADOPAGO_API_TIMEOUT_SECONDS: API call timeout (default: 10)
- MERCADOPAGO_CURRENCY_ID, MERCADOPAGO_ITEM_CATEGORY_ID, MERCADOPAGO_BACK_URL,
  MERCADOPAGO_CHECKOUT_PATH, MERCADOPAGO_NOTIFICATION_URL,
  MERCADOPAGO_STATEMENT_DESCRIPTOR, MERCADOPAGO_TEST_PAYER_EMAIL

Usage:
    from payments.adapters import CheckoutSessionParams, MercadoPagoAdapter

    result = MercadoPagoAdapter.create_checkout_session(
        CheckoutSessionParams(
            external_reference=str(intent_id),
            items=[{"title": "Order", "quantity": 1,
                    "currency_id": "ARS", "unit_price": 1055.0}],
            metadata={"payment_id": str(intent_id)},
        )
    )
    result.transaction_id  # preference id
"""

from __future__ import annotations

import logging
import re
import time
import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any
from urllib.parse import urlencode

import mercadopago
import requests
from django.conf import settings
from mercadopago.config import RequestOptions

from payments.exceptions import (
    GatewayAuthenticationError,
    GatewayConfigurationError,
    GatewayError,
    GatewayInvalidRequestError,
    GatewayRateLimitError,
    GatewayResourceNotFoundError,
    GatewayTimeoutError,
    GatewayUnavailableError,
    PaymentValidationError,
)


API_BASE_URL = "https://api.mercadopago.com"
AUTHORIZATION_BASE_URL = "https://auth.mercadopago.com/authorization"

STATEMENT_DESCRIPTOR_MAX_LENGTH = 22
_STATEMENT_DESCRIPTOR_DISALLOWED = re.compile(r"[^A-Za-z0-9 .,_-]")


# =============================================================================
# Data Types
# =============================================================================


@dataclass
class SellerCredentials:
    """
    Seller-scoped credentials for a split checkout.

    Attributes:
        collector_id: Gateway user id that receives the funds
        access_token: Seller's valid (refreshed if needed) access token
    """

    collector_id: str
    access_token: str

    def __repr__(self) -> str:
        # Keep tokens out of logs and tracebacks
        return f"SellerCredentials(collector_id={self.collector_id!r})"


@dataclass
class CheckoutSessionParams:
    """
    Parameters for creating a checkout session (preference).

    Attributes:
        external_reference: Local PaymentIntent id, echoed back by webhooks
        items: Line items; each needs title, quantity, currency_id, unit_price
        metadata: Key-value pairs attached to the preference
        payer_email: Payer email (defaults to MERCADOPAGO_TEST_PAYER_EMAIL)
        seller: Seller credentials for a split checkout (None = platform account)
        marketplace_fee: Platform commission withheld from the seller
        statement_descriptor: Text on the payer's card statement
    """

    external_reference: str
    items: list[dict[str, Any]]
    metadata: dict[str, Any] = field(default_factory=dict)
    payer_email: str | None = None
    seller: SellerCredentials | None = None
    marketplace_fee: Decimal | None = None
    statement_descriptor: str | None = None

    def __post_init__(self) -> None:
        """Validate parameters after initialization."""
        if not self.external_reference:
            raise PaymentValidationError(
                "external_reference is required",
                error_code="INVALID_CHECKOUT_SESSION",
            )
        if not self.items:
            raise PaymentValidationError(
                "At least one item is required",
                error_code="INVALID_CHECKOUT_SESSION",
            )
        for index, item in enumerate(self.items):
            if not item.get("title"):
                raise PaymentValidationError(
                    f"Item {index} is missing a title",
                    error_code="INVALID_CHECKOUT_SESSION",
                    details={"item": index},
                )
            if not item.get("currency_id"):
                raise PaymentValidationError(
                    f"Item {index} is missing a currency",
                    error_code="INVALID_CHECKOUT_SESSION",
                    details={"item": index},
                )
            if not item.get("quantity") or item["quantity"] <= 0:
                raise PaymentValidationError(
                    f"Item {index} quantity must be positive",
                    error_code="INVALID_CHECKOUT_SESSION",
                    details={"item": index},
                )
            if item.get("unit_price") is None or item["unit_price"] <= 0:
                raise PaymentValidationError(
                    f"Item {index} unit_price must be positive",
                    error_code="INVALID_CHECKOUT_SESSION",
                    details={"item": index},
                )


@dataclass
class CheckoutSessionResult:
    """
    Result of a checkout session creation.

    Attributes:
        transaction_id: Preference id
        init_point: Live checkout URL
        sandbox_init_point: Sandbox checkout URL
        raw_response: Full gateway response (for debugging)
    """

    transaction_id: str
    init_point: str
    sandbox_init_point: str
    raw_response: dict[str, Any] = field(default_factory=dict)


@dataclass
class GatewayPayment:
    """
    A payment as reported by the gateway.

    Attributes:
        id: Gateway payment id
        status: approved, pending, in_process, rejected, cancelled, refunded, ...
        status_detail: Finer-grained reason (e.g., 'cc_rejected_other_reason')
        external_reference: Value sent at checkout creation (PaymentIntent id)
        metadata: Metadata attached to the checkout session
    """

    id: str
    status: str
    status_detail: str = ""
    external_reference: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)
    raw_response: dict[str, Any] = field(default_factory=dict)

    @property
    def local_reference(self) -> str | None:
        """External reference, falling back to metadata.order_id."""
        reference = self.external_reference or (self.metadata or {}).get("order_id")
        return str(reference) if reference else None


@dataclass
class OAuthTokens:
    """Token set returned by the OAuth token endpoint."""

    access_token: str
    refresh_token: str | None = None
    expires_in: int | None = None
    public_key: str | None = None
    user_id: str | None = None
    scope: str | None = None

    def __repr__(self) -> str:
        return f"OAuthTokens(user_id={self.user_id!r}, expires_in={self.expires_in!r})"


@dataclass
class AccountProfile:
    """Seller profile from the gateway's /users/me endpoint."""

    collector_id: str
    email: str | None = None
    nickname: str | None = None
    country: str | None = None
    site_id: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    identification: dict[str, Any] | None = None


# =============================================================================
# Helpers
# =============================================================================


def format_statement_descriptor(value: str | None) -> str | None:
    """
    Clean a statement descriptor to what the gateway accepts.

    Letters, digits, space and ``.,_-`` are kept; the result is cut to
    22 characters. Returns None when nothing usable is left.
    """
    if not value:
        return None
    cleaned = _STATEMENT_DESCRIPTOR_DISALLOWED.sub("", value).strip()
    if not cleaned:
        return None
    return cleaned[:STATEMENT_DESCRIPTOR_MAX_LENGTH].strip()


def strip_empty(value: Any) -> Any:
    """Recursively drop None, empty strings, empty dicts and empty lists."""
    if isinstance(value, dict):
        cleaned = {k: strip_empty(v) for k, v in value.items()}
        return {k: v for k, v in cleaned.items() if v not in (None, "", {}, [])}
    if isinstance(value, list):
        return [strip_empty(v) for v in value if v not in (None, "", {}, [])]
    return value


def build_back_urls() -> dict[str, str]:
    """Success/failure/pending return URLs, or {} when no base URL is set."""
    base_url = (getattr(settings, "MERCADOPAGO_BACK_URL", "") or "").rstrip("/")
    if not base_url:
        return {}
    path = getattr(settings, "MERCADOPAGO_CHECKOUT_PATH", "/#/checkout/status")
    return {
        outcome: f"{base_url}{path}?status={outcome}"
        for outcome in ("success", "failure", "pending")
    }


# =============================================================================
# MercadoPago Adapter
# =============================================================================


class MercadoPagoAdapter:
    """
    Adapter for MercadoPago API operations.

    All methods are classmethods - no instance state is maintained.

    Usage:
        result = MercadoPagoAdapter.create_checkout_session(params)
        payment = MercadoPagoAdapter.get_payment("1234567890")
    """

    # =========================================================================
    # Configuration
    # =========================================================================

    @staticmethod
    def _timeout() -> float:
        return float(getattr(settings, "MERCADOPAGO_API_TIMEOUT_SECONDS", 10))

    @classmethod
    def _sdk(cls, access_token: str | None = None) -> mercadopago.SDK:
        """Build an SDK client for the given token (platform token by default)."""
        token = access_token or getattr(settings, "MERCADOPAGO_ACCESS_TOKEN", "")
        if not token:
            raise GatewayConfigurationError(
                "MERCADOPAGO_ACCESS_TOKEN is not configured",
            )
        request_options = RequestOptions(connection_timeout=cls._timeout())
        return mercadopago.SDK(token, request_options=request_options)

    @staticmethod
    def _oauth_credentials() -> tuple[str, str]:
        client_id = getattr(settings, "MERCADOPAGO_CLIENT_ID", "")
        client_secret = getattr(settings, "MERCADOPAGO_CLIENT_SECRET", "")
        if not client_id or not client_secret:
            raise GatewayConfigurationError(
                "MercadoPago OAuth credentials are not configured",
                details={
                    "client_id": bool(client_id),
                    "client_secret": bool(client_secret),
                },
            )
        return client_id, client_secret

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """Get logger for this adapter."""
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    def build_authorization_url(cls, redirect_uri: str, state: str) -> str:
        """
        Build the URL a seller visits to grant the platform access.

        Raises:
            GatewayConfigurationError: MERCADOPAGO_CLIENT_ID is not set
        """
        client_id = getattr(settings, "MERCADOPAGO_CLIENT_ID", "")
        if not client_id:
            raise GatewayConfigurationError(
                "MERCADOPAGO_CLIENT_ID is not configured",
            )
        query = urlencode(
            {
                "client_id": client_id,
                "response_type": "code",
                "platform_id": "mp",
                "redirect_uri": redirect_uri,
                "state": state,
            }
        )
        return f"{AUTHORIZATION_BASE_URL}?{query}"

    # =========================================================================
    # Checkout Sessions
    # =========================================================================

    @classmethod
    def build_preference_payload(cls, params: CheckoutSessionParams) -> dict[str, Any]:
        """
        Build the preference body sent to the gateway.

        Fills in item ids and categories, the payer, back URLs,
        notification URL and statement descriptor, and the split fields
        when seller credentials are present. Empty values are removed.
        """
        category_id = getattr(settings, "MERCADOPAGO_ITEM_CATEGORY_ID", "services")
        items = [
            {
                "id": item.get("id") or uuid.uuid4().hex,
                "category_id": item.get("category_id") or category_id,
                **item,
                "unit_price": float(item["unit_price"]),
            }
            for item in params.items
        ]

        back_urls = build_back_urls()
        payload: dict[str, Any] = {
            "items": items,
            "external_reference": params.external_reference,
            "metadata": params.metadata,
            "payer": {
                "email": params.payer_email
                or getattr(settings, "MERCADOPAGO_TEST_PAYER_EMAIL", "test_user@test.com"),
            },
            "back_urls": back_urls,
            "auto_return": "approved" if back_urls else None,
            "payment_methods": {
                "excluded_payment_methods": [],
                "excluded_payment_types": [],
            },
            "notification_url": getattr(settings, "MERCADOPAGO_NOTIFICATION_URL", ""),
            "statement_descriptor": format_statement_descriptor(
                params.statement_descriptor
                or getattr(settings, "MERCADOPAGO_STATEMENT_DESCRIPTOR", "")
            ),
        }

        if params.seller is not None:
            payload["collector_id"] = _as_int_if_numeric(params.seller.collector_id)
            if params.marketplace_fee is not None:
                payload["marketplace_fee"] = float(params.marketplace_fee)

        cleaned = strip_empty(payload)
        # payment_methods exclusions are sent even when empty
        cleaned["payment_methods"] = payload["payment_methods"]
        return cleaned

    @classmethod
    def create_checkout_session(
        cls,
        params: CheckoutSessionParams,
        trace_id: str | None = None,
    ) -> CheckoutSessionResult:
        """
        Create a checkout session (preference).

        With seller credentials the request is made with the seller's token,
        so the session belongs to the seller's account and the marketplace
        fee is withheld for the platform.

        Args:
            params: Checkout session parameters
            trace_id: Optional trace ID for distributed tracing

        Returns:
            CheckoutSessionResult with the preference id and checkout URLs

        Raises:
            GatewayInvalidRequestError: Gateway rejected the payload
            GatewayAuthenticationError: Token rejected
            GatewayUnavailableError: Gateway unreachable or failing
        """
        logger = cls.get_logger()
        access_token = params.seller.access_token if params.seller else None

        log_context = {
            "operation": "create_checkout_session",
            "external_reference": params.external_reference,
            "collector_id": params.seller.collector_id if params.seller else None,
            "marketplace_fee": str(params.marketplace_fee)
            if params.marketplace_fee is not None
            else None,
            "trace_id": trace_id,
        }

        payload = cls.build_preference_payload(params)
        sdk = cls._sdk(access_token)

        start_time = time.time()
        logger.info("Starting MercadoPago operation", extra=log_context)

        try:
            result = sdk.preference().create(payload)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            cls._handle_gateway_error(e, log_context, duration_ms)
            raise  # Never reached, but satisfies type checker

        duration_ms = (time.time() - start_time) * 1000
        body = cls._unwrap(result, log_context, duration_ms)

        logger.info(
            "MercadoPago operation completed",
            extra={
                **log_context,
                "transaction_id": body.get("id"),
                "duration_ms": duration_ms,
            },
        )

        return CheckoutSessionResult(
            transaction_id=str(body.get("id", "")),
            init_point=body.get("init_point", "") or "",
            sandbox_init_point=body.get("sandbox_init_point", "") or "",
            raw_response=body,
        )

    # =========================================================================
    # Payments & Merchant Orders
    # =========================================================================

    @classmethod
    def get_payment(
        cls,
        payment_id: str,
        access_token: str | None = None,
        trace_id: str | None = None,
    ) -> GatewayPayment:
        """
        Fetch a payment by id.

        Raises:
            GatewayResourceNotFoundError: Payment does not exist
            GatewayUnavailableError: Gateway unreachable or failing
        """
        logger = cls.get_logger()
        log_context = {
            "operation": "get_payment",
            "payment_id": str(payment_id),
            "trace_id": trace_id,
        }

        sdk = cls._sdk(access_token)
        start_time = time.time()
        logger.info("Starting MercadoPago operation", extra=log_context)

        try:
            result = sdk.payment().get(payment_id)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            cls._handle_gateway_error(e, log_context, duration_ms)
            raise

        duration_ms = (time.time() - start_time) * 1000
        body = cls._unwrap(result, log_context, duration_ms)

        logger.info(
            "MercadoPago operation completed",
            extra={
                **log_context,
                "status": body.get("status"),
                "duration_ms": duration_ms,
            },
        )

        return GatewayPayment(
            id=str(body.get("id", payment_id)),
            status=str(body.get("status") or ""),
            status_detail=str(body.get("status_detail") or ""),
            external_reference=str(body.get("external_reference") or ""),
            metadata=dict(body.get("metadata") or {}),
            raw_response=body,
        )

    @classmethod
    def get_merchant_orders_by_preference_id(
        cls,
        preference_id: str,
        access_token: str | None = None,
        trace_id: str | None = None,
    ) -> list[dict[str, Any]]:
        """
        Search merchant orders created from a checkout session.

        Returns:
            List of merchant order dicts (may be empty)
        """
        logger = cls.get_logger()
        log_context = {
            "operation": "search_merchant_orders",
            "preference_id": preference_id,
            "trace_id": trace_id,
        }

        sdk = cls._sdk(access_token)
        start_time = time.time()
        logger.info("Starting MercadoPago operation", extra=log_context)

        try:
            result = sdk.merchant_order().search({"preference_id": preference_id})
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            cls._handle_gateway_error(e, log_context, duration_ms)
            raise

        duration_ms = (time.time() - start_time) * 1000
        body = cls._unwrap(result, log_context, duration_ms)
        elements = list(body.get("elements") or [])

        logger.info(
            "MercadoPago operation completed",
            extra={
                **log_context,
                "count": len(elements),
                "duration_ms": duration_ms,
            },
        )
        return elements

    @classmethod
    def get_order_id_by_merchant_order_id(
        cls,
        merchant_order_id: str | int,
        access_token: str | None = None,
        trace_id: str | None = None,
    ) -> str | None:
        """
        Resolve a merchant order to the external reference of its checkout.

        Never raises: a non-numeric id, a gateway error or a merchant order
        without an external reference all return None.
        """
        logger = cls.get_logger()
        log_context = {
            "operation": "get_merchant_order",
            "merchant_order_id": str(merchant_order_id),
            "trace_id": trace_id,
        }

        numeric_id = _as_int_if_numeric(merchant_order_id)
        if not isinstance(numeric_id, int):
            logger.warning("Merchant order id is not numeric", extra=log_context)
            return None

        start_time = time.time()
        logger.info("Starting MercadoPago operation", extra=log_context)

        try:
            sdk = cls._sdk(access_token)
            result = sdk.merchant_order().get(numeric_id)
            duration_ms = (time.time() - start_time) * 1000
            body = cls._unwrap(result, log_context, duration_ms)
        except GatewayError as e:
            logger.warning(
                "Could not resolve merchant order",
                extra={**log_context, "error": str(e)},
            )
            return None
        except Exception as e:
            logger.error(
                f"Unexpected error resolving merchant order: {type(e).__name__}",
                extra=log_context,
                exc_info=True,
            )
            return None

        reference = body.get("external_reference")
        logger.info(
            "MercadoPago operation completed",
            extra={
                **log_context,
                "external_reference": reference,
                "duration_ms": duration_ms,
            },
        )
        return str(reference) if reference else None

    # =========================================================================
    # OAuth
    # =========================================================================

    @classmethod
    def exchange_authorization_code(
        cls,
        code: str,
        redirect_uri: str,
        trace_id: str | None = None,
    ) -> OAuthTokens:
        """
        Exchange an authorization code for a seller's token set.

        Raises:
            GatewayConfigurationError: OAuth credentials missing
            GatewayInvalidRequestError: Code invalid, expired or already used
            GatewayUnavailableError: Gateway unreachable or failing
        """
        client_id, client_secret = cls._oauth_credentials()
        body = cls._post_oauth_token(
            {
                "client_id": client_id,
                "client_secret": client_secret,
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": redirect_uri,
            },
            log_context={
                "operation": "exchange_authorization_code",
                "trace_id": trace_id,
            },
        )
        return cls._tokens_from_body(body)

    @classmethod
    def refresh_token(
        cls,
        refresh_token: str,
        trace_id: str | None = None,
    ) -> OAuthTokens:
        """
        Exchange a refresh token for a new token set.

        The gateway may or may not rotate the refresh token; callers must
        keep the old one when refresh_token is None in the result.
        """
        client_id, client_secret = cls._oauth_credentials()
        body = cls._post_oauth_token(
            {
                "client_id": client_id,
                "client_secret": client_secret,
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
            },
            log_context={
                "operation": "refresh_token",
                "trace_id": trace_id,
            },
        )
        return cls._tokens_from_body(body)

    @classmethod
    def get_account_profile(
        cls,
        access_token: str,
        trace_id: str | None = None,
    ) -> AccountProfile:
        """Fetch the profile of the account that owns ``access_token``."""
        logger = cls.get_logger()
        log_context = {"operation": "get_account_profile", "trace_id": trace_id}

        start_time = time.time()
        logger.info("Starting MercadoPago operation", extra=log_context)

        try:
            response = requests.get(
                f"{API_BASE_URL}/users/me",
                headers={"Authorization": f"Bearer {access_token}"},
                timeout=cls._timeout(),
            )
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            cls._handle_gateway_error(e, log_context, duration_ms)
            raise

        duration_ms = (time.time() - start_time) * 1000
        body = cls._unwrap(
            {"status": response.status_code, "response": _json_or_empty(response)},
            log_context,
            duration_ms,
        )

        logger.info(
            "MercadoPago operation completed",
            extra={**log_context, "collector_id": body.get("id"), "duration_ms": duration_ms},
        )

        return AccountProfile(
            collector_id=str(body.get("id", "")),
            email=body.get("email"),
            nickname=body.get("nickname"),
            country=body.get("country_id"),
            site_id=body.get("site_id"),
            first_name=body.get("first_name"),
            last_name=body.get("last_name"),
            identification=body.get("identification"),
        )

    @classmethod
    def _post_oauth_token(
        cls,
        data: dict[str, str],
        log_context: dict[str, Any],
    ) -> dict[str, Any]:
        logger = cls.get_logger()
        start_time = time.time()
        logger.info("Starting MercadoPago operation", extra=log_context)

        try:
            response = requests.post(
                f"{API_BASE_URL}/oauth/token",
                data=data,
                headers={"Accept": "application/json"},
                timeout=cls._timeout(),
            )
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            cls._handle_gateway_error(e, log_context, duration_ms)
            raise

        duration_ms = (time.time() - start_time) * 1000
        body = cls._unwrap(
            {"status": response.status_code, "response": _json_or_empty(response)},
            log_context,
            duration_ms,
        )
        if not body.get("access_token"):
            logger.error("OAuth response without access_token", extra=log_context)
            raise GatewayInvalidRequestError(
                "MercadoPago did not return an access token",
                gateway_status=response.status_code,
            )

        logger.info(
            "MercadoPago operation completed",
            extra={
                **log_context,
                "user_id": body.get("user_id"),
                "expires_in": body.get("expires_in"),
                "duration_ms": duration_ms,
            },
        )
        return body

    @staticmethod
    def _tokens_from_body(body: dict[str, Any]) -> OAuthTokens:
        expires_in = body.get("expires_in")
        return OAuthTokens(
            access_token=body["access_token"],
            refresh_token=body.get("refresh_token") or None,
            expires_in=int(expires_in) if expires_in is not None else None,
            public_key=body.get("public_key") or None,
            user_id=str(body["user_id"]) if body.get("user_id") is not None else None,
            scope=body.get("scope") or None,
        )

    # =========================================================================
    # Error Handling
    # =========================================================================

    @classmethod
    def _unwrap(
        cls,
        result: dict[str, Any],
        log_context: dict[str, Any],
        duration_ms: float,
    ) -> dict[str, Any]:
        """
        Return the response body of an SDK-style result or raise.

        SDK calls return {"status": <http status>, "response": <body>}
        instead of raising on HTTP errors.
        """
        status_code = int(result.get("status") or 0)
        body = result.get("response")
        if not isinstance(body, dict):
            body = {}

        if 200 <= status_code < 300:
            return body

        logger = cls.get_logger()
        message = body.get("message") or body.get("error") or f"HTTP {status_code}"
        gateway_code = body.get("error") if isinstance(body.get("error"), str) else None
        log_context = {
            **log_context,
            "duration_ms": duration_ms,
            "gateway_status": status_code,
            "gateway_code": gateway_code,
        }

        if status_code == 404:
            logger.warning("MercadoPago resource not found", extra=log_context)
            raise GatewayResourceNotFoundError(
                str(message), gateway_status=status_code, gateway_code=gateway_code
            )

        if status_code in (401, 403):
            logger.error("MercadoPago rejected credentials", extra=log_context)
            raise GatewayAuthenticationError(
                str(message), gateway_status=status_code, gateway_code=gateway_code
            )

        if status_code == 429:
            logger.warning("Rate limited by MercadoPago", extra=log_context)
            raise GatewayRateLimitError(
                "MercadoPago rate limit exceeded. Please retry.",
                gateway_status=status_code,
                gateway_code=gateway_code,
            )

        if 400 <= status_code < 500:
            logger.error("Invalid request to MercadoPago", extra=log_context)
            raise GatewayInvalidRequestError(
                str(message), gateway_status=status_code, gateway_code=gateway_code
            )

        logger.error("MercadoPago API error", extra=log_context)
        raise GatewayUnavailableError(
            "MercadoPago service error. Please retry.",
            gateway_status=status_code or None,
            gateway_code=gateway_code,
        )

    @classmethod
    def _handle_gateway_error(
        cls,
        error: Exception,
        log_context: dict[str, Any],
        duration_ms: float,
    ) -> None:
        """
        Translate transport exceptions to domain exceptions.

        Raises:
            GatewayTimeoutError: Request timed out
            GatewayUnavailableError: Connection failed or unexpected error
        """
        logger = cls.get_logger()
        log_context = {**log_context, "duration_ms": duration_ms}

        if isinstance(error, GatewayError):
            raise error

        if isinstance(error, requests.exceptions.Timeout):
            logger.error("Timeout calling MercadoPago", extra=log_context)
            raise GatewayTimeoutError(
                "MercadoPago did not respond in time. Please retry.",
            )

        if isinstance(error, requests.exceptions.RequestException):
            logger.error(
                "Connection error to MercadoPago",
                extra=log_context,
                exc_info=True,
            )
            raise GatewayUnavailableError(
                "Could not connect to MercadoPago. Please retry.",
            )

        logger.error(
            f"Unexpected error from MercadoPago: {type(error).__name__}",
            extra=log_context,
            exc_info=True,
        )
        raise GatewayUnavailableError(
            f"Unexpected MercadoPago error: {error}",
        )


def _as_int_if_numeric(value: Any) -> Any:
    text = str(value).strip()
    return int(text) if text.isdigit() else value


def _json_or_empty(response: requests.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}
