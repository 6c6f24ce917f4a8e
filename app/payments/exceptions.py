"""
Payment-specific exceptions.

Exception Hierarchy:
    PaymentError (base for payment domain)
    ├── PaymentNotFoundError - PaymentIntent lookup failures (404)
    │   └── LinkedAccountNotFoundError - No active linked payout account (404)
    ├── PaymentValidationError - Invalid input / rejected operation (400)
    ├── GatewayConfigurationError - Missing gateway credentials (500)
    └── GatewayError - Base for all payment gateway failures (502)
        ├── GatewayInvalidRequestError - Gateway rejected the request (permanent)
        ├── GatewayAuthenticationError - Token rejected by the gateway (permanent)
        ├── GatewayResourceNotFoundError - Gateway object does not exist (permanent)
        └── GatewayUnavailableError - Gateway unreachable or 5xx (transient, 503)
            ├── GatewayRateLimitError - Rate limited (transient, 503)
            └── GatewayTimeoutError - Request timed out (transient, 503)

    AccountAlreadyLinkedError - Seller already linked (inherits ConflictError, 409)

Usage:
    from payments.exceptions import GatewayError, PaymentValidationError

    try:
        MercadoPagoAdapter.create_checkout_session(params)
    except GatewayError as e:
        if e.is_retryable:
            ...
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import BaseApplicationError, ConflictError

if TYPE_CHECKING:
    from typing import Any


# =============================================================================
# Payment Domain Exceptions
# =============================================================================


class PaymentError(BaseApplicationError):
    """Base exception for all payment operations."""

    default_error_code: str = "PAYMENT_ERROR"


class PaymentNotFoundError(PaymentError):
    """
    Raised when a payment entity cannot be found.

    Example:
        intent = PaymentIntent.objects.filter(id=intent_id).first()
        if not intent:
            raise PaymentNotFoundError(
                f"PaymentIntent {intent_id} not found",
                details={"payment_intent_id": str(intent_id)},
            )
    """

    default_error_code: str = "PAYMENT_NOT_FOUND"
    http_status: int = 404


class LinkedAccountNotFoundError(PaymentNotFoundError):
    """Raised when a seller has no active linked payout account."""

    default_error_code: str = "LINKED_ACCOUNT_NOT_FOUND"


class PaymentValidationError(PaymentError):
    """
    Raised when a payment operation receives invalid input.

    Also used when the gateway refuses a checkout session for reasons
    that are not transient, so the caller sees a 400 rather than a 5xx.
    """

    default_error_code: str = "PAYMENT_VALIDATION_ERROR"
    http_status: int = 400


class GatewayConfigurationError(PaymentError):
    """Raised when OAuth client credentials or the platform token are missing."""

    default_error_code: str = "GATEWAY_NOT_CONFIGURED"
    http_status: int = 500


class AccountAlreadyLinkedError(ConflictError):
    """Raised when a seller who already has an active linked account links again."""

    default_error_code: str = "ACCOUNT_ALREADY_LINKED"


# =============================================================================
# Gateway Exceptions
# =============================================================================


class GatewayError(PaymentError):
    """
    Base exception for all payment gateway failures.

    Attributes:
        gateway_status: HTTP status returned by the gateway (None on network errors)
        gateway_code: Gateway's own error code, when the body carries one
        is_retryable: Whether the same call may succeed later

    Example:
        except GatewayError as e:
            logger.warning("Gateway call failed", extra={"retryable": e.is_retryable})
    """

    default_error_code: str = "GATEWAY_ERROR"
    http_status: int = 502
    is_retryable: bool = False

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        gateway_status: int | None = None,
        gateway_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if gateway_status is not None:
            details["gateway_status"] = gateway_status
        if gateway_code:
            details["gateway_code"] = gateway_code
        super().__init__(message, error_code=error_code, details=details)
        self.gateway_status = gateway_status
        self.gateway_code = gateway_code


# -----------------------------------------------------------------------------
# Permanent Errors (do not retry)
# -----------------------------------------------------------------------------


class GatewayInvalidRequestError(GatewayError):
    """
    The gateway rejected the request parameters (4xx).

    Usually a bug in the payload we built, or data the gateway refuses
    (for example an item price it considers invalid).
    """

    default_error_code: str = "GATEWAY_INVALID_REQUEST"


class GatewayAuthenticationError(GatewayError):
    """The access token was rejected (401/403). Expired or revoked seller grant."""

    default_error_code: str = "GATEWAY_AUTHENTICATION_FAILED"


class GatewayResourceNotFoundError(GatewayError):
    """The requested payment, merchant order or user does not exist at the gateway."""

    default_error_code: str = "GATEWAY_RESOURCE_NOT_FOUND"


# -----------------------------------------------------------------------------
# Transient Errors (safe to retry)
# -----------------------------------------------------------------------------


class GatewayUnavailableError(GatewayError):
    """
    The gateway could not be reached or answered with a server error.

    This is the "upstream unavailable" kind: callers surface it as 503
    instead of blaming the client's input.
    """

    default_error_code: str = "GATEWAY_UNAVAILABLE"
    http_status: int = 503
    is_retryable: bool = True


class GatewayRateLimitError(GatewayUnavailableError):
    """Rate limited by the gateway (429). Surfaced as unavailable, not as a bad request."""

    default_error_code: str = "GATEWAY_RATE_LIMITED"


class GatewayTimeoutError(GatewayUnavailableError):
    """The gateway did not answer within MERCADOPAGO_API_TIMEOUT_SECONDS."""

    default_error_code: str = "GATEWAY_TIMEOUT"
