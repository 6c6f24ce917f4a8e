"""
Base exception classes for application-wide error handling.

Every domain error raised by a service carries a human-readable message,
a machine-readable error code and an optional details dict. The DRF
exception handler in core.exception_handler turns them into JSON
responses with a status code chosen from the class.

Exception Hierarchy:
    BaseApplicationError (base)
    ├── ValidationError - Input validation failures (400)
    ├── NotFoundError - Resource not found (404)
    ├── ConflictError - State conflicts such as duplicates (409)
    └── ConfigurationError - Missing server-side configuration (500)

Usage:
    from core.exceptions import ConflictError, NotFoundError

    raise NotFoundError(
        f"Order {order_id} not found",
        error_code="ORDER_NOT_FOUND",
        details={"order_id": str(order_id)},
    )

Note:
    These exceptions are for domain/business logic errors.
    DRF handles API-layer exceptions (serialization, authentication, etc.).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (field errors, identifiers, etc.)
        http_status: Status code used when the error reaches an API view
    """

    default_error_code: str = "APPLICATION_ERROR"
    http_status: int = 400

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Example:
            {
                "error": "Payment intent not found",
                "error_code": "PAYMENT_NOT_FOUND",
                "details": {"payment_intent_id": "..."}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ValidationError(BaseApplicationError):
    """
    Raised when input validation fails in the service layer.

    For request-body validation, use DRF serializers instead.
    """

    default_error_code: str = "VALIDATION_ERROR"
    http_status: int = 400


class NotFoundError(BaseApplicationError):
    """Raised when a single resource that is expected to exist is missing."""

    default_error_code: str = "NOT_FOUND"
    http_status: int = 404


class ConflictError(BaseApplicationError):
    """
    Raised when an operation conflicts with current resource state.

    Example:
        if account.is_active:
            raise ConflictError(
                "Seller already has an active linked account",
                error_code="ACCOUNT_ALREADY_LINKED",
                details={"seller_id": str(seller_id)},
            )
    """

    default_error_code: str = "CONFLICT"
    http_status: int = 409


class ConfigurationError(BaseApplicationError):
    """
    Raised when a required server-side setting is missing or invalid.

    This is an operator problem, not a client one, so it maps to 500.
    """

    default_error_code: str = "CONFIGURATION_ERROR"
    http_status: int = 500
