"""Order-specific exceptions."""

from core.exceptions import NotFoundError, ValidationError


class OrderNotFoundError(NotFoundError):
    """Raised when an order lookup fails."""

    default_error_code: str = "ORDER_NOT_FOUND"


class OrderValidationError(ValidationError):
    """Raised when order input is invalid (no items, no contact, bad amounts)."""

    default_error_code: str = "ORDER_VALIDATION_ERROR"
