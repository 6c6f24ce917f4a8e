"""
Base service layer patterns for business logic encapsulation.

This module provides:
- ServiceResult: result wrapper for best-effort operations whose failure
  must be reported without raising (webhook reconciliation steps)
- BaseService: base class with logging, transaction and validation helpers

Pattern Comparison:
    - Exceptions: the default for the synchronous API paths. Services raise
      BaseApplicationError subclasses and the DRF handler renders them.
    - ServiceResult: for paths that must never raise to their caller
      (the gateway webhook), where a failure is logged and discarded.

Usage:
    from core.services import BaseService, ServiceResult

    def handle(payload) -> ServiceResult:
        try:
            outcome = reconcile(payload)
        except Exception as exc:
            return ServiceResult.from_exception(exc)
        return ServiceResult.success(outcome)
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar

from django.db import transaction

from core.exceptions import BaseApplicationError, ValidationError

if TYPE_CHECKING:
    from collections.abc import Generator
    from typing import Any

T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    Standard result wrapper for service operations.

    Attributes:
        success: Whether the operation succeeded
        data: Result data if successful (None if failed)
        error: Error message if failed (None if successful)
        error_code: Machine-readable error code
    """

    success: bool
    data: T | None = None
    error: str | None = None
    error_code: str | None = None

    @classmethod
    def success(cls, data: T) -> ServiceResult[T]:
        """Create a successful result carrying ``data``."""
        return cls(success=True, data=data)

    @classmethod
    def from_exception(
        cls, exc: Exception, error_code: str | None = None
    ) -> ServiceResult[T]:
        """
        Create a failed result from an exception.

        Application errors keep their own error code; anything else uses
        the exception class name.
        """
        if error_code is None and isinstance(exc, BaseApplicationError):
            error_code = exc.error_code
        return cls(
            success=False,
            error=str(exc),
            error_code=error_code or exc.__class__.__name__.upper(),
        )


class BaseService:
    """
    Base class for service layer classes.

    Provides:
    - A logger named after the concrete service class
    - An explicit transaction boundary (atomic)
    - Required-field validation that raises ValidationError

    Services can be stateless (classmethods only) or take collaborators
    in __init__ so tests can inject fakes.
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """Return a logger named ``<module>.<ClassName>``."""
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls) -> Generator[None, None, None]:
        """Run the enclosed block in a database transaction."""
        with transaction.atomic():
            yield

    @classmethod
    def validate_required(cls, **kwargs: Any) -> None:
        """
        Raise ValidationError if any keyword value is None or blank.

        Example:
            cls.validate_required(payer_reference=payer, amount=amount)
        """
        errors: dict[str, list[str]] = {}
        for field_name, value in kwargs.items():
            if value is None or (isinstance(value, str) and not value.strip()):
                errors[field_name] = ["This field is required."]

        if errors:
            raise ValidationError(
                f"Required fields missing: {', '.join(sorted(errors))}",
                error_code="VALIDATION_ERROR",
                details=errors,
            )
