"""
Configuration provider backed by the AppSetting table.

Usage:
    from core.configuration import ConfigurationProvider

    percentage = ConfigurationProvider().get_number(
        "marketplace_fee_percentage", default=0
    )

A missing key always yields the caller's default. Database errors are
not swallowed here; callers that must fail open (the fee calculator)
handle them themselves.
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING

from core.models import AppSetting

if TYPE_CHECKING:
    from typing import Any


logger = logging.getLogger(__name__)

_MISSING = object()


class ConfigurationProvider:
    """Read-only access to AppSetting values with defaults."""

    def get(self, key: str, default: Any = None) -> Any:
        """Return the stored value for ``key``, or ``default`` if absent."""
        value = (
            AppSetting.objects.filter(key=key)
            .values_list("value", flat=True)
            .first()
        )
        if value is None:
            return default
        return value

    def get_number(self, key: str, default: Any = 0) -> Decimal:
        """
        Return the value for ``key`` as a Decimal.

        Non-numeric values are logged and replaced by ``default``.
        Booleans are rejected because JSON true/false would otherwise
        coerce to 1/0.
        """
        value = self.get(key, _MISSING)
        if value is _MISSING or isinstance(value, bool):
            return Decimal(str(default))

        try:
            number = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            number = None

        if number is None or not number.is_finite():
            logger.warning(
                "Non-numeric configuration value, using default",
                extra={"key": key, "value": value, "default": default},
            )
            return Decimal(str(default))
        return number
