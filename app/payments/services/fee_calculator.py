"""
Marketplace fee computation.

The platform takes a commission on every order. The percentage lives in
the AppSetting table and is read on every call, so an admin change
applies to the next order without a deploy.

Usage:
    from payments.services import FeeCalculator

    breakdown = FeeCalculator().compute_amounts(Decimal("1000"))
    breakdown.fee_amount  # Decimal("55.000000") with a 5.5% setting
    breakdown.total       # Decimal("1055.000000")

Amounts are Decimals quantized to six fractional digits (ROUND_HALF_UP).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import TYPE_CHECKING

from core.configuration import ConfigurationProvider
from core.exceptions import ValidationError
from core.models import AppSetting
from core.services import BaseService

if TYPE_CHECKING:
    from typing import Any


AMOUNT_PRECISION = Decimal("0.000001")

FEE_PERCENTAGE_KEY = "marketplace_fee_percentage"
LEGACY_FEE_PERCENTAGE_KEY = "percentage_fee"

MIN_FEE_PERCENTAGE = Decimal("0")
MAX_FEE_PERCENTAGE = Decimal("100")


def quantize_amount(value: Decimal) -> Decimal:
    """Round to the precision used for every stored money amount."""
    return value.quantize(AMOUNT_PRECISION, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class FeeBreakdown:
    """
    Result of a fee computation.

    Attributes:
        subtotal: Sum of the order items
        fee_percentage: Commission percentage applied (snapshot)
        fee_amount: subtotal * fee_percentage / 100
        total: subtotal + fee_amount
    """

    subtotal: Decimal
    fee_percentage: Decimal
    fee_amount: Decimal
    total: Decimal

    def to_dict(self) -> dict[str, str]:
        return {
            "subtotal": str(self.subtotal),
            "fee_percentage": str(self.fee_percentage),
            "fee_amount": str(self.fee_amount),
            "total": str(self.total),
        }


class FeeCalculator(BaseService):
    """
    Compute order totals including the marketplace commission.

    The configuration read fails open: if the provider raises, or the
    stored percentage is outside 0-100, the order is charged without
    commission and the problem is logged.
    """

    def __init__(self, configuration: ConfigurationProvider | None = None):
        self.configuration = configuration or ConfigurationProvider()

    def compute_amounts(self, subtotal: Any) -> FeeBreakdown:
        """
        Split ``subtotal`` into fee and total.

        Args:
            subtotal: Non-negative amount (Decimal, int, float or numeric str)

        Returns:
            FeeBreakdown with the percentage used and the computed amounts
        """
        subtotal = quantize_amount(Decimal(str(subtotal)))
        percentage = self.get_fee_percentage()

        fee_amount = quantize_amount(subtotal * percentage / Decimal("100"))
        return FeeBreakdown(
            subtotal=subtotal,
            fee_percentage=percentage,
            fee_amount=fee_amount,
            total=quantize_amount(subtotal + fee_amount),
        )

    def get_fee_percentage(self) -> Decimal:
        """
        Current commission percentage, or 0 when it cannot be used.

        Never raises.
        """
        logger = self.get_logger()
        try:
            legacy = self.configuration.get_number(LEGACY_FEE_PERCENTAGE_KEY, default=0)
            percentage = self.configuration.get_number(FEE_PERCENTAGE_KEY, default=legacy)
        except Exception:
            logger.warning(
                "Could not read marketplace fee percentage, charging no fee",
                exc_info=True,
            )
            return Decimal("0")

        if not MIN_FEE_PERCENTAGE <= percentage <= MAX_FEE_PERCENTAGE:
            logger.warning(
                "Marketplace fee percentage out of range, charging no fee",
                extra={"fee_percentage": str(percentage)},
            )
            return Decimal("0")
        return percentage

    def set_fee_percentage(self, percentage: Any) -> AppSetting:
        """
        Store a new commission percentage.

        Raises:
            ValidationError: Not a number, or outside 0-100
        """
        try:
            value = Decimal(str(percentage))
        except (InvalidOperation, ValueError):
            value = None
        if value is None or not value.is_finite() or not (
            MIN_FEE_PERCENTAGE <= value <= MAX_FEE_PERCENTAGE
        ):
            raise ValidationError(
                "Fee percentage must be a number between 0 and 100",
                error_code="INVALID_FEE_PERCENTAGE",
                details={"percentage": str(percentage)},
            )

        setting, created = AppSetting.objects.update_or_create(
            key=FEE_PERCENTAGE_KEY,
            defaults={"value": str(value)},
            create_defaults={
                "value": str(value),
                "description": "Marketplace commission percentage per transaction",
            },
        )
        self.get_logger().info(
            "Marketplace fee percentage updated",
            extra={"fee_percentage": str(value), "created": created},
        )
        return setting
