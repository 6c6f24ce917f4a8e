"""
Payments app configuration.

This app provides the marketplace payment core:
- Seller OAuth linking (LinkedPayoutAccount)
- Checkout session creation (PaymentIntent)
- Gateway webhook reconciliation
"""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    """Configuration for the payments application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"
    verbose_name = "Payments"
