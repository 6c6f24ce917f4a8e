"""
Payment services.

This module provides:
- FeeCalculator: Marketplace commission and order totals
- StatusMapper: Gateway status to PaymentIntent state / Order status
- PayoutAccountLinker: Seller OAuth linking and token lifecycle
- PaymentIntentManager: Checkout session creation and intent lookup
- WebhookReconciler: Applies gateway notifications to local records

Usage:
    from payments.services import PaymentIntentManager

    intent = PaymentIntentManager().create_payment(
        payer_reference="buyer@example.com",
        amount=Decimal("1055"),
        seller_id=seller.id,
        marketplace_fee_amount=Decimal("55"),
    )

    from payments.services import WebhookReconciler

    outcome = WebhookReconciler().process_notification(payment_id="123")
"""

from payments.services.fee_calculator import FeeBreakdown, FeeCalculator
from payments.services.status_mapper import (
    StatusMapper,
    to_order_status,
    to_payment_intent_state,
)
from payments.services.payout_account_linker import LinkStatus, PayoutAccountLinker
from payments.services.payment_intent_manager import (
    PaymentIntentDetail,
    PaymentIntentManager,
)
from payments.services.webhook_reconciler import (
    ReconciliationOutcome,
    WebhookReconciler,
)

__all__ = [
    "FeeBreakdown",
    "FeeCalculator",
    "LinkStatus",
    "PaymentIntentDetail",
    "PaymentIntentManager",
    "PayoutAccountLinker",
    "ReconciliationOutcome",
    "StatusMapper",
    "WebhookReconciler",
    "to_order_status",
    "to_payment_intent_state",
]
