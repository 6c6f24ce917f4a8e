"""
Payment domain models.

- LinkedPayoutAccount: A seller's OAuth-linked gateway account
- PaymentIntent: Local mirror of one gateway checkout session
- WebhookNotification: Audit log of inbound gateway notifications
"""

from payments.models.linked_payout_account import LinkedPayoutAccount
from payments.models.payment_intent import PaymentIntent
from payments.models.webhook_notification import WebhookNotification

__all__ = [
    "LinkedPayoutAccount",
    "PaymentIntent",
    "WebhookNotification",
]
