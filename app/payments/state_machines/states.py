"""
State enums for payment models.

These are Django TextChoices for database storage and admin integration.
PaymentIntentState is driven by django-fsm transitions on PaymentIntent.

State Machines Overview:

PaymentIntent States (driven only by gateway notifications):
    pending → in_process        gateway status pending / in_process
    pending|in_process → approved   gateway status approved, or any merchant_order
    pending|in_process → rejected   gateway status rejected / cancelled
    any → refunded              gateway status refunded
    unknown gateway status → pending

    Notifications are not ordered, so every transition accepts any
    source state: a late "pending" can move an "approved" intent back.

LinkedPayoutAccount Status:
    active → inactive (unlink)
    active → suspended (set by operators)
    inactive → active (relink)
"""

from django.db import models


class PaymentIntentState(models.TextChoices):
    """
    Local mirror of the gateway payment status.

    Terminal in practice: APPROVED, REJECTED, REFUNDED (but see module
    docstring, nothing prevents an overwrite).
    """

    PENDING = "pending", "Pending"
    IN_PROCESS = "in_process", "In Process"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"
    REFUNDED = "refunded", "Refunded"


class LinkedAccountStatus(models.TextChoices):
    """Status of a seller's linked payout account."""

    ACTIVE = "active", "Active"
    INACTIVE = "inactive", "Inactive"
    SUSPENDED = "suspended", "Suspended"


class WebhookNotificationStatus(models.TextChoices):
    """
    Processing outcome recorded for each webhook delivery.

    State Flow:
        RECEIVED → PROCESSED   identity resolved, updates attempted
        RECEIVED → IGNORED     unknown topic or unresolvable identity
        RECEIVED → FAILED      reconciliation raised
    """

    RECEIVED = "received", "Received"
    PROCESSED = "processed", "Processed"
    IGNORED = "ignored", "Ignored"
    FAILED = "failed", "Failed"


__all__ = [
    "PaymentIntentState",
    "LinkedAccountStatus",
    "WebhookNotificationStatus",
]
