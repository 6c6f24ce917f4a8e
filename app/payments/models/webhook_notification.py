"""
WebhookNotification model: audit log of gateway webhook deliveries.

Every delivery gets its own row, including redeliveries of the same
notification. The log is not consulted before processing, so it does
not deduplicate anything; it records what arrived and what happened.

Usage:
    notification = WebhookNotification.objects.create(
        topic="payment",
        resource_id="1234567890",
        payload=body,
    )
"""

from __future__ import annotations

from django.db import models
from django.utils import timezone

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel

from payments.state_machines import WebhookNotificationStatus


class WebhookNotification(UUIDPrimaryKeyMixin, BaseModel):
    """
    One inbound notification from the payment gateway.

    Fields:
        topic: "payment", "merchant_order" or whatever the gateway sent
        resource_id: Payment id or merchant order id extracted from the request
        idempotency_key: X-Idempotency-Key header, if present
        payload: JSON body as received
        query_params: Query string as received
        status: Processing outcome
        external_reference: Local PaymentIntent id the notification resolved to
        payment_status: Gateway status applied during reconciliation
        error_message: Failure details when status is FAILED
        processed_at: When processing finished
    """

    topic = models.CharField(max_length=50, db_index=True, blank=True, default="")

    resource_id = models.CharField(max_length=64, db_index=True, blank=True, default="")

    idempotency_key = models.CharField(max_length=255, blank=True, default="")

    payload = models.JSONField(default=dict, blank=True)

    query_params = models.JSONField(default=dict, blank=True)

    status = models.CharField(
        max_length=20,
        choices=WebhookNotificationStatus.choices,
        default=WebhookNotificationStatus.RECEIVED,
        db_index=True,
    )

    external_reference = models.CharField(max_length=64, blank=True, default="")

    payment_status = models.CharField(max_length=50, blank=True, default="")

    error_message = models.TextField(blank=True, default="")

    processed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Webhook Notification"
        verbose_name_plural = "Webhook Notifications"
        indexes = [
            models.Index(fields=["topic", "resource_id"], name="webhook_topic_resource_idx"),
        ]

    def __str__(self) -> str:
        return f"WebhookNotification({self.topic}:{self.resource_id}, {self.status})"

    def mark_finished(
        self,
        status: str,
        external_reference: str | None = None,
        payment_status: str | None = None,
        error_message: str | None = None,
    ) -> None:
        """
        Record the processing outcome and save.

        Gateway-supplied values are cut to their column lengths; the
        reference and status come from the payment and are not validated.
        """
        self.status = status
        self.external_reference = (external_reference or "")[:64]
        self.payment_status = (payment_status or "")[:50]
        self.error_message = error_message or ""
        self.processed_at = timezone.now()
        self.save(
            update_fields=[
                "status",
                "external_reference",
                "payment_status",
                "error_message",
                "processed_at",
                "updated_at",
            ]
        )
