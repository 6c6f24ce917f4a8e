"""
Webhook notification handlers for MercadoPago.

This module parses inbound notifications, keeps a registry of handlers by
topic and dispatches to them. Dispatch never raises: any failure becomes
a failed ServiceResult that is logged and recorded on the audit row, so
the endpoint can always acknowledge the delivery.

Usage:
    from payments.webhooks.handlers import dispatch_notification, parse_notification

    payload = parse_notification(body, query_params)
    result = dispatch_notification(payload)

    # Register a handler for another topic
    @register_handler("chargebacks")
    def handle_chargeback(payload, reconciler) -> ServiceResult:
        ...
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from core.services import ServiceResult

from payments.services import ReconciliationOutcome, WebhookReconciler
from payments.state_machines import WebhookNotificationStatus

if TYPE_CHECKING:
    from typing import Any

    from payments.models import WebhookNotification


logger = logging.getLogger(__name__)

TOPIC_PAYMENT = "payment"
TOPIC_MERCHANT_ORDER = "merchant_order"


# =============================================================================
# Parsing
# =============================================================================


@dataclass
class NotificationPayload:
    """
    What a delivery is about, independent of the shape it arrived in.

    Attributes:
        topic: "payment", "merchant_order", or the raw topic/type received
        payment_id: Payment id (payment notifications)
        merchant_order_id: Merchant order id (merchant_order notifications)
        idempotency_key: X-Idempotency-Key header, if any
    """

    topic: str
    payment_id: str | None = None
    merchant_order_id: str | None = None
    idempotency_key: str | None = None

    @property
    def resource_id(self) -> str:
        return self.payment_id or self.merchant_order_id or ""


def parse_notification(
    body: dict[str, Any] | None,
    query: dict[str, Any] | None,
    idempotency_key: str | None = None,
) -> NotificationPayload:
    """
    Extract ids from the body or the query string.

    Accepted shapes:
        body  {"type": "payment", "data": {"id": "123"}}
        query ?type=payment&data.id=123
        body  {"topic": "merchant_order", "resource": "https://.../merchant_orders/456"}
        query ?topic=merchant_order&id=456
    """
    body = body if isinstance(body, dict) else {}
    query = query or {}

    payment_id = None
    data = body.get("data")
    if body.get("type") == TOPIC_PAYMENT and isinstance(data, dict) and data.get("id"):
        payment_id = str(data["id"])
    elif query.get("type") == TOPIC_PAYMENT and query.get("data.id"):
        payment_id = str(query["data.id"])

    merchant_order_id = None
    if body.get("topic") == TOPIC_MERCHANT_ORDER and body.get("resource"):
        merchant_order_id = str(body["resource"]).rstrip("/").split("/")[-1]
    elif query.get("topic") == TOPIC_MERCHANT_ORDER and query.get("id"):
        merchant_order_id = str(query["id"])

    if payment_id:
        topic = TOPIC_PAYMENT
    elif merchant_order_id:
        topic = TOPIC_MERCHANT_ORDER
    else:
        topic = str(
            body.get("type") or body.get("topic") or query.get("type") or query.get("topic") or ""
        )

    return NotificationPayload(
        topic=topic,
        payment_id=payment_id,
        merchant_order_id=merchant_order_id or None,
        idempotency_key=idempotency_key or None,
    )


# =============================================================================
# Handler Registry
# =============================================================================


# Maps topic strings to handler functions
WEBHOOK_HANDLERS: dict[
    str, Callable[[NotificationPayload, WebhookReconciler], ServiceResult]
] = {}


def register_handler(topic: str) -> Callable:
    """
    Decorator to register a handler for a notification topic.

    Args:
        topic: The notification topic (e.g., "payment")
    """

    def decorator(
        func: Callable[[NotificationPayload, WebhookReconciler], ServiceResult],
    ) -> Callable:
        WEBHOOK_HANDLERS[topic] = func
        logger.debug(f"Registered webhook handler for {topic}")
        return func

    return decorator


def dispatch_notification(
    payload: NotificationPayload,
    notification: WebhookNotification | None = None,
    reconciler: WebhookReconciler | None = None,
) -> ServiceResult[ReconciliationOutcome | None]:
    """
    Dispatch a notification to the handler for its topic.

    Unknown topics are acknowledged and ignored. Handler exceptions are
    caught and returned as a failed ServiceResult. When ``notification``
    is given, the outcome is recorded on it; a failed audit write is
    logged and does not change the result.
    """
    handler = WEBHOOK_HANDLERS.get(payload.topic)
    log_extra = {
        "topic": payload.topic,
        "resource_id": payload.resource_id,
        "idempotency_key": payload.idempotency_key,
    }

    if not handler:
        logger.info(
            f"No handler registered for topic: {payload.topic or '(none)'}",
            extra=log_extra,
        )
        result = ServiceResult.success(None)
    else:
        logger.info(f"Dispatching {payload.topic} notification to handler", extra=log_extra)

        try:
            result = handler(payload, reconciler or WebhookReconciler())
        except Exception as e:
            logger.error(
                f"Webhook handler failed: {type(e).__name__}",
                extra=log_extra,
                exc_info=True,
            )
            result = ServiceResult.from_exception(e)

    if notification is not None:
        try:
            _record_outcome(notification, result)
        except Exception as e:
            logger.error(
                f"Failed to record webhook outcome: {type(e).__name__}",
                extra={**log_extra, "notification_id": str(notification.id)},
                exc_info=True,
            )
    return result


def _record_outcome(notification: WebhookNotification, result: ServiceResult) -> None:
    if not result.success:
        notification.mark_finished(
            WebhookNotificationStatus.FAILED,
            error_message=result.error,
        )
        return

    outcome = result.data
    if outcome is None or not outcome.resolved:
        notification.mark_finished(
            WebhookNotificationStatus.IGNORED,
            payment_status=outcome.payment_status if outcome else None,
        )
        return

    notification.mark_finished(
        WebhookNotificationStatus.PROCESSED,
        external_reference=outcome.external_reference,
        payment_status=outcome.payment_status,
    )


# =============================================================================
# Handlers
# =============================================================================


@register_handler(TOPIC_PAYMENT)
def handle_payment(
    payload: NotificationPayload, reconciler: WebhookReconciler
) -> ServiceResult:
    """
    Handle a payment notification.

    A merchant order id delivered alongside is used only if the payment
    does not resolve to a local reference.
    """
    outcome = reconciler.process_notification(
        payment_id=payload.payment_id,
        merchant_order_id=payload.merchant_order_id,
    )
    return ServiceResult.success(outcome)


@register_handler(TOPIC_MERCHANT_ORDER)
def handle_merchant_order(
    payload: NotificationPayload, reconciler: WebhookReconciler
) -> ServiceResult:
    """Handle a merchant_order notification (applied as approved)."""
    outcome = reconciler.process_notification(
        merchant_order_id=payload.merchant_order_id,
    )
    return ServiceResult.success(outcome)
