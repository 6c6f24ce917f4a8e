"""
Webhook endpoint view for MercadoPago.

The view:
1. Parses the notification from the JSON body or the query string
2. Records a WebhookNotification audit row
3. Reconciles synchronously through the handler registry
4. Always answers 200

Answering non-2xx makes the gateway retry, and a retry of a failing
notification would fail again, so failures are logged and recorded on
the audit row instead.

Security:
    Notification signatures are not verified. The endpoint only ever
    re-reads state from the gateway, so a forged notification can at
    most trigger a reconciliation with the gateway's real data.

Usage:
    # In urls.py
    from payments.webhooks.views import mercadopago_webhook

    urlpatterns = [
        path("webhooks/mercadopago/", mercadopago_webhook, name="mercadopago_webhook"),
    ]
"""

from __future__ import annotations

import json
import logging

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from payments.models import WebhookNotification
from payments.webhooks.handlers import dispatch_notification, parse_notification


logger = logging.getLogger(__name__)


@csrf_exempt
@require_POST
def mercadopago_webhook(request: HttpRequest) -> JsonResponse:
    """
    Receive and reconcile a MercadoPago notification.

    Returns:
        JsonResponse (always 200):
        {
            "message": "...",
            "order_id": "<payment intent id or null>",
            "payment_status": "<gateway status or null>",
            "idempotency_key": "<X-Idempotency-Key or null>"
        }
    """
    idempotency_key = request.headers.get("X-Idempotency-Key")

    try:
        body = json.loads(request.body or b"{}")
    except (ValueError, UnicodeDecodeError):
        logger.warning("Webhook body is not valid JSON")
        body = {}
    if not isinstance(body, dict):
        body = {}
    query = request.GET.dict()

    payload = parse_notification(body, query, idempotency_key=idempotency_key)

    logger.info(
        f"Received MercadoPago webhook: {payload.topic or '(none)'}",
        extra={
            "topic": payload.topic,
            "payment_id": payload.payment_id,
            "merchant_order_id": payload.merchant_order_id,
            "idempotency_key": idempotency_key,
        },
    )

    notification = None
    try:
        notification = WebhookNotification.objects.create(
            topic=payload.topic[:50],
            resource_id=payload.resource_id[:64],
            idempotency_key=(idempotency_key or "")[:255],
            payload=body,
            query_params=query,
        )
    except Exception as e:
        logger.error(
            f"Failed to record webhook notification: {type(e).__name__}",
            exc_info=True,
        )

    result = dispatch_notification(payload, notification=notification)

    if not result.success:
        return JsonResponse(
            {
                "message": "Error processing notification",
                "error": result.error,
                "order_id": None,
                "payment_status": None,
                "idempotency_key": idempotency_key,
            },
            status=200,
        )

    outcome = result.data
    return JsonResponse(
        {
            "message": "Notification processed",
            "order_id": outcome.external_reference if outcome else None,
            "payment_status": outcome.payment_status if outcome else None,
            "idempotency_key": idempotency_key,
        },
        status=200,
    )
