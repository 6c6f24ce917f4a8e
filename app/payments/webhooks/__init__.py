"""
Webhook handling for MercadoPago notifications.

Notifications are parsed, recorded in an audit log and reconciled
synchronously. The endpoint always acknowledges with 200.

Usage:
    # In urls.py
    from payments.webhooks.views import mercadopago_webhook

    urlpatterns = [
        path("webhooks/mercadopago/", mercadopago_webhook, name="mercadopago_webhook"),
    ]
"""

from payments.webhooks.handlers import (
    NotificationPayload,
    dispatch_notification,
    parse_notification,
    register_handler,
)
from payments.webhooks.views import mercadopago_webhook

__all__ = [
    "NotificationPayload",
    "dispatch_notification",
    "mercadopago_webhook",
    "parse_notification",
    "register_handler",
]
