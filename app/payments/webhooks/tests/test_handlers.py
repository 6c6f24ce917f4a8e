"""
Tests for webhook handlers.

Tests cover:
- Parsing every notification shape the gateway sends
- Handler registry dispatch
- Failure isolation (dispatch never raises)
- Outcome recording on the audit row
"""

from unittest.mock import MagicMock, patch

import pytest
from django.db import DatabaseError

from core.services import ServiceResult
from payments.exceptions import GatewayUnavailableError
from payments.models import WebhookNotification
from payments.services import ReconciliationOutcome
from payments.state_machines import WebhookNotificationStatus
from payments.tests.factories import WebhookNotificationFactory
from payments.webhooks.handlers import (
    WEBHOOK_HANDLERS,
    NotificationPayload,
    dispatch_notification,
    parse_notification,
    register_handler,
)


# =============================================================================
# Parsing
# =============================================================================


class TestParseNotification:
    """Tests for parse_notification."""

    def test_payment_in_body(self, payment_body):
        payload = parse_notification(payment_body, {})

        assert payload.topic == "payment"
        assert payload.payment_id == "1234567890"
        assert payload.merchant_order_id is None

    def test_payment_in_query(self):
        payload = parse_notification({}, {"type": "payment", "data.id": "987"})

        assert payload.topic == "payment"
        assert payload.payment_id == "987"

    def test_numeric_payment_id(self):
        payload = parse_notification({"type": "payment", "data": {"id": 42}}, {})

        assert payload.payment_id == "42"

    def test_merchant_order_in_body(self, merchant_order_body):
        """The id is the last segment of the resource URL."""
        payload = parse_notification(merchant_order_body, {})

        assert payload.topic == "merchant_order"
        assert payload.merchant_order_id == "456"
        assert payload.resource_id == "456"

    def test_merchant_order_in_query(self):
        payload = parse_notification({}, {"topic": "merchant_order", "id": "789"})

        assert payload.topic == "merchant_order"
        assert payload.merchant_order_id == "789"

    def test_payment_wins_over_merchant_order(self):
        payload = parse_notification(
            {"type": "payment", "data": {"id": "1"}},
            {"topic": "merchant_order", "id": "2"},
        )

        assert payload.topic == "payment"
        assert payload.payment_id == "1"
        assert payload.merchant_order_id == "2"

    def test_unknown_topic(self):
        payload = parse_notification({"type": "subscription_preapproval", "data": {"id": "x"}}, {})

        assert payload.topic == "subscription_preapproval"
        assert payload.payment_id is None
        assert payload.resource_id == ""

    @pytest.mark.parametrize("body", [None, [], "text", {}])
    def test_empty_or_invalid_body(self, body):
        payload = parse_notification(body, None)

        assert payload.topic == ""
        assert payload.payment_id is None
        assert payload.merchant_order_id is None

    def test_idempotency_key(self, payment_body):
        payload = parse_notification(payment_body, {}, idempotency_key="key-1")

        assert payload.idempotency_key == "key-1"


# =============================================================================
# Dispatch
# =============================================================================


class TestHandlerRegistry:
    def test_payment_and_merchant_order_registered(self):
        assert "payment" in WEBHOOK_HANDLERS
        assert "merchant_order" in WEBHOOK_HANDLERS

    def test_register_handler(self):
        @register_handler("test_topic")
        def handle_test(payload, reconciler):
            return ServiceResult.success(None)

        try:
            assert WEBHOOK_HANDLERS["test_topic"] is handle_test
        finally:
            WEBHOOK_HANDLERS.pop("test_topic", None)


class TestDispatchNotification:
    """Tests for dispatch_notification."""

    def test_payment_handler_calls_reconciler(self):
        reconciler = MagicMock()
        outcome = ReconciliationOutcome(external_reference="ref", payment_status="approved")
        reconciler.process_notification.return_value = outcome

        result = dispatch_notification(
            NotificationPayload(topic="payment", payment_id="1", merchant_order_id="2"),
            reconciler=reconciler,
        )

        assert result.success is True
        assert result.data is outcome
        reconciler.process_notification.assert_called_once_with(
            payment_id="1", merchant_order_id="2"
        )

    def test_merchant_order_handler_calls_reconciler(self):
        reconciler = MagicMock()
        reconciler.process_notification.return_value = ReconciliationOutcome()

        dispatch_notification(
            NotificationPayload(topic="merchant_order", merchant_order_id="456"),
            reconciler=reconciler,
        )

        reconciler.process_notification.assert_called_once_with(merchant_order_id="456")

    def test_unknown_topic_is_ignored(self):
        reconciler = MagicMock()

        result = dispatch_notification(NotificationPayload(topic="chargebacks"), reconciler=reconciler)

        assert result.success is True
        assert result.data is None
        reconciler.process_notification.assert_not_called()

    def test_handler_exception_becomes_failure(self):
        """Should never raise out of dispatch."""
        reconciler = MagicMock()
        reconciler.process_notification.side_effect = GatewayUnavailableError("down")

        result = dispatch_notification(
            NotificationPayload(topic="payment", payment_id="1"), reconciler=reconciler
        )

        assert result.success is False
        assert result.error_code == "GATEWAY_UNAVAILABLE"


@pytest.mark.django_db
class TestOutcomeRecording:
    """The audit row reflects what happened."""

    def test_processed(self):
        notification = WebhookNotificationFactory()
        reconciler = MagicMock()
        reconciler.process_notification.return_value = ReconciliationOutcome(
            external_reference="ref-1", payment_status="approved"
        )

        dispatch_notification(
            NotificationPayload(topic="payment", payment_id="1"),
            notification=notification,
            reconciler=reconciler,
        )

        stored = WebhookNotification.objects.get(id=notification.id)
        assert stored.status == WebhookNotificationStatus.PROCESSED
        assert stored.external_reference == "ref-1"
        assert stored.payment_status == "approved"
        assert stored.processed_at is not None

    def test_unresolved_is_ignored(self):
        notification = WebhookNotificationFactory()
        reconciler = MagicMock()
        reconciler.process_notification.return_value = ReconciliationOutcome(
            payment_status="approved"
        )

        dispatch_notification(
            NotificationPayload(topic="payment", payment_id="1"),
            notification=notification,
            reconciler=reconciler,
        )

        stored = WebhookNotification.objects.get(id=notification.id)
        assert stored.status == WebhookNotificationStatus.IGNORED

    def test_unknown_topic_is_ignored(self):
        notification = WebhookNotificationFactory(topic="chargebacks")

        dispatch_notification(NotificationPayload(topic="chargebacks"), notification=notification)

        stored = WebhookNotification.objects.get(id=notification.id)
        assert stored.status == WebhookNotificationStatus.IGNORED

    def test_failure_is_recorded(self):
        notification = WebhookNotificationFactory()
        reconciler = MagicMock()
        reconciler.process_notification.side_effect = RuntimeError("boom")

        dispatch_notification(
            NotificationPayload(topic="payment", payment_id="1"),
            notification=notification,
            reconciler=reconciler,
        )

        stored = WebhookNotification.objects.get(id=notification.id)
        assert stored.status == WebhookNotificationStatus.FAILED
        assert "boom" in stored.error_message

    def test_long_gateway_values_are_truncated(self):
        notification = WebhookNotificationFactory()
        reconciler = MagicMock()
        reconciler.process_notification.return_value = ReconciliationOutcome(
            external_reference="r" * 100, payment_status="s" * 80
        )

        dispatch_notification(
            NotificationPayload(topic="payment", payment_id="1"),
            notification=notification,
            reconciler=reconciler,
        )

        stored = WebhookNotification.objects.get(id=notification.id)
        assert stored.external_reference == "r" * 64
        assert stored.payment_status == "s" * 50

    def test_audit_write_failure_does_not_raise(self, caplog):
        """The reconciliation result is returned even if the audit row can't be saved."""
        notification = WebhookNotificationFactory()
        reconciler = MagicMock()
        reconciler.process_notification.return_value = ReconciliationOutcome(
            external_reference="ref-1", payment_status="approved"
        )

        with patch.object(
            WebhookNotification, "mark_finished", side_effect=DatabaseError("value too long")
        ):
            result = dispatch_notification(
                NotificationPayload(topic="payment", payment_id="1"),
                notification=notification,
                reconciler=reconciler,
            )

        assert result.success is True
        assert result.data.external_reference == "ref-1"
        assert "Failed to record webhook outcome" in caplog.text
