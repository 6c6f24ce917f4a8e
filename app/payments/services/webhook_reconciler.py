"""
Reconciliation of gateway notifications with local records.

The gateway notifies two kinds of events:

- payment: a single transaction changed status. The live payment is
  fetched and its status drives both the PaymentIntent and the Order.
- merchant_order: the gateway-side order completed. It is resolved to
  the checkout's external reference and treated as approved.

Both kinds resolve to the PaymentIntent id that was sent to the gateway
as external_reference. The PaymentIntent update and the Order update are
independent best-effort steps: each one's failure is logged and does not
affect the other. No cross-entity transaction is used.

Redelivery is safe because every step sets the state the gateway reports
now; nothing is deduplicated. Ordering is not enforced either, so a late
pending notification moves an approved intent back to in_process.

Note:
    A merchant_order notification is applied as approved without looking
    at the merchant order's own status. The poll path
    (check_payment_status) does require order_status == "paid". The two
    paths intentionally disagree; see DESIGN.md.

Usage:
    from payments.services import WebhookReconciler

    outcome = WebhookReconciler().process_notification(payment_id="1234567890")
    outcome.external_reference  # PaymentIntent id, or None if unresolved
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from core.services import BaseService

from payments.adapters import MercadoPagoAdapter
from payments.exceptions import PaymentValidationError
from payments.models import PaymentIntent
from payments.services.payment_intent_manager import PaymentIntentManager
from payments.services.status_mapper import StatusMapper

if TYPE_CHECKING:
    from typing import Any

    from orders.models import Order
    from orders.services import OrderOrchestrator


MERCHANT_ORDER_IMPLIED_STATUS = "approved"
MERCHANT_ORDER_PAID = "paid"


@dataclass
class ReconciliationOutcome:
    """
    What a notification resolved to and which records were updated.

    Attributes:
        external_reference: PaymentIntent id the notification pointed to
        payment_status: Gateway status that was applied
        payment_intent: Updated PaymentIntent (None if not found or failed)
        order: Updated Order (None if not found or failed)
    """

    external_reference: str | None = None
    payment_status: str | None = None
    payment_intent: PaymentIntent | None = None
    order: Order | None = None

    @property
    def resolved(self) -> bool:
        return self.external_reference is not None


class WebhookReconciler(BaseService):
    """
    Applies gateway notifications to PaymentIntent and Order.

    Collaborators are injectable for tests:
        adapter: Gateway adapter class
        orders: OrderOrchestrator for the order persistence boundary
        status_mapper: Mapping from gateway status to local states
        intents: PaymentIntentManager (used by check_payment_status)
    """

    def __init__(
        self,
        adapter: type[MercadoPagoAdapter] | None = None,
        orders: OrderOrchestrator | None = None,
        status_mapper: type[StatusMapper] | None = None,
        intents: PaymentIntentManager | None = None,
    ):
        self.adapter = adapter or MercadoPagoAdapter
        if orders is None:
            # orders.services imports payments.services
            from orders.services import OrderOrchestrator

            orders = OrderOrchestrator()
        self.orders = orders
        self.status_mapper = status_mapper or StatusMapper
        self.intents = intents or PaymentIntentManager(adapter=self.adapter)

    # =========================================================================
    # Entry Points
    # =========================================================================

    def process_notification(
        self,
        payment_id: str | None = None,
        merchant_order_id: str | None = None,
    ) -> ReconciliationOutcome:
        """
        Process a notification carrying a payment id, a merchant order id, or both.

        The merchant order is only consulted when the payment did not
        resolve to a local reference.
        """
        outcome = ReconciliationOutcome()
        if payment_id:
            outcome = self.process_payment_notification(payment_id)
        if merchant_order_id and not outcome.resolved:
            outcome = self.process_merchant_order_notification(merchant_order_id)

        self.get_logger().info(
            "Webhook notification processed",
            extra={
                "payment_id": payment_id,
                "merchant_order_id": merchant_order_id,
                "external_reference": outcome.external_reference,
                "payment_status": outcome.payment_status,
            },
        )
        return outcome

    def process_payment_notification(self, payment_id: str) -> ReconciliationOutcome:
        """
        Fetch the payment and apply its status to the intent and the order.

        Gateway errors while fetching the payment propagate; the webhook
        dispatch layer logs them and still acknowledges the delivery.
        """
        logger = self.get_logger()
        payment = self.adapter.get_payment(payment_id)
        reference = payment.local_reference
        status = payment.status or None

        logger.info(
            "Payment notification resolved",
            extra={
                "payment_id": str(payment_id),
                "external_reference": reference,
                "gateway_status": status,
            },
        )

        if not reference or not status:
            logger.warning(
                "Payment has no external reference or status, nothing to reconcile",
                extra={"payment_id": str(payment_id)},
            )
            return ReconciliationOutcome(payment_status=status)

        return ReconciliationOutcome(
            external_reference=reference,
            payment_status=status,
            payment_intent=self._update_payment_intent(
                reference, status, gateway_payment_id=payment.id
            ),
            order=self._update_order(
                reference, self.status_mapper.to_order_status(status)
            ),
        )

    def process_merchant_order_notification(
        self, merchant_order_id: str
    ) -> ReconciliationOutcome:
        """Resolve the merchant order and mark both records approved/confirmed."""
        logger = self.get_logger()
        reference = self.adapter.get_order_id_by_merchant_order_id(merchant_order_id)

        if not reference:
            logger.warning(
                "Merchant order did not resolve to a payment intent",
                extra={"merchant_order_id": str(merchant_order_id)},
            )
            return ReconciliationOutcome()

        status = MERCHANT_ORDER_IMPLIED_STATUS
        return ReconciliationOutcome(
            external_reference=reference,
            payment_status=status,
            payment_intent=self._update_payment_intent(reference, status),
            order=self._update_order(
                reference, self.status_mapper.to_order_status(status)
            ),
        )

    # =========================================================================
    # Poll Path
    # =========================================================================

    def check_payment_status(self, payment_intent_id: Any) -> dict[str, Any]:
        """
        Confirm payment by looking for a paid merchant order. Read-only.

        Raises:
            PaymentNotFoundError: Unknown intent
            PaymentValidationError: No merchant order is paid (PAYMENT_NOT_CONFIRMED)
        """
        logger = self.get_logger()
        detail = self.intents.get_with_gateway_detail(payment_intent_id)
        intent = detail.intent

        if not detail.gateway_orders:
            raise PaymentValidationError(
                f"No payments found for checkout {intent.transaction_id or '(none)'}",
                error_code="PAYMENT_NOT_CONFIRMED",
                details={"payment_intent_id": str(intent.id)},
            )

        paid = next(
            (
                merchant_order
                for merchant_order in detail.gateway_orders
                if merchant_order.get("order_status") == MERCHANT_ORDER_PAID
            ),
            None,
        )
        if paid is None:
            raise PaymentValidationError(
                "No approved payment among the checkout's merchant orders",
                error_code="PAYMENT_NOT_CONFIRMED",
                details={
                    "payment_intent_id": str(intent.id),
                    "merchant_orders": len(detail.gateway_orders),
                },
            )

        logger.info(
            "Payment confirmed by merchant order",
            extra={
                "payment_intent_id": str(intent.id),
                "merchant_order_id": paid.get("id"),
            },
        )
        return {
            "payment_intent_id": str(intent.id),
            "transaction_id": intent.transaction_id,
            "merchant_order_id": paid.get("id"),
            "order_status": paid.get("order_status"),
            "paid": True,
        }

    # =========================================================================
    # Independent Updates
    # =========================================================================

    def _update_payment_intent(
        self,
        reference: str,
        status: str,
        gateway_payment_id: str | None = None,
    ) -> PaymentIntent | None:
        """Best effort: failures are logged and return None."""
        logger = self.get_logger()
        try:
            intent = self.intents.get_by_id(reference)
            intent.apply_state(
                self.status_mapper.to_payment_intent_state(status),
                gateway_status=status,
                gateway_payment_id=gateway_payment_id,
            )
            intent.save()
        except Exception as e:
            logger.warning(
                "Could not update payment intent",
                extra={
                    "external_reference": reference,
                    "gateway_status": status,
                    "error_type": type(e).__name__,
                    "error": str(e),
                },
            )
            return None

        logger.info(
            "Payment intent reconciled",
            extra={"payment_intent_id": str(intent.id), "state": intent.state},
        )
        return intent

    def _update_order(self, reference: str, order_status: str) -> Order | None:
        """Best effort: failures are logged and return None."""
        logger = self.get_logger()
        try:
            order = self.orders.find_by_external_reference(reference)
            if order is None:
                logger.warning(
                    "No order for external reference",
                    extra={"external_reference": reference},
                )
                return None
            order = self.orders.update_status(order.id, order_status)
        except Exception as e:
            logger.warning(
                "Could not update order",
                extra={
                    "external_reference": reference,
                    "order_status": order_status,
                    "error_type": type(e).__name__,
                    "error": str(e),
                },
            )
            return None

        logger.info(
            "Order reconciled",
            extra={"order_id": str(order.id), "status": order.status},
        )
        return order
