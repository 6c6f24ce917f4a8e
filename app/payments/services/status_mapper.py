"""
Gateway status translation.

Two lookup tables: gateway payment status to local PaymentIntent state,
and the same status to the coarser Order status. Both functions accept
any input and fall back to pending, so a status the gateway invents
later never breaks webhook processing.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from orders.models import OrderStatus
from payments.state_machines import PaymentIntentState

if TYPE_CHECKING:
    from typing import Any


logger = logging.getLogger(__name__)


PAYMENT_INTENT_STATES: dict[str, str] = {
    "approved": PaymentIntentState.APPROVED,
    "pending": PaymentIntentState.IN_PROCESS,
    "in_process": PaymentIntentState.IN_PROCESS,
    "rejected": PaymentIntentState.REJECTED,
    "cancelled": PaymentIntentState.REJECTED,
    "refunded": PaymentIntentState.REFUNDED,
}

ORDER_STATUSES: dict[str, str] = {
    "approved": OrderStatus.CONFIRMED,
    "pending": OrderStatus.PENDING,
    "in_process": OrderStatus.PENDING,
    "rejected": OrderStatus.CANCELLED,
    "cancelled": OrderStatus.CANCELLED,
    "refunded": OrderStatus.CANCELLED,
}


def _normalize(status: Any) -> str:
    if status is None:
        return ""
    return str(status).strip().lower()


def to_payment_intent_state(status: Any) -> str:
    """Map a gateway payment status to a PaymentIntentState value."""
    key = _normalize(status)
    state = PAYMENT_INTENT_STATES.get(key)
    if state is None:
        logger.warning(
            "Unknown gateway status, using pending",
            extra={"gateway_status": key, "target": "payment_intent"},
        )
        return PaymentIntentState.PENDING
    return state


def to_order_status(status: Any) -> str:
    """Map a gateway payment status to an OrderStatus value."""
    key = _normalize(status)
    order_status = ORDER_STATUSES.get(key)
    if order_status is None:
        logger.warning(
            "Unknown gateway status, using pending",
            extra={"gateway_status": key, "target": "order"},
        )
        return OrderStatus.PENDING
    return order_status


class StatusMapper:
    """Namespace over the two mapping functions, for injection."""

    to_payment_intent_state = staticmethod(to_payment_intent_state)
    to_order_status = staticmethod(to_order_status)
