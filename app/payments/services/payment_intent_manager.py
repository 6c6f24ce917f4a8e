"""
Payment intent creation and lookup.

PaymentIntentManager creates the gateway checkout session for an order
and stores the local PaymentIntent that mirrors it. When a seller is
given and has a linked account, the session is created under the
seller's account with the marketplace fee withheld for the platform;
otherwise (or if anything about the seller lookup fails) the platform's
own account is used.

Usage:
    from payments.services import PaymentIntentManager

    intent = PaymentIntentManager().create_payment(
        payer_reference="buyer@example.com",
        amount=Decimal("1055.00"),
        description="Order 42",
        seller_id=seller.id,
        order_id=str(order_id),
        marketplace_fee_amount=Decimal("55.00"),
    )
    intent.checkout_url  # redirect the payer here
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING

from django.conf import settings
from django.utils import timezone

from core.services import BaseService

from payments.adapters import CheckoutSessionParams, MercadoPagoAdapter
from payments.exceptions import (
    GatewayError,
    GatewayUnavailableError,
    PaymentNotFoundError,
    PaymentValidationError,
)
from payments.models import PaymentIntent
from payments.services.fee_calculator import quantize_amount
from payments.services.payout_account_linker import PayoutAccountLinker

if TYPE_CHECKING:
    from typing import Any

    from payments.adapters import CheckoutSessionResult, SellerCredentials


DEFAULT_ITEM_TITLE = "Pago de servicio"

LIVE_CHECKOUT_ENVIRONMENTS = frozenset({"production", "qa"})


@dataclass
class PaymentIntentDetail:
    """A stored intent plus the merchant orders the gateway holds for it."""

    intent: PaymentIntent
    gateway_orders: list[dict[str, Any]] = field(default_factory=list)


class PaymentIntentManager(BaseService):
    """
    Creates and reads PaymentIntents.

    Collaborators are injectable for tests:
        adapter: Gateway adapter class (default MercadoPagoAdapter)
        linker: PayoutAccountLinker used to resolve seller credentials
    """

    def __init__(
        self,
        adapter: type[MercadoPagoAdapter] | None = None,
        linker: PayoutAccountLinker | None = None,
    ):
        self.adapter = adapter or MercadoPagoAdapter
        self.linker = linker or PayoutAccountLinker(adapter=self.adapter)

    # =========================================================================
    # Creation
    # =========================================================================

    def create_payment(
        self,
        payer_reference: str | None,
        amount: Any,
        description: str | None = None,
        seller_id: Any = None,
        creator_reference: str | None = None,
        order_id: str | None = None,
        marketplace_fee_amount: Any = None,
    ) -> PaymentIntent:
        """
        Create a checkout session and the PaymentIntent that mirrors it.

        Args:
            payer_reference: Payer email or phone
            amount: Amount to charge (total, fee included)
            description: Checkout item title
            seller_id: Seller who receives the funds (optional)
            creator_reference: Who created the order (optional, may be anonymous)
            order_id: Order reference stored in metadata (optional)
            marketplace_fee_amount: Platform cut for split checkouts

        Returns:
            The saved PaymentIntent in state pending

        Raises:
            PaymentValidationError: Missing/invalid input, or the gateway
                refused the checkout session
            GatewayUnavailableError: Gateway unreachable or failing
        """
        logger = self.get_logger()
        amount = self._validate(payer_reference, amount)
        fee = (
            quantize_amount(Decimal(str(marketplace_fee_amount)))
            if marketplace_fee_amount is not None
            else None
        )

        intent_id = uuid.uuid4()
        seller = self._resolve_seller(seller_id)

        metadata = {
            key: value
            for key, value in {
                "payment_id": str(intent_id),
                "order_id": order_id,
                "owner_id": str(seller_id) if seller_id is not None else None,
                "creator_ref": creator_reference,
                "created_at": timezone.now().isoformat(),
                "environment": self.environment(),
            }.items()
            if value is not None
        }

        item = {
            "title": description or DEFAULT_ITEM_TITLE,
            "quantity": 1,
            "currency_id": getattr(settings, "MERCADOPAGO_CURRENCY_ID", "ARS"),
            "unit_price": amount,
        }

        params = CheckoutSessionParams(
            external_reference=str(intent_id),
            items=[item],
            metadata=metadata,
            payer_email=payer_reference if "@" in payer_reference else None,
            seller=seller,
            marketplace_fee=fee if seller is not None else None,
        )

        logger.info(
            "Creating checkout session",
            extra={
                "payment_intent_id": str(intent_id),
                "order_id": order_id,
                "amount": str(amount),
                "split": seller is not None,
            },
        )

        try:
            session = self.adapter.create_checkout_session(params)
        except GatewayUnavailableError:
            raise
        except GatewayError as e:
            raise PaymentValidationError(
                f"Could not create checkout session: {e.message}",
                error_code="CHECKOUT_CREATION_FAILED",
                details={"payment_intent_id": str(intent_id), **e.details},
            ) from e

        intent = PaymentIntent.objects.create(
            id=intent_id,
            transaction_id=session.transaction_id,
            checkout_url=self._checkout_url(session),
            payer_reference=payer_reference,
            amount=amount,
            marketplace_fee_amount=fee,
            seller_id=seller_id if seller is not None else None,
            order_id=order_id or "",
            creator_reference=creator_reference or "",
            metadata=metadata,
        )

        logger.info(
            "Payment intent created",
            extra={
                "payment_intent_id": str(intent.id),
                "transaction_id": intent.transaction_id,
                "collector_id": seller.collector_id if seller else None,
            },
        )
        return intent

    def _validate(self, payer_reference: str | None, amount: Any) -> Decimal:
        if payer_reference is None or not str(payer_reference).strip():
            raise PaymentValidationError(
                "payer_reference is required",
                details={"payer_reference": ["This field is required."]},
            )
        if amount is None or isinstance(amount, bool):
            raise PaymentValidationError(
                "amount is required",
                details={"amount": ["This field is required."]},
            )
        try:
            value = Decimal(str(amount))
        except (InvalidOperation, ValueError):
            value = None
        if value is None or not value.is_finite() or value <= 0:
            raise PaymentValidationError(
                "amount must be a positive number",
                details={"amount": [f"Invalid amount: {amount!r}"]},
            )
        return quantize_amount(value)

    def _resolve_seller(self, seller_id: Any) -> SellerCredentials | None:
        """Seller credentials, or None to fall back to the platform account."""
        if seller_id is None:
            return None
        try:
            return self.linker.get_seller_credentials(seller_id)
        except Exception as e:
            self.get_logger().warning(
                "Seller account unavailable, using platform checkout",
                extra={
                    "seller_id": str(seller_id),
                    "error_type": type(e).__name__,
                    "error": str(e),
                },
            )
            return None

    @staticmethod
    def environment() -> str:
        return str(getattr(settings, "MERCADOPAGO_ENVIRONMENT", "sandbox")).lower()

    def _checkout_url(self, session: CheckoutSessionResult) -> str:
        if self.environment() in LIVE_CHECKOUT_ENVIRONMENTS:
            return session.init_point or session.sandbox_init_point
        return session.sandbox_init_point or session.init_point

    # =========================================================================
    # Lookups
    # =========================================================================

    def get_by_id(self, payment_intent_id: Any) -> PaymentIntent:
        """
        Raises:
            PaymentNotFoundError: No intent with that id (or the id is malformed)
        """
        try:
            intent_uuid = uuid.UUID(str(payment_intent_id))
        except ValueError:
            intent_uuid = None

        intent = (
            PaymentIntent.objects.filter(id=intent_uuid).first()
            if intent_uuid is not None
            else None
        )
        if intent is None:
            raise PaymentNotFoundError(
                f"PaymentIntent {payment_intent_id} not found",
                details={"payment_intent_id": str(payment_intent_id)},
            )
        return intent

    def get_with_gateway_detail(self, payment_intent_id: Any) -> PaymentIntentDetail:
        """
        The stored intent plus live merchant orders searched by its transaction id.

        Gateway errors propagate; an intent without transaction id has no orders.
        """
        intent = self.get_by_id(payment_intent_id)
        if not intent.transaction_id:
            return PaymentIntentDetail(intent=intent)

        access_token = None
        if intent.seller_id is not None:
            access_token = self._seller_token(intent.seller_id)

        orders = self.adapter.get_merchant_orders_by_preference_id(
            intent.transaction_id, access_token=access_token
        )
        return PaymentIntentDetail(intent=intent, gateway_orders=orders)

    def _seller_token(self, seller_id: Any) -> str | None:
        """Seller token for reads of split checkouts; platform token if unavailable."""
        try:
            return self.linker.get_valid_access_token(seller_id)
        except Exception as e:
            self.get_logger().warning(
                "Seller token unavailable, reading with platform token",
                extra={"seller_id": str(seller_id), "error_type": type(e).__name__},
            )
            return None
