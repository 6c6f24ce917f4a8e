"""
PaymentIntent model: the local mirror of one gateway checkout session.

The PaymentIntent id is generated locally and sent to the gateway as the
checkout session's external_reference. Webhooks echo that reference back,
which is how notifications find their way to this row and to the Order
whose operation_id holds the same value.

Usage:
    from payments.models import PaymentIntent
    from payments.state_machines import PaymentIntentState

    intent = PaymentIntent.objects.get(id=intent_id)
    intent.apply_state(PaymentIntentState.APPROVED, gateway_status="approved")
    intent.save()
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.utils import timezone

from django_fsm import FSMField, transition

from core.model_mixins import MetadataMixin, UUIDPrimaryKeyMixin, VersionedMixin
from core.models import BaseModel

from payments.state_machines import PaymentIntentState


class PaymentIntent(UUIDPrimaryKeyMixin, VersionedMixin, MetadataMixin, BaseModel):
    """
    Local record of a checkout session and its reconciled status.

    Uses django-fsm for the state field. Every transition accepts any
    source state because gateway notifications arrive unordered and the
    latest one wins.

    Fields:
        transaction_id: Gateway checkout session (preference) id
        payer_reference: Customer email or phone given at checkout
        amount: Total charged, including marketplace fee
        marketplace_fee_amount: Platform commission withheld from the seller
        seller: Seller whose linked account the session was created under
            (None when the platform's own account was used)
        order_id: Opaque reference to the order that requested the payment
        creator_reference: Opaque reference to whoever created the order
        state: Current FSM state
        checkout_url: URL the payer is redirected to
        gateway_status: Raw status string of the last applied notification
        gateway_payment_id: Gateway payment id from the last payment notification
        metadata: Metadata sent to the gateway with the checkout session
    """

    # ==========================================================================
    # Gateway Identity
    # ==========================================================================

    transaction_id = models.CharField(
        max_length=255,
        blank=True,
        default="",
        db_index=True,
        help_text="Gateway checkout session (preference) id",
    )

    checkout_url = models.URLField(
        max_length=1024,
        blank=True,
        default="",
        help_text="Checkout URL for the payer (sandbox or live)",
    )

    # ==========================================================================
    # Payment Details
    # ==========================================================================

    payer_reference = models.CharField(
        max_length=255,
        help_text="Payer contact (email or phone)",
    )

    amount = models.DecimalField(
        max_digits=18,
        decimal_places=6,
        help_text="Amount charged to the payer",
    )

    marketplace_fee_amount = models.DecimalField(
        max_digits=18,
        decimal_places=6,
        null=True,
        blank=True,
        help_text="Platform commission withheld from the seller",
    )

    seller = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="received_payment_intents",
        help_text="Seller whose linked account received the session",
    )

    order_id = models.CharField(
        max_length=64,
        blank=True,
        default="",
        db_index=True,
    )

    creator_reference = models.CharField(
        max_length=255,
        blank=True,
        default="",
    )

    # ==========================================================================
    # State
    # ==========================================================================

    state = FSMField(
        default=PaymentIntentState.PENDING,
        choices=PaymentIntentState.choices,
        db_index=True,
        protected=True,  # Prevent direct assignment outside transitions
        help_text="Current state (managed by FSM)",
    )

    gateway_status = models.CharField(
        max_length=50,
        blank=True,
        default="",
        help_text="Raw gateway status from the last notification",
    )

    gateway_payment_id = models.CharField(
        max_length=64,
        blank=True,
        default="",
    )

    status_updated_at = models.DateTimeField(null=True, blank=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    refunded_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Payment Intent"
        verbose_name_plural = "Payment Intents"
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=0),
                name="payment_intent_amount_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"PaymentIntent({self.id}, {self.state}, {self.amount})"

    @property
    def external_reference(self) -> str:
        return str(self.id)

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(field=state, source="*", target=PaymentIntentState.PENDING)
    def mark_pending(self):
        """Unknown gateway status, or a late pending notification."""
        self.status_updated_at = timezone.now()

    @transition(field=state, source="*", target=PaymentIntentState.IN_PROCESS)
    def mark_in_process(self):
        """Gateway reports the payment as pending or in_process."""
        self.status_updated_at = timezone.now()

    @transition(field=state, source="*", target=PaymentIntentState.APPROVED)
    def approve(self):
        """Gateway approved the payment (or a merchant order completed)."""
        now = timezone.now()
        self.status_updated_at = now
        if self.approved_at is None:
            self.approved_at = now

    @transition(field=state, source="*", target=PaymentIntentState.REJECTED)
    def reject(self):
        """Gateway rejected or cancelled the payment."""
        self.status_updated_at = timezone.now()

    @transition(field=state, source="*", target=PaymentIntentState.REFUNDED)
    def refund(self):
        """Gateway refunded the payment."""
        now = timezone.now()
        self.status_updated_at = now
        if self.refunded_at is None:
            self.refunded_at = now

    def apply_state(
        self,
        target: str,
        gateway_status: str | None = None,
        gateway_payment_id: str | None = None,
    ) -> None:
        """
        Run the transition that leads to ``target``. Does not save.

        Args:
            target: A PaymentIntentState value
            gateway_status: Raw gateway status to record
            gateway_payment_id: Gateway payment id to record
        """
        transitions = {
            PaymentIntentState.PENDING: self.mark_pending,
            PaymentIntentState.IN_PROCESS: self.mark_in_process,
            PaymentIntentState.APPROVED: self.approve,
            PaymentIntentState.REJECTED: self.reject,
            PaymentIntentState.REFUNDED: self.refund,
        }
        transitions[PaymentIntentState(target)]()
        if gateway_status is not None:
            self.gateway_status = str(gateway_status)[:50]
        if gateway_payment_id:
            self.gateway_payment_id = str(gateway_payment_id)
