"""
Order models.

Order: What a customer buys from a seller, with the marketplace fee
    snapshotted at creation and a link (by value) to the PaymentIntent
    that pays for it.
OrderItem: One line of an order.

The Order/PaymentIntent link has no foreign key: Order.operation_id holds
str(PaymentIntent.id), the same value the gateway echoes back as
external_reference.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from django_fsm import FSMField, transition

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel


class OrderStatus(models.TextChoices):
    """Order status, a coarse projection of the payment state."""

    PENDING = "pending", "Pending"
    CONFIRMED = "confirmed", "Confirmed"
    CANCELLED = "cancelled", "Cancelled"


class Order(UUIDPrimaryKeyMixin, BaseModel):
    """
    A customer order.

    Fields:
        customer_email / customer_phone: Contact, at least one is set
        created_by: Opaque creator reference (anonymous id allowed)
        owner: Seller who receives the funds
        subtotal: Sum of item prices times quantities
        marketplace_fee_percentage: Commission percentage at creation time
        marketplace_fee_amount: subtotal * percentage / 100
        total: subtotal + marketplace_fee_amount
        status: pending, confirmed or cancelled (FSM, any-to-any)
        operation_id: PaymentIntent id used as gateway external reference
        payment_url: Checkout URL for the customer

    Note:
        Amounts are never recomputed after creation, even if the fee
        percentage changes later.
    """

    customer_email = models.EmailField(blank=True, default="")

    customer_phone = models.CharField(max_length=32, blank=True, default="")

    created_by = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="Creator reference (X-Anonymous-Id for anonymous buyers)",
    )

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="received_orders",
        help_text="Seller who receives the funds",
    )

    # ==========================================================================
    # Amounts
    # ==========================================================================

    subtotal = models.DecimalField(max_digits=18, decimal_places=6)

    marketplace_fee_percentage = models.DecimalField(
        max_digits=9,
        decimal_places=6,
        default=Decimal("0"),
        help_text="Commission percentage snapshot",
    )

    marketplace_fee_amount = models.DecimalField(
        max_digits=18,
        decimal_places=6,
        default=Decimal("0"),
    )

    total = models.DecimalField(max_digits=18, decimal_places=6)

    # ==========================================================================
    # Payment Link
    # ==========================================================================

    status = FSMField(
        default=OrderStatus.PENDING,
        choices=OrderStatus.choices,
        db_index=True,
        protected=True,
    )

    status_updated_at = models.DateTimeField(null=True, blank=True)

    operation_id = models.CharField(
        max_length=64,
        blank=True,
        default="",
        db_index=True,
        help_text="PaymentIntent id (gateway external reference)",
    )

    payment_url = models.URLField(max_length=1024, blank=True, default="")

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Order"
        verbose_name_plural = "Orders"

    def __str__(self) -> str:
        return f"Order({self.id}, {self.status}, {self.total})"

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(field=status, source="*", target=OrderStatus.PENDING)
    def mark_pending(self):
        self.status_updated_at = timezone.now()

    @transition(field=status, source="*", target=OrderStatus.CONFIRMED)
    def confirm(self):
        self.status_updated_at = timezone.now()

    @transition(field=status, source="*", target=OrderStatus.CANCELLED)
    def cancel(self):
        self.status_updated_at = timezone.now()

    def apply_status(self, target: str) -> None:
        """Run the transition that leads to ``target``. Does not save."""
        transitions = {
            OrderStatus.PENDING: self.mark_pending,
            OrderStatus.CONFIRMED: self.confirm,
            OrderStatus.CANCELLED: self.cancel,
        }
        transitions[OrderStatus(target)]()


class OrderItem(BaseModel):
    """One product line of an order."""

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="items",
    )

    product_name = models.CharField(max_length=255)

    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])

    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )

    source_id = models.CharField(
        max_length=64,
        blank=True,
        default="",
        help_text="Catalog item this line was bought from",
    )

    source_type = models.CharField(
        max_length=32,
        blank=True,
        default="",
        help_text="Catalog kind (e.g., 'menu', 'wardrobe')",
    )

    class Meta:
        ordering = ["created_at"]
        verbose_name = "Order Item"
        verbose_name_plural = "Order Items"

    def __str__(self) -> str:
        return f"{self.quantity} x {self.product_name}"

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity
