"""
Order orchestration.

OrderOrchestrator is the synchronous entry point of the payment flow:

    items -> subtotal -> FeeCalculator -> PaymentIntentManager -> Order

The payment intent (and its gateway checkout session) is created before
the Order row, so a gateway failure leaves no half-created order behind.
It is also the order persistence boundary the webhook reconciler uses
(find_by_external_reference, update_status).

Usage:
    from orders.services import OrderItemInput, OrderOrchestrator

    order = OrderOrchestrator().create_order(
        items=[OrderItemInput(product_name="Pizza", quantity=2, price=Decimal("500"))],
        customer_email="buyer@example.com",
        owner_id=seller.id,
    )
    order.payment_url
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING

from core.services import BaseService

from orders.exceptions import OrderNotFoundError, OrderValidationError
from orders.models import Order, OrderItem
from payments.services.fee_calculator import FeeCalculator, quantize_amount
from payments.services.payment_intent_manager import PaymentIntentManager

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from typing import Any


@dataclass
class OrderItemInput:
    """
    One requested order line.

    Attributes:
        product_name: Display name of the product
        quantity: Units bought (> 0)
        price: Unit price (> 0, at most 2 decimals)
        source_id: Catalog item id, used to resolve the owner
        source_type: Catalog kind (e.g., 'menu', 'wardrobe')
    """

    product_name: str
    quantity: int
    price: Decimal
    source_id: str | None = None
    source_type: str | None = None

    def __post_init__(self) -> None:
        """Validate and normalize after initialization."""
        if not self.product_name or not str(self.product_name).strip():
            raise OrderValidationError("product_name is required")
        if isinstance(self.quantity, bool) or int(self.quantity) <= 0:
            raise OrderValidationError(
                "quantity must be positive",
                details={"product_name": self.product_name},
            )
        try:
            price = Decimal(str(self.price))
        except (InvalidOperation, ValueError):
            price = None
        if price is None or not price.is_finite() or price <= 0:
            raise OrderValidationError(
                "price must be a positive number",
                details={"product_name": self.product_name},
            )
        if price.as_tuple().exponent < -2:
            raise OrderValidationError(
                "price allows at most 2 decimal places",
                details={"product_name": self.product_name},
            )
        self.quantity = int(self.quantity)
        self.price = price

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


def normalize_email(value: str | None) -> str:
    return (value or "").strip().lower()


def normalize_phone(value: str | None) -> str:
    return "".join((value or "").split())


def no_owner(items: Sequence[OrderItemInput]) -> Any:
    """Default owner resolver: orders without an explicit owner have none."""
    return None


class OrderOrchestrator(BaseService):
    """
    Creates orders and applies status changes to them.

    Collaborators are injectable for tests:
        fee_calculator: FeeCalculator
        payment_intent_manager: PaymentIntentManager
        owner_resolver: callable(items) -> seller id or None, used when
            no owner_id is given (e.g., look up the catalog owner)
    """

    def __init__(
        self,
        fee_calculator: FeeCalculator | None = None,
        payment_intent_manager: PaymentIntentManager | None = None,
        owner_resolver: Callable[[Sequence[OrderItemInput]], Any] | None = None,
    ):
        self.fee_calculator = fee_calculator or FeeCalculator()
        self.payment_intent_manager = payment_intent_manager or PaymentIntentManager()
        self.owner_resolver = owner_resolver or no_owner

    # =========================================================================
    # Creation
    # =========================================================================

    def create_order(
        self,
        items: Sequence[OrderItemInput],
        customer_email: str | None = None,
        customer_phone: str | None = None,
        owner_id: Any = None,
        created_by: str | None = None,
    ) -> Order:
        """
        Create an order and its checkout.

        Raises:
            OrderValidationError: No items, or no customer contact
            PaymentValidationError: Payment layer rejected the request
            GatewayUnavailableError: Gateway unreachable
        """
        logger = self.get_logger()

        if not items:
            raise OrderValidationError(
                "An order needs at least one item",
                details={"items": ["This field is required."]},
            )
        email = normalize_email(customer_email)
        phone = normalize_phone(customer_phone)
        if not email and not phone:
            raise OrderValidationError(
                "customer_email or customer_phone is required",
                details={"customer_email": ["Provide an email or a phone."]},
            )

        subtotal = quantize_amount(sum((item.line_total for item in items), Decimal("0")))
        if owner_id is None:
            owner_id = self.owner_resolver(items)
        breakdown = self.fee_calculator.compute_amounts(subtotal)

        order_id = uuid.uuid4()
        logger.info(
            "Creating order",
            extra={
                "order_id": str(order_id),
                "owner_id": str(owner_id) if owner_id is not None else None,
                "items": len(items),
                **breakdown.to_dict(),
            },
        )

        intent = self.payment_intent_manager.create_payment(
            payer_reference=email or phone,
            amount=breakdown.total,
            description=self._description(items),
            seller_id=owner_id,
            creator_reference=created_by,
            order_id=str(order_id),
            marketplace_fee_amount=breakdown.fee_amount,
        )

        with self.atomic():
            order = Order.objects.create(
                id=order_id,
                customer_email=email,
                customer_phone=phone,
                created_by=created_by or "",
                owner_id=owner_id,
                subtotal=breakdown.subtotal,
                marketplace_fee_percentage=breakdown.fee_percentage,
                marketplace_fee_amount=breakdown.fee_amount,
                total=breakdown.total,
                operation_id=str(intent.id),
                payment_url=intent.checkout_url,
            )
            OrderItem.objects.bulk_create(
                [
                    OrderItem(
                        order=order,
                        product_name=item.product_name.strip(),
                        quantity=item.quantity,
                        price=item.price,
                        source_id=item.source_id or "",
                        source_type=item.source_type or "",
                    )
                    for item in items
                ]
            )

        logger.info(
            "Order created",
            extra={
                "order_id": str(order.id),
                "payment_intent_id": order.operation_id,
                "total": str(order.total),
            },
        )
        return order

    @staticmethod
    def _description(items: Sequence[OrderItemInput]) -> str:
        if len(items) == 1:
            item = items[0]
            return f"{item.quantity} x {item.product_name.strip()}"[:255]
        return f"Order with {len(items)} items"

    # =========================================================================
    # Persistence Boundary
    # =========================================================================

    def get_order(self, order_id: Any) -> Order:
        """
        Raises:
            OrderNotFoundError: Unknown or malformed id
        """
        try:
            order_uuid = uuid.UUID(str(order_id))
        except ValueError:
            order_uuid = None

        order = (
            Order.objects.prefetch_related("items").filter(id=order_uuid).first()
            if order_uuid is not None
            else None
        )
        if order is None:
            raise OrderNotFoundError(
                f"Order {order_id} not found",
                details={"order_id": str(order_id)},
            )
        return order

    def find_by_external_reference(self, reference: str) -> Order | None:
        """The order whose operation_id equals ``reference``, if any."""
        if not reference:
            return None
        return Order.objects.filter(operation_id=str(reference)).first()

    def update_status(self, order_id: Any, status: str) -> Order:
        """
        Move the order to ``status``. Any transition is allowed.

        Raises:
            OrderNotFoundError: Unknown order
        """
        order = self.get_order(order_id)
        previous = order.status
        order.apply_status(status)
        order.save(update_fields=["status", "status_updated_at", "updated_at"])

        self.get_logger().info(
            "Order status updated",
            extra={
                "order_id": str(order.id),
                "from_status": previous,
                "to_status": order.status,
            },
        )
        return order
