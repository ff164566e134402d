"""Order aggregate: an immutable record of what was bought and at what price.

Lines and the total are fixed at creation from a checkout snapshot and never
recomputed. Only the lifecycle status and the paid marker change afterwards.

State Machine:
    PENDING → PROCESSING → SHIPPED → DELIVERED
    CANCELLED (from PENDING, PROCESSING)

The paid marker is orthogonal to the status: gateway orders are paid at
confirmation, cash-on-delivery orders on delivery.
"""

import json
import math
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String, ValueObject

from ordering.domain import ordering
from ordering.exceptions import InvalidTransition
from ordering.order.events import OrderPaid, OrderPlaced, OrderStatusChanged


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentMethod(Enum):
    COD = "cod"
    GATEWAY = "gateway"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in _VALID_TRANSITIONS[current]


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class ShippingDetails:
    """Where the order goes, copied from the checkout request.

    Later changes to the buyer's saved addresses never touch an existing order.
    """

    name = String(required=True, max_length=255)
    phone = String(required=True, max_length=30)
    address = String(required=True, max_length=500)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(max_length=100, default="IN")


@ordering.value_object(part_of="Order")
class PaymentReference:
    gateway_order_id = String(required=True, max_length=255)
    gateway_payment_id = String(required=True, max_length=255)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderItem:
    """A purchased line, priced at checkout time."""

    product_id = Identifier(required=True)
    variant_id = Identifier()
    seller_id = Identifier(required=True)
    title = String(required=True, max_length=255)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)

    @property
    def line_total(self) -> float:
        return self.unit_price * self.quantity


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    owner_id = Identifier(required=True)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    items = HasMany(OrderItem)
    total = Float(required=True, min_value=0.0)
    currency = String(max_length=3, default="INR")
    shipping_details = ValueObject(ShippingDetails)
    payment_method = String(choices=PaymentMethod, required=True)
    payment_reference = ValueObject(PaymentReference)
    is_paid = Boolean(default=False)
    paid_at = DateTime()
    cancellation_reason = String(max_length=500)
    cancelled_by = String(max_length=20)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_matches_items(self):
        if not self.items or self.total is None:
            return
        expected = sum(item.line_total for item in self.items)
        if not math.isclose(self.total, expected, abs_tol=0.005):
            raise ValidationError({"total": [f"Total {self.total} does not match items ({expected})"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, owner_id, lines, total, shipping_details, payment_method, currency="INR", source="cart"):
        """Create a pending order from priced checkout lines.

        Args:
            owner_id: The buyer.
            lines: Iterable of objects with product_id, variant_id, seller_id,
                   title, quantity and unit_price.
            total: Sum of the lines, computed once from the snapshot.
            shipping_details: Dict with name, phone, address, city, state,
                              postal_code, country.
            payment_method: ``PaymentMethod`` value.
        """
        lines = list(lines)
        if not lines:
            raise ValidationError({"items": ["An order must have at least one item"]})

        now = datetime.now(UTC)
        order = cls(
            owner_id=str(owner_id),
            status=OrderStatus.PENDING.value,
            items=[
                OrderItem(
                    product_id=line.product_id,
                    variant_id=line.variant_id,
                    seller_id=line.seller_id,
                    title=line.title,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                )
                for line in lines
            ],
            total=total,
            currency=currency,
            shipping_details=ShippingDetails(**shipping_details),
            payment_method=PaymentMethod(payment_method).value,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                owner_id=str(owner_id),
                items=json.dumps(
                    [
                        {
                            "product_id": str(i.product_id),
                            "variant_id": str(i.variant_id) if i.variant_id else None,
                            "seller_id": str(i.seller_id),
                            "quantity": i.quantity,
                            "unit_price": i.unit_price,
                        }
                        for i in order.items
                    ]
                ),
                item_count=len(order.items),
                total=order.total,
                currency=currency,
                payment_method=order.payment_method,
                source=source,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def seller_ids(self) -> set[str]:
        return {str(item.seller_id) for item in self.items}

    def contains_seller(self, seller_id) -> bool:
        return str(seller_id) in self.seller_ids()

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def mark_paid(self, payment_reference: dict | None = None):
        """Set the paid marker. An order can only be paid once."""
        if self.is_paid:
            raise ValidationError({"is_paid": ["Order is already paid"]})

        now = datetime.now(UTC)
        if payment_reference:
            self.payment_reference = PaymentReference(**payment_reference)
        self.is_paid = True
        self.paid_at = now
        self.updated_at = now

        self.raise_(
            OrderPaid(
                order_id=str(self.id),
                payment_method=self.payment_method,
                gateway_order_id=self.payment_reference.gateway_order_id if self.payment_reference else None,
                gateway_payment_id=self.payment_reference.gateway_payment_id if self.payment_reference else None,
                amount=self.total,
                paid_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def change_status(self, target: OrderStatus, changed_by: str | None = None, reason: str | None = None):
        """Move the order to ``target``. Illegal moves leave the order untouched."""
        current = OrderStatus(self.status)
        if not can_transition(current, target):
            raise InvalidTransition(current.value, target.value)

        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now
        if target == OrderStatus.CANCELLED:
            self.cancelled_by = changed_by
            self.cancellation_reason = reason

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=current.value,
                new_status=target.value,
                changed_by=changed_by,
                reason=reason,
                changed_at=now,
            )
        )

        if target == OrderStatus.DELIVERED and self.payment_method == PaymentMethod.COD.value and not self.is_paid:
            self.mark_paid()
