"""PaymentIntent aggregate: the server's record of a gateway order.

An intent is created when the buyer asks to pay through the gateway and
consumed exactly once, in the same unit of work that creates the order
paid by it. The (gateway order id, gateway payment id) pair recorded on a
consumed intent is what makes confirmation idempotent.
"""

from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String, ValueObject

from ordering.domain import ordering
from ordering.payment.events import PaymentIntentConsumed, PaymentIntentCreated


class IntentStatus(Enum):
    CREATED = "created"
    CONSUMED = "consumed"


def new_receipt_id() -> str:
    return f"rcpt_{uuid4().hex[:20]}"


@ordering.value_object(part_of="PaymentIntent")
class BuyNowLine:
    """The single product a buy-now payment is for, instead of the cart."""

    product_id = Identifier(required=True)
    variant_id = Identifier()
    quantity = Integer(required=True, min_value=1)


@ordering.aggregate
class PaymentIntent:
    owner_id = Identifier(required=True)
    gateway_order_id = String(required=True, max_length=255)
    amount_minor_units = Integer(required=True, min_value=1)
    currency = String(max_length=3, default="INR")
    receipt_id = String(required=True, max_length=64)
    status = String(choices=IntentStatus, default=IntentStatus.CREATED.value)
    gateway_payment_id = String(max_length=255)
    order_id = Identifier()
    buy_now_line = ValueObject(BuyNowLine)
    created_at = DateTime()
    consumed_at = DateTime()

    @classmethod
    def open(cls, owner_id, gateway_order_id, amount_minor_units, currency, receipt_id, buy_now_line=None):
        now = datetime.now(UTC)
        intent = cls(
            owner_id=str(owner_id),
            gateway_order_id=gateway_order_id,
            amount_minor_units=amount_minor_units,
            currency=currency,
            receipt_id=receipt_id,
            buy_now_line=BuyNowLine(**buy_now_line) if buy_now_line else None,
            created_at=now,
        )
        intent.raise_(
            PaymentIntentCreated(
                intent_id=str(intent.id),
                owner_id=str(owner_id),
                gateway_order_id=gateway_order_id,
                amount_minor_units=amount_minor_units,
                currency=currency,
                receipt_id=receipt_id,
                created_at=now,
            )
        )
        return intent

    @property
    def is_consumed(self) -> bool:
        return self.status == IntentStatus.CONSUMED.value

    def consume(self, gateway_payment_id: str, order_id) -> None:
        if self.is_consumed:
            raise ValidationError({"status": ["Payment intent has already been consumed"]})

        now = datetime.now(UTC)
        self.status = IntentStatus.CONSUMED.value
        self.gateway_payment_id = gateway_payment_id
        self.order_id = str(order_id)
        self.consumed_at = now

        self.raise_(
            PaymentIntentConsumed(
                intent_id=str(self.id),
                gateway_order_id=self.gateway_order_id,
                gateway_payment_id=gateway_payment_id,
                order_id=str(order_id),
                consumed_at=now,
            )
        )


@ordering.repository(part_of=PaymentIntent)
class PaymentIntentRepository:
    def find_by_gateway_order_id(self, gateway_order_id: str) -> PaymentIntent | None:
        results = self._dao.query.filter(gateway_order_id=gateway_order_id).all().items
        return results[0] if results else None
