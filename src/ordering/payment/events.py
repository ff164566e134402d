"""Domain events for the PaymentIntent aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="PaymentIntent")
class PaymentIntentCreated:
    """A gateway order was opened for an amount the buyer is about to pay."""

    __version__ = 1

    intent_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    gateway_order_id = String(max_length=255, required=True)
    amount_minor_units = Integer(required=True)
    currency = String(max_length=3, required=True)
    receipt_id = String(max_length=64, required=True)
    created_at = DateTime(required=True)


@ordering.event(part_of="PaymentIntent")
class PaymentIntentConsumed:
    """A verified payment was turned into an order. Intents are consumed once."""

    __version__ = 1

    intent_id = Identifier(required=True)
    gateway_order_id = String(max_length=255, required=True)
    gateway_payment_id = String(max_length=255, required=True)
    order_id = Identifier(required=True)
    consumed_at = DateTime(required=True)
