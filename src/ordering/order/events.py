"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """An order was committed from a checkout snapshot.

    ``items`` is a JSON array of the order lines as priced at checkout.
    """

    __version__ = 1

    order_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    items = Text(required=True)
    item_count = Integer(required=True)
    total = Float(required=True)
    currency = String(max_length=3, required=True)
    payment_method = String(max_length=20, required=True)
    source = String(max_length=20)  # cart | buy_now
    placed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderPaid:
    __version__ = 1

    order_id = Identifier(required=True)
    payment_method = String(max_length=20, required=True)
    gateway_order_id = String(max_length=255)
    gateway_payment_id = String(max_length=255)
    amount = Float(required=True)
    paid_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderStatusChanged:
    """The order moved along its lifecycle."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(max_length=20, required=True)
    new_status = String(max_length=20, required=True)
    changed_by = String(max_length=20)
    reason = String(max_length=500)
    changed_at = DateTime(required=True)
