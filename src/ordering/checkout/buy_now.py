"""Buy now: a one-line cash-on-delivery checkout that bypasses the cart."""

import structlog
from protean import handle
from protean.fields import Identifier, Integer, String, Text

from ordering.cart.inventory import InventoryGate
from ordering.cart.selection import resolve_selection
from ordering.catalog import get_catalog
from ordering.checkout.placement import commit_order, load_shipping_details, require_cod
from ordering.checkout.snapshot import CheckoutSnapshot, build_snapshot
from ordering.domain import ordering
from ordering.order.order import Order, PaymentMethod
from ordering.shared.actor import require_buyer

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class BuyNow:
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=20)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    quantity = Integer(required=True, min_value=1)
    shipping_details = Text(required=True)  # JSON: shipping details dict
    payment_method = String(max_length=20, default=PaymentMethod.COD.value)


def snapshot_single_line(product_id, variant_id, quantity) -> CheckoutSnapshot:
    """Apply the add-to-cart checks to one line and price it."""
    catalog = get_catalog()
    resolve_selection(catalog, product_id, variant_id)
    quantity = InventoryGate(catalog).clamp(product_id, variant_id, quantity)
    return build_snapshot([(product_id, variant_id or None, quantity)], catalog=catalog)


@ordering.command_handler(part_of=Order)
class BuyNowHandler:
    @handle(BuyNow)
    def buy_now(self, command):
        require_buyer(command.actor_role)
        require_cod(command.payment_method)
        shipping_details = load_shipping_details(command.shipping_details)

        snapshot = snapshot_single_line(command.product_id, command.variant_id, command.quantity)
        order = commit_order(
            owner_id=command.actor_id,
            snapshot=snapshot,
            shipping_details=shipping_details,
            payment_method=PaymentMethod.COD.value,
            source="buy_now",
        )

        logger.info(
            "Buy-now order placed",
            order_id=str(order.id),
            owner_id=str(command.actor_id),
            product_id=str(command.product_id),
            quantity=snapshot.lines[0].quantity,
            total=order.total,
        )
        return str(order.id)
