"""Standard checkout: turn the buyer's cart into a pending order.

``commit_order`` is the single write path shared by every checkout flavour.
It runs inside the command handler's unit of work, so the order, its items,
the cart clear and (for gateway payments) the intent consumption are
persisted together or not at all.
"""

import json
import math

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.cart.cart import ShoppingCart
from ordering.cart.validation import CartValidator
from ordering.checkout.snapshot import CheckoutSnapshot, build_snapshot
from ordering.domain import ordering
from ordering.exceptions import CartInvalid, EmptyCart, IntegrityFailure, InvalidPaymentMethod
from ordering.order.order import Order, PaymentMethod, ShippingDetails
from ordering.payment.intent import PaymentIntent
from ordering.shared.actor import require_buyer

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class PlaceOrder:
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=20)
    shipping_details = Text(required=True)  # JSON: shipping details dict
    payment_method = String(max_length=20, default=PaymentMethod.COD.value)


def load_shipping_details(raw) -> dict:
    """Decode and validate shipping details before anything is read or written."""
    details = json.loads(raw) if isinstance(raw, str) else dict(raw or {})
    ShippingDetails(**details)  # Raises ValidationError on missing fields
    return details


def require_cod(payment_method: str | None) -> None:
    if (payment_method or PaymentMethod.COD.value) != PaymentMethod.COD.value:
        raise InvalidPaymentMethod(
            "Only cash on delivery can be placed directly; gateway payments go through confirmation",
            payment_method=payment_method,
        )


def snapshot_cart(cart: ShoppingCart | None) -> CheckoutSnapshot:
    """Validate the cart and price it. The cart itself is left untouched."""
    if cart is None or not cart.items:
        raise EmptyCart()

    validation = CartValidator().validate_cart(cart)
    if not validation.valid:
        raise CartInvalid(validation.invalid_rows)

    return build_snapshot((item.product_id, item.variant_id, item.quantity) for item in cart.items)


def commit_order(
    owner_id,
    snapshot: CheckoutSnapshot,
    shipping_details: dict,
    payment_method: str,
    source: str = "cart",
    cart: ShoppingCart | None = None,
    intent: PaymentIntent | None = None,
    gateway_payment_id: str | None = None,
) -> Order:
    order = Order.place(
        owner_id=owner_id,
        lines=snapshot.lines,
        total=snapshot.total,
        shipping_details=shipping_details,
        payment_method=payment_method,
        currency=snapshot.currency,
        source=source,
    )
    if len(order.items) != len(snapshot.lines) or not math.isclose(order.total, snapshot.total, abs_tol=0.005):
        raise IntegrityFailure(
            "Order does not match its checkout snapshot",
            expected_total=snapshot.total,
            expected_lines=len(snapshot.lines),
        )

    if intent is not None:
        order.mark_paid(
            {
                "gateway_order_id": intent.gateway_order_id,
                "gateway_payment_id": gateway_payment_id,
            }
        )

    current_domain.repository_for(Order).add(order)

    if intent is not None:
        intent.consume(gateway_payment_id, order.id)
        current_domain.repository_for(PaymentIntent).add(intent)

    if cart is not None:
        cart.clear(reason="checked_out")
        current_domain.repository_for(ShoppingCart).add(cart)

    return order


@ordering.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        require_buyer(command.actor_role)
        require_cod(command.payment_method)
        shipping_details = load_shipping_details(command.shipping_details)

        cart = current_domain.repository_for(ShoppingCart).find_for_owner(command.actor_id)
        snapshot = snapshot_cart(cart)

        order = commit_order(
            owner_id=command.actor_id,
            snapshot=snapshot,
            shipping_details=shipping_details,
            payment_method=PaymentMethod.COD.value,
            cart=cart,
        )

        logger.info(
            "Order placed",
            order_id=str(order.id),
            owner_id=str(command.actor_id),
            total=order.total,
            items=len(order.items),
            payment_method=order.payment_method,
        )
        return str(order.id)
