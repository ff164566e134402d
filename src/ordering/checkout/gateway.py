"""Gateway checkout: pay first on the gateway, then confirm into an order.

1. ``RequestGatewayPayment`` prices the cart (or a single buy-now line),
   opens a gateway order for that amount and records a PaymentIntent.
2. The buyer pays on the gateway's hosted checkout.
3. ``ConfirmGatewayCheckout`` verifies the payment and commits the order,
   marks it paid and consumes the intent in one unit of work. Confirming the
   same payment again returns the order that was already created.
"""

import structlog
from protean import handle
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from ordering.cart.cart import ShoppingCart
from ordering.checkout.buy_now import snapshot_single_line
from ordering.checkout.placement import commit_order, load_shipping_details, snapshot_cart
from ordering.domain import ordering
from ordering.exceptions import GatewayUnavailable, PaymentVerificationFailed, UnknownIntent
from ordering.order.order import PaymentMethod
from ordering.payment.confirmation import PaymentConfirmationGate
from ordering.payment.intent import PaymentIntent, new_receipt_id
from ordering.shared.actor import require_buyer
from payments.gateway import get_gateway
from payments.gateway.port import GatewayError

logger = structlog.get_logger(__name__)


@ordering.command(part_of="PaymentIntent")
class RequestGatewayPayment:
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=20)
    # Buy-now line; when absent the cart is paid for
    product_id = Identifier()
    variant_id = Identifier()
    quantity = Integer(min_value=1)


@ordering.command(part_of="PaymentIntent")
class ConfirmGatewayCheckout:
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=20)
    gateway_order_id = String(required=True, max_length=255)
    gateway_payment_id = String(required=True, max_length=255)
    signature = String(required=True, max_length=255)
    shipping_details = Text(required=True)  # JSON: shipping details dict


@ordering.command_handler(part_of=PaymentIntent)
class GatewayCheckoutHandler:
    @handle(RequestGatewayPayment)
    def request_gateway_payment(self, command):
        require_buyer(command.actor_role)

        buy_now_line = None
        if command.product_id:
            snapshot = snapshot_single_line(command.product_id, command.variant_id, command.quantity or 1)
            line = snapshot.lines[0]
            buy_now_line = {"product_id": line.product_id, "variant_id": line.variant_id, "quantity": line.quantity}
        else:
            cart = current_domain.repository_for(ShoppingCart).find_for_owner(command.actor_id)
            snapshot = snapshot_cart(cart)

        gateway = get_gateway()
        receipt_id = new_receipt_id()
        try:
            gateway_order = gateway.create_gateway_order(snapshot.amount_minor_units, snapshot.currency, receipt_id)
        except GatewayError as exc:
            logger.warning("Gateway order creation failed", receipt_id=receipt_id, error=str(exc))
            raise GatewayUnavailable("Payment gateway is unavailable, nothing was charged") from exc

        intent = PaymentIntent.open(
            owner_id=command.actor_id,
            gateway_order_id=gateway_order.id,
            amount_minor_units=gateway_order.amount_minor_units,
            currency=gateway_order.currency,
            receipt_id=receipt_id,
            buy_now_line=buy_now_line,
        )
        current_domain.repository_for(PaymentIntent).add(intent)

        logger.info(
            "Payment intent created",
            intent_id=str(intent.id),
            owner_id=str(command.actor_id),
            gateway_order_id=gateway_order.id,
            amount_minor_units=gateway_order.amount_minor_units,
        )
        return {
            "intent_id": str(intent.id),
            "gateway_order_id": gateway_order.id,
            "amount_minor_units": gateway_order.amount_minor_units,
            "currency": gateway_order.currency,
            "receipt_id": receipt_id,
            "key_id": gateway.public_key,
        }

    @handle(ConfirmGatewayCheckout)
    def confirm_gateway_checkout(self, command):
        require_buyer(command.actor_role)
        shipping_details = load_shipping_details(command.shipping_details)

        result = PaymentConfirmationGate().verify(
            command.gateway_order_id,
            command.gateway_payment_id,
            command.signature,
            owner_id=command.actor_id,
        )
        if not result.success:
            if result.reason == "UnknownIntent":
                raise UnknownIntent(command.gateway_order_id)
            raise PaymentVerificationFailed(result.reason, gateway_order_id=command.gateway_order_id)

        if result.already_processed:
            logger.info(
                "Payment already confirmed",
                gateway_order_id=command.gateway_order_id,
                order_id=result.order_id,
            )
            return result.order_id

        intent = result.intent
        cart = None
        if intent.buy_now_line:
            line = intent.buy_now_line
            snapshot = snapshot_single_line(line.product_id, line.variant_id, line.quantity)
            source = "buy_now"
        else:
            cart = current_domain.repository_for(ShoppingCart).find_for_owner(command.actor_id)
            snapshot = snapshot_cart(cart)
            source = "cart"

        if snapshot.amount_minor_units != intent.amount_minor_units:
            logger.warning(
                "Paid amount does not match checkout total",
                gateway_order_id=command.gateway_order_id,
                paid=intent.amount_minor_units,
                expected=snapshot.amount_minor_units,
            )
            raise PaymentVerificationFailed(
                "AmountMismatch",
                gateway_order_id=command.gateway_order_id,
                paid_minor_units=intent.amount_minor_units,
                expected_minor_units=snapshot.amount_minor_units,
            )

        order = commit_order(
            owner_id=command.actor_id,
            snapshot=snapshot,
            shipping_details=shipping_details,
            payment_method=PaymentMethod.GATEWAY.value,
            source=source,
            cart=cart,
            intent=intent,
            gateway_payment_id=command.gateway_payment_id,
        )

        logger.info(
            "Gateway order placed",
            order_id=str(order.id),
            owner_id=str(command.actor_id),
            gateway_order_id=command.gateway_order_id,
            total=order.total,
        )
        return str(order.id)
