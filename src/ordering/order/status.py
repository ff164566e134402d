"""Order status changes: command, authorization and handler.

Checks run in a fixed order so that each rejection tells the caller the first
thing that is wrong: unknown status, unknown order, actor not allowed, and
finally an illegal lifecycle move.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.exceptions import InvalidStatus, NotAuthorized
from ordering.order.order import Order, OrderStatus
from ordering.shared.actor import Actor, Role

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class SetOrderStatus:
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=20)
    order_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    reason = String(max_length=500)


def parse_status(value: str) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        raise InvalidStatus(value) from None


def authorize_status_change(actor: Actor, order: Order, target: OrderStatus) -> None:
    """Raise ``NotAuthorized`` unless ``actor`` may move ``order`` to ``target``.

    - admins may request any transition
    - sellers only on orders holding at least one of their products
    - buyers may only cancel their own order while it is still pending
    """
    if actor.role == Role.ADMIN:
        return

    if actor.role == Role.SELLER:
        if not order.contains_seller(actor.id):
            raise NotAuthorized("Order contains none of your products", order_id=str(order.id))
        return

    if str(order.owner_id) != actor.id:
        raise NotAuthorized("Order does not belong to you", order_id=str(order.id))
    if target != OrderStatus.CANCELLED or order.status != OrderStatus.PENDING.value:
        raise NotAuthorized("Buyers can only cancel pending orders", order_id=str(order.id))


@ordering.command_handler(part_of=Order)
class SetOrderStatusHandler:
    @handle(SetOrderStatus)
    def set_order_status(self, command):
        target = parse_status(command.status)
        actor = Actor.of(command.actor_id, command.actor_role)

        repo = current_domain.repository_for(Order)
        order = repo.load(command.order_id)

        authorize_status_change(actor, order, target)

        previous = order.status
        order.change_status(target, changed_by=actor.role.value, reason=command.reason)
        repo.add(order)

        logger.info(
            "Order status changed",
            order_id=str(order.id),
            previous_status=previous,
            new_status=order.status,
            changed_by=actor.role.value,
        )
        return order.status
