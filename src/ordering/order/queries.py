"""Read access to orders, scoped by the caller's role."""

from protean.utils.globals import current_domain

from ordering.exceptions import NotAuthorized
from ordering.order.order import Order
from ordering.shared.actor import Actor, Role


def _visible_to(actor: Actor, order: Order) -> bool:
    if actor.role == Role.ADMIN:
        return True
    if actor.role == Role.SELLER:
        return order.contains_seller(actor.id)
    return str(order.owner_id) == actor.id


def get_order(actor: Actor, order_id) -> Order:
    """Return one order. Missing orders raise ``NotFound``, never a reconstruction."""
    order = current_domain.repository_for(Order).load(order_id)
    if not _visible_to(actor, order):
        raise NotAuthorized("You may not view this order", order_id=str(order_id))
    return order


def list_orders(actor: Actor) -> list[Order]:
    repo = current_domain.repository_for(Order)
    if actor.role == Role.ADMIN:
        return repo.find_all()
    if actor.role == Role.SELLER:
        return repo.find_for_seller(actor.id)
    return repo.find_for_owner(actor.id)
