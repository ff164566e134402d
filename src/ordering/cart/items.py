"""Cart item management: commands and handler.

Every command carries the authenticated actor. Callers are expected to go
through ``ordering.utils.locks.process_for_owner`` so that mutations of one
owner's cart are applied one at a time against the stored cart.
"""

import structlog
from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from ordering.cart.cart import ShoppingCart
from ordering.cart.inventory import InventoryGate
from ordering.cart.selection import resolve_selection
from ordering.catalog import get_catalog
from ordering.domain import ordering
from ordering.exceptions import NotAuthorized, OutOfStock
from ordering.shared.actor import Role, require_buyer

logger = structlog.get_logger(__name__)


@ordering.command(part_of="ShoppingCart")
class AddToCart:
    actor_id = Identifier(required=True)
    actor_role = String(required=True, choices=Role)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    quantity = Integer(required=True, min_value=1)


@ordering.command(part_of="ShoppingCart")
class UpdateCartQuantity:
    actor_id = Identifier(required=True)
    actor_role = String(required=True, choices=Role)
    item_id = Identifier(required=True)
    quantity = Integer(required=True)  # <= 0 removes the row


@ordering.command(part_of="ShoppingCart")
class RemoveFromCart:
    actor_id = Identifier(required=True)
    actor_role = String(required=True, choices=Role)
    item_id = Identifier(required=True)


@ordering.command(part_of="ShoppingCart")
class ClearCart:
    actor_id = Identifier(required=True)
    actor_role = String(required=True, choices=Role)


@ordering.command_handler(part_of=ShoppingCart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        require_buyer(command.actor_role)

        catalog = get_catalog()
        resolve_selection(catalog, command.product_id, command.variant_id)

        available = InventoryGate(catalog).available_stock(command.product_id, command.variant_id)
        if available <= 0:
            raise OutOfStock(command.product_id, command.variant_id, available=0)

        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.for_owner(command.actor_id)
        item = cart.add_item(
            product_id=command.product_id,
            variant_id=command.variant_id,
            quantity=command.quantity,
            max_quantity=available,
        )
        repo.add(cart)

        logger.info(
            "Cart item added",
            owner_id=str(command.actor_id),
            product_id=str(command.product_id),
            variant_id=command.variant_id,
            requested=command.quantity,
            quantity=item.quantity,
        )
        return str(item.id)

    @handle(UpdateCartQuantity)
    def update_cart_quantity(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.find_for_owner(command.actor_id)
        item = cart.find_item(command.item_id) if cart else None
        if item is None:
            # Rows of other owners are indistinguishable from missing rows
            raise NotAuthorized("Cart row does not belong to you", item_id=str(command.item_id))

        if command.quantity <= 0:
            cart.remove_item(command.item_id)
        else:
            quantity = InventoryGate().clamp(item.product_id, item.variant_id, command.quantity)
            cart.update_item_quantity(command.item_id, quantity)
        repo.add(cart)

        logger.info(
            "Cart item quantity updated",
            owner_id=str(command.actor_id),
            item_id=str(command.item_id),
            requested=command.quantity,
        )

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.find_for_owner(command.actor_id)
        if cart is None or not cart.remove_item(command.item_id):
            return False

        repo.add(cart)
        logger.info("Cart item removed", owner_id=str(command.actor_id), item_id=str(command.item_id))
        return True

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.find_for_owner(command.actor_id)
        if cart is None:
            return 0

        removed = cart.clear()
        if removed:
            repo.add(cart)
            logger.info("Cart cleared", owner_id=str(command.actor_id), items_removed=removed)
        return removed
