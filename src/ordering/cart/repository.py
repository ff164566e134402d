"""Repository for the ShoppingCart aggregate."""

from protean.exceptions import ObjectNotFoundError

from ordering.cart.cart import ShoppingCart
from ordering.domain import ordering


@ordering.repository(part_of=ShoppingCart)
class ShoppingCartRepository:
    def find_for_owner(self, owner_id) -> ShoppingCart | None:
        """Return the owner's persisted cart, or None if they never had one."""
        try:
            return self.get(str(owner_id))
        except ObjectNotFoundError:
            return None

    def for_owner(self, owner_id) -> ShoppingCart:
        """Return the owner's cart, creating an unsaved empty one if needed."""
        return self.find_for_owner(owner_id) or ShoppingCart.create(owner_id)
