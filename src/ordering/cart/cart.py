"""Shopping Cart aggregate: one mutable cart per authenticated owner.

The cart's identity is the owner's id, so every owner has exactly one cart
and it can be fetched without a query. Rows hold only (product, variant,
quantity): prices, names and stock are looked up live whenever they are
needed and never stored on the row.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer

from ordering.cart.events import CartCleared, CartItemAdded, CartItemRemoved, CartQuantityUpdated
from ordering.domain import ordering


def _same(a, b) -> bool:
    return (str(a) if a else None) == (str(b) if b else None)


@ordering.entity(part_of="ShoppingCart")
class CartItem:
    product_id = Identifier(required=True)
    variant_id = Identifier()
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()

    def matches(self, product_id, variant_id) -> bool:
        return _same(self.product_id, product_id) and _same(self.variant_id, variant_id)


@ordering.aggregate
class ShoppingCart:
    owner_id = Identifier(required=True)
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def one_row_per_product_variant(self):
        keys = [(str(i.product_id), str(i.variant_id) if i.variant_id else None) for i in self.items]
        if len(keys) != len(set(keys)):
            raise ValidationError({"items": ["A cart may hold only one row per product and variant"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, owner_id):
        now = datetime.now(UTC)
        return cls(
            id=str(owner_id),
            owner_id=str(owner_id),
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------
    def find_item(self, item_id):
        return next((i for i in self.items if str(i.id) == str(item_id)), None)

    def row_for(self, product_id, variant_id=None):
        return next((i for i in self.items if i.matches(product_id, variant_id)), None)

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product_id, variant_id, quantity, max_quantity=None):
        """Add a product to the cart, combining with an existing row.

        The resulting row quantity is capped at ``max_quantity`` (the stock
        available at the time of the add).
        """
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        existing = self.row_for(product_id, variant_id)
        target = (existing.quantity if existing else 0) + quantity
        if max_quantity is not None:
            target = min(target, max_quantity)

        now = datetime.now(UTC)
        if existing:
            existing.quantity = target
            item = existing
        else:
            item = CartItem(
                product_id=product_id,
                variant_id=variant_id or None,
                quantity=target,
                added_at=now,
            )
            self.add_items(item)

        self.updated_at = now
        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                item_id=str(item.id),
                product_id=str(product_id),
                variant_id=str(variant_id) if variant_id else None,
                requested_quantity=quantity,
                quantity=target,
            )
        )
        return item

    def update_item_quantity(self, item_id, new_quantity):
        """Set a row's quantity. Zero or less removes the row."""
        item = self.find_item(item_id)
        if item is None:
            raise ValidationError({"item_id": ["Item not found in cart"]})

        if new_quantity <= 0:
            self.remove_item(item_id)
            return

        previous_quantity = item.quantity
        item.quantity = new_quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                item_id=str(item_id),
                previous_quantity=previous_quantity,
                new_quantity=new_quantity,
            )
        )

    def remove_item(self, item_id, reason="removed") -> bool:
        """Remove a row. Removing a row that is not there is a no-op."""
        item = self.find_item(item_id)
        if item is None:
            return False

        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                item_id=str(item_id),
                reason=reason,
            )
        )
        return True

    def clear(self, reason="cleared") -> int:
        """Remove every row and return how many were removed."""
        rows = list(self.items)
        if not rows:
            return 0

        for row in rows:
            self.remove_items(row)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartCleared(
                cart_id=str(self.id),
                items_removed=len(rows),
                reason=reason,
            )
        )
        return len(rows)
