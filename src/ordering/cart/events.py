"""Domain events for the ShoppingCart aggregate."""

from protean.fields import Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="ShoppingCart")
class CartItemAdded:
    """A product (or one of its variants) was added to the cart.

    ``quantity`` is the resulting row quantity after combining with any
    existing row and clamping to available stock.
    """

    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    requested_quantity = Integer(required=True)
    quantity = Integer(required=True)


@ordering.event(part_of="ShoppingCart")
class CartQuantityUpdated:
    """The quantity of a cart row was changed."""

    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@ordering.event(part_of="ShoppingCart")
class CartItemRemoved:
    """A row was removed from the cart, explicitly or by validation cleanup."""

    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    reason = String(max_length=50)


@ordering.event(part_of="ShoppingCart")
class CartCleared:
    """Every row was removed, either on request or because the cart was checked out."""

    __version__ = 1

    cart_id = Identifier(required=True)
    items_removed = Integer(required=True)
    reason = String(max_length=50)
