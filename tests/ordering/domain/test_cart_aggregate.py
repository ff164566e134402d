"""Tests for the ShoppingCart aggregate."""

import pytest
from ordering.cart.cart import ShoppingCart
from ordering.cart.events import CartCleared, CartItemAdded, CartItemRemoved, CartQuantityUpdated
from protean.exceptions import ValidationError


def _make_cart():
    return ShoppingCart.create(owner_id="buyer-001")


class TestCartCreation:
    def test_cart_identity_is_the_owner(self):
        cart = _make_cart()
        assert cart.id == "buyer-001"
        assert cart.owner_id == "buyer-001"
        assert len(cart.items) == 0


class TestAddItem:
    def test_add_item(self):
        cart = _make_cart()
        item = cart.add_item("prod-001", None, 2)
        assert len(cart.items) == 1
        assert item.quantity == 2
        assert item.variant_id is None

    def test_add_same_product_and_variant_combines_rows(self):
        cart = _make_cart()
        cart.add_item("prod-001", "var-001", 1)
        cart.add_item("prod-001", "var-001", 2)
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 3

    def test_different_variants_get_their_own_rows(self):
        cart = _make_cart()
        cart.add_item("prod-001", "var-001", 1)
        cart.add_item("prod-001", "var-002", 1)
        assert len(cart.items) == 2

    def test_quantity_is_capped_at_max_quantity(self):
        cart = _make_cart()
        item = cart.add_item("prod-001", None, 50, max_quantity=4)
        assert item.quantity == 4

    def test_combined_quantity_is_capped(self):
        cart = _make_cart()
        cart.add_item("prod-001", None, 3, max_quantity=5)
        item = cart.add_item("prod-001", None, 3, max_quantity=5)
        assert item.quantity == 5

    def test_zero_quantity_rejected(self):
        cart = _make_cart()
        with pytest.raises(ValidationError):
            cart.add_item("prod-001", None, 0)

    def test_add_item_raises_event(self):
        cart = _make_cart()
        cart.add_item("prod-001", "var-001", 7, max_quantity=5)
        added = [e for e in cart._events if isinstance(e, CartItemAdded)]
        assert len(added) == 1
        assert added[0].requested_quantity == 7
        assert added[0].quantity == 5
        assert added[0].variant_id == "var-001"


class TestUpdateQuantity:
    def test_update_quantity(self):
        cart = _make_cart()
        item = cart.add_item("prod-001", None, 1)
        cart.update_item_quantity(item.id, 4)
        assert cart.items[0].quantity == 4

    def test_update_quantity_raises_event(self):
        cart = _make_cart()
        item = cart.add_item("prod-001", None, 1)
        cart.update_item_quantity(item.id, 3)
        updated = [e for e in cart._events if isinstance(e, CartQuantityUpdated)]
        assert updated[0].previous_quantity == 1
        assert updated[0].new_quantity == 3

    def test_zero_quantity_removes_row(self):
        cart = _make_cart()
        item = cart.add_item("prod-001", None, 2)
        cart.update_item_quantity(item.id, 0)
        assert len(cart.items) == 0

    def test_negative_quantity_removes_row(self):
        cart = _make_cart()
        item = cart.add_item("prod-001", None, 2)
        cart.update_item_quantity(item.id, -3)
        assert len(cart.items) == 0

    def test_unknown_item_rejected(self):
        cart = _make_cart()
        with pytest.raises(ValidationError):
            cart.update_item_quantity("missing", 2)


class TestRemoveAndClear:
    def test_remove_item(self):
        cart = _make_cart()
        item = cart.add_item("prod-001", None, 1)
        assert cart.remove_item(item.id) is True
        assert cart.row_for("prod-001") is None

    def test_remove_missing_item_is_noop(self):
        cart = _make_cart()
        cart.add_item("prod-001", None, 1)
        assert cart.remove_item("missing") is False
        assert len(cart.items) == 1
        assert not [e for e in cart._events if isinstance(e, CartItemRemoved)]

    def test_remove_records_reason(self):
        cart = _make_cart()
        item = cart.add_item("prod-001", None, 1)
        cart.remove_item(item.id, reason="ProductRemoved")
        removed = [e for e in cart._events if isinstance(e, CartItemRemoved)]
        assert removed[0].reason == "ProductRemoved"

    def test_clear_removes_every_row(self):
        cart = _make_cart()
        cart.add_item("prod-001", None, 1)
        cart.add_item("prod-002", "var-002", 2)
        assert cart.clear() == 2
        assert len(cart.items) == 0
        cleared = [e for e in cart._events if isinstance(e, CartCleared)]
        assert cleared[0].items_removed == 2

    def test_clear_empty_cart_is_noop(self):
        cart = _make_cart()
        assert cart.clear() == 0
        assert not [e for e in cart._events if isinstance(e, CartCleared)]
