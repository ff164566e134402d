"""Application tests for cart validation, cleanup and listing."""

from ordering.cart.cart import ShoppingCart
from ordering.cart.items import AddToCart
from ordering.cart.listing import list_cart_items
from ordering.cart.validation import CartValidator, CleanupCart
from ordering.utils.locks import process_for_owner
from protean import current_domain

BUYER = "buyer-001"


def _add(product_id="prod-tee", variant_id=None, quantity=1):
    return process_for_owner(
        BUYER,
        AddToCart(actor_id=BUYER, actor_role="buyer", product_id=product_id, variant_id=variant_id, quantity=quantity),
    )


def _cleanup():
    return process_for_owner(BUYER, CleanupCart(actor_id=BUYER, actor_role="buyer"))


class TestCartValidator:
    def test_valid_cart(self):
        _add(quantity=2)
        result = CartValidator().validate(BUYER)
        assert result.valid is True
        assert result.invalid_rows == []

    def test_owner_without_cart_is_valid(self):
        assert CartValidator().validate("nobody").valid is True

    def test_removed_product(self, catalog):
        item_id = _add()
        catalog.remove_product("prod-tee")
        result = CartValidator().validate(BUYER)
        assert result.valid is False
        assert result.invalid_rows[0].item_id == item_id
        assert result.invalid_rows[0].reason == "ProductRemoved"

    def test_unapproved_product_counts_as_removed(self, catalog):
        _add()
        catalog.set_approval("prod-tee", False)
        assert CartValidator().validate(BUYER).invalid_rows[0].reason == "ProductRemoved"

    def test_removed_variant(self, catalog):
        _add("prod-shirt", "var-shirt-m")
        catalog.remove_variant("var-shirt-m")
        assert CartValidator().validate(BUYER).invalid_rows[0].reason == "VariantRemoved"

    def test_deactivated_variant(self, catalog):
        _add("prod-shirt", "var-shirt-m")
        catalog.deactivate_variant("var-shirt-m")
        assert CartValidator().validate(BUYER).invalid_rows[0].reason == "VariantRemoved"

    def test_product_that_gained_variants(self, catalog):
        _add()
        catalog.add_variant("prod-tee", "var-tee-s", stock=3, size="S")
        assert CartValidator().validate(BUYER).invalid_rows[0].reason == "VariantRemoved"

    def test_insufficient_stock_reports_available(self, catalog):
        _add(quantity=6)
        catalog.set_stock("prod-tee", 2)
        row = CartValidator().validate(BUYER).invalid_rows[0]
        assert row.reason == "InsufficientStock"
        assert row.quantity == 6
        assert row.available == 2

    def test_all_violations_returned(self, catalog):
        _add(quantity=4)
        _add("prod-shirt", "var-shirt-m", quantity=1)
        catalog.set_stock("prod-tee", 1)
        catalog.remove_variant("var-shirt-m")
        reasons = sorted(row.reason for row in CartValidator().validate(BUYER).invalid_rows)
        assert reasons == ["InsufficientStock", "VariantRemoved"]

    def test_validation_does_not_modify_cart(self, catalog):
        _add()
        catalog.remove_product("prod-tee")
        CartValidator().validate(BUYER)
        assert len(current_domain.repository_for(ShoppingCart).get(BUYER).items) == 1


class TestCleanupCart:
    def test_cleanup_removes_only_invalid_rows(self, catalog):
        _add(quantity=3)
        _add("prod-shirt", "var-shirt-m", quantity=2)
        catalog.remove_variant("var-shirt-m")

        assert _cleanup() == 1

        cart = current_domain.repository_for(ShoppingCart).get(BUYER)
        assert len(cart.items) == 1
        assert cart.items[0].product_id == "prod-tee"

    def test_cleanup_never_reduces_quantity(self, catalog):
        _add(quantity=6)
        catalog.set_stock("prod-tee", 2)

        assert _cleanup() == 1
        assert len(current_domain.repository_for(ShoppingCart).get(BUYER).items) == 0

    def test_cleanup_of_valid_cart(self):
        _add()
        assert _cleanup() == 0

    def test_cleanup_without_cart(self):
        assert _cleanup() == 0


class TestListCartItems:
    def test_rows_joined_with_live_product_data(self, catalog):
        _add(quantity=2)
        catalog.set_price("prod-tee", 90.0)
        rows = list_cart_items(BUYER)
        assert rows[0]["product"]["title"] == "Plain Tee"
        assert rows[0]["product"]["unit_price"] == 90.0
        assert rows[0]["product"]["stock"] == 10
        assert rows[0]["line_total"] == 180.0

    def test_variant_row_uses_variant_price_and_attributes(self):
        _add("prod-shirt", "var-shirt-m")
        row = list_cart_items(BUYER)[0]
        assert row["product"]["unit_price"] == 550.0
        assert row["product"]["attributes"] == {"size": "M"}

    def test_vanished_product_listed_without_product(self, catalog):
        _add()
        catalog.remove_product("prod-tee")
        rows = list_cart_items(BUYER)
        assert len(rows) == 1
        assert rows[0]["product"] is None

    def test_vanished_variant_listed_without_price(self, catalog):
        _add(quantity=2)
        _add("prod-shirt", "var-shirt-m", quantity=2)
        catalog.remove_variant("var-shirt-m")
        rows = {row["product_id"]: row for row in list_cart_items(BUYER)}

        shirt = rows["prod-shirt"]
        assert shirt["product"]["title"] == "Oxford Shirt"
        assert shirt["product"]["unit_price"] is None
        assert shirt["product"]["stock"] == 0
        assert "line_total" not in shirt
        assert rows["prod-tee"]["line_total"] == 200.0

    def test_empty_for_unknown_owner(self):
        assert list_cart_items("nobody") == []
