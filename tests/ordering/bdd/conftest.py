"""Shared BDD fixtures and step definitions for the checkout pipeline."""

import pytest
from ordering.cart.cart import ShoppingCart
from ordering.cart.items import AddToCart, RemoveFromCart
from ordering.checkout.placement import PlaceOrder
from ordering.exceptions import OrderingError
from ordering.order.order import Order
from ordering.utils.locks import process_for_owner
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then, when


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for the error raised by the last action."""
    return {"exc": None}


@pytest.fixture()
def placed():
    """Order ids returned by checkout actions, in call order."""
    return []


def _rows(owner_id):
    cart = current_domain.repository_for(ShoppingCart).find_for_owner(owner_id)
    return list(cart.items) if cart else []


def _attempt(error, action):
    try:
        return action()
    except (OrderingError, ValidationError) as exc:
        error["exc"] = exc
        return None


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('the buyer "{buyer_id}"'), target_fixture="buyer")
def the_buyer(buyer_id):
    return buyer_id


@given(parsers.cfparse('the catalog has product "{product_id}" priced {price:f} with stock {stock:d}'))
def catalog_has_product(catalog, product_id, price, stock):
    catalog.add_product(product_id, price=price, stock=stock)


@given(
    parsers.cfparse(
        'the catalog has a variant "{variant_id}" of product "{product_id}" priced {price:f} with stock {stock:d}'
    )
)
def catalog_has_variant(catalog, product_id, variant_id, price, stock):
    catalog.add_product(product_id, price=price, stock=0, seller_id="seller-002")
    catalog.add_variant(product_id, variant_id, stock=stock, price=price)


# ---------------------------------------------------------------------------
# When steps (shared)
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the buyer adds {quantity:d} of "{product_id}"'))
def buyer_adds(buyer, quantity, product_id, error):
    command = AddToCart(actor_id=buyer, actor_role="buyer", product_id=product_id, quantity=quantity)
    _attempt(error, lambda: process_for_owner(buyer, command))


@when(parsers.cfparse('the buyer adds {quantity:d} of variant "{variant_id}" of "{product_id}"'))
def buyer_adds_variant(buyer, quantity, product_id, variant_id, error):
    command = AddToCart(
        actor_id=buyer, actor_role="buyer", product_id=product_id, variant_id=variant_id, quantity=quantity
    )
    _attempt(error, lambda: process_for_owner(buyer, command))


@when(parsers.cfparse('the buyer removes the "{product_id}" row'))
def buyer_removes(buyer, product_id):
    row = next(row for row in _rows(buyer) if str(row.product_id) == product_id)
    process_for_owner(buyer, RemoveFromCart(actor_id=buyer, actor_role="buyer", item_id=str(row.id)))


@when(parsers.cfparse('the product "{product_id}" is removed from the catalog'))
def product_removed(catalog, product_id):
    catalog.remove_product(product_id)


@when("the buyer checks out with cash on delivery")
def buyer_checks_out(buyer, shipping_json, error, placed):
    command = PlaceOrder(actor_id=buyer, actor_role="buyer", shipping_details=shipping_json)
    order_id = _attempt(error, lambda: process_for_owner(buyer, command))
    if order_id:
        placed.append(order_id)


# ---------------------------------------------------------------------------
# Then steps (shared)
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the request fails with "{code}"'))
def request_fails_with(error, code):
    assert error["exc"] is not None, "Expected an error but none was raised"
    assert getattr(error["exc"], "code", type(error["exc"]).__name__) == code


@then("the request succeeds")
def request_succeeds(error):
    assert error["exc"] is None, f"Unexpected error: {error['exc']!r}"


@then(parsers.cfparse("the cart has {count:d} row(s)"))
def cart_row_count(buyer, count):
    assert len(_rows(buyer)) == count


@then(parsers.cfparse('the "{product_id}" row has quantity {quantity:d}'))
def row_quantity(buyer, product_id, quantity):
    row = next(row for row in _rows(buyer) if str(row.product_id) == product_id)
    assert row.quantity == quantity


@then("no order is placed")
def no_order_placed(buyer):
    assert current_domain.repository_for(Order).find_for_owner(buyer) == []


@then(parsers.cfparse("the buyer has {count:d} order(s)"))
def buyer_order_count(buyer, count):
    assert len(current_domain.repository_for(Order).find_for_owner(buyer)) == count
