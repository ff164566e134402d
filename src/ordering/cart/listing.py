"""Read side of the cart: rows joined with product data looked up at call time."""

from protean.utils.globals import current_domain

from ordering.cart.cart import ShoppingCart
from ordering.catalog import get_catalog


def list_cart_items(owner_id) -> list[dict]:
    """Return the owner's cart rows with live title, price, image and stock.

    Rows whose product has disappeared are still listed, with ``product`` set
    to None, so the buyer can see and remove them. A row whose variant has
    disappeared keeps its product data but has no price and no line total.
    """
    cart = current_domain.repository_for(ShoppingCart).find_for_owner(owner_id)
    if cart is None:
        return []

    catalog = get_catalog()
    rows = []
    for item in sorted(cart.items, key=lambda i: i.added_at.timestamp() if i.added_at else 0.0):
        variant_id = str(item.variant_id) if item.variant_id else None
        row = {
            "item_id": str(item.id),
            "product_id": str(item.product_id),
            "variant_id": variant_id,
            "quantity": item.quantity,
            "product": None,
        }

        product = catalog.get_product(str(item.product_id))
        if product is not None:
            variant = catalog.get_variant(variant_id) if variant_id else None
            if variant_id and (
                variant is None or not variant.is_active or variant.product_id != str(item.product_id)
            ):
                # no base-price fallback for a vanished variant
                row["product"] = {
                    "title": product.name,
                    "seller_id": product.seller_id,
                    "unit_price": None,
                    "image_url": product.image_url,
                    "stock": 0,
                    "attributes": {},
                }
                rows.append(row)
                continue

            unit_price = catalog.unit_price(product, variant)
            row["product"] = {
                "title": product.name,
                "seller_id": product.seller_id,
                "unit_price": unit_price,
                "image_url": product.image_url,
                "stock": catalog.available_stock(str(item.product_id), variant_id),
                "attributes": dict(variant.attributes) if variant else {},
            }
            row["line_total"] = round(unit_price * item.quantity, 2)
        rows.append(row)
    return rows
