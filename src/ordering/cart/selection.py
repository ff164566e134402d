"""Resolve a buyer's (product, variant) choice against the live catalog."""

from ordering.catalog.port import Catalog, CatalogProduct, CatalogVariant
from ordering.exceptions import NotFound, VariantRequired


def resolve_selection(catalog: Catalog, product_id, variant_id=None) -> tuple[CatalogProduct, CatalogVariant | None]:
    """Return the product and variant a buyer is about to purchase.

    Products that have variants require one to be chosen; a product without
    variants must not be given one.
    """
    product = catalog.get_product(str(product_id))
    if product is None or not catalog.is_approved(str(product_id)):
        raise NotFound(f"Product {product_id} is not available", product_id=str(product_id))

    if not product.has_variants:
        if variant_id:
            raise NotFound(
                f"Variant {variant_id} does not belong to product {product_id}",
                product_id=str(product_id),
                variant_id=str(variant_id),
            )
        return product, None

    if not variant_id:
        raise VariantRequired(product_id)

    variant = catalog.get_variant(str(variant_id))
    if variant is None or str(variant.product_id) != str(product.id) or not variant.is_active:
        raise NotFound(
            f"Variant {variant_id} is not available",
            product_id=str(product_id),
            variant_id=str(variant_id),
        )
    return product, variant
