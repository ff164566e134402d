"""In-memory catalog for development and testing.

Holds products and variants in dictionaries and exposes mutators so tests can
simulate catalog changes that happen between add-to-cart and checkout
(deletions, price changes, stock drops, variant deactivation).
"""

import threading
from dataclasses import replace

from ordering.catalog.port import Catalog, CatalogProduct, CatalogVariant


class InMemoryCatalog(Catalog):
    """Mutable in-memory catalog."""

    def __init__(self) -> None:
        self._products: dict[str, CatalogProduct] = {}
        self._variants: dict[str, CatalogVariant] = {}
        self._lock = threading.Lock()

    # -------------------------------------------------------------------
    # Seeding and mutation
    # -------------------------------------------------------------------
    def add_product(
        self,
        product_id: str,
        price: float,
        stock: int = 0,
        seller_id: str = "seller-001",
        name: str | None = None,
        approved: bool = True,
        image_url: str | None = None,
    ) -> CatalogProduct:
        product = CatalogProduct(
            id=product_id,
            seller_id=seller_id,
            name=name or f"Product {product_id}",
            price=price,
            stock=stock,
            approved=approved,
            image_url=image_url,
        )
        with self._lock:
            self._products[product_id] = product
        return product

    def add_variant(
        self,
        product_id: str,
        variant_id: str,
        stock: int,
        price: float | None = None,
        **attributes,
    ) -> CatalogVariant:
        variant = CatalogVariant(
            id=variant_id,
            product_id=product_id,
            stock=stock,
            price=price,
            attributes=attributes,
        )
        with self._lock:
            self._variants[variant_id] = variant
            self._products[product_id] = replace(self._products[product_id], has_variants=True)
        return variant

    def remove_product(self, product_id: str) -> None:
        with self._lock:
            self._products.pop(product_id, None)
            for variant_id in [v.id for v in self._variants.values() if v.product_id == product_id]:
                del self._variants[variant_id]

    def remove_variant(self, variant_id: str) -> None:
        with self._lock:
            self._variants.pop(variant_id, None)

    def deactivate_variant(self, variant_id: str) -> None:
        with self._lock:
            self._variants[variant_id] = replace(self._variants[variant_id], is_active=False)

    def set_approval(self, product_id: str, approved: bool) -> None:
        with self._lock:
            self._products[product_id] = replace(self._products[product_id], approved=approved)

    def set_price(self, product_id: str, price: float, variant_id: str | None = None) -> None:
        with self._lock:
            if variant_id:
                self._variants[variant_id] = replace(self._variants[variant_id], price=price)
            else:
                self._products[product_id] = replace(self._products[product_id], price=price)

    def set_stock(self, product_id: str, stock: int, variant_id: str | None = None) -> None:
        with self._lock:
            if variant_id:
                self._variants[variant_id] = replace(self._variants[variant_id], stock=stock)
            else:
                self._products[product_id] = replace(self._products[product_id], stock=stock)

    # -------------------------------------------------------------------
    # Catalog port
    # -------------------------------------------------------------------
    def get_product(self, product_id: str) -> CatalogProduct | None:
        return self._products.get(str(product_id))

    def get_variant(self, variant_id: str) -> CatalogVariant | None:
        return self._variants.get(str(variant_id))

    def available_stock(self, product_id: str, variant_id: str | None = None) -> int:
        if variant_id:
            variant = self.get_variant(variant_id)
            if variant is None or str(variant.product_id) != str(product_id):
                return 0
            return max(variant.stock, 0)

        product = self.get_product(product_id)
        return max(product.stock, 0) if product else 0

    def is_approved(self, product_id: str) -> bool:
        product = self.get_product(product_id)
        return bool(product and product.approved and product.is_active)
