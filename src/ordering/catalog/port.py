"""Catalog collaborator port (abstract interface).

The checkout pipeline never owns product data. Everything it knows about a
product (existence, approval, price, variants and stock) is read live
through this port at the moment it is needed and never cached on cart rows.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class CatalogVariant:
    """A purchasable configuration (size, colour, ...) of a product."""

    id: str
    product_id: str
    stock: int
    price: float | None = None  # Falls back to the product price
    is_active: bool = True
    attributes: dict = field(default_factory=dict)


@dataclass(frozen=True)
class CatalogProduct:
    id: str
    seller_id: str
    name: str
    price: float
    stock: int
    approved: bool = True
    is_active: bool = True
    has_variants: bool = False
    image_url: str | None = None


class Catalog(ABC):
    """Read-only view of the product catalog."""

    @abstractmethod
    def get_product(self, product_id: str) -> CatalogProduct | None:
        """Return the product, or None when it no longer exists."""
        ...

    @abstractmethod
    def get_variant(self, variant_id: str) -> CatalogVariant | None:
        """Return the variant, or None when it no longer exists."""
        ...

    @abstractmethod
    def available_stock(self, product_id: str, variant_id: str | None = None) -> int:
        """Authoritative sellable stock for a product or one of its variants."""
        ...

    @abstractmethod
    def is_approved(self, product_id: str) -> bool:
        """Whether the product is approved and active for sale."""
        ...

    def unit_price(self, product: CatalogProduct, variant: CatalogVariant | None = None) -> float:
        if variant is not None and variant.price is not None:
            return variant.price
        return product.price
