"""Inventory Gate: authoritative stock lookups and quantity clamping."""

from ordering.catalog import get_catalog
from ordering.catalog.port import Catalog
from ordering.exceptions import OutOfStock


class InventoryGate:
    def __init__(self, catalog: Catalog | None = None) -> None:
        self.catalog = catalog or get_catalog()

    def available_stock(self, product_id, variant_id=None) -> int:
        return self.catalog.available_stock(str(product_id), str(variant_id) if variant_id else None)

    def clamp(self, product_id, variant_id, requested: int) -> int:
        """Return ``requested`` capped at the available stock.

        Raises ``OutOfStock`` when nothing is available at all.
        """
        available = self.available_stock(product_id, variant_id)
        if available <= 0:
            raise OutOfStock(product_id, variant_id, available=0)
        return min(requested, available)
