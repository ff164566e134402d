"""HTTP client for a remote catalog service.

Expected endpoints (JSON):
    GET {base_url}/products/{product_id}
    GET {base_url}/variants/{variant_id}

A 404 means the product or variant no longer exists. Any other failure is
surfaced as ``CatalogUnavailable`` so callers never act on a guessed answer.
"""

import requests
import structlog

from ordering.catalog.port import Catalog, CatalogProduct, CatalogVariant
from ordering.exceptions import CatalogUnavailable

logger = structlog.get_logger(__name__)


class HttpCatalog(Catalog):
    def __init__(self, base_url: str, timeout: float = 2.0, session: requests.Session | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _fetch(self, path: str) -> dict | None:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("Catalog request failed", url=url, error=str(exc))
            raise CatalogUnavailable(f"Catalog unreachable: {exc}") from exc

        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            logger.warning("Catalog returned an error", url=url, status_code=response.status_code)
            raise CatalogUnavailable(f"Catalog returned HTTP {response.status_code}")
        return response.json()

    def get_product(self, product_id: str) -> CatalogProduct | None:
        data = self._fetch(f"/products/{product_id}")
        if data is None:
            return None
        return CatalogProduct(
            id=str(data["id"]),
            seller_id=str(data["seller_id"]),
            name=data.get("name", ""),
            price=float(data["price"]),
            stock=int(data.get("stock", 0)),
            approved=bool(data.get("approved", True)),
            is_active=bool(data.get("is_active", True)),
            has_variants=bool(data.get("has_variants", False)),
            image_url=data.get("image_url"),
        )

    def get_variant(self, variant_id: str) -> CatalogVariant | None:
        data = self._fetch(f"/variants/{variant_id}")
        if data is None:
            return None
        return CatalogVariant(
            id=str(data["id"]),
            product_id=str(data["product_id"]),
            stock=int(data.get("stock", 0)),
            price=float(data["price"]) if data.get("price") is not None else None,
            is_active=bool(data.get("is_active", True)),
            attributes=data.get("attributes") or {},
        )

    def available_stock(self, product_id: str, variant_id: str | None = None) -> int:
        if variant_id:
            variant = self.get_variant(variant_id)
            if variant is None or variant.product_id != str(product_id):
                return 0
            return max(variant.stock, 0)
        product = self.get_product(product_id)
        return max(product.stock, 0) if product else 0

    def is_approved(self, product_id: str) -> bool:
        product = self.get_product(product_id)
        return bool(product and product.approved and product.is_active)
