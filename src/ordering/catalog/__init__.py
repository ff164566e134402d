"""Catalog collaborator factory.

Provides get_catalog() / set_catalog() to swap implementations:
- InMemoryCatalog for development and testing
- HttpCatalog when CATALOG_URL points at a catalog service
"""

import os

from ordering.catalog.http_adapter import HttpCatalog
from ordering.catalog.memory_adapter import InMemoryCatalog
from ordering.catalog.port import Catalog

_current_catalog: Catalog | None = None


def get_catalog() -> Catalog:
    """Return the current catalog. Defaults to InMemoryCatalog unless CATALOG_URL is set."""
    global _current_catalog
    if _current_catalog is None:
        base_url = os.environ.get("CATALOG_URL")
        _current_catalog = HttpCatalog(base_url) if base_url else InMemoryCatalog()
    return _current_catalog


def set_catalog(catalog: Catalog) -> None:
    """Override the active catalog (useful for tests)."""
    global _current_catalog
    _current_catalog = catalog


def reset_catalog() -> None:
    """Reset to default catalog."""
    global _current_catalog
    _current_catalog = None
