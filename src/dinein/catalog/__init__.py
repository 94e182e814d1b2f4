"""Catalog factory.

Provides get_catalog() / set_catalog() to swap implementations. The pricing
engine never looks the catalog up itself: command handlers fetch it here and
pass it in.
"""

from dinein.catalog.memory_adapter import InMemoryCatalog
from dinein.catalog.port import Catalog

_current_catalog: Catalog | None = None


def get_catalog() -> Catalog:
    """Return the current catalog. Defaults to an empty InMemoryCatalog."""
    global _current_catalog
    if _current_catalog is None:
        _current_catalog = InMemoryCatalog()
    return _current_catalog


def set_catalog(catalog: Catalog) -> None:
    """Override the active catalog (useful for tests)."""
    global _current_catalog
    _current_catalog = catalog


def reset_catalog() -> None:
    """Reset to default catalog."""
    global _current_catalog
    _current_catalog = None
