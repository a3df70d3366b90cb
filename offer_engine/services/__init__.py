"""Services for the offer draft engine."""

from .interfaces import TemplateCatalog, RuleSource, PriceListCatalog, SelectionSource, SelectionKey
from .catalog_store import (
    CatalogSnapshot,
    CatalogStore,
    load_catalog_store,
    get_catalog_store,
    set_catalog_store,
)
from .selection import ProjectSelectionSource

__all__ = [
    "TemplateCatalog",
    "RuleSource",
    "PriceListCatalog",
    "SelectionSource",
    "SelectionKey",
    "CatalogSnapshot",
    "CatalogStore",
    "load_catalog_store",
    "get_catalog_store",
    "set_catalog_store",
    "ProjectSelectionSource",
]
