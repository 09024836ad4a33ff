"""
Catalog data - read-only snapshot models and data sources.

Usage:
    from core.catalog import InMemoryCatalogSource, ProductSnapshot

    source = InMemoryCatalogSource.from_json("snapshot.json")
    products = await source.list_products()
"""

from .models import (
    ProductImage,
    ProductParam,
    ProductSnapshot,
    Category,
    CompanyProfile,
    ExportConfig,
    ExportResult,
    ALLOWED_PRODUCTS_PER_ROW,
    DEFAULT_PRODUCTS_PER_ROW,
)
from .protocol import CatalogSource, SORT_FIELDS, SORT_ORDERS
from .memory_source import InMemoryCatalogSource
from .sqlite_source import SQLiteCatalogSource

__all__ = [
    # Models
    "ProductImage",
    "ProductParam",
    "ProductSnapshot",
    "Category",
    "CompanyProfile",
    "ExportConfig",
    "ExportResult",
    "ALLOWED_PRODUCTS_PER_ROW",
    "DEFAULT_PRODUCTS_PER_ROW",
    # Sources
    "CatalogSource",
    "SORT_FIELDS",
    "SORT_ORDERS",
    "InMemoryCatalogSource",
    "SQLiteCatalogSource",
]
