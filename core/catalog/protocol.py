"""
CatalogSource protocol - the read-only data contract of the export engine.

Usage:
    products = await source.list_products(category_id=3)
    config = await source.get_active_export_config()
"""

from __future__ import annotations

from typing import List, Optional, Protocol, runtime_checkable

from .models import Category, CompanyProfile, ExportConfig, ProductSnapshot


SORT_FIELDS = ("created_at", "price", "name")
SORT_ORDERS = ("asc", "desc")


@runtime_checkable
class CatalogSource(Protocol):
    """
    Protocol that every catalog data source must implement.

    All methods are read-only and must tolerate concurrent calls.
    """

    async def get_active_export_config(self) -> Optional[ExportConfig]: ...

    async def get_company_profile(self) -> Optional[CompanyProfile]: ...

    async def get_category(self, category_id: int) -> Optional[Category]: ...

    async def list_products(self, category_id: Optional[int] = None) -> List[ProductSnapshot]: ...

    async def search_products(
        self,
        keyword: str,
        sort_field: str = "created_at",
        sort_order: str = "desc",
    ) -> List[ProductSnapshot]: ...
