"""
In-memory CatalogSource.

Backs tests and the CLI. A snapshot can be loaded from a JSON file:

    {
        "export_config": {...} | null,
        "company_profile": {"company_name": "..."} | null,
        "categories": [{"category_id": 1, "name": "Rings"}],
        "products": [{"product_id": 1, "name": "...", "images": [...], "params": [...]}]
    }
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, List, Optional, Union

from config.logging_config import get_logger

from .models import Category, CompanyProfile, ExportConfig, ProductSnapshot


logger = get_logger(__name__)


def _matches(product: ProductSnapshot, category_name: Optional[str], needle: str) -> bool:
    """Case-insensitive substring match on name, category name or tags."""
    fields = (product.name, category_name, product.tags)
    return any(needle in f.lower() for f in fields if f)


class InMemoryCatalogSource:
    """CatalogSource over plain Python objects."""

    def __init__(
        self,
        products: Iterable[ProductSnapshot] = (),
        categories: Iterable[Category] = (),
        export_config: Optional[ExportConfig] = None,
        company_profile: Optional[CompanyProfile] = None,
    ):
        self._products = list(products)
        self._categories = {c.category_id: c for c in categories}
        self._export_config = export_config
        self._company_profile = company_profile

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "InMemoryCatalogSource":
        """Load a snapshot file."""
        path = Path(path)
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        config_data = data.get("export_config")
        profile_data = data.get("company_profile")
        source = cls(
            products=[ProductSnapshot.model_validate(p) for p in data.get("products", [])],
            categories=[Category.model_validate(c) for c in data.get("categories", [])],
            export_config=ExportConfig.model_validate(config_data) if config_data else None,
            company_profile=CompanyProfile.model_validate(profile_data) if profile_data else None,
        )
        logger.info(f"Loaded catalog snapshot: {path} ({len(source._products)} products)")
        return source

    async def get_active_export_config(self) -> Optional[ExportConfig]:
        if self._export_config and self._export_config.is_active:
            return self._export_config
        return None

    async def get_company_profile(self) -> Optional[CompanyProfile]:
        return self._company_profile

    async def get_category(self, category_id: int) -> Optional[Category]:
        return self._categories.get(category_id)

    async def list_products(self, category_id: Optional[int] = None) -> List[ProductSnapshot]:
        if category_id is None:
            return list(self._products)
        return [p for p in self._products if p.category_id == category_id]

    def _category_name(self, product: ProductSnapshot) -> Optional[str]:
        if product.category_name:
            return product.category_name
        category = self._categories.get(product.category_id)
        return category.name if category else None

    async def search_products(
        self,
        keyword: str,
        sort_field: str = "created_at",
        sort_order: str = "desc",
    ) -> List[ProductSnapshot]:
        needle = keyword.strip().lower()
        matches = [p for p in self._products if _matches(p, self._category_name(p), needle)]

        present = [p for p in matches if getattr(p, sort_field, None) is not None]
        missing = [p for p in matches if getattr(p, sort_field, None) is None]
        present.sort(key=lambda p: getattr(p, sort_field), reverse=(sort_order == "desc"))
        return present + missing
