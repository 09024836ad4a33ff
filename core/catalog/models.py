"""
Catalog snapshot models.

Read-only views of product, category and export-configuration records,
supplied by a CatalogSource and consumed by the export engine.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


ALLOWED_PRODUCTS_PER_ROW = (2, 3)
DEFAULT_PRODUCTS_PER_ROW = 2


class ProductImage(BaseModel):
    """One image attached to a product"""
    model_config = ConfigDict(frozen=True)

    image_url: str = Field(..., description="Local path or http(s) URL")
    image_type: Literal["main", "sub"] = "sub"
    sort_order: int = 0


class ProductParam(BaseModel):
    """One key/value parameter of a product"""
    model_config = ConfigDict(frozen=True)

    param_key: str
    param_value: str

    @field_validator("param_value", mode="before")
    @classmethod
    def _stringify(cls, v: Any) -> str:
        return "" if v is None else str(v)


class ProductSnapshot(BaseModel):
    """Immutable product record as seen by the export engine"""
    model_config = ConfigDict(frozen=True)

    product_id: int
    name: str = ""
    category_name: Optional[str] = None
    params: Tuple[ProductParam, ...] = ()
    images: Tuple[ProductImage, ...] = ()

    # Used by data sources for filtering/sorting only
    category_id: Optional[int] = None
    price: Optional[float] = None
    tags: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def primary_image(self) -> Optional[ProductImage]:
        """First 'main' image in sort order, else the first image."""
        if not self.images:
            return None
        ordered = sorted(self.images, key=lambda img: img.sort_order)
        for img in ordered:
            if img.image_type == "main":
                return img
        return ordered[0]


class Category(BaseModel):
    model_config = ConfigDict(frozen=True)

    category_id: int
    name: str


class CompanyProfile(BaseModel):
    """The 'about us' record; only the company name matters here."""
    model_config = ConfigDict(frozen=True)

    company_name: Optional[str] = None


class ExportConfig(BaseModel):
    """
    Catalog export configuration.

    file_company_name is used in generated filenames, title_company_name
    in the document heading.
    """
    model_config = ConfigDict(frozen=True)

    file_company_name: str
    title_company_name: str
    background_image: Optional[str] = None
    products_per_row: int = DEFAULT_PRODUCTS_PER_ROW
    is_active: bool = True

    @field_validator("file_company_name", "title_company_name")
    @classmethod
    def _non_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("company name must not be empty")
        return v

    @field_validator("background_image", mode="before")
    @classmethod
    def _empty_to_none(cls, v: Any) -> Optional[str]:
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return v

    @field_validator("products_per_row", mode="before")
    @classmethod
    def _check_products_per_row(cls, v: Any) -> int:
        # Stored as the strings "2"/"3" upstream
        try:
            value = int(v)
        except (TypeError, ValueError):
            raise ValueError(f"products_per_row must be one of {ALLOWED_PRODUCTS_PER_ROW}")
        if value not in ALLOWED_PRODUCTS_PER_ROW:
            raise ValueError(f"products_per_row must be one of {ALLOWED_PRODUCTS_PER_ROW}")
        return value


class ExportResult(BaseModel):
    """Descriptor of a generated catalog file"""
    display_name: str
    storage_path: str
    generated_at: str  # ISO 8601, UTC
    file_path: Optional[Path] = None
    page_count: int = 0
    product_count: int = 0

    def to_dict(self) -> Dict[str, str]:
        """Wire format expected by existing clients."""
        return {
            "pdfName": self.display_name,
            "pdfPath": self.storage_path,
            "generatedTime": self.generated_at,
        }
