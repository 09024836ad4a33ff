"""
Catalog Export Service - turns catalog queries into stored PDF files.

Usage:
    service = CatalogExportService(InMemoryCatalogSource.from_json("snapshot.json"))
    result = await service.export_by_category(3)
    print(result.to_dict())
    # {"pdfName": "Acme-Rings-1767225600000.pdf",
    #  "pdfPath": "/uploads/pdfs/Acme-Rings-1767225600000.pdf",
    #  "generatedTime": "2026-01-01T00:00:00.000Z"}
"""

import asyncio
from datetime import datetime, timezone
from typing import Callable, Optional, Sequence, Tuple

from config.logging_config import get_logger
from config.settings import settings
from core.catalog.models import ExportConfig, ExportResult, ProductSnapshot
from core.catalog.protocol import SORT_FIELDS, SORT_ORDERS, CatalogSource
from core.i18n import get_string
from core.pdf_engine import CatalogRenderer

from .exceptions import (
    CategoryNotFoundError,
    ExportGenerationError,
    InvalidArgumentError,
)
from .storage import PdfFileStore, build_filename


logger = get_logger(__name__)


def format_generated_time(moment: datetime) -> str:
    """ISO 8601 in UTC with millisecond precision and a 'Z' suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CatalogExportService:
    """
    Orchestrates a catalog export: resolve names and configuration,
    query products, render, persist.

    Caller-input errors are raised before anything is rendered or
    written. Rendering and I/O failures surface as ExportGenerationError.
    """

    def __init__(
        self,
        source: CatalogSource,
        renderer: Optional[CatalogRenderer] = None,
        store: Optional[PdfFileStore] = None,
        language: Optional[str] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize export service.

        Args:
            source: Read-only catalog data
            renderer: PDF renderer (default: CatalogRenderer(language=language))
            store: Output file store (default: PdfFileStore())
            language: Label language (default: settings.catalog_language)
            clock: Returns the current time; injectable for tests
        """
        self.source = source
        self.language = language or settings.catalog_language
        self.renderer = renderer or CatalogRenderer(language=self.language)
        self.store = store or PdfFileStore()
        self._clock = clock or _utc_now

    # ------------------------------------------------------------------
    # Exports
    # ------------------------------------------------------------------

    async def export_all(self) -> ExportResult:
        """Export every product."""
        config, file_company, title_company = await self.resolve_company_names()
        products = await self.source.list_products()

        title = get_string("title_all", self.language).format(company=title_company)
        label = get_string("export_all", self.language)
        return await self._export(products, title, file_company, label, config)

    async def export_by_category(self, category_id: int) -> ExportResult:
        """
        Export the products of one category.

        Raises:
            CategoryNotFoundError: category_id does not exist
        """
        category = await self.source.get_category(category_id)
        if category is None:
            raise CategoryNotFoundError(category_id)

        config, file_company, title_company = await self.resolve_company_names()
        products = await self.source.list_products(category_id=category_id)

        title = get_string("title_category", self.language).format(
            company=title_company, category=category.name
        )
        return await self._export(products, title, file_company, category.name, config)

    async def export_by_search(
        self,
        keyword: str,
        sort_field: str = "created_at",
        sort_order: str = "desc",
    ) -> ExportResult:
        """
        Export the products whose name matches keyword.

        Raises:
            InvalidArgumentError: blank keyword or unsupported sort option
        """
        keyword = (keyword or "").strip()
        if not keyword:
            raise InvalidArgumentError("Search keyword must not be empty")
        if sort_field not in SORT_FIELDS:
            raise InvalidArgumentError(
                f"Invalid sort field {sort_field!r}, expected one of {', '.join(SORT_FIELDS)}"
            )
        sort_order = (sort_order or "").lower()
        if sort_order not in SORT_ORDERS:
            raise InvalidArgumentError(
                f"Invalid sort order {sort_order!r}, expected one of {', '.join(SORT_ORDERS)}"
            )

        config, file_company, title_company = await self.resolve_company_names()
        products = await self.source.search_products(keyword, sort_field, sort_order)

        title = get_string("title_search", self.language).format(company=title_company)
        label = get_string("export_search", self.language)
        return await self._export(products, title, file_company, label, config)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def resolve_company_names(self) -> Tuple[Optional[ExportConfig], str, str]:
        """
        Active export config plus the (file, title) company names.

        Order: the config's two names, else the company profile's name for
        both, else the configured default or the localized "Company".
        """
        config = await self.source.get_active_export_config()
        if config is not None:
            return config, config.file_company_name, config.title_company_name

        profile = await self.source.get_company_profile()
        name = profile.company_name.strip() if profile and profile.company_name else ""
        if not name:
            name = settings.default_company_name or get_string("company", self.language)
        return None, name, name

    async def _export(
        self,
        products: Sequence[ProductSnapshot],
        title: str,
        file_company: str,
        label: str,
        config: Optional[ExportConfig],
    ) -> ExportResult:
        now = self._clock()
        products = list(products)

        try:
            document = await self.renderer.render(products, title, config, generated_at=now)
        except Exception as e:
            logger.error(f"Catalog rendering failed: {e}", exc_info=True)
            raise ExportGenerationError(f"Failed to render catalog: {e}") from e

        millis = int(now.timestamp()) * 1000 + now.microsecond // 1000
        filename = build_filename(file_company, label, millis)
        try:
            stored = await asyncio.to_thread(self.store.save, document.content, filename)
        except OSError as e:
            logger.error(f"Saving catalog failed: {e}")
            raise ExportGenerationError(f"Failed to save catalog {filename}: {e}") from e

        result = ExportResult(
            display_name=stored.name,
            storage_path=stored.public_path,
            generated_at=format_generated_time(now),
            file_path=stored.path,
            page_count=document.page_count,
            product_count=len(products),
        )
        logger.info(
            f"Catalog exported: {result.display_name} "
            f"({result.product_count} products, {result.page_count} pages)"
        )
        return result
