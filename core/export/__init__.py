"""
Catalog export - orchestration, file storage and errors.

Usage:
    from core.export import CatalogExportService, PdfFileStore

    service = CatalogExportService(source)
    result = await service.export_all()

    store = PdfFileStore()
    files = store.list_files()
"""

from .exceptions import (
    CatalogExportError,
    CategoryNotFoundError,
    InvalidArgumentError,
    ExportGenerationError,
)
from .storage import (
    PdfFileStore,
    StoredFile,
    StoredPdf,
    DeleteReport,
    sanitize_filename,
    build_filename,
    format_file_size,
)
from .service import CatalogExportService, format_generated_time

__all__ = [
    # Errors
    "CatalogExportError",
    "CategoryNotFoundError",
    "InvalidArgumentError",
    "ExportGenerationError",
    # Storage
    "PdfFileStore",
    "StoredFile",
    "StoredPdf",
    "DeleteReport",
    "sanitize_filename",
    "build_filename",
    "format_file_size",
    # Service
    "CatalogExportService",
    "format_generated_time",
]
