"""
Catalog Export Exceptions
"""


class CatalogExportError(Exception):
    """Base exception for catalog export"""
    pass


class CategoryNotFoundError(CatalogExportError):
    """Requested category does not exist"""
    def __init__(self, category_id: int):
        self.category_id = category_id
        super().__init__(f"Category not found: {category_id}")


class InvalidArgumentError(CatalogExportError):
    """Caller supplied an unusable parameter"""
    pass


class ExportGenerationError(CatalogExportError):
    """Rendering or writing the document failed"""
    pass
