"""
PDF Engine - catalog sheet generation using ReportLab.

This module provides:
- Card grid geometry (layout)
- CJK font discovery with Helvetica fallback (fonts)
- Product card drawing (card)
- The paginating catalog renderer (renderer)

Usage:
    from core.pdf_engine import CatalogRenderer

    renderer = CatalogRenderer(language="en")
    document = await renderer.render(products, title="Acme - All Products")
    Path("catalog.pdf").write_bytes(document.content)

Key components:
- CatalogRenderer: Main renderer class
- RenderedDocument: PDF bytes plus pagination summary
- FontResolver: Injectable font lookup
- compute_geometry / total_pages: Pure layout functions
"""

from .layout import (
    Margins,
    DEFAULT_MARGINS,
    CardRect,
    PageGeometry,
    compute_geometry,
    total_pages,
    ROWS_PER_PAGE,
    HEADER_RESERVE,
    CARD_PADDING,
    IMAGE_AREA_RATIO,
)
from .fonts import FontResolver, FontSelection, FALLBACK_FONTS
from .context import DocumentContext, RenderState, RenderPhase
from .card import draw_card, fit_text, params_summary
from .renderer import CatalogRenderer, RenderedDocument


__all__ = [
    # Main renderer
    'CatalogRenderer',
    'RenderedDocument',

    # Layout
    'Margins',
    'DEFAULT_MARGINS',
    'CardRect',
    'PageGeometry',
    'compute_geometry',
    'total_pages',
    'ROWS_PER_PAGE',
    'HEADER_RESERVE',
    'CARD_PADDING',
    'IMAGE_AREA_RATIO',

    # Fonts
    'FontResolver',
    'FontSelection',
    'FALLBACK_FONTS',

    # Context
    'DocumentContext',
    'RenderState',
    'RenderPhase',

    # Cards
    'draw_card',
    'fit_text',
    'params_summary',
]
