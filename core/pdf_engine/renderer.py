"""
Catalog PDF Renderer using the ReportLab canvas.

Lays products out as an N x 3 card grid on A4 pages, with a title on the
first page, a running info bar on every page and an optional full-page
background image. Rendering happens in memory and returns the PDF bytes.
"""

import io
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Sequence, Tuple

from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas as rl_canvas

from config.logging_config import get_logger
from config.settings import settings
from core.catalog.models import DEFAULT_PRODUCTS_PER_ROW, ExportConfig, ProductSnapshot
from core.i18n import format_info_bar, get_string
from core.image_pipeline import ImagePipeline, ImageResult

from .card import draw_card, draw_centered_line, fit_text
from .context import DocumentContext, RenderPhase, RenderState
from .fonts import FontResolver
from .layout import DEFAULT_MARGINS, Margins, compute_geometry, total_pages


logger = get_logger(__name__)


TITLE_FONT_SIZE = 20
TITLE_MIN_FONT_SIZE = 12
INFO_FONT_SIZE = 10
LINE_SPACING = 1.2  # line height as a multiple of font size

INFO_COLOR = HexColor("#666666")
RULE_COLOR = HexColor("#cccccc")
RULE_WIDTH = 0.5


@dataclass(frozen=True)
class RenderedDocument:
    """In-memory result of one render call"""
    content: bytes
    page_count: int
    cards_per_page: Tuple[int, ...]
    custom_font: bool
    product_count: int = 0

    @property
    def size_bytes(self) -> int:
        return len(self.content)


class CatalogRenderer:
    """
    Renders product snapshots into a catalog PDF.

    Images are fetched one card at a time; a card whose image cannot be
    loaded gets a placeholder instead.
    """

    def __init__(
        self,
        pipeline: Optional[ImagePipeline] = None,
        font_resolver: Optional[FontResolver] = None,
        language: Optional[str] = None,
        invariant: Optional[bool] = None,
        page_size: Tuple[float, float] = A4,
        margins: Margins = DEFAULT_MARGINS,
    ):
        """
        Initialize renderer.

        Args:
            pipeline: Image loader (default: ImagePipeline())
            font_resolver: Font lookup (default: FontResolver())
            language: Label language, en or zh (default: settings.catalog_language)
            invariant: Produce byte-identical output for identical input
                (default: settings.pdf_invariant)
            page_size: Page size in points
            margins: Page margins in points
        """
        self.pipeline = pipeline or ImagePipeline()
        self.font_resolver = font_resolver or FontResolver()
        self.language = language or settings.catalog_language
        self.invariant = settings.pdf_invariant if invariant is None else invariant
        self.page_size = page_size
        self.margins = margins

    async def render(
        self,
        products: Sequence[ProductSnapshot],
        title: str,
        config: Optional[ExportConfig] = None,
        generated_at: Optional[datetime] = None,
    ) -> RenderedDocument:
        """
        Render products to PDF bytes.

        Args:
            products: Cards in display order
            title: First-page heading
            config: Export configuration; None means 2 columns, no background
            generated_at: Timestamp printed in the info bar (default: now, UTC)

        Returns:
            RenderedDocument with the PDF bytes and pagination summary
        """
        columns = config.products_per_row if config else DEFAULT_PRODUCTS_PER_ROW
        geometry = compute_geometry(columns, self.page_size, self.margins)

        buffer = io.BytesIO()
        canvas = rl_canvas.Canvas(
            buffer,
            pagesize=self.page_size,
            invariant=1 if self.invariant else 0,
        )
        canvas.setTitle(title)

        ctx = DocumentContext(
            canvas=canvas,
            geometry=geometry,
            generated_at=generated_at or datetime.now(timezone.utc),
            language=self.language,
        )
        self.font_resolver.register_fonts(ctx)

        if config and config.background_image:
            ctx.background = await self._load_background(config.background_image, geometry)

        state = RenderState(
            total_items=len(products),
            items_per_page=geometry.items_per_page,
            total_pages=total_pages(len(products), geometry.items_per_page),
        )
        logger.info(
            f"Rendering catalog: {len(products)} products, {columns} columns, "
            f"{state.total_pages} pages, custom_font={ctx.custom_font}"
        )

        self._begin_page(ctx, state, title)

        for product in products:
            if state.page_full:
                canvas.showPage()
                self._begin_page(ctx, state, None)

            rect = geometry.place(state.index_in_page, state.content_top)
            image = await self._load_card_image(ctx, product)
            draw_card(ctx, product, rect, image)
            state.record_card()

        canvas.showPage()
        canvas.save()
        state.advance(RenderPhase.CLOSED)

        content = buffer.getvalue()
        logger.info(f"Catalog rendered: {state.page_number} pages, {len(content) / 1024:.1f}KB")
        return RenderedDocument(
            content=content,
            page_count=state.page_number,
            cards_per_page=tuple(state.cards_per_page),
            custom_font=ctx.custom_font,
            product_count=len(products),
        )

    # ------------------------------------------------------------------
    # Page furniture
    # ------------------------------------------------------------------

    def _begin_page(self, ctx: DocumentContext, state: RenderState, title: Optional[str]) -> None:
        """Draw background, optional title and info bar; start the card grid."""
        if ctx.background is not None:
            self._draw_background(ctx)

        cursor = ctx.geometry.margins.top
        if title is not None:
            cursor = self._draw_title(ctx, title, cursor)

        page_number = state.page_number + 1
        cursor = self._draw_info_bar(ctx, page_number, state, cursor)

        state.start_page(cursor)
        logger.debug(f"Page {page_number}/{state.total_pages}: content top {cursor:.1f}")

    def _draw_background(self, ctx: DocumentContext) -> None:
        geometry = ctx.geometry
        try:
            ctx.canvas.drawImage(
                ctx.background,
                0,
                0,
                width=geometry.page_width,
                height=geometry.page_height,
            )
        except Exception as e:
            logger.error(f"Failed to draw background image: {e}")
            ctx.background = None

    def _draw_title(self, ctx: DocumentContext, title: str, cursor: float) -> float:
        """Single-line centred title, shrunk then ellipsized to fit."""
        geometry = ctx.geometry
        font = ctx.fonts.bold
        size = TITLE_FONT_SIZE
        while size > TITLE_MIN_FONT_SIZE and pdfmetrics.stringWidth(title, font, size) > geometry.usable_width:
            size -= 1

        line = fit_text(title, font, size, geometry.usable_width)
        ctx.canvas.setFont(font, size)
        ctx.canvas.setFillColor(HexColor("#000000"))
        baseline = cursor + pdfmetrics.getAscent(font, size)
        ctx.canvas.drawCentredString(
            geometry.margins.left + geometry.usable_width / 2,
            ctx.pdf_y(baseline),
            line,
        )

        # Reserve the full-size line so the grid does not move with the title
        line_height = TITLE_FONT_SIZE * LINE_SPACING
        return cursor + line_height + line_height / 2

    def _draw_info_bar(
        self,
        ctx: DocumentContext,
        page_number: int,
        state: RenderState,
        cursor: float,
    ) -> float:
        geometry = ctx.geometry
        text = format_info_bar(
            state.total_items,
            page_number,
            state.total_pages,
            ctx.generated_label,
            ctx.language,
        )
        draw_centered_line(
            ctx,
            text,
            geometry.margins.left + geometry.usable_width / 2,
            cursor,
            geometry.usable_width,
            ctx.fonts.regular,
            INFO_FONT_SIZE,
            INFO_COLOR,
        )

        line_height = INFO_FONT_SIZE * LINE_SPACING
        cursor += line_height + line_height / 2

        canvas = ctx.canvas
        canvas.setStrokeColor(RULE_COLOR)
        canvas.setLineWidth(RULE_WIDTH)
        canvas.line(
            geometry.margins.left,
            ctx.pdf_y(cursor),
            geometry.page_width - geometry.margins.right,
            ctx.pdf_y(cursor),
        )
        return cursor + line_height / 2

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    async def _load_background(self, ref: str, geometry) -> Optional[ImageReader]:
        result = await self.pipeline.load_background(
            ref,
            round(geometry.page_width),
            round(geometry.page_height),
        )
        if not result.ok:
            logger.warning(f"Background image skipped: {result.error}")
            return None
        return ImageReader(io.BytesIO(result.data))

    async def _load_card_image(self, ctx: DocumentContext, product: ProductSnapshot) -> ImageResult:
        width, height = ctx.geometry.placeholder_size
        primary = product.primary_image

        if primary is None:
            label = get_string("no_image", ctx.language)
            return self.pipeline.placeholder(width, height, label, font_path=ctx.fonts.font_path)

        result = await self.pipeline.load_original(primary.image_url)
        if result.ok:
            return result

        logger.warning(f"Product {product.product_id}: using placeholder ({result.error})")
        label = get_string("image_failed", ctx.language)
        return self.pipeline.placeholder(width, height, label, font_path=ctx.fonts.font_path)
