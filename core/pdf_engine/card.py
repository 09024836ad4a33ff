"""
Product card drawing.

A card is an image area (60% of the card height) above three centred
single-line text rows: product name, category and a short parameter
summary.
"""

import io
from typing import Sequence

from reportlab.lib.colors import HexColor
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics

from config.logging_config import get_logger
from core.catalog.models import ProductParam, ProductSnapshot
from core.i18n import format_category_label, get_string
from core.image_pipeline import ImageResult

from .context import DocumentContext
from .layout import CardRect


logger = get_logger(__name__)

ELLIPSIS = "..."
MAX_PARAMS = 2

NAME_FONT_SIZE = 14
CATEGORY_FONT_SIZE = 11
PARAMS_FONT_SIZE = 8
UNAVAILABLE_FONT_SIZE = 10

NAME_COLOR = HexColor("#000000")
CATEGORY_COLOR = HexColor("#592620")
PARAMS_COLOR = HexColor("#330302")
UNAVAILABLE_COLOR = HexColor("#999999")

# Row heights are capped, then scaled down on very short cards
NAME_ROW_MAX = 18
CATEGORY_ROW_MAX = 14
ROW_GAP = 2


def fit_text(text: str, font_name: str, font_size: float, max_width: float) -> str:
    """Truncate text with a trailing ellipsis so it fits max_width."""
    if pdfmetrics.stringWidth(text, font_name, font_size) <= max_width:
        return text

    ellipsis_width = pdfmetrics.stringWidth(ELLIPSIS, font_name, font_size)
    if ellipsis_width > max_width:
        return ""

    # Binary search on the longest prefix that still fits
    lo, hi = 0, len(text)
    while lo < hi:
        mid = (lo + hi + 1) // 2
        width = pdfmetrics.stringWidth(text[:mid], font_name, font_size) + ellipsis_width
        if width <= max_width:
            lo = mid
        else:
            hi = mid - 1
    return text[:lo].rstrip() + ELLIPSIS


def params_summary(params: Sequence[ProductParam], lang: str = "en", max_params: int = MAX_PARAMS) -> str:
    """
    One-line parameter summary, e.g. "Specs: Size: 7 | Metal: Gold ...".

    Returns an empty string when the product has no parameters.
    """
    if not params:
        return ""
    pairs = " | ".join(f"{p.param_key}: {p.param_value}" for p in params[:max_params])
    text = get_string("params", lang) + pairs
    if len(params) > max_params:
        text += " " + ELLIPSIS
    return text


def draw_centered_line(
    ctx: DocumentContext,
    text: str,
    center_x: float,
    top: float,
    max_width: float,
    font_name: str,
    font_size: float,
    color,
) -> str:
    """Draw one centred line whose glyph tops sit at `top`. Returns the drawn text."""
    line = fit_text(text, font_name, font_size, max_width)
    if not line:
        return line
    canvas = ctx.canvas
    canvas.setFont(font_name, font_size)
    canvas.setFillColor(color)
    baseline = top + pdfmetrics.getAscent(font_name, font_size)
    canvas.drawCentredString(center_x, ctx.pdf_y(baseline), line)
    return line


def draw_card_image(ctx: DocumentContext, rect: CardRect, image: ImageResult) -> bool:
    """
    Fit and centre image bytes inside the card's image area.

    Returns False, after drawing an "unavailable" label, when the bytes
    cannot be embedded.
    """
    x, y, width, height = rect.image_box
    try:
        ctx.canvas.drawImage(
            ImageReader(io.BytesIO(image.data)),
            x,
            ctx.pdf_y(y + height),
            width=width,
            height=height,
            preserveAspectRatio=True,
            anchor="c",
            mask="auto",
        )
        return True
    except Exception as e:
        logger.error(f"Failed to draw card image: {e}")

    label_top = y + (height - UNAVAILABLE_FONT_SIZE) / 2
    draw_centered_line(
        ctx,
        get_string("image_unavailable", ctx.language),
        x + width / 2,
        label_top,
        width,
        ctx.fonts.regular,
        UNAVAILABLE_FONT_SIZE,
        UNAVAILABLE_COLOR,
    )
    return False


def draw_card(
    ctx: DocumentContext,
    product: ProductSnapshot,
    rect: CardRect,
    image: ImageResult,
) -> None:
    """Draw one product card. A failed `image` leaves the image area empty."""
    if image.ok:
        draw_card_image(ctx, rect, image)

    lang = ctx.language
    fonts = ctx.fonts
    text_height = ctx.geometry.text_height
    center_x = rect.x + rect.width / 2

    name_row = min(NAME_ROW_MAX, text_height * 0.4)
    category_row = min(CATEGORY_ROW_MAX, text_height * 0.3)

    name_top = rect.text_top
    category_top = name_top + name_row + ROW_GAP
    params_top = category_top + category_row + ROW_GAP

    draw_centered_line(
        ctx,
        product.name or get_string("unnamed_product", lang),
        center_x,
        name_top,
        rect.text_width,
        fonts.bold,
        NAME_FONT_SIZE,
        NAME_COLOR,
    )
    draw_centered_line(
        ctx,
        format_category_label(product.category_name, lang),
        center_x,
        category_top,
        rect.text_width,
        fonts.regular,
        CATEGORY_FONT_SIZE,
        CATEGORY_COLOR,
    )

    summary = params_summary(product.params, lang)
    if summary:
        draw_centered_line(
            ctx,
            summary,
            center_x,
            params_top,
            rect.text_width,
            fonts.regular,
            PARAMS_FONT_SIZE,
            PARAMS_COLOR,
        )
