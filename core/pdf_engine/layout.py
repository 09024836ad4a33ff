"""
Card grid layout for catalog pages.

Pure geometry, no drawing. Coordinates are top-down page coordinates in
points: (0, 0) is the top-left corner of the page and y grows downwards.
The renderer converts to ReportLab's bottom-left origin when drawing.

Usage:
    geometry = compute_geometry(columns=3)
    rect = geometry.place(index=4, content_top=75.0)
    pages = total_pages(len(products), geometry.items_per_page)
"""

import math
from dataclasses import dataclass
from typing import Tuple

from reportlab.lib.pagesizes import A4


ROWS_PER_PAGE = 3
ALLOWED_COLUMNS = (2, 3)

# Vertical space kept free for the title and info bar on every page
HEADER_RESERVE = 100.0
CARD_PADDING = 5.0
IMAGE_AREA_RATIO = 0.6


@dataclass(frozen=True)
class Margins:
    """Page margins in points"""
    top: float = 15.0
    right: float = 15.0
    bottom: float = 15.0
    left: float = 15.0


DEFAULT_MARGINS = Margins()


@dataclass(frozen=True)
class CardRect:
    """One card cell in top-down page coordinates"""
    x: float
    y: float
    width: float
    height: float
    row: int
    col: int
    image_height: float

    @property
    def image_box(self) -> Tuple[float, float, float, float]:
        """(x, y, width, height) of the image area inside the padding."""
        return (
            self.x + CARD_PADDING,
            self.y + CARD_PADDING,
            self.width - 2 * CARD_PADDING,
            self.image_height,
        )

    @property
    def text_top(self) -> float:
        return self.y + self.image_height + CARD_PADDING

    @property
    def text_width(self) -> float:
        return self.width - 2 * CARD_PADDING

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height


@dataclass(frozen=True)
class PageGeometry:
    """Derived page and card dimensions for one document"""
    page_width: float
    page_height: float
    margins: Margins
    columns: int
    rows_per_page: int
    usable_width: float
    usable_height: float
    card_width: float
    card_height: float
    image_height: float
    text_height: float

    @property
    def items_per_page(self) -> int:
        return self.columns * self.rows_per_page

    @property
    def placeholder_size(self) -> Tuple[int, int]:
        """Pixel size of a synthesized placeholder image."""
        return (
            round(self.card_width - 2 * CARD_PADDING),
            round(self.card_height * IMAGE_AREA_RATIO),
        )

    def cell(self, index: int) -> Tuple[int, int]:
        """(row, col) of the index-th card on its page."""
        position = index % self.items_per_page
        return position // self.columns, position % self.columns

    def place(self, index: int, content_top: float) -> CardRect:
        """Rectangle of the index-th card given the page's content top."""
        row, col = self.cell(index)
        return CardRect(
            x=self.margins.left + col * self.card_width,
            y=content_top + row * self.card_height,
            width=self.card_width,
            height=self.card_height,
            row=row,
            col=col,
            image_height=self.image_height,
        )


def compute_geometry(
    columns: int,
    page_size: Tuple[float, float] = A4,
    margins: Margins = DEFAULT_MARGINS,
) -> PageGeometry:
    """
    Compute card geometry for a page.

    Cards tile the usable width edge to edge with no gutter. The same
    header reserve applies on every page, including continuation pages.

    Raises:
        ValueError: columns is not 2 or 3
    """
    if columns not in ALLOWED_COLUMNS:
        raise ValueError(f"columns must be one of {ALLOWED_COLUMNS}, got {columns!r}")

    page_width, page_height = page_size
    usable_width = page_width - margins.left - margins.right
    usable_height = page_height - margins.top - margins.bottom

    card_width = usable_width / columns
    card_height = (usable_height - HEADER_RESERVE) / ROWS_PER_PAGE
    image_height = card_height * IMAGE_AREA_RATIO
    text_height = card_height - image_height - 2 * CARD_PADDING

    return PageGeometry(
        page_width=page_width,
        page_height=page_height,
        margins=margins,
        columns=columns,
        rows_per_page=ROWS_PER_PAGE,
        usable_width=usable_width,
        usable_height=usable_height,
        card_width=card_width,
        card_height=card_height,
        image_height=image_height,
        text_height=text_height,
    )


def total_pages(item_count: int, items_per_page: int) -> int:
    """Number of pages for item_count cards; an empty document has one page."""
    return max(1, math.ceil(item_count / items_per_page))
