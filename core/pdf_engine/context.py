"""
Per-document rendering context and state.

DocumentContext carries everything draw functions need; RenderState
tracks pagination while the renderer walks the product list.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from reportlab.lib.utils import ImageReader
from reportlab.pdfgen.canvas import Canvas

from .fonts import FALLBACK_FONTS, FontSelection
from .layout import PageGeometry


class RenderPhase(Enum):
    """Renderer lifecycle: INIT -> FIRST_PAGE -> PAGE* -> CLOSED"""
    INIT = "init"
    FIRST_PAGE = "first_page"
    PAGE = "page"
    CLOSED = "closed"


_TRANSITIONS = {
    RenderPhase.INIT: {RenderPhase.FIRST_PAGE},
    RenderPhase.FIRST_PAGE: {RenderPhase.PAGE, RenderPhase.CLOSED},
    RenderPhase.PAGE: {RenderPhase.PAGE, RenderPhase.CLOSED},
    RenderPhase.CLOSED: set(),
}


@dataclass
class DocumentContext:
    """Shared state for drawing one catalog document"""
    canvas: Canvas
    geometry: PageGeometry
    generated_at: datetime
    language: str = "en"
    fonts: FontSelection = FALLBACK_FONTS
    custom_font: bool = False
    background: Optional[ImageReader] = None

    @property
    def generated_label(self) -> str:
        """Generation time in the local timezone, as printed in the info bar."""
        return self.generated_at.astimezone().strftime("%Y-%m-%d %H:%M:%S")

    def pdf_y(self, top_y: float) -> float:
        """Convert a top-down y coordinate to ReportLab's bottom-up space."""
        return self.geometry.page_height - top_y


@dataclass
class RenderState:
    """Pagination cursor; only ever moves forward"""
    total_items: int
    items_per_page: int
    total_pages: int
    phase: RenderPhase = RenderPhase.INIT
    page_number: int = 0
    index_in_page: int = 0
    content_top: float = 0.0
    cards_per_page: List[int] = field(default_factory=list)

    @property
    def page_full(self) -> bool:
        return self.index_in_page >= self.items_per_page

    def advance(self, phase: RenderPhase) -> None:
        if phase not in _TRANSITIONS[self.phase]:
            raise RuntimeError(f"Invalid render transition: {self.phase.value} -> {phase.value}")
        self.phase = phase

    def start_page(self, content_top: float) -> None:
        self.advance(RenderPhase.FIRST_PAGE if self.phase == RenderPhase.INIT else RenderPhase.PAGE)
        self.page_number += 1
        self.index_in_page = 0
        self.content_top = content_top
        self.cards_per_page.append(0)

    def record_card(self) -> None:
        self.index_in_page += 1
        self.cards_per_page[-1] += 1
