"""
Font discovery and registration for catalog documents.

Catalog text is frequently CJK, which ReportLab's built-in fonts cannot
draw. FontResolver probes a list of candidate font files and registers
the first one found under two names derived from its path:

    CatalogFont-<digest>       regular text
    CatalogFont-Bold-<digest>  headings (same file, no true bold face)

Each file keeps its own names for the life of the process, so a document
never sees its font swapped by a later registration.

When nothing is found, or registration fails, the built-in Helvetica
pair is used and the document is rendered without a custom font.
"""

import hashlib
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont

from config.logging_config import get_logger
from config.settings import settings


logger = get_logger(__name__)


REGULAR_FONT_NAME = "CatalogFont"
BOLD_FONT_NAME = "CatalogFont-Bold"

WINDOWS_FONT_FILES = [
    "simhei.ttf",
    "simsun.ttf",
    "msyh.ttf",
    "simsun.ttc",
    "msyh.ttc",
]

MACOS_FONTS = [
    "/System/Library/Fonts/PingFang.ttc",
    "/System/Library/Fonts/STHeiti Light.ttc",
    "/Library/Fonts/Arial Unicode.ttf",
]

LINUX_FONTS = [
    "/usr/share/fonts/truetype/wqy/wqy-microhei.ttc",
    "/usr/share/fonts/truetype/wqy/wqy-zenhei.ttc",
    "/usr/share/fonts/truetype/arphic/uming.ttc",
]

# Font file path -> (regular, bold) names registered for it
_registered: Dict[str, Tuple[str, str]] = {}


@dataclass(frozen=True)
class FontSelection:
    """Font names used for one document"""
    regular: str = "Helvetica"
    bold: str = "Helvetica-Bold"
    custom_font: bool = False
    font_path: Optional[str] = None


FALLBACK_FONTS = FontSelection()


def font_names_for(font_path: str) -> Tuple[str, str]:
    """ReportLab (regular, bold) names for a font file, unique per path."""
    digest = hashlib.sha1(font_path.encode("utf-8")).hexdigest()[:10]
    return f"{REGULAR_FONT_NAME}-{digest}", f"{BOLD_FONT_NAME}-{digest}"


def platform_candidates(platform: Optional[str] = None) -> List[Path]:
    """Default candidate font files for a platform (sys.platform style)."""
    platform = platform or sys.platform
    if platform.startswith("win"):
        fonts_dir = Path(os.environ.get("WINDIR", r"C:\Windows")) / "Fonts"
        return [fonts_dir / name for name in WINDOWS_FONT_FILES]
    if platform == "darwin":
        return [Path(p) for p in MACOS_FONTS]
    return [Path(p) for p in LINUX_FONTS]


class FontResolver:
    """
    Finds and registers the document font.

    Args:
        candidates: Font files to probe, in order. Defaults to
            settings.font_paths followed by the platform list.
        platform: Override sys.platform when building default candidates.
    """

    def __init__(
        self,
        candidates: Optional[Sequence[Union[str, Path]]] = None,
        platform: Optional[str] = None,
    ):
        if candidates is None:
            candidates = settings.get_font_paths() + platform_candidates(platform)
        self.candidates = [Path(c) for c in candidates]

    def resolve_font(self) -> Optional[Path]:
        """First existing candidate, or None."""
        for path in self.candidates:
            if path.is_file():
                logger.debug(f"Font candidate found: {path}")
                return path
        return None

    def select(self) -> FontSelection:
        """Resolve and register a font; never raises."""
        path = self.resolve_font()
        if path is None:
            logger.warning("No CJK font found, falling back to Helvetica")
            return FALLBACK_FONTS

        font_path = str(path)
        names = _registered.get(font_path)
        if names is None:
            regular, bold = font_names_for(font_path)
            try:
                pdfmetrics.registerFont(TTFont(regular, font_path))
                pdfmetrics.registerFont(TTFont(bold, font_path))
            except Exception as e:
                logger.error(f"Failed to register font {font_path}: {e}")
                return FALLBACK_FONTS
            names = _registered[font_path] = (regular, bold)
            logger.info(f"Registered catalog font: {font_path} as {regular}")

        return FontSelection(
            regular=names[0],
            bold=names[1],
            custom_font=True,
            font_path=font_path,
        )

    def register_fonts(self, context) -> FontSelection:
        """Select fonts for a document and record them on its context."""
        selection = self.select()
        context.fonts = selection
        context.custom_font = selection.custom_font
        return selection
