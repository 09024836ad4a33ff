"""
Pillow image transforms used by the pipeline.

All functions are synchronous and operate on decoded PIL images or raw
bytes. They raise on failure; ImagePipeline maps exceptions to LoadError.
"""

import io
from typing import Optional, Tuple

from PIL import Image, ImageDraw, ImageFont, ImageOps


WHITE = (255, 255, 255)
PLACEHOLDER_BACKGROUND = "#f0f0f0"
PLACEHOLDER_TEXT = "#999999"


def decode(data: bytes) -> Image.Image:
    """Decode bytes into a fully loaded PIL image."""
    img = Image.open(io.BytesIO(data))
    img.load()
    return img


def verify(data: bytes) -> Tuple[int, int]:
    """
    Check that bytes are a decodable image without modifying them.

    Returns:
        (width, height) in pixels
    """
    with Image.open(io.BytesIO(data)) as img:
        size = img.size
        img.verify()
    return size


def flatten_to_rgb(img: Image.Image) -> Image.Image:
    """Composite any alpha channel onto white and return an RGB image."""
    has_alpha = img.mode in ("RGBA", "LA") or (
        img.mode == "P" and "transparency" in img.info
    )
    if not has_alpha:
        return img.convert("RGB") if img.mode != "RGB" else img

    rgba = img.convert("RGBA")
    background = Image.new("RGB", rgba.size, WHITE)
    background.paste(rgba, mask=rgba.split()[3])
    return background


def fit_inside(
    img: Image.Image,
    max_width: int,
    max_height: int,
    allow_enlarge: bool = True,
) -> Image.Image:
    """Resize to fit inside the box, preserving aspect ratio."""
    width, height = img.size
    scale = min(max_width / width, max_height / height)
    if scale >= 1 and not allow_enlarge:
        return img
    new_size = (max(1, round(width * scale)), max(1, round(height * scale)))
    if new_size == img.size:
        return img
    return img.resize(new_size, Image.Resampling.LANCZOS)


def cover_fit(img: Image.Image, width: int, height: int) -> Image.Image:
    """Scale to fill the target exactly, cropping overflow around the centre."""
    return ImageOps.fit(
        img,
        (width, height),
        method=Image.Resampling.LANCZOS,
        centering=(0.5, 0.5),
    )


def encode_jpeg(img: Image.Image, quality: int) -> bytes:
    buf = io.BytesIO()
    flatten_to_rgb(img).save(buf, format="JPEG", quality=quality)
    return buf.getvalue()


def render_placeholder(
    width: int,
    height: int,
    text: str,
    quality: int = 80,
    font_path: Optional[str] = None,
) -> bytes:
    """
    Draw a flat grey rectangle with centred label text, JPEG encoded.

    Args:
        width, height: Pixel size (clamped to at least 1)
        text: Label drawn in the centre
        quality: JPEG quality
        font_path: TrueType font able to render the label; Pillow's
            default font is used when omitted
    """
    width, height = max(1, int(width)), max(1, int(height))
    img = Image.new("RGB", (width, height), PLACEHOLDER_BACKGROUND)

    if text:
        font_size = max(8, min(16, height // 8))
        if font_path:
            font = ImageFont.truetype(font_path, font_size)
        else:
            font = ImageFont.load_default()

        draw = ImageDraw.Draw(img)
        left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
        x = (width - (right - left)) / 2 - left
        y = (height - (bottom - top)) / 2 - top
        draw.text((x, y), text, fill=PLACEHOLDER_TEXT, font=font)

    return encode_jpeg(img, quality)
