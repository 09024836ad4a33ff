"""
Image Pipeline Module

Fetch product and background images from disk or http(s), normalize them
for PDF embedding, and synthesize placeholders when loading fails.

Usage:
    from core.image_pipeline import ImagePipeline

    pipeline = ImagePipeline()
    background = await pipeline.load_background(ref, 595, 842)
    card = await pipeline.load_original(product.primary_image.image_url)
"""

from .models import ImageResult, LoadError, LoadErrorKind
from .pipeline import ImagePipeline

__all__ = [
    # Models
    "ImageResult",
    "LoadError",
    "LoadErrorKind",
    # Pipeline
    "ImagePipeline",
]
