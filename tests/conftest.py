"""Shared fixtures for catalog export tests."""

import io

import pytest
from PIL import Image

from core.catalog.models import ProductImage, ProductParam, ProductSnapshot
from core.image_pipeline import ImagePipeline
from core.pdf_engine import CatalogRenderer, FontResolver


def make_png(width: int = 64, height: int = 32, color=(200, 30, 30, 255), mode: str = "RGBA") -> bytes:
    """Encode a solid-colour PNG."""
    img = Image.new(mode, (width, height), color if mode == "RGBA" else color[:3])
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def make_product(product_id: int, name: str = None, image_url: str = None, params=None, **extra) -> ProductSnapshot:
    """Build a ProductSnapshot with optional single main image and params."""
    images = ()
    if image_url:
        images = (ProductImage(image_url=image_url, image_type="main"),)
    return ProductSnapshot(
        product_id=product_id,
        name=name if name is not None else f"Product {product_id}",
        category_name=extra.pop("category_name", "Rings"),
        params=tuple(ProductParam(param_key=k, param_value=v) for k, v in (params or [])),
        images=images,
        **extra,
    )


@pytest.fixture
def uploads_dir(tmp_path):
    d = tmp_path / "uploads"
    d.mkdir()
    return d


@pytest.fixture
def pipeline(uploads_dir):
    return ImagePipeline(uploads_dir=uploads_dir, timeout=1.0)


@pytest.fixture
def renderer(pipeline):
    """Deterministic renderer using built-in fonts only."""
    return CatalogRenderer(
        pipeline=pipeline,
        font_resolver=FontResolver(candidates=[]),
        language="en",
        invariant=True,
    )


@pytest.fixture
def png_factory():
    return make_png


@pytest.fixture
def product_factory():
    return make_product
