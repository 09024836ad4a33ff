"""Tests for core.export.service.CatalogExportService."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from core.catalog import Category, CompanyProfile, ExportConfig, InMemoryCatalogSource, ProductSnapshot
from core.export import (
    CatalogExportService,
    CategoryNotFoundError,
    ExportGenerationError,
    InvalidArgumentError,
    PdfFileStore,
    format_generated_time,
)
from core.pdf_engine import RenderedDocument


FIXED_NOW = datetime(2026, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)
FIXED_MILLIS = 1767323045678


def _products():
    return [
        ProductSnapshot(product_id=1, name="Gold Ring", category_id=1, category_name="Rings/Bands", price=10.0),
        ProductSnapshot(product_id=2, name="Silver Ring", category_id=1, category_name="Rings/Bands", price=5.0),
        ProductSnapshot(product_id=3, name="Pearl Necklace", category_id=2, category_name="Necklaces"),
    ]


def _fake_renderer():
    renderer = AsyncMock()
    renderer.render.return_value = RenderedDocument(
        content=b"%PDF-fake",
        page_count=1,
        cards_per_page=(3,),
        custom_font=False,
        product_count=3,
    )
    return renderer


@pytest.fixture
def store(tmp_path):
    return PdfFileStore(tmp_path / "pdfs", public_prefix="/uploads/pdfs")


@pytest.fixture
def source():
    return InMemoryCatalogSource(
        products=_products(),
        categories=[Category(category_id=1, name="Rings/Bands"), Category(category_id=2, name="Necklaces")],
        export_config=ExportConfig(file_company_name="AcmeFile", title_company_name="Acme Title"),
    )


def _service(source, store, renderer=None, language="en"):
    return CatalogExportService(
        source,
        renderer=renderer or _fake_renderer(),
        store=store,
        language=language,
        clock=lambda: FIXED_NOW,
    )


class TestFormatGeneratedTime:

    def test_utc_millis_z(self):
        assert format_generated_time(FIXED_NOW) == "2026-01-02T03:04:05.678Z"

    def test_naive_treated_as_utc(self):
        assert format_generated_time(datetime(2026, 1, 1)) == "2026-01-01T00:00:00.000Z"


class TestExportAll:

    @pytest.mark.asyncio
    async def test_uses_config_names(self, source, store):
        renderer = _fake_renderer()
        result = await _service(source, store, renderer).export_all()

        expected_name = f"AcmeFile-All Products-{FIXED_MILLIS}.pdf"
        assert result.display_name == expected_name
        assert result.storage_path == f"/uploads/pdfs/{expected_name}"
        assert result.generated_at == "2026-01-02T03:04:05.678Z"
        assert result.file_path.read_bytes() == b"%PDF-fake"
        assert result.product_count == 3
        assert result.page_count == 1

        products, title, config = renderer.render.await_args.args
        assert title == "Acme Title - All Products"
        assert len(products) == 3
        assert config.file_company_name == "AcmeFile"
        assert renderer.render.await_args.kwargs["generated_at"] == FIXED_NOW

    @pytest.mark.asyncio
    async def test_profile_name_when_no_config(self, store):
        source = InMemoryCatalogSource(products=_products(), company_profile=CompanyProfile(company_name="Acme"))
        renderer = _fake_renderer()

        result = await _service(source, store, renderer).export_all()

        assert result.display_name.startswith("Acme-All Products-")
        products, title, config = renderer.render.await_args.args
        assert title == "Acme - All Products"
        assert config is None

    @pytest.mark.asyncio
    async def test_generic_name_localized(self, store, monkeypatch):
        from core.export import service as service_module
        monkeypatch.setattr(service_module.settings, "default_company_name", None)
        source = InMemoryCatalogSource(products=_products())

        result = await _service(source, store, language="zh").export_all()

        assert result.display_name == f"公司-全部款式-{FIXED_MILLIS}.pdf"

    @pytest.mark.asyncio
    async def test_collision_gets_unique_name(self, source, store):
        service = _service(source, store)
        first = await service.export_all()
        second = await service.export_all()
        assert first.display_name != second.display_name
        assert first.file_path.exists() and second.file_path.exists()


class TestExportByCategory:

    @pytest.mark.asyncio
    async def test_filters_and_sanitizes_label(self, source, store):
        renderer = _fake_renderer()
        result = await _service(source, store, renderer).export_by_category(1)

        assert result.display_name == f"AcmeFile-Rings_Bands-{FIXED_MILLIS}.pdf"
        products, title, _ = renderer.render.await_args.args
        assert [p.product_id for p in products] == [1, 2]
        assert title == "Acme Title - Rings/Bands"

    @pytest.mark.asyncio
    async def test_unknown_category_writes_nothing(self, source, store):
        renderer = _fake_renderer()
        with pytest.raises(CategoryNotFoundError) as exc:
            await _service(source, store, renderer).export_by_category(99)

        assert exc.value.category_id == 99
        renderer.render.assert_not_awaited()
        assert not store.output_dir.exists() or list(store.output_dir.iterdir()) == []


class TestExportBySearch:

    @pytest.mark.asyncio
    async def test_search_export(self, source, store):
        renderer = _fake_renderer()
        result = await _service(source, store, renderer).export_by_search("  ring ", "price", "ASC")

        assert result.display_name == f"AcmeFile-Search Results-{FIXED_MILLIS}.pdf"
        products, title, _ = renderer.render.await_args.args
        assert [p.product_id for p in products] == [2, 1]
        assert title == "Acme Title - Search Export"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("keyword,field,order", [
        ("", "created_at", "desc"),
        ("   ", "created_at", "desc"),
        (None, "created_at", "desc"),
        ("ring", "stock", "desc"),
        ("ring", "price", "up"),
    ])
    async def test_invalid_arguments(self, source, store, keyword, field, order):
        renderer = _fake_renderer()
        with pytest.raises(InvalidArgumentError):
            await _service(source, store, renderer).export_by_search(keyword, field, order)
        renderer.render.assert_not_awaited()


class TestFailures:

    @pytest.mark.asyncio
    async def test_render_failure_wrapped(self, source, store):
        renderer = _fake_renderer()
        renderer.render.side_effect = RuntimeError("canvas exploded")

        with pytest.raises(ExportGenerationError) as exc:
            await _service(source, store, renderer).export_all()

        assert isinstance(exc.value.__cause__, RuntimeError)

    @pytest.mark.asyncio
    async def test_save_failure_wrapped(self, source, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("file in the way")
        store = PdfFileStore(blocker / "pdfs")

        with pytest.raises(ExportGenerationError) as exc:
            await _service(source, store).export_all()

        assert isinstance(exc.value.__cause__, OSError)
