"""Tests for core.pdf_engine.fonts.FontResolver."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from core.pdf_engine import fonts
from core.pdf_engine.fonts import (
    BOLD_FONT_NAME,
    FALLBACK_FONTS,
    REGULAR_FONT_NAME,
    FontResolver,
    font_names_for,
    platform_candidates,
)


@pytest.fixture(autouse=True)
def reset_registration(monkeypatch):
    monkeypatch.setattr(fonts, "_registered", {})


class TestPlatformCandidates:

    def test_linux(self):
        paths = platform_candidates("linux")
        assert paths[0] == Path("/usr/share/fonts/truetype/wqy/wqy-microhei.ttc")
        assert len(paths) == 3

    def test_macos(self):
        paths = platform_candidates("darwin")
        assert Path("/System/Library/Fonts/PingFang.ttc") in paths

    def test_windows_uses_windir(self, monkeypatch):
        monkeypatch.setenv("WINDIR", "D:\\Win")
        paths = platform_candidates("win32")
        assert [p.name for p in paths] == ["simhei.ttf", "simsun.ttf", "msyh.ttf", "simsun.ttc", "msyh.ttc"]
        assert all(str(p).startswith("D:\\Win") for p in paths)


class TestFontResolver:

    def test_no_candidates_falls_back(self):
        resolver = FontResolver(candidates=[])
        assert resolver.resolve_font() is None
        assert resolver.select() == FALLBACK_FONTS

    def test_first_existing_candidate_wins(self, tmp_path):
        first = tmp_path / "a.ttf"
        second = tmp_path / "b.ttf"
        second.write_bytes(b"x")
        first.write_bytes(b"x")
        resolver = FontResolver(candidates=[tmp_path / "missing.ttf", first, second])
        assert resolver.resolve_font() == first

    def test_unreadable_font_falls_back(self, tmp_path):
        bad = tmp_path / "broken.ttf"
        bad.write_bytes(b"definitely not a font")

        selection = FontResolver(candidates=[bad]).select()

        assert selection == FALLBACK_FONTS
        assert selection.custom_font is False

    def test_registers_regular_and_bold(self, tmp_path):
        font_file = tmp_path / "cjk.ttc"
        font_file.write_bytes(b"x")

        with patch.object(fonts, "TTFont") as tt, patch.object(fonts.pdfmetrics, "registerFont") as reg:
            selection = FontResolver(candidates=[font_file]).select()

        regular, bold = font_names_for(str(font_file))
        assert selection.regular == regular
        assert selection.bold == bold
        assert selection.custom_font is True
        assert selection.font_path == str(font_file)
        assert [c.args[0] for c in tt.call_args_list] == [regular, bold]
        assert reg.call_count == 2

    def test_registration_cached_per_process(self, tmp_path):
        font_file = tmp_path / "cjk.ttc"
        font_file.write_bytes(b"x")

        with patch.object(fonts, "TTFont"), patch.object(fonts.pdfmetrics, "registerFont") as reg:
            resolver = FontResolver(candidates=[font_file])
            resolver.select()
            resolver.select()

        assert reg.call_count == 2

    def test_font_names_unique_per_path(self):
        regular, bold = font_names_for("/fonts/a.ttc")
        assert regular.startswith(REGULAR_FONT_NAME + "-")
        assert bold.startswith(BOLD_FONT_NAME + "-")
        assert font_names_for("/fonts/a.ttc") == (regular, bold)
        assert font_names_for("/fonts/b.ttc")[0] != regular

    def test_second_font_does_not_replace_first(self, tmp_path):
        first_file = tmp_path / "a.ttc"
        second_file = tmp_path / "b.ttc"
        first_file.write_bytes(b"x")
        second_file.write_bytes(b"x")

        with patch.object(fonts, "TTFont") as tt, patch.object(fonts.pdfmetrics, "registerFont") as reg:
            first = FontResolver(candidates=[first_file]).select()
            second = FontResolver(candidates=[second_file]).select()
            again = FontResolver(candidates=[first_file]).select()

        assert first.regular != second.regular
        assert again == first
        assert reg.call_count == 4
        registered = [(c.args[0], c.args[1]) for c in tt.call_args_list]
        assert (first.regular, str(first_file)) in registered
        assert (second.regular, str(second_file)) in registered
        assert all(path == str(first_file) for name, path in registered if name == first.regular)

    def test_register_fonts_sets_context(self):
        ctx = MagicMock()
        selection = FontResolver(candidates=[]).register_fonts(ctx)
        assert ctx.fonts == selection
        assert ctx.custom_font is False

    def test_default_candidates_include_settings_paths(self, monkeypatch):
        monkeypatch.setattr(fonts.settings, "font_paths", "/opt/fonts/a.ttf, /opt/fonts/b.ttf")
        resolver = FontResolver(platform="linux")
        assert resolver.candidates[:2] == [Path("/opt/fonts/a.ttf"), Path("/opt/fonts/b.ttf")]
        assert resolver.candidates[2] == Path("/usr/share/fonts/truetype/wqy/wqy-microhei.ttc")
