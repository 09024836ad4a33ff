"""Tests for core.export.storage."""

import os
import time
from unittest.mock import patch

import pytest

from core.export import InvalidArgumentError
from core.export.storage import (
    PdfFileStore,
    build_filename,
    format_file_size,
    sanitize_filename,
)


@pytest.fixture
def store(tmp_path):
    return PdfFileStore(tmp_path / "pdfs", public_prefix="/uploads/pdfs", clock=lambda: 1234.5)


def _pdf(directory, name, content=b"%PDF-1.4 test", age_seconds=0):
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_bytes(content)
    if age_seconds:
        past = time.time() - age_seconds
        os.utime(path, (past, past))
    return path


class TestFilenames:

    def test_sanitize_replaces_unsafe_characters(self):
        assert sanitize_filename('a<b>c:d"e/f\\g|h?i*j') == "a_b_c_d_e_f_g_h_i_j"

    def test_sanitize_control_characters(self):
        assert sanitize_filename("a\x00b\nc") == "a_b_c"

    def test_sanitize_keeps_unicode(self):
        assert sanitize_filename("公司-全部款式.pdf") == "公司-全部款式.pdf"

    def test_build_filename(self):
        assert build_filename("Acme", "Rings/Bands", 1767225600000) == "Acme-Rings_Bands-1767225600000.pdf"


class TestFormatFileSize:

    @pytest.mark.parametrize("size,expected", [
        (0, "0 B"),
        (512, "512 B"),
        (1024, "1 KB"),
        (1536, "1.5 KB"),
        (1024 * 1024, "1 MB"),
        (int(2.25 * 1024 ** 3), "2.25 GB"),
    ])
    def test_format(self, size, expected):
        assert format_file_size(size) == expected


class TestSave:

    def test_writes_file_and_returns_paths(self, store):
        stored = store.save(b"%PDF-data", "Acme-All-1.pdf")

        assert stored.name == "Acme-All-1.pdf"
        assert stored.public_path == "/uploads/pdfs/Acme-All-1.pdf"
        assert stored.path.read_bytes() == b"%PDF-data"
        assert stored.path.is_absolute()

    def test_collision_appends_millis(self, store):
        store.save(b"first", "Acme-All-1.pdf")
        stored = store.save(b"second", "Acme-All-1.pdf")

        assert stored.name == "Acme-All-1_1234500.pdf"
        assert (store.output_dir / "Acme-All-1.pdf").read_bytes() == b"first"
        assert stored.path.read_bytes() == b"second"

    def test_no_temporary_files_left(self, store):
        store.save(b"data", "a.pdf")
        assert sorted(p.name for p in store.output_dir.iterdir()) == ["a.pdf"]

    def test_repeated_collisions_never_overwrite(self, store):
        names = [store.save(data, "X.pdf").name for data in (b"first", b"second", b"third")]

        assert names == ["X.pdf", "X_1234500.pdf", "X_1234500_1.pdf"]
        assert [(store.output_dir / n).read_bytes() for n in names] == [b"first", b"second", b"third"]
        assert sorted(p.name for p in store.output_dir.iterdir()) == sorted(names)

    def test_existing_suffixed_name_is_kept(self, store):
        _pdf(store.output_dir, "X.pdf", content=b"base")
        _pdf(store.output_dir, "X_1234500.pdf", content=b"earlier")

        stored = store.save(b"new", "X.pdf")

        assert stored.name == "X_1234500_1.pdf"
        assert (store.output_dir / "X_1234500.pdf").read_bytes() == b"earlier"

    def test_failed_link_leaves_nothing(self, store):
        with patch("core.export.storage.os.link", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                store.save(b"data", "a.pdf")

        assert list(store.output_dir.iterdir()) == []


class TestListFiles:

    def test_missing_directory_is_created_empty(self, store):
        assert store.list_files() == []
        assert store.output_dir.is_dir()

    def test_pdfs_only_newest_first(self, store):
        _pdf(store.output_dir, "old.pdf", age_seconds=3600)
        _pdf(store.output_dir, "new.PDF")
        _pdf(store.output_dir, "notes.txt")

        files = store.list_files()

        assert [f.filename for f in files] == ["new.PDF", "old.pdf"]
        assert files[1].url == "/uploads/pdfs/old.pdf"
        assert files[1].size == len(b"%PDF-1.4 test")
        assert files[1].size_formatted == "13 B"
        assert set(files[0].to_dict()) == {
            "filename", "size", "sizeFormatted", "createdTime", "modifiedTime", "url",
        }


class TestDeleteFiles:

    def test_empty_request_rejected(self, store):
        with pytest.raises(InvalidArgumentError):
            store.delete_files([])

    def test_deletes_and_reports(self, store):
        _pdf(store.output_dir, "a.pdf")
        _pdf(store.output_dir, "b.pdf")

        report = store.delete_files(["a.pdf", "missing.pdf"])

        assert report.deleted == ["a.pdf"]
        assert report.failed == [{"filename": "missing.pdf", "reason": "file not found"}]
        assert not (store.output_dir / "a.pdf").exists()
        assert (store.output_dir / "b.pdf").exists()
        assert not report.all_succeeded

    @pytest.mark.parametrize("name", [
        "../secret.pdf",
        "sub/a.pdf",
        "sub\\a.pdf",
        "a\0.pdf",
        "notes.txt",
        "",
    ])
    def test_unsafe_names_refused(self, store, tmp_path, name):
        _pdf(store.output_dir, "keep.pdf")
        _pdf(tmp_path, "secret.pdf")

        report = store.delete_files([name])

        assert report.deleted == []
        assert report.failed[0]["reason"] == "unsafe filename"
        assert (tmp_path / "secret.pdf").exists()

    def test_symlink_outside_directory_refused(self, store, tmp_path):
        outside = _pdf(tmp_path / "elsewhere", "target.pdf")
        store.output_dir.mkdir(parents=True, exist_ok=True)
        (store.output_dir / "link.pdf").symlink_to(outside)

        report = store.delete_files(["link.pdf"])

        assert report.failed[0]["reason"] == "unsafe path"
        assert outside.exists()

    def test_missing_directory(self, store):
        report = store.delete_files(["a.pdf"])
        assert report.deleted == []
        assert len(report.failed) == 1
