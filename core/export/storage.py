"""
PDF File Store - persistence and management of generated catalogs.

Files are written to a hidden temporary file in the output directory and
hard-linked into place under a free name, so a partially written catalog
is never visible and an existing file is never replaced.

Usage:
    store = PdfFileStore()
    stored = store.save(pdf_bytes, "Acme-All Products-1767225600000.pdf")
    for pdf in store.list_files():
        print(pdf.filename, pdf.size_formatted)
    report = store.delete_files(["old.pdf"])
"""

from __future__ import annotations

import os
import re
import tempfile
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional

from config.logging_config import get_logger

from .exceptions import InvalidArgumentError

logger = get_logger(__name__)


_UNSAFE_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
_SIZE_UNITS = ["B", "KB", "MB", "GB", "TB"]
MAX_NAME_ATTEMPTS = 1000


def sanitize_filename(filename: str) -> str:
    """Replace characters that are unsafe in filenames with '_'."""
    return _UNSAFE_CHARS.sub("_", filename).strip()


def build_filename(company: str, label: str, millis: int) -> str:
    """'{company}-{label}-{millis}.pdf', sanitized."""
    return sanitize_filename(f"{company}-{label}-{millis}.pdf")


def format_file_size(size: int) -> str:
    """
    Human-readable size with up to two decimals.

    Examples:
        format_file_size(0)    -> "0 B"
        format_file_size(1536) -> "1.5 KB"
    """
    if size <= 0:
        return "0 B"
    value = float(size)
    exponent = 0
    while value >= 1024 and exponent < len(_SIZE_UNITS) - 1:
        value /= 1024
        exponent += 1
    return f"{round(value, 2):g} {_SIZE_UNITS[exponent]}"


@dataclass(frozen=True)
class StoredFile:
    """A file written by PdfFileStore.save"""
    name: str
    public_path: str
    path: Path


@dataclass(frozen=True)
class StoredPdf:
    """Listing entry for a generated catalog"""
    filename: str
    size: int
    size_formatted: str
    created_time: datetime
    modified_time: datetime
    url: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filename": self.filename,
            "size": self.size,
            "sizeFormatted": self.size_formatted,
            "createdTime": self.created_time.isoformat(),
            "modifiedTime": self.modified_time.isoformat(),
            "url": self.url,
        }


@dataclass
class DeleteReport:
    """Per-file outcome of a batch delete."""
    deleted: List[str] = field(default_factory=list)
    failed: List[Dict[str, str]] = field(default_factory=list)

    @property
    def all_succeeded(self) -> bool:
        return not self.failed

    def add_failure(self, filename: str, reason: str) -> None:
        self.failed.append({"filename": filename, "reason": reason})

    def to_dict(self) -> Dict[str, Any]:
        return {"deleted": list(self.deleted), "failed": list(self.failed)}

    def __str__(self) -> str:
        return f"Delete: deleted={len(self.deleted)}, failed={len(self.failed)}"


class PdfFileStore:
    """Writes, lists and deletes catalog PDFs in one directory."""

    def __init__(
        self,
        output_dir: str | Path | None = None,
        public_prefix: Optional[str] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        from config.settings import settings

        self.output_dir = Path(output_dir or settings.pdf_output_dir)
        self.public_prefix = (public_prefix or settings.pdf_public_prefix).rstrip("/")
        self._clock = clock or time.time

    def public_path(self, filename: str) -> str:
        return f"{self.public_prefix}/{filename}"

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def save(self, content: bytes, filename: str) -> StoredFile:
        """
        Write content under filename, avoiding collisions.

        An existing file is never overwritten. The temporary file is
        hard-linked under the first free name: filename, then
        '{stem}_{millis}{ext}', then '{stem}_{millis}_{n}{ext}'.

        Raises:
            OSError: directory creation, write or link failed
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(prefix=".", suffix=".tmp", dir=self.output_dir)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            final_path = self._publish(tmp_name, filename)
        finally:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass

        logger.info(f"Saved catalog PDF: {final_path} ({format_file_size(len(content))})")
        return StoredFile(
            name=final_path.name,
            public_path=self.public_path(final_path.name),
            path=final_path.resolve(),
        )

    def _publish(self, tmp_name: str, filename: str) -> Path:
        for name in self._candidate_names(filename):
            path = self.output_dir / name
            try:
                os.link(tmp_name, path)
            except FileExistsError:
                logger.debug(f"Name taken, trying another: {name}")
                continue
            return path
        raise FileExistsError(f"No free filename for {filename} in {self.output_dir}")

    def _candidate_names(self, filename: str) -> Iterator[str]:
        yield filename
        stem, ext = os.path.splitext(filename)
        millis = int(self._clock() * 1000)
        yield f"{stem}_{millis}{ext}"
        for n in range(1, MAX_NAME_ATTEMPTS):
            yield f"{stem}_{millis}_{n}{ext}"

    # ------------------------------------------------------------------
    # Manage
    # ------------------------------------------------------------------

    def list_files(self) -> List[StoredPdf]:
        """All PDFs in the output directory, most recently modified first."""
        if not self.output_dir.exists():
            self.output_dir.mkdir(parents=True, exist_ok=True)
            return []

        entries = []
        for path in self.output_dir.iterdir():
            if not path.is_file() or path.suffix.lower() != ".pdf":
                continue
            stat = path.stat()
            created = getattr(stat, "st_birthtime", stat.st_ctime)
            entries.append(StoredPdf(
                filename=path.name,
                size=stat.st_size,
                size_formatted=format_file_size(stat.st_size),
                created_time=datetime.fromtimestamp(created, tz=timezone.utc),
                modified_time=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
                url=self.public_path(path.name),
            ))

        entries.sort(key=lambda e: e.modified_time, reverse=True)
        return entries

    def delete_files(self, filenames: Iterable[str]) -> DeleteReport:
        """
        Delete PDFs by name, reporting each outcome.

        Names with path components, NUL bytes or a non-.pdf extension are
        refused, as is anything resolving outside the output directory.

        Raises:
            InvalidArgumentError: no filenames given
        """
        names = list(filenames or [])
        if not names:
            raise InvalidArgumentError("No filenames given")

        report = DeleteReport()
        if not self.output_dir.exists():
            for name in names:
                report.add_failure(name, "PDF directory does not exist")
            return report

        root = self.output_dir.resolve()
        for name in names:
            if not self._is_safe_name(name):
                report.add_failure(name, "unsafe filename")
                continue

            path = (self.output_dir / name).resolve()
            if path.parent != root:
                report.add_failure(name, "unsafe path")
                continue

            if not path.is_file():
                report.add_failure(name, "file not found")
                continue

            try:
                path.unlink()
            except OSError as e:
                logger.error(f"Failed to delete {path}: {e}")
                report.add_failure(name, str(e) or "delete failed")
                continue
            report.deleted.append(name)

        logger.info(str(report))
        return report

    @staticmethod
    def _is_safe_name(name: str) -> bool:
        if not isinstance(name, str) or not name:
            return False
        if ".." in name or "/" in name or "\\" in name or "\0" in name:
            return False
        return name.lower().endswith(".pdf")
