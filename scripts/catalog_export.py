#!/usr/bin/env python3
"""
CLI entry point for catalog PDF export and file management.

Usage:
    python -m scripts.catalog_export export --snapshot catalog.json
    python -m scripts.catalog_export export --db data/catalog.db --category 3
    python -m scripts.catalog_export export --snapshot catalog.json --search ring --sort price --order asc
    python -m scripts.catalog_export list
    python -m scripts.catalog_export delete old-1.pdf old-2.pdf
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

# Ensure project root is on path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Catalog PDF Export")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True)

    export = sub.add_parser("export", help="Generate a catalog PDF")
    source = export.add_mutually_exclusive_group()
    source.add_argument("--snapshot", type=Path, help="JSON catalog snapshot")
    source.add_argument("--db", type=Path, help="SQLite catalog database (default: CATALOG_DB_PATH)")
    scope = export.add_mutually_exclusive_group()
    scope.add_argument("--category", type=int, help="Export one category by id")
    scope.add_argument("--search", metavar="KEYWORD", help="Export products whose name matches")
    export.add_argument("--sort", default="created_at", help="Search sort field: created_at, price, name")
    export.add_argument("--order", default="desc", help="Search sort order: asc, desc")
    export.add_argument("--lang", default=None, help="Label language: en, zh")
    export.add_argument("--output-dir", type=Path, default=None, help="Override PDF_OUTPUT_DIR")

    list_cmd = sub.add_parser("list", help="List generated PDFs, newest first")
    list_cmd.add_argument("--output-dir", type=Path, default=None)
    list_cmd.add_argument("--json", action="store_true", help="Print JSON")

    delete = sub.add_parser("delete", help="Delete generated PDFs by filename")
    delete.add_argument("filenames", nargs="+")
    delete.add_argument("--output-dir", type=Path, default=None)

    return parser


def run_export(args) -> int:
    from core.catalog import InMemoryCatalogSource, SQLiteCatalogSource
    from core.export import CatalogExportError, CatalogExportService, PdfFileStore

    if args.snapshot:
        source = InMemoryCatalogSource.from_json(args.snapshot)
    else:
        source = SQLiteCatalogSource(args.db)

    service = CatalogExportService(
        source,
        store=PdfFileStore(args.output_dir),
        language=args.lang,
    )

    try:
        if args.category is not None:
            result = asyncio.run(service.export_by_category(args.category))
        elif args.search is not None:
            result = asyncio.run(service.export_by_search(args.search, args.sort, args.order))
        else:
            result = asyncio.run(service.export_all())
    except CatalogExportError as e:
        print(f"Export failed: {e}", file=sys.stderr)
        return 1

    print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    print(f"Written: {result.file_path} ({result.product_count} products, {result.page_count} pages)")
    return 0


def run_list(args) -> int:
    from core.export import PdfFileStore

    files = PdfFileStore(args.output_dir).list_files()
    if args.json:
        print(json.dumps([f.to_dict() for f in files], ensure_ascii=False, indent=2))
        return 0

    print(f"{len(files)} PDF file(s)")
    for f in files:
        print(f"  {f.modified_time:%Y-%m-%d %H:%M:%S}  {f.size_formatted:>10}  {f.filename}")
    return 0


def run_delete(args) -> int:
    from core.export import PdfFileStore

    report = PdfFileStore(args.output_dir).delete_files(args.filenames)
    print(report)
    for name in report.deleted:
        print(f"  deleted: {name}")
    if report.failed:
        print(f"\nFailures ({len(report.failed)}):")
        for failure in report.failed:
            print(f"  - {failure['filename']}: {failure['reason']}")
    return 0 if report.all_succeeded else 1


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    from config.logging_config import setup_logging
    setup_logging(level=args.log_level)

    if args.command == "export":
        return run_export(args)
    if args.command == "list":
        return run_list(args)
    return run_delete(args)


if __name__ == "__main__":
    sys.exit(main())
