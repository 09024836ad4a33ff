"""
SQLite implementation of CatalogSource.

Read-only: the database is opened with ``mode=ro`` and each call gets
its own connection, so concurrent exports never share a cursor. Queries
run on the default executor to keep the event loop free.

Expected tables:
    categories(category_id, name)
    products(product_id, name, category_id, price, tags, created_at)
    product_images(image_id, product_id, image_url, image_type, sort_order)
    product_params(param_id, product_id, param_key, param_value, sort_order)
    pdf_config(config_id, pdf_file_company_name, pdf_title_company_name,
               pdf_background_image, products_per_row, is_active, created_at)
    about_us(id, company_name, is_active)
"""

from __future__ import annotations

import asyncio
import sqlite3
from contextlib import contextmanager
from functools import partial
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence

from config.logging_config import get_logger

from .models import (
    Category,
    CompanyProfile,
    ExportConfig,
    ProductImage,
    ProductParam,
    ProductSnapshot,
)
from .protocol import SORT_FIELDS, SORT_ORDERS


logger = get_logger(__name__)

# Whitelisted ORDER BY columns
_SORT_COLUMNS = {
    "created_at": "p.created_at",
    "price": "p.price",
    "name": "p.name",
}

_PRODUCT_SELECT = """
    SELECT p.product_id, p.name, p.category_id, p.price, p.tags, p.created_at,
           c.name AS category_name
    FROM products p
    LEFT JOIN categories c ON c.category_id = p.category_id
"""

# Stay well below SQLITE_MAX_VARIABLE_NUMBER on old builds
_IN_CHUNK = 500


class SQLiteCatalogSource:
    """CatalogSource reading a SQLite catalog database."""

    def __init__(self, db_path: str | Path | None = None):
        if db_path is None:
            from config.settings import settings
            db_path = settings.catalog_db_path
        self.db_path = Path(db_path)

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(f"{self.db_path.resolve().as_uri()}?mode=ro", uri=True)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    async def _run(self, func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(func, *args))

    # ------------------------------------------------------------------
    # CatalogSource
    # ------------------------------------------------------------------

    async def get_active_export_config(self) -> Optional[ExportConfig]:
        return await self._run(self._get_active_export_config)

    async def get_company_profile(self) -> Optional[CompanyProfile]:
        return await self._run(self._get_company_profile)

    async def get_category(self, category_id: int) -> Optional[Category]:
        return await self._run(self._get_category, category_id)

    async def list_products(self, category_id: Optional[int] = None) -> List[ProductSnapshot]:
        return await self._run(self._list_products, category_id)

    async def search_products(
        self,
        keyword: str,
        sort_field: str = "created_at",
        sort_order: str = "desc",
    ) -> List[ProductSnapshot]:
        if sort_field not in SORT_FIELDS:
            raise ValueError(f"Unsupported sort field: {sort_field}")
        if sort_order.lower() not in SORT_ORDERS:
            raise ValueError(f"Unsupported sort order: {sort_order}")
        return await self._run(self._search_products, keyword, sort_field, sort_order.lower())

    # ------------------------------------------------------------------
    # Blocking implementations
    # ------------------------------------------------------------------

    def _get_active_export_config(self) -> Optional[ExportConfig]:
        with self.connection() as conn:
            row = conn.execute(
                "SELECT * FROM pdf_config WHERE is_active = 1 "
                "ORDER BY created_at DESC LIMIT 1"
            ).fetchone()
        if row is None:
            return None
        return ExportConfig(
            file_company_name=row["pdf_file_company_name"],
            title_company_name=row["pdf_title_company_name"],
            background_image=row["pdf_background_image"],
            products_per_row=row["products_per_row"] or 2,
            is_active=bool(row["is_active"]),
        )

    def _get_company_profile(self) -> Optional[CompanyProfile]:
        with self.connection() as conn:
            row = conn.execute(
                "SELECT company_name FROM about_us WHERE is_active = 1 "
                "ORDER BY id DESC LIMIT 1"
            ).fetchone()
        if row is None:
            return None
        return CompanyProfile(company_name=row["company_name"])

    def _get_category(self, category_id: int) -> Optional[Category]:
        with self.connection() as conn:
            row = conn.execute(
                "SELECT category_id, name FROM categories WHERE category_id = ?",
                (category_id,),
            ).fetchone()
        if row is None:
            return None
        return Category(category_id=row["category_id"], name=row["name"])

    def _list_products(self, category_id: Optional[int]) -> List[ProductSnapshot]:
        sql = _PRODUCT_SELECT
        params: tuple = ()
        if category_id is not None:
            sql += " WHERE p.category_id = ?"
            params = (category_id,)
        sql += " ORDER BY p.created_at DESC, p.product_id DESC"

        with self.connection() as conn:
            rows = conn.execute(sql, params).fetchall()
            return self._build_snapshots(conn, rows)

    def _search_products(self, keyword: str, sort_field: str, sort_order: str) -> List[ProductSnapshot]:
        column = _SORT_COLUMNS[sort_field]
        direction = "ASC" if sort_order == "asc" else "DESC"
        sql = (
            f"{_PRODUCT_SELECT} WHERE p.name LIKE ? OR c.name LIKE ? OR p.tags LIKE ? "
            f"ORDER BY {column} {direction}, p.product_id {direction}"
        )
        with self.connection() as conn:
            pattern = f"%{keyword.strip()}%"
            rows = conn.execute(sql, (pattern, pattern, pattern)).fetchall()
            return self._build_snapshots(conn, rows)

    def _build_snapshots(
        self,
        conn: sqlite3.Connection,
        rows: Sequence[sqlite3.Row],
    ) -> List[ProductSnapshot]:
        ids = [row["product_id"] for row in rows]
        images = self._fetch_children(
            conn,
            "SELECT product_id, image_url, image_type, sort_order FROM product_images "
            "WHERE product_id IN ({}) ORDER BY sort_order, image_id",
            ids,
        )
        params = self._fetch_children(
            conn,
            "SELECT product_id, param_key, param_value FROM product_params "
            "WHERE product_id IN ({}) ORDER BY sort_order, param_id",
            ids,
        )

        snapshots = []
        for row in rows:
            pid = row["product_id"]
            snapshots.append(ProductSnapshot(
                product_id=pid,
                name=row["name"] or "",
                category_name=row["category_name"],
                category_id=row["category_id"],
                price=row["price"],
                tags=row["tags"],
                created_at=row["created_at"],
                images=tuple(
                    ProductImage(
                        image_url=r["image_url"],
                        image_type=r["image_type"] if r["image_type"] in ("main", "sub") else "sub",
                        sort_order=r["sort_order"] or 0,
                    )
                    for r in images.get(pid, [])
                ),
                params=tuple(
                    ProductParam(param_key=r["param_key"], param_value=r["param_value"])
                    for r in params.get(pid, [])
                ),
            ))
        logger.debug(f"Loaded {len(snapshots)} product snapshots from {self.db_path}")
        return snapshots

    def _fetch_children(
        self,
        conn: sqlite3.Connection,
        sql_template: str,
        ids: List[int],
    ) -> Dict[int, List[sqlite3.Row]]:
        grouped: Dict[int, List[sqlite3.Row]] = {}
        for start in range(0, len(ids), _IN_CHUNK):
            chunk = ids[start:start + _IN_CHUNK]
            placeholders = ",".join("?" * len(chunk))
            for row in conn.execute(sql_template.format(placeholders), chunk).fetchall():
                grouped.setdefault(row["product_id"], []).append(row)
        return grouped
