"""
Relational catalog: one SQLite table, one row per item.

Every call opens and closes its own connection through `core.db.Database`;
SQLite's locking serializes concurrent writers.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from core.db import Database
from core.errors import NotFound, StoreUnavailable

from .schemas import CatalogRecord, NewRecord

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS items (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  name TEXT,
  category TEXT,
  image TEXT
);
"""

_COLUMNS = "id, name, category, image"


def _row_to_record(row: dict[str, Any]) -> CatalogRecord:
    return CatalogRecord(
        id=int(row["id"]),
        name=str(row["name"] or ""),
        category=str(row["category"] or ""),
        image=str(row["image"] or ""),
    )


class RelationalCatalog:
    def __init__(self, db: Database) -> None:
        self.db = db

    @classmethod
    def from_path(cls, path: Path | str, *, timeout_s: float = 5.0) -> RelationalCatalog:
        return cls(Database(path, timeout_s=timeout_s))

    async def init_schema(self) -> None:
        """
        Create the items table if it does not exist yet.
        """
        try:
            self.db.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreUnavailable(f"Could not create database directory: {exc}") from exc
        await self.db.executescript(SCHEMA)

    async def create(self, record: NewRecord) -> CatalogRecord:
        item_id = await self.db.insert(
            "INSERT INTO items (name, category, image) VALUES (?, ?, ?)",
            record.name,
            record.category,
            record.image,
        )
        created = record.with_id(item_id)
        logger.info("item_created backend=sqlite id=%s image=%s", created.id, created.image)
        return created

    async def list_items(self) -> list[CatalogRecord]:
        rows = await self.db.fetch_all(f"SELECT {_COLUMNS} FROM items ORDER BY id")
        return [_row_to_record(r) for r in rows]

    async def get_by_id(self, item_id: int) -> CatalogRecord:
        row = await self.db.fetch_one(
            f"SELECT {_COLUMNS} FROM items WHERE id = ?",
            item_id,
        )
        if row is None:
            raise NotFound(f"Item {item_id} not found.")
        return _row_to_record(row)

    async def search(self, keyword: str) -> list[CatalogRecord]:
        """
        Substring match across all four columns, evaluated by SQLite.

        `instr` is case-sensitive and treats `%`/`_` literally, which keeps
        the result identical to `repository.record_matches`.
        """
        rows = await self.db.fetch_all(
            f"""
            SELECT {_COLUMNS}
            FROM items
            WHERE instr(CAST(id AS TEXT), ?1) > 0
               OR instr(COALESCE(name, ''), ?1) > 0
               OR instr(COALESCE(category, ''), ?1) > 0
               OR instr(COALESCE(image, ''), ?1) > 0
            ORDER BY id
            """,
            keyword,
        )
        return [_row_to_record(r) for r in rows]
