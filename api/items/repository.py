"""
Catalog persistence contract.

Two backends implement `CatalogStore`:
- `items.relational.RelationalCatalog`: SQLite table, auto-increment ids.
- `items.document.DocumentCatalog`: one JSON document rewritten per write.

Both assign a stable integer id at creation and store it with the record.
Callers depend only on the protocol; `open_store` picks the backend from
settings.
"""

from __future__ import annotations

from typing import Protocol

from core.config import BACKEND_JSON, BACKEND_SQLITE, Settings

from .schemas import CatalogRecord, NewRecord


class CatalogStore(Protocol):
    async def create(self, record: NewRecord) -> CatalogRecord: ...

    async def list_items(self) -> list[CatalogRecord]: ...

    async def get_by_id(self, item_id: int) -> CatalogRecord: ...

    async def search(self, keyword: str) -> list[CatalogRecord]: ...


def record_matches(record: CatalogRecord, keyword: str) -> bool:
    """
    Case-sensitive substring match over id, name, category and image.
    """
    return any(
        keyword in field
        for field in (str(record.id), record.name, record.category, record.image)
    )


async def open_store(settings: Settings) -> CatalogStore:
    # Imported here so each backend's module only loads when selected.
    if settings.backend == BACKEND_SQLITE:
        from .relational import RelationalCatalog

        store = RelationalCatalog.from_path(
            settings.database_path,
            timeout_s=settings.db_timeout_s,
        )
        await store.init_schema()
        return store

    if settings.backend == BACKEND_JSON:
        from .document import DocumentCatalog

        return DocumentCatalog(settings.items_json_path)

    raise RuntimeError(f"Unsupported catalog backend: {settings.backend}")
