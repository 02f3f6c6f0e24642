"""
Document catalog: the whole collection lives in one JSON file.

Layout: {"items": [{"id": 1, "name": ..., "category": ..., "image": ...}, ...]}

Writes are read-modify-write of the entire document, so they are serialized
through a write gate: a `threading.Lock` for writers in this process plus a
`filelock.FileLock` (`<path>.lock`) for other processes on the same host.
The new document is written to a temporary file and renamed over the old
one; readers skip the gate and always see a complete snapshot, at most one
in-flight write behind.

Documents written before ids were stored have elements whose `id` is
missing, null or 0. Those are read with their 1-based position as id,
and the next write persists explicit ids for every record.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import threading
import uuid
from pathlib import Path
from typing import Any

from filelock import FileLock, Timeout
from pydantic import ValidationError

from core.errors import CorruptStore, NotFound, StorageIOError, StoreUnavailable

from .repository import record_matches
from .schemas import CatalogRecord, NewRecord

DEFAULT_LOCK_TIMEOUT_S = 10.0

logger = logging.getLogger(__name__)


def _parse_document(doc: Any, path: Path) -> list[CatalogRecord]:
    if not isinstance(doc, dict):
        raise CorruptStore(f"{path}: top level must be an object.")

    elements = doc.get("items", [])
    if not isinstance(elements, list):
        raise CorruptStore(f"{path}: 'items' must be a list.")

    records: list[CatalogRecord] = []
    seen: set[int] = set()
    for position, element in enumerate(elements, start=1):
        if not isinstance(element, dict):
            raise CorruptStore(f"{path}: item {position} is not an object.")
        fields = dict(element)
        if not fields.get("id"):
            # Legacy element: id missing, null or 0.
            fields["id"] = position
        try:
            record = CatalogRecord.model_validate(fields)
        except ValidationError as exc:
            raise CorruptStore(f"{path}: item {position} is invalid: {exc}") from exc
        if record.id in seen:
            raise CorruptStore(f"{path}: duplicate item id {record.id}.")
        seen.add(record.id)
        records.append(record)
    return records


def _dump_document(records: list[CatalogRecord]) -> str:
    return json.dumps(
        {"items": [r.model_dump() for r in records]},
        ensure_ascii=False,
        indent=2,
    )


class DocumentCatalog:
    def __init__(self, path: Path | str, *, lock_timeout_s: float = DEFAULT_LOCK_TIMEOUT_S) -> None:
        self.path = Path(path)
        self._write_gate = threading.Lock()
        self._file_lock = FileLock(f"{self.path}.lock", timeout=lock_timeout_s)

    def __repr__(self) -> str:
        return f"DocumentCatalog(path={str(self.path)!r})"

    def _read_collection(self) -> list[CatalogRecord]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            # Nothing written yet.
            return []
        except UnicodeDecodeError as exc:
            raise CorruptStore(f"{self.path} is not UTF-8 text: {exc}") from exc
        except OSError as exc:
            raise StorageIOError(f"Could not read {self.path}: {exc}") from exc

        try:
            doc = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.error("catalog_corrupt path=%s error=%s", self.path, exc)
            raise CorruptStore(f"{self.path} is not valid JSON: {exc}") from exc
        return _parse_document(doc, self.path)

    def _write_collection(self, records: list[CatalogRecord]) -> None:
        data = _dump_document(records)
        tmp = self.path.with_name(f"{self.path.name}.tmp.{uuid.uuid4().hex}")
        try:
            with tmp.open("w", encoding="utf-8") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            tmp.replace(self.path)
        except OSError as exc:
            tmp.unlink(missing_ok=True)
            raise StorageIOError(f"Could not write {self.path}: {exc}") from exc

    def _append(self, record: NewRecord) -> CatalogRecord:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageIOError(f"Could not create {self.path.parent}: {exc}") from exc

        with self._write_gate:
            try:
                with self._file_lock:
                    records = self._read_collection()
                    next_id = max((r.id for r in records), default=0) + 1
                    created = record.with_id(next_id)
                    self._write_collection([*records, created])
            except Timeout as exc:
                raise StoreUnavailable(
                    f"Timed out waiting for {self._file_lock.lock_file}; another writer may be stalled."
                ) from exc
            except OSError as exc:
                # Lock file itself could not be created or opened.
                raise StorageIOError(f"Could not lock {self.path}: {exc}") from exc
        return created

    async def create(self, record: NewRecord) -> CatalogRecord:
        created = await asyncio.to_thread(self._append, record)
        logger.info("item_created backend=json id=%s image=%s", created.id, created.image)
        return created

    async def list_items(self) -> list[CatalogRecord]:
        return await asyncio.to_thread(self._read_collection)

    async def get_by_id(self, item_id: int) -> CatalogRecord:
        for record in await self.list_items():
            if record.id == item_id:
                return record
        raise NotFound(f"Item {item_id} not found.")

    async def search(self, keyword: str) -> list[CatalogRecord]:
        return [r for r in await self.list_items() if record_matches(r, keyword)]
