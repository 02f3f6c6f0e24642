"""
Item "service layer".

Logic that is independent of FastAPI's routing layer:
- Validate submissions and item ids
- Ingest the image before anything is persisted
- Delegate persistence to whichever `CatalogStore` is configured
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

from core.errors import InvalidRequest
from images import ingest, resolve

from .repository import CatalogStore
from .schemas import CatalogRecord, NewRecord


def parse_item_id(raw: str | int) -> int:
    # int() alone would accept "+1", " 1" and "1_0".
    if isinstance(raw, str) and not (raw.isascii() and raw.isdigit()):
        raise InvalidRequest(f"Invalid item id '{raw}'. It must be an integer.")
    try:
        item_id = int(raw)
    except (TypeError, ValueError):
        raise InvalidRequest(f"Invalid item id '{raw}'. It must be an integer.")
    if item_id <= 0:
        raise InvalidRequest(f"Invalid item id '{raw}'. It must be > 0.")
    return item_id


def _required(value: str | None, field: str) -> str:
    value = (value or "").strip()
    if not value:
        raise InvalidRequest(f"Field '{field}' is required.")
    return value


def source_image_path(requested: str, *, source_dir: Path | None) -> Path:
    """
    Map a submitted source path to a `.jpg` inside `source_dir`.

    Source paths are disabled unless a source directory is configured.
    Symlinks are followed before the containment check, so a link inside
    the directory cannot point at a file outside it.
    """
    if source_dir is None:
        raise InvalidRequest("Image source paths are disabled. Upload 'image_file' instead.")
    path = resolve.safe_image_path(source_dir, requested)
    root = os.path.realpath(source_dir)
    if os.path.commonpath([root, os.path.realpath(path)]) != root:
        raise InvalidRequest("Image path escapes its directory.")
    return path


async def submit_item(
    store: CatalogStore,
    *,
    name: str | None,
    category: str | None,
    images_dir: Path,
    image_source_path: str | None = None,
    image_data: bytes | None = None,
    source_dir: Path | None = None,
) -> CatalogRecord:
    """
    Store the image by content hash, then create the catalog record.

    Exactly one of `image_source_path` / `image_data` must be given; a
    source path must name a `.jpg` under `source_dir`. If the image cannot
    be read or written, nothing is persisted. If the store write fails, the
    image file stays behind but is reused by the next submission of the
    same bytes.
    """
    name = _required(name, "name")
    category = _required(category, "category")

    has_path = bool((image_source_path or "").strip())
    if has_path == (image_data is not None):
        raise InvalidRequest("Provide exactly one of 'image' (source path) or 'image_file' (upload).")

    if has_path:
        source = source_image_path(image_source_path.strip(), source_dir=source_dir)
        filename = await asyncio.to_thread(ingest.ingest, source, images_dir=images_dir)
    else:
        filename = await asyncio.to_thread(ingest.ingest_bytes, image_data, images_dir=images_dir)

    return await store.create(NewRecord(name=name, category=category, image=filename))


async def list_items(store: CatalogStore) -> list[CatalogRecord]:
    return await store.list_items()


async def get_item(store: CatalogStore, raw_id: str | int) -> CatalogRecord:
    return await store.get_by_id(parse_item_id(raw_id))


async def search_items(store: CatalogStore, keyword: str | None = "") -> list[CatalogRecord]:
    # Missing keyword behaves like a full listing.
    return await store.search(keyword or "")
