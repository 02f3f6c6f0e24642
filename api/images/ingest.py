"""
Content-addressed image storage.

An image's filename is the SHA-256 of its bytes plus `.jpg`, so identical
content always lands at the same path and is stored once. Writes go through
a temporary file in the image directory followed by an atomic rename; a
canonical filename never points at a partially written file.
"""

from __future__ import annotations

import hashlib
import logging
import os
import uuid
from pathlib import Path

from core.errors import StorageIOError

IMAGE_EXTENSION = ".jpg"
DEFAULT_IMAGE_NAME = "default" + IMAGE_EXTENSION

logger = logging.getLogger(__name__)


def content_filename(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest() + IMAGE_EXTENSION


def ensure_image_dir(images_dir: Path) -> Path:
    try:
        images_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise StorageIOError(f"Could not create image directory {images_dir}: {exc}") from exc
    if not (images_dir / DEFAULT_IMAGE_NAME).is_file():
        logger.warning("default_image_missing images_dir=%s", images_dir)
    return images_dir


def _write_atomic(path: Path, data: bytes) -> None:
    tmp = path.with_name(f".{path.name}.tmp.{uuid.uuid4().hex}")
    try:
        with tmp.open("wb") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        tmp.replace(path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


def ingest_bytes(data: bytes, *, images_dir: Path) -> str:
    """
    Store `data` under its content filename and return that filename.

    Repeating the call with the same bytes is a no-op.
    """
    filename = content_filename(data)
    target = images_dir / filename
    if target.is_file():
        logger.debug("image_exists filename=%s", filename)
        return filename

    try:
        _write_atomic(target, data)
    except OSError as exc:
        raise StorageIOError(f"Could not write image {filename}: {exc}") from exc

    logger.info("image_stored filename=%s size_bytes=%s", filename, len(data))
    return filename


def ingest(source_path: str | Path, *, images_dir: Path) -> str:
    """
    Read the image at `source_path` and store it by content hash.

    A read failure raises StorageIOError before anything is written, so no
    record can be created for bytes that were never fully read.
    """
    try:
        data = Path(source_path).read_bytes()
    except OSError as exc:
        raise StorageIOError(f"Could not read image source {source_path}: {exc}") from exc
    return ingest_bytes(data, images_dir=images_dir)
