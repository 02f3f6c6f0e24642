"""
Multipart image uploads.

Uploads are an alternative to submitting a local source path: the bytes are
read here (with a size limit) and handed to `ingest.ingest_bytes`.
"""

from __future__ import annotations

from pathlib import Path

from fastapi import HTTPException, UploadFile

from core.errors import InvalidRequest

ALLOWED_EXTENSIONS = {".jpg", ".jpeg"}


def _file_ext(filename: str) -> str:
    return Path(filename).suffix.lower()


def validate_upload(file: UploadFile) -> str:
    """
    Check an uploaded image's filename and return its lowercased suffix.

    Only `.jpg`/`.jpeg` names pass. Browsers send unreliable image content
    types, so the suffix is the deciding signal; the stored name is the
    content hash either way.
    """
    if not file.filename:
        raise InvalidRequest("Uploaded image has no filename.")

    ext = _file_ext(file.filename)
    if ext not in ALLOWED_EXTENSIONS:
        raise InvalidRequest(
            f"Image upload must be one of {sorted(ALLOWED_EXTENSIONS)}, got '{ext}'."
        )
    return ext


async def read_upload_bytes(file: UploadFile, max_bytes: int) -> bytes:
    """
    Buffer an image upload, aborting with 413 once it passes `max_bytes`.
    """
    read_size = 256 * 1024
    data = bytearray()

    while True:
        chunk = await file.read(read_size)
        if not chunk:
            break
        data.extend(chunk)
        if len(data) > max_bytes:
            raise HTTPException(
                status_code=413,
                detail=f"Image exceeds the {max_bytes}-byte upload limit.",
            )

    if not data:
        raise InvalidRequest("Uploaded image is empty.")
    return bytes(data)
