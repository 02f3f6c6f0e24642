"""
FastAPI router for image retrieval.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from core.config import Settings
from core.dependencies import get_settings

from . import resolve as resolver

router = APIRouter()


@router.get("/image/{image_filename:path}")
async def get_image(
    image_filename: str,
    settings: Settings = Depends(get_settings),
) -> FileResponse:
    """
    Serve an image by filename, falling back to the default image.
    """
    path = resolver.resolve(image_filename, images_dir=settings.images_dir)
    return FileResponse(path, media_type="image/jpeg")
