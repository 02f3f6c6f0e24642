"""
FastAPI router for catalog item endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from core.config import Settings
from core.dependencies import get_catalog, get_settings
from images import uploads

from . import service
from .repository import CatalogStore
from .schemas import CatalogRecord, ItemListResponse, MessageResponse

router = APIRouter()


@router.get("/", response_model=MessageResponse)
async def root() -> dict:
    return {"message": "Hello, world!"}


@router.get("/items", response_model=ItemListResponse)
async def list_items(store: CatalogStore = Depends(get_catalog)) -> dict:
    items = await service.list_items(store)
    return {"items": items}


@router.post("/items", response_model=CatalogRecord)
async def add_item(
    name: str = Form(""),
    category: str = Form(""),
    image: str | None = Form(None),
    image_file: UploadFile | None = File(None),
    store: CatalogStore = Depends(get_catalog),
    settings: Settings = Depends(get_settings),
) -> CatalogRecord:
    """
    Create an item from form fields.

    The image comes either from an uploaded `image_file` or, when
    IMAGE_SOURCE_DIR is configured, from `image`: a `.jpg` path inside
    that directory.
    """
    image_data = None
    if image_file is not None:
        uploads.validate_upload(image_file)
        image_data = await uploads.read_upload_bytes(image_file, max_bytes=settings.max_upload_bytes)

    return await service.submit_item(
        store,
        name=name,
        category=category,
        images_dir=settings.images_dir,
        image_source_path=image,
        image_data=image_data,
        source_dir=settings.image_source_dir,
    )


@router.get("/items/{item_id}", response_model=CatalogRecord)
async def get_item_detail(
    item_id: str,
    store: CatalogStore = Depends(get_catalog),
) -> CatalogRecord:
    # Taken as str so malformed ids get our 400 instead of a 422.
    return await service.get_item(store, item_id)


@router.get("/search", response_model=ItemListResponse)
async def search_items(
    keyword: str = Query(default=""),
    store: CatalogStore = Depends(get_catalog),
) -> dict:
    items = await service.search_items(store, keyword)
    return {"items": items}
