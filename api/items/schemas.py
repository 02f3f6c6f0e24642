"""
Pydantic schemas for catalog items.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class NewRecord(BaseModel):
    """
    An item before the store assigns its id.

    `image` is always a filename produced by `images.ingest`, never raw
    client input.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    category: str
    image: str

    def with_id(self, item_id: int) -> CatalogRecord:
        return CatalogRecord(id=item_id, name=self.name, category=self.category, image=self.image)


class CatalogRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int = Field(..., ge=1)
    name: str
    category: str
    image: str


class ItemListResponse(BaseModel):
    items: list[CatalogRecord]


class MessageResponse(BaseModel):
    message: str
