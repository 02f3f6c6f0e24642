"""
FastAPI dependencies for objects created once in the app lifespan.
"""

from __future__ import annotations

from fastapi import Request

from items.repository import CatalogStore

from .config import Settings


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_catalog(request: Request) -> CatalogStore:
    return request.app.state.catalog
