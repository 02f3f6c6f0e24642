"""
Catalog error kinds.

Core code raises these; only the HTTP layer (`api/main.py`) turns them into
responses. Low-level errors (OSError, JSON decode, sqlite3) are chained with
`raise ... from exc` so the underlying cause stays in the logs.
"""

from __future__ import annotations


class CatalogError(RuntimeError):
    pass


class StorageIOError(CatalogError):
    """Source image or store file could not be read or written."""


class StoreUnavailable(CatalogError):
    """The backing store could not be opened or queried."""


class CorruptStore(CatalogError):
    """Persisted catalog data failed to parse."""


class NotFound(CatalogError):
    pass


class InvalidRequest(CatalogError):
    pass
