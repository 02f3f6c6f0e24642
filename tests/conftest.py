from pathlib import Path

import pytest
import pytest_asyncio

from core.config import BACKEND_JSON, BACKEND_SQLITE, Settings
from items.repository import open_store

DEFAULT_IMAGE_BYTES = b"\xff\xd8\xff\xe0default-image"
JACKET_IMAGE_BYTES = b"\xff\xd8\xff\xe0jacket-photo"


@pytest.fixture
def images_dir(tmp_path: Path) -> Path:
    d = tmp_path / "images"
    d.mkdir()
    (d / "default.jpg").write_bytes(DEFAULT_IMAGE_BYTES)
    return d


@pytest.fixture
def fixtures_dir(tmp_path: Path) -> Path:
    d = tmp_path / "fixtures"
    d.mkdir()
    (d / "a.jpg").write_bytes(JACKET_IMAGE_BYTES)
    return d


@pytest.fixture
def make_settings(tmp_path: Path, images_dir: Path):
    def _make(backend: str = BACKEND_SQLITE, **overrides) -> Settings:
        values = dict(
            backend=backend,
            database_path=tmp_path / "db" / "items.db",
            items_json_path=tmp_path / "items.json",
            images_dir=images_dir,
            front_url="http://localhost:3000",
            max_upload_bytes=1024 * 1024,
            db_timeout_s=5.0,
            log_level="INFO",
            port=9000,
        )
        values.update(overrides)
        return Settings(**values)

    return _make


@pytest_asyncio.fixture(params=[BACKEND_SQLITE, BACKEND_JSON])
async def store(request, make_settings):
    """Each test using this fixture runs once per backend."""
    return await open_store(make_settings(request.param))
