import hashlib
import os

import pytest

from core.errors import InvalidRequest, NotFound, StorageIOError
from items import service


def _content_name(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest() + ".jpg"


@pytest.mark.parametrize("raw", ["abc", "1.5", "", "0", "-3", "1_0", "+1", " 1", None])
def test_parse_item_id_rejects_malformed(raw):
    with pytest.raises(InvalidRequest):
        service.parse_item_id(raw)


def test_parse_item_id_accepts_digits():
    assert service.parse_item_id("42") == 42
    assert service.parse_item_id(7) == 7


@pytest.mark.asyncio
async def test_submit_from_source_path(store, fixtures_dir, images_dir):
    created = await service.submit_item(
        store,
        name="jacket",
        category="fashion",
        images_dir=images_dir,
        image_source_path=str(fixtures_dir / "a.jpg"),
        source_dir=fixtures_dir,
    )

    source_bytes = (fixtures_dir / "a.jpg").read_bytes()
    assert created.id == 1
    assert created.image == _content_name(source_bytes)
    assert (images_dir / created.image).read_bytes() == source_bytes
    assert await service.list_items(store) == [created]
    assert await service.get_item(store, "1") == created
    assert await service.search_items(store, "fashion") == [created]
    assert await service.search_items(store, "shoes") == []


@pytest.mark.asyncio
async def test_submit_from_uploaded_bytes(store, images_dir):
    created = await service.submit_item(
        store,
        name="mug",
        category="kitchen",
        images_dir=images_dir,
        image_data=b"mug-bytes",
    )
    assert created.image == _content_name(b"mug-bytes")


@pytest.mark.asyncio
async def test_same_image_for_two_items_is_stored_once(store, fixtures_dir, images_dir):
    source = str(fixtures_dir / "a.jpg")
    first = await service.submit_item(
        store, name="a", category="c", images_dir=images_dir, image_source_path=source,
        source_dir=fixtures_dir,
    )
    second = await service.submit_item(
        store, name="b", category="c", images_dir=images_dir, image_source_path=source,
        source_dir=fixtures_dir,
    )

    assert first.image == second.image
    assert sorted(p.name for p in images_dir.iterdir()) == sorted(["default.jpg", first.image])


@pytest.mark.asyncio
async def test_unreadable_source_persists_nothing(store, tmp_path, images_dir):
    with pytest.raises(StorageIOError):
        await service.submit_item(
            store,
            name="jacket",
            category="fashion",
            images_dir=images_dir,
            image_source_path=str(tmp_path / "nope.jpg"),
            source_dir=tmp_path,
        )
    assert await service.list_items(store) == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "kwargs",
    [
        {"name": "", "category": "c", "image_data": b"x"},
        {"name": "n", "category": "  ", "image_data": b"x"},
        {"name": "n", "category": "c"},
        {"name": "n", "category": "c", "image_data": b"x", "image_source_path": "a.jpg"},
    ],
)
async def test_submit_rejects_invalid_input(store, images_dir, kwargs):
    with pytest.raises(InvalidRequest):
        await service.submit_item(store, images_dir=images_dir, **kwargs)
    assert await service.list_items(store) == []


@pytest.mark.asyncio
async def test_get_item_missing(store):
    with pytest.raises(NotFound):
        await service.get_item(store, "5")


@pytest.mark.asyncio
async def test_search_without_keyword_is_full_listing(store, images_dir):
    await service.submit_item(store, name="a", category="c", images_dir=images_dir, image_data=b"1")
    await service.submit_item(store, name="b", category="d", images_dir=images_dir, image_data=b"2")
    assert await service.search_items(store, None) == await service.list_items(store)


@pytest.mark.parametrize("requested", ["../secret.jpg", "/etc/passwd", "notes.txt", ""])
def test_source_path_must_stay_in_source_dir(fixtures_dir, requested):
    with pytest.raises(InvalidRequest):
        service.source_image_path(requested, source_dir=fixtures_dir)


def test_source_path_rejects_symlink_out_of_source_dir(fixtures_dir, tmp_path):
    outside = tmp_path / "secret.jpg"
    outside.write_bytes(b"secret")
    os.symlink(outside, fixtures_dir / "link.jpg")

    with pytest.raises(InvalidRequest):
        service.source_image_path(str(fixtures_dir / "link.jpg"), source_dir=fixtures_dir)


def test_source_path_disabled_without_source_dir(fixtures_dir):
    with pytest.raises(InvalidRequest):
        service.source_image_path(str(fixtures_dir / "a.jpg"), source_dir=None)


def test_source_path_inside_source_dir(fixtures_dir):
    path = service.source_image_path("a.jpg", source_dir=fixtures_dir)
    assert path.read_bytes() == (fixtures_dir / "a.jpg").read_bytes()
