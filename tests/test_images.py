import hashlib
from pathlib import Path

import pytest

from core.errors import InvalidRequest, StorageIOError
from images import ingest, resolve


def _stored_images(images_dir: Path) -> list[str]:
    return sorted(p.name for p in images_dir.iterdir() if p.name != "default.jpg")


def test_content_filename_is_sha256_hex_with_jpg_suffix():
    data = b"some image bytes"
    assert ingest.content_filename(data) == hashlib.sha256(data).hexdigest() + ".jpg"


def test_ingest_same_content_twice_stores_one_file(tmp_path, images_dir):
    first = tmp_path / "first.jpg"
    second = tmp_path / "second.jpg"
    first.write_bytes(b"identical")
    second.write_bytes(b"identical")

    name_a = ingest.ingest(first, images_dir=images_dir)
    name_b = ingest.ingest(second, images_dir=images_dir)

    assert name_a == name_b
    assert _stored_images(images_dir) == [name_a]
    assert (images_dir / name_a).read_bytes() == b"identical"


def test_ingest_different_content_gets_different_names(tmp_path, images_dir):
    a = ingest.ingest_bytes(b"one", images_dir=images_dir)
    b = ingest.ingest_bytes(b"two", images_dir=images_dir)
    assert a != b
    assert _stored_images(images_dir) == sorted([a, b])


def test_ingest_missing_source_raises_and_writes_nothing(tmp_path, images_dir):
    with pytest.raises(StorageIOError):
        ingest.ingest(tmp_path / "missing.jpg", images_dir=images_dir)
    assert _stored_images(images_dir) == []


def test_ingest_directory_source_raises(tmp_path, images_dir):
    with pytest.raises(StorageIOError):
        ingest.ingest(tmp_path, images_dir=images_dir)


def test_ingest_bytes_leaves_no_temp_file_on_write_failure(monkeypatch, images_dir):
    def boom(fd):
        raise OSError("disk full")

    monkeypatch.setattr(ingest.os, "fsync", boom)
    with pytest.raises(StorageIOError):
        ingest.ingest_bytes(b"payload", images_dir=images_dir)
    assert _stored_images(images_dir) == []


def test_ensure_image_dir_creates_directory(tmp_path):
    target = tmp_path / "nested" / "images"
    assert ingest.ensure_image_dir(target) == target
    assert target.is_dir()


def test_resolve_existing_image(images_dir):
    name = ingest.ingest_bytes(b"stored", images_dir=images_dir)
    path = resolve.resolve(name, images_dir=images_dir)
    assert path.read_bytes() == b"stored"


def test_resolve_missing_image_falls_back_to_default(images_dir):
    path = resolve.resolve("0" * 64 + ".jpg", images_dir=images_dir)
    assert path.name == "default.jpg"
    assert path.is_file()


@pytest.mark.parametrize("name", ["photo.png", "photo.jpeg", "photo", "photo.jpg.txt", ""])
def test_resolve_rejects_wrong_extension(name, images_dir):
    with pytest.raises(InvalidRequest):
        resolve.resolve(name, images_dir=images_dir)


def test_resolve_rejects_extension_before_touching_filesystem(monkeypatch, images_dir):
    def fail(*args, **kwargs):
        raise AssertionError("filesystem accessed")

    with monkeypatch.context() as m:
        m.setattr(Path, "is_file", fail)
        m.setattr(Path, "exists", fail)
        with pytest.raises(InvalidRequest):
            resolve.resolve("notes.txt", images_dir=images_dir)


@pytest.mark.parametrize(
    "name",
    ["../secret.jpg", "../../etc/passwd.jpg", "sub/../../secret.jpg", "/etc/secret.jpg", "..\\secret.jpg"],
)
def test_resolve_rejects_traversal(name, tmp_path, images_dir):
    (tmp_path / "secret.jpg").write_bytes(b"secret")
    with pytest.raises(InvalidRequest):
        resolve.resolve(name, images_dir=images_dir)


def test_resolve_normalizes_segments_that_stay_inside(images_dir):
    name = ingest.ingest_bytes(b"inside", images_dir=images_dir)
    path = resolve.resolve(f"sub/../{name}", images_dir=images_dir)
    assert path.read_bytes() == b"inside"


def test_resolve_rejects_nul_byte(images_dir):
    with pytest.raises(InvalidRequest):
        resolve.resolve("a\x00.jpg", images_dir=images_dir)
