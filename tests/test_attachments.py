import os

import pytest

from catalog_service.attachments import ImageStore, Upload
from catalog_service.errors import ValidationError
from helpers import GIF_BYTES, JPEG_BYTES, PNG_BYTES


@pytest.fixture
def store(tmp_path):
    return ImageStore(str(tmp_path / "uploads"))


def test_store_writes_unique_files_and_returns_urls(store):
    refs = store.store(
        [
            Upload("a.png", "image/png", PNG_BYTES),
            Upload("b.JPG", "image/jpeg", JPEG_BYTES),
            Upload("c.gif", "image/gif", GIF_BYTES),
        ],
        base_url="https://cdn.example.com/",
    )

    assert len(set(refs)) == 3
    assert all(r.startswith("https://cdn.example.com/uploads/product-") for r in refs)
    assert refs[1].endswith(".jpg")
    with open(store.path_for(refs[0]), "rb") as f:
        assert f.read() == PNG_BYTES


def test_store_without_base_url_returns_relative_paths(store):
    [ref] = store.store([Upload("a.png", "image/png", PNG_BYTES)])
    assert ref.startswith("/uploads/product-")
    assert os.path.exists(store.path_for(ref))


@pytest.mark.parametrize(
    "upload",
    [
        Upload("notes.txt", "text/plain", b"hello"),
        Upload("notes.png", "text/plain", PNG_BYTES),
        Upload("photo.bmp", "image/png", PNG_BYTES),
        Upload("fake.png", "image/png", b"just some text pretending"),
        Upload("", "image/png", PNG_BYTES),
    ],
)
def test_validate_rejects_non_images(store, upload):
    with pytest.raises(ValidationError):
        store.validate(upload)


def test_validate_rejects_oversized_files(tmp_path):
    store = ImageStore(str(tmp_path), max_bytes=16)
    with pytest.raises(ValidationError, match="limit"):
        store.validate(Upload("big.png", "image/png", PNG_BYTES))


def test_store_is_all_or_nothing(store):
    with pytest.raises(ValidationError):
        store.store(
            [
                Upload("ok.png", "image/png", PNG_BYTES),
                Upload("bad.png", "image/png", b"nope"),
            ]
        )
    assert not os.path.exists(store.root) or os.listdir(store.root) == []


def test_reclaim_accepts_urls_and_paths(store):
    url_ref, path_ref = store.store(
        [Upload("a.png", "image/png", PNG_BYTES), Upload("b.png", "image/png", PNG_BYTES)],
        base_url="http://localhost:5000",
    )
    relative = "/uploads/" + os.path.basename(path_ref)

    assert store.reclaim(url_ref) is True
    assert store.reclaim(relative) is True
    assert os.listdir(store.root) == []


def test_reclaim_tolerates_missing_files(store):
    assert store.reclaim("http://localhost/uploads/product-1-2.png") is False
    assert store.reclaim("") is False


def test_reclaim_stays_inside_root(store, tmp_path):
    outside = tmp_path / "keep.png"
    outside.write_bytes(PNG_BYTES)

    assert store.reclaim("/uploads/../keep.png") is False
    assert outside.exists()
