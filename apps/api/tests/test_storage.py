"""Tests for local upload storage."""

import io

import pytest

from pedidos_api.storage.service import StorageService, UploadTooLarge


def test_creates_upload_dir(tmp_path):
    """The upload directory is created when missing."""
    target = tmp_path / "nested" / "uploads"
    storage = StorageService(str(target))
    assert target.is_dir()
    assert storage.is_writable()


def test_save_and_read_back(storage):
    """Saved bytes land under the stored name."""
    written = storage.save_upload(io.BytesIO(b"hello" * 100000), "1-2.pdf")

    assert written == 500000
    assert storage.path_for("1-2.pdf").read_bytes() == b"hello" * 100000


def test_limit_leaves_no_partial_file(storage):
    """Exceeding the limit removes what was written so far."""
    with pytest.raises(UploadTooLarge):
        storage.save_upload(io.BytesIO(b"x" * 200_000), "big.png", max_bytes=100_000)
    assert list(storage.root.iterdir()) == []


def test_delete(storage):
    """Delete reports whether a file was removed."""
    storage.save_upload(io.BytesIO(b"x"), "a.png")
    assert storage.delete("a.png") is True
    assert storage.delete("a.png") is False
    assert not storage.exists("a.png")


@pytest.mark.parametrize("name", ["../secret", "..", "a/b.png", "a\\b.png", ""])
def test_unsafe_names_are_refused(storage, name):
    """Names cannot escape the upload directory."""
    with pytest.raises(ValueError):
        storage.save_upload(io.BytesIO(b"x"), name)
    with pytest.raises(FileNotFoundError):
        storage.path_for(name)
    assert storage.exists(name) is False


def test_path_for_missing(storage):
    """Missing files raise FileNotFoundError."""
    with pytest.raises(FileNotFoundError):
        storage.path_for("nope.png")


def test_path_for_refuses_partial_files(storage):
    """In-progress ``.part`` files are not exposed."""
    storage.root.joinpath("1-2.png.part").write_bytes(b"half")
    with pytest.raises(FileNotFoundError):
        storage.path_for("1-2.png.part")
