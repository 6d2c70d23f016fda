"""Tests for upload validation and naming."""

import io
import os
import re
from unittest.mock import patch

import pytest

from pedidos_api.errors import UploadRejected
from pedidos_api.models import UploadCandidate
from pedidos_api.uploads.validator import UploadValidator, generate_stored_name


@pytest.fixture
def validator(storage):
    """Validator with the default 10 MiB limit."""
    return UploadValidator(storage)


def _candidate(name="proof.png", content_type="image/png", data=b"data", declared_size=None):
    return UploadCandidate(
        filename=name,
        content_type=content_type,
        stream=io.BytesIO(data),
        declared_size=declared_size,
    )


@pytest.mark.parametrize(
    "name, content_type",
    [
        ("proof.png", "image/png"),
        ("PROOF.JPG", "image/jpeg"),
        ("scan.jpeg", "image/jpeg"),
        ("anim.gif", "image/gif"),
        ("photo.webp", "image/webp"),
        ("receipt.pdf", "application/pdf"),
    ],
)
def test_allowed_types_are_accepted(validator, storage, name, content_type):
    """Allow-listed extension and content type are stored."""
    descriptor = validator.accept(_candidate(name, content_type, b"abc"))

    assert descriptor.original_file_name == name
    assert descriptor.size_bytes == 3
    assert descriptor.content_type == content_type
    assert descriptor.stored_file_name.endswith(os.path.splitext(name)[1])
    assert storage.exists(descriptor.stored_file_name)


@pytest.mark.parametrize(
    "name, content_type",
    [
        ("notes.txt", "text/plain"),
        ("proof.png", "application/octet-stream"),
        ("proof.exe", "image/png"),
        ("proof", "image/png"),
        ("proof.png", ""),
    ],
)
def test_disallowed_types_are_rejected(validator, storage, name, content_type):
    """Neither signal alone is trusted."""
    with pytest.raises(UploadRejected) as exc_info:
        validator.accept(_candidate(name, content_type))
    assert exc_info.value.reason == "type"
    assert os.listdir(storage.root) == []


def test_oversized_stream_is_rejected_and_not_persisted(storage):
    """Bytes beyond the limit abort the write and leave nothing on disk."""
    validator = UploadValidator(storage, max_bytes=100)

    with pytest.raises(UploadRejected) as exc_info:
        validator.accept(_candidate(data=b"x" * 101))

    assert exc_info.value.reason == "size"
    assert os.listdir(storage.root) == []


def test_declared_size_rejected_before_reading(storage):
    """A declared size above the limit is rejected without touching storage."""
    validator = UploadValidator(storage, max_bytes=100)
    candidate = _candidate(data=b"x", declared_size=1000)

    with patch.object(storage, "save_upload") as save:
        with pytest.raises(UploadRejected):
            validator.accept(candidate)
    save.assert_not_called()


def test_default_limit_is_ten_mebibytes(validator):
    """Default limit matches the documented 10 MiB."""
    assert validator.max_bytes == 10 * 1024 * 1024


def test_stored_name_format():
    """Stored names combine a millisecond timestamp, a random int and the extension."""
    name = generate_stored_name("My Proof.Png")
    assert re.fullmatch(r"\d{13}-\d{1,9}\.Png", name)


def test_stored_names_do_not_collide():
    """Names generated in the same millisecond still differ."""
    with patch("pedidos_api.uploads.validator.time.time", return_value=1_700_000_000.0):
        names = {generate_stored_name("a.png") for _ in range(200)}
    assert len(names) > 190
