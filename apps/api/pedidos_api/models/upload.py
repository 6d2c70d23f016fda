"""Upload candidate and accepted descriptor."""

from dataclasses import dataclass
from typing import BinaryIO, Optional


@dataclass
class UploadCandidate:
    """An incoming file as declared by the client."""

    filename: str
    content_type: str
    stream: BinaryIO
    declared_size: Optional[int] = None


@dataclass(frozen=True)
class UploadDescriptor:
    """An upload that passed validation and was written to storage."""

    stored_file_name: str
    original_file_name: str
    size_bytes: int
    content_type: str
