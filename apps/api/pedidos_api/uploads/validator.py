"""Upload validation: type allow-list, size limit and storage naming."""

import logging
import os
import random
import re
import time
from typing import Optional

from pedidos_api.errors import UploadRejected
from pedidos_api.models import UploadCandidate, UploadDescriptor
from pedidos_api.storage.service import StorageService, UploadTooLarge
from pedidos_api.utils.metrics import upload_rejections

logger = logging.getLogger(__name__)

ALLOWED_TYPES = re.compile(r"jpeg|jpg|png|gif|pdf|webp")
DEFAULT_MAX_BYTES = 10 * 1024 * 1024


def generate_stored_name(original_name: str) -> str:
    """Build a unique storage name: ``<epoch ms>-<random int><ext>``."""
    extension = os.path.splitext(original_name)[1]
    return f"{int(time.time() * 1000)}-{random.randrange(1_000_000_000)}{extension}"


class UploadValidator:
    """Accept or reject incoming files before they become part of an order."""

    def __init__(self, storage: StorageService, max_bytes: Optional[int] = None):
        """Initialize validator."""
        self.storage = storage
        self.max_bytes = max_bytes or DEFAULT_MAX_BYTES

    def check_type(self, filename: str, content_type: str) -> None:
        """Require both the extension and the declared content type to be allowed."""
        extension = os.path.splitext(filename or "")[1].lower().lstrip(".")
        ext_ok = ALLOWED_TYPES.fullmatch(extension) is not None
        mime_ok = bool(content_type) and ALLOWED_TYPES.search(content_type.lower()) is not None
        if not (ext_ok and mime_ok):
            upload_rejections.labels(reason="type").inc()
            raise UploadRejected("Solo imágenes o PDFs", reason="type")

    def check_declared_size(self, declared_size: Optional[int]) -> None:
        """Reject early when the client already told us the file is too big."""
        if declared_size is not None and declared_size > self.max_bytes:
            upload_rejections.labels(reason="size").inc()
            raise UploadRejected(self._size_message(), reason="size")

    def accept(self, candidate: UploadCandidate) -> UploadDescriptor:
        """
        Validate a candidate and persist its bytes.

        Returns:
            Descriptor of the stored file

        Raises:
            UploadRejected: If the type or size is not acceptable
        """
        self.check_type(candidate.filename, candidate.content_type)
        self.check_declared_size(candidate.declared_size)

        stored_name = generate_stored_name(candidate.filename)
        try:
            size = self.storage.save_upload(candidate.stream, stored_name, max_bytes=self.max_bytes)
        except UploadTooLarge:
            upload_rejections.labels(reason="size").inc()
            raise UploadRejected(self._size_message(), reason="size")

        logger.info(f"Accepted upload {candidate.filename!r} as {stored_name} ({size} bytes)")
        return UploadDescriptor(
            stored_file_name=stored_name,
            original_file_name=candidate.filename,
            size_bytes=size,
            content_type=candidate.content_type,
        )

    def _size_message(self) -> str:
        return f"El archivo supera el máximo de {self.max_bytes // (1024 * 1024)} MB"
