"""Local disk storage for payment-proof uploads.

Files live flat inside a single upload directory. Callers only ever deal in
stored file names, never filesystem paths, so a name cannot escape the
directory.
"""

import logging
import os
from pathlib import Path
from typing import BinaryIO, Optional

from pedidos_api.settings import get_settings

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class UploadTooLarge(Exception):
    """Raised when a stream exceeds the allowed number of bytes."""

    def __init__(self, limit: int):
        super().__init__(f"Upload exceeds {limit} bytes")
        self.limit = limit


class StorageService:
    """Disk storage service for uploaded files."""

    def __init__(self, upload_dir: Optional[str] = None):
        """Initialize storage, creating the upload directory if absent."""
        self.root = Path(upload_dir or get_settings().upload_dir).resolve()
        self.root.mkdir(parents=True, exist_ok=True)
        logger.info(f"Upload storage at {self.root}")

    def _resolve(self, stored_name: str) -> Path:
        """Map a stored name to a path inside the upload directory."""
        if not stored_name or stored_name in (".", "..") or "/" in stored_name or "\\" in stored_name:
            raise ValueError(f"Invalid stored file name: {stored_name!r}")
        path = (self.root / stored_name).resolve()
        if path.parent != self.root:
            raise ValueError(f"Invalid stored file name: {stored_name!r}")
        return path

    def save_upload(self, stream: BinaryIO, stored_name: str, max_bytes: Optional[int] = None) -> int:
        """
        Write a stream to storage under the given name.

        Bytes go to a temporary ``.part`` file which is renamed once the
        stream is fully written, so a rejected or failed upload leaves
        nothing behind.

        Args:
            stream: Binary file-like object positioned at the start
            stored_name: Final file name inside the upload directory
            max_bytes: Optional size limit

        Returns:
            Number of bytes written

        Raises:
            UploadTooLarge: If the stream exceeds max_bytes
        """
        target = self._resolve(stored_name)
        partial = target.with_name(target.name + ".part")
        written = 0
        try:
            with open(partial, "wb") as out:
                while True:
                    chunk = stream.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    if max_bytes is not None and written > max_bytes:
                        raise UploadTooLarge(max_bytes)
                    out.write(chunk)
                out.flush()
                os.fsync(out.fileno())
            os.replace(partial, target)
        except BaseException:
            partial.unlink(missing_ok=True)
            raise

        logger.debug(f"Stored upload: {stored_name} ({written} bytes)")
        return written

    def delete(self, stored_name: str) -> bool:
        """Delete a stored file. Returns False if it did not exist."""
        path = self._resolve(stored_name)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        logger.debug(f"Deleted upload: {stored_name}")
        return True

    def exists(self, stored_name: str) -> bool:
        """Check if a stored file exists."""
        try:
            return self._resolve(stored_name).is_file()
        except ValueError:
            return False

    def path_for(self, stored_name: str) -> Path:
        """
        Get the filesystem path of a stored file.

        Raises:
            FileNotFoundError: If the name is invalid or the file is absent
        """
        if stored_name.endswith(".part"):
            # Uploads still being written are not visible
            raise FileNotFoundError(stored_name)
        try:
            path = self._resolve(stored_name)
        except ValueError:
            raise FileNotFoundError(stored_name)
        if not path.is_file():
            raise FileNotFoundError(stored_name)
        return path

    def is_writable(self) -> bool:
        """Check that the upload directory exists and is writable."""
        return self.root.is_dir() and os.access(self.root, os.W_OK)
