"""Manages physical file bytes on disk under a single root directory."""

import os
import re
import secrets
import time
from pathlib import Path
from typing import BinaryIO, Iterator, List, Optional

from common.constants import READ_PIECE_SIZE_BYTES
from common.logging_config import get_logger
from server.exceptions import (
    BlobNotFoundError,
    PayloadTooLargeError,
    StorageError,
    StorageWriteError,
    ValidationError,
)

logger = get_logger(__name__)

_EXTENSION_RE = re.compile(r"^\.[A-Za-z0-9]{1,16}$")


class BlobStore:
    """
    Blob storage addressed by server-generated stored filenames.

    Nothing outside this class reads or writes files under ``root``.
    """

    def __init__(self, root: str, piece_size: int = READ_PIECE_SIZE_BYTES):
        self.root = Path(root).resolve()
        self.piece_size = piece_size
        self.root.mkdir(parents=True, exist_ok=True)

    def path_for(self, stored_name: str) -> Path:
        """
        Get file path for a stored name.

        Args:
            stored_name: Server-generated blob name

        Returns:
            Path object inside the root directory

        Raises:
            ValidationError: If the name is empty or escapes the root
        """
        if not stored_name or stored_name in (".", "..") or "/" in stored_name or "\\" in stored_name:
            raise ValidationError(f"Invalid stored filename: {stored_name!r}")

        path = self.root / stored_name
        if path.resolve().parent != self.root:
            raise ValidationError(f"Invalid stored filename: {stored_name!r}")
        return path

    def allocate_name(self, original_name: str) -> str:
        """
        Produce a fresh stored name: ``<epoch millis>-<random><ext>``.

        The original extension is kept (for content-type hints) when it is a
        short alphanumeric suffix. Nothing is reserved on disk; ``write_blob``
        uses exclusive create so a residual collision fails instead of
        overwriting.

        Args:
            original_name: User-supplied filename

        Returns:
            Stored filename not currently present under the root
        """
        extension = os.path.splitext(os.path.basename(original_name or ""))[1]
        if not _EXTENSION_RE.match(extension):
            extension = ""

        while True:
            stored_name = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{extension}"
            if not (self.root / stored_name).exists():
                return stored_name
            logger.debug(f"Stored name collision, redrawing: {stored_name}")

    def write_blob(self, stored_name: str, stream: BinaryIO, max_bytes: Optional[int] = None) -> int:
        """
        Stream data to disk.

        Args:
            stored_name: Name from ``allocate_name``
            stream: Binary file-like object to read from
            max_bytes: Optional ceiling; exceeding it aborts the write

        Returns:
            Number of bytes written

        Raises:
            PayloadTooLargeError: If the stream is larger than max_bytes
            StorageWriteError: If the write operation fails
        """
        path = self.path_for(stored_name)
        written = 0

        try:
            with open(path, "xb") as out:
                while True:
                    piece = stream.read(self.piece_size)
                    if not piece:
                        break
                    written += len(piece)
                    if max_bytes is not None and written > max_bytes:
                        raise PayloadTooLargeError(
                            f"File exceeds the maximum upload size of {max_bytes} bytes"
                        )
                    out.write(piece)
        except FileExistsError as e:
            # Never remove a blob this call did not create.
            logger.error(f"Stored name already in use: {stored_name}")
            raise StorageWriteError(f"Stored name already in use: {stored_name}") from e
        except PayloadTooLargeError:
            self._discard_partial(path)
            raise
        except OSError as e:
            self._discard_partial(path)
            logger.error(f"Failed to write blob {stored_name}: {e}")
            raise StorageWriteError(f"Failed to write file to storage: {e.strerror or e}") from e

        logger.debug(f"Wrote blob {stored_name} ({written} bytes)")
        return written

    def _discard_partial(self, path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Failed to remove partial blob {path.name}: {e}")

    def delete_blob(self, stored_name: str) -> bool:
        """
        Delete a blob from disk. Idempotent.

        Args:
            stored_name: Name of the blob

        Returns:
            True if the file was deleted, False if it didn't exist

        Raises:
            StorageError: If the file exists but cannot be removed
        """
        path = self.path_for(stored_name)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.info(f"Blob already absent, nothing to delete: {stored_name}")
            return False
        except OSError as e:
            raise StorageError(f"Failed to delete blob {stored_name}: {e.strerror or e}") from e
        return True

    def exists(self, stored_name: str) -> bool:
        """
        Check if a blob exists on disk.
        """
        return self.path_for(stored_name).is_file()

    def blob_size(self, stored_name: str) -> int:
        """
        Get size of a blob in bytes.

        Raises:
            BlobNotFoundError: If the blob does not exist
        """
        try:
            return self.path_for(stored_name).stat().st_size
        except FileNotFoundError as e:
            raise BlobNotFoundError("Physical file not found") from e

    def open_for_read(self, stored_name: str) -> BinaryIO:
        """
        Open a blob for reading.

        Returns:
            Binary file handle; the caller closes it (``iter_blob`` does)

        Raises:
            BlobNotFoundError: If the blob does not exist
            StorageError: If the blob cannot be opened
        """
        path = self.path_for(stored_name)
        try:
            return open(path, "rb")
        except FileNotFoundError as e:
            raise BlobNotFoundError("Physical file not found") from e
        except OSError as e:
            raise StorageError(f"Failed to open blob {stored_name}: {e.strerror or e}") from e

    def iter_blob(self, handle: BinaryIO) -> Iterator[bytes]:
        """
        Stream an open blob in pieces and close it when done.

        Yields:
            Blob data pieces
        """
        try:
            while True:
                piece = handle.read(self.piece_size)
                if not piece:
                    break
                yield piece
        finally:
            handle.close()

    def list_blobs(self) -> List[str]:
        """
        List all stored names under the root directory.
        """
        return sorted(entry.name for entry in self.root.iterdir() if entry.is_file())

    def blob_mtime(self, stored_name: str) -> Optional[float]:
        """
        Get the last-modified time of a blob, or None if it is gone.
        """
        try:
            return self.path_for(stored_name).stat().st_mtime
        except FileNotFoundError:
            return None
