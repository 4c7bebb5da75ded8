"""Utility functions for CLI operations."""

import re
import sys
from pathlib import PurePosixPath
from typing import BinaryIO, Optional
from urllib.parse import unquote

from cli.constants import GREEN, RESET


class TransferProgress:
    """Single-line progress display for an upload or download."""

    def __init__(self, verb: str, filename: str, total_size: Optional[int] = None):
        """
        Args:
            verb: Leading word of the line ("Uploading", "Downloading")
            filename: Display name for the file
            total_size: Expected size in bytes, None or 0 if unknown
        """
        self.verb = verb
        self.filename = filename
        self.total_size = total_size or 0
        self.transferred = 0
        self._finished = False

    def advance(self, n_bytes: int) -> None:
        self.transferred += n_bytes
        done = format_file_size(self.transferred)
        if self.total_size > 0:
            progress = (self.transferred / self.total_size) * 100
            line = f"{done} / {format_file_size(self.total_size)} ({GREEN}{progress:.1f}%{RESET})"
        else:
            line = done
        sys.stdout.write(f"\r{self.verb} {self.filename}: {line}")
        sys.stdout.flush()

    def finish(self) -> None:
        if self._finished:
            return
        self._finished = True
        if self.transferred:
            sys.stdout.write('\n')
            sys.stdout.flush()

    def abort(self) -> None:
        """Blank out a half-written progress line."""
        self._finished = True
        sys.stdout.write('\r' + ' ' * 100 + '\r')
        sys.stdout.flush()


class ProgressFileReader:
    """Read-only file wrapper that reports every read to a TransferProgress."""

    def __init__(self, handle: BinaryIO, progress: TransferProgress):
        self._handle = handle
        self.progress = progress

    def read(self, size: int = -1) -> bytes:
        """
        Read bytes from the file and update progress display.

        Args:
            size: Number of bytes to read (-1 or 0 for default chunk size)

        Returns:
            Bytes read from the file
        """
        chunk = self._handle.read(size if size > 0 else 64 * 1024)
        if chunk:
            self.progress.advance(len(chunk))
        else:
            self.progress.finish()
        return chunk


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in bytes to human-readable format with appropriate unit.

    Uses binary units (1024-based) and automatically selects the most
    appropriate unit (B, KiB, MiB, GiB, TiB).

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string with size and unit (e.g., "1.50 MiB", "512 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"

    units = ['KiB', 'MiB', 'GiB', 'TiB']
    size = size_bytes / 1024.0

    for unit in units:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0

    return f"{size:.2f} PiB"


_DISPOSITION_EXTENDED = re.compile(r"filename\*\s*=\s*([\w-]+)'[^']*'([^;]+)", re.IGNORECASE)
_DISPOSITION_PLAIN = re.compile(r'filename\s*=\s*"((?:[^"\\]|\\.)*)"|filename\s*=\s*([^;]+)', re.IGNORECASE)


def filename_from_disposition(header: Optional[str]) -> Optional[str]:
    """
    Extract the suggested filename from a Content-Disposition header.

    Prefers the RFC 5987 ``filename*`` parameter over the plain ``filename``.
    Any directory part is stripped so the result is safe to join onto a
    local directory.

    Args:
        header: Raw header value, may be None

    Returns:
        Bare filename, or None if the header carries none
    """
    if not header:
        return None

    name = None
    extended = _DISPOSITION_EXTENDED.search(header)
    if extended:
        charset, value = extended.groups()
        try:
            name = unquote(value.strip(), encoding=charset, errors="strict")
        except (LookupError, UnicodeDecodeError):
            name = None

    if name is None:
        plain = _DISPOSITION_PLAIN.search(header)
        if plain:
            quoted, bare = plain.groups()
            name = quoted.replace('\\"', '"') if quoted is not None else bare.strip()

    if not name:
        return None
    name = PurePosixPath(name.replace("\\", "/")).name
    return name if name not in ("", ".", "..") else None
