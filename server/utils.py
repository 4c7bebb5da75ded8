"""Utility helper functions for the server."""

import mimetypes
from datetime import datetime, timezone
from urllib.parse import quote


def get_current_timestamp() -> str:
    """
    Get current UTC timestamp in ISO format (microsecond resolution).

    Returns:
        Current timestamp as ISO format string
    """
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def guess_media_type(filename: str) -> str:
    """
    Guess a content type from a filename extension.

    Returns:
        MIME type, ``application/octet-stream`` when unknown
    """
    media_type, _ = mimetypes.guess_type(filename)
    return media_type or "application/octet-stream"


def content_disposition(filename: str) -> str:
    """
    Build an attachment Content-Disposition header for a download.

    Non-ASCII names get an RFC 5987 ``filename*`` parameter next to an ASCII
    fallback; quotes, backslashes and control characters are stripped from the
    fallback.

    Args:
        filename: Suggested save name (the user's original filename)

    Returns:
        Header value
    """
    fallback = filename.encode("ascii", "ignore").decode("ascii")
    fallback = "".join(ch for ch in fallback if ch.isprintable() and ch not in '"\\')
    fallback = fallback.strip() or "download"

    if fallback == filename:
        return f'attachment; filename="{fallback}"'

    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"
