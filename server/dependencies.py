"""FastAPI dependencies resolving per-app services and the caller identity."""

from typing import Optional

from fastapi import Header, Request

from common.constants import USER_ID_HEADER
from server.exceptions import ValidationError
from server.services.auth_service import AuthService
from server.services.file_service import FileService


def get_file_service(request: Request) -> FileService:
    return request.app.state.file_service


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def parse_user_id(value: Optional[str], field_name: str) -> Optional[int]:
    """
    Parse a client-supplied user id.

    Args:
        value: Raw header or form value (None or blank means absent)
        field_name: Name used in the error message

    Returns:
        The user id, or None when absent

    Raises:
        ValidationError: If the value is not a positive integer
    """
    if value is None or not value.strip():
        return None
    try:
        user_id = int(value.strip())
    except ValueError:
        raise ValidationError(f"{field_name} must be an integer user id")
    if user_id <= 0:
        raise ValidationError(f"{field_name} must be a positive user id")
    return user_id


async def get_caller_id(x_user_id: Optional[str] = Header(None, alias=USER_ID_HEADER)) -> Optional[int]:
    """
    FastAPI dependency extracting the caller's user id from the X-User-Id header.

    Returns:
        The caller's user id, or None if the header is absent
    """
    return parse_user_id(x_user_id, USER_ID_HEADER)
