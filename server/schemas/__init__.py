"""Pydantic schemas for API requests and responses."""

from server.schemas.auth import AuthResponse, CredentialsRequest, UserSummary
from server.schemas.common import ErrorResponse, HealthResponse
from server.schemas.files import (
    DeleteFileResponse,
    FileListItem,
    ListFilesResponse,
    UploadedFile,
    UploadResponse,
)

__all__ = [
    "AuthResponse",
    "CredentialsRequest",
    "UserSummary",
    "ErrorResponse",
    "HealthResponse",
    "DeleteFileResponse",
    "FileListItem",
    "ListFilesResponse",
    "UploadedFile",
    "UploadResponse",
]
