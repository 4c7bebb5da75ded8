"""Pydantic schemas for file operation endpoints."""

from typing import List, Optional

from pydantic import BaseModel


class UploadedFile(BaseModel):
    id: int
    original_name: str
    file_size: int
    upload_date: str


class UploadResponse(BaseModel):
    """Response model for file upload."""
    success: bool = True
    file: UploadedFile


class FileListItem(BaseModel):
    """One file in the public listing."""
    id: int
    filename: str
    original_name: str
    file_path: str
    file_size: int
    uploaded_by: Optional[int]
    upload_date: str
    uploaded_by_name: Optional[str]


class ListFilesResponse(BaseModel):
    """Response model for file listing."""
    success: bool = True
    files: List[FileListItem]


class DeleteFileResponse(BaseModel):
    """Response model for file deletion."""
    success: bool = True
    message: str
