"""File operation API routes."""

import os
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import StreamingResponse

from server.dependencies import get_caller_id, get_file_service, parse_user_id
from server.exceptions import FileRecordNotFoundError
from server.schemas.files import (
    DeleteFileResponse,
    FileListItem,
    ListFilesResponse,
    UploadedFile,
    UploadResponse,
)
from server.services.file_service import FileService
from server.utils import content_disposition, guess_media_type

router = APIRouter(prefix="/api", tags=["Files"])


def _parse_file_id(file_id: str) -> int:
    try:
        return int(file_id)
    except ValueError:
        raise FileRecordNotFoundError("File not found")


@router.post("/upload", response_model=UploadResponse)
def upload_file(
    file: Optional[UploadFile] = File(None),
    uploadedBy: Optional[str] = Form(None),
    file_service: FileService = Depends(get_file_service),
):
    """
    Upload a file.

    Parameters:
        - file: File to upload (multipart/form-data)
        - uploadedBy: Id of the uploading user

    Returns:
        - file: {id, original_name, file_size, upload_date}

    Raises:
        - 400: No file, missing or unknown uploader
        - 413: File too large
        - 500: Storage or database failure
    """
    uploader_id = parse_user_id(uploadedBy, "uploadedBy")
    original_name = file.filename if file is not None else None
    file_data = file.file if file is not None else None

    record = file_service.upload_file(original_name, file_data, uploader_id)

    return UploadResponse(
        file=UploadedFile(
            id=record.id,
            original_name=record.original_name,
            file_size=record.file_size,
            upload_date=record.upload_date.isoformat(),
        )
    )


@router.get("/files", response_model=ListFilesResponse)
def list_files(file_service: FileService = Depends(get_file_service)):
    """
    List every uploaded file, newest first.

    Returns:
        - files: file records with the uploader's username (null if it no longer resolves)

    Raises:
        - 500: Database failure
    """
    listings = file_service.list_files()

    return ListFilesResponse(
        files=[
            FileListItem(
                id=listing.record.id,
                filename=listing.record.filename,
                original_name=listing.record.original_name,
                file_path=listing.record.file_path,
                file_size=listing.record.file_size,
                uploaded_by=listing.record.uploaded_by,
                upload_date=listing.record.upload_date.isoformat(),
                uploaded_by_name=listing.uploaded_by_name,
            )
            for listing in listings
        ]
    )


@router.get("/download/{file_id}")
def download_file(file_id: str, file_service: FileService = Depends(get_file_service)):
    """
    Download a file by id, suggesting its original name.

    Raises:
        - 404: No such file (code FILE_NOT_FOUND) or its physical file is missing (code BLOB_NOT_FOUND)
    """
    record, handle = file_service.open_download(_parse_file_id(file_id))

    try:
        return StreamingResponse(
            file_service.blob_store.iter_blob(handle),
            media_type=guess_media_type(record.original_name),
            headers={
                "Content-Disposition": content_disposition(record.original_name),
                "Content-Length": str(os.fstat(handle.fileno()).st_size),
            },
        )
    except Exception:
        handle.close()
        raise


@router.delete("/files/{file_id}", response_model=DeleteFileResponse)
def delete_file(
    file_id: str,
    caller_id: Optional[int] = Depends(get_caller_id),
    file_service: FileService = Depends(get_file_service),
):
    """
    Delete a file.

    Parameters:
        - X-User-Id header: id of the caller (must be the uploader when ownership is enforced)

    Raises:
        - 401: Caller identity missing
        - 403: Caller is not the uploader
        - 404: No such file
        - 500: Database failure
    """
    file_service.delete_file(_parse_file_id(file_id), caller_id=caller_id)
    return DeleteFileResponse(message="File deleted successfully")
