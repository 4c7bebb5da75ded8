"""File service: keeps blobs and metadata records in step."""

from typing import BinaryIO, List, Optional, Tuple

from common.logging_config import get_logger
from server.blob_store import BlobStore
from server.exceptions import (
    BlobNotFoundError,
    FileRecordNotFoundError,
    MissingIdentityError,
    UnauthorizedAccessError,
    ValidationError,
)
from server.repositories.file_repository import FileListing, FileRecord, FileRepository

logger = get_logger(__name__)


class FileService:
    """
    Upload, list, download and delete.

    Blobs are always written before their metadata and removed before their
    metadata, so a failure can leave an orphan blob (wasted space, swept by
    the cleaner) but never a record that points at nothing.
    """

    def __init__(
        self,
        file_repo: FileRepository,
        blob_store: BlobStore,
        max_upload_bytes: Optional[int] = None,
        enforce_delete_ownership: bool = True,
    ):
        self.file_repo = file_repo
        self.blob_store = blob_store
        self.max_upload_bytes = max_upload_bytes
        self.enforce_delete_ownership = enforce_delete_ownership

    def upload_file(
        self,
        original_name: Optional[str],
        file_data: BinaryIO,
        uploader_id: Optional[int],
    ) -> FileRecord:
        if not original_name:
            raise ValidationError("No file was uploaded")
        if uploader_id is None:
            raise ValidationError("Uploader user id is required")

        stored_name = self.blob_store.allocate_name(original_name)
        file_size = self.blob_store.write_blob(stored_name, file_data, max_bytes=self.max_upload_bytes)
        logger.info(f"Blob written: {stored_name} ({file_size} bytes) for '{original_name}'")

        try:
            record = self.file_repo.insert_file_record(
                filename=stored_name,
                original_name=original_name,
                file_path=str(self.blob_store.path_for(stored_name)),
                file_size=file_size,
                uploaded_by=uploader_id,
            )
        except Exception as e:
            logger.error(f"Saving metadata failed for blob {stored_name}: {e}")
            self._rollback_blob(stored_name)
            raise

        logger.info(
            f"Upload committed [file_id={record.id}] '{original_name}' "
            f"({file_size} bytes) [uploaded_by={uploader_id}]"
        )
        return record

    def _rollback_blob(self, stored_name: str) -> None:
        try:
            self.blob_store.delete_blob(stored_name)
            logger.warning(f"Rolled back blob {stored_name} after failed metadata insert")
        except Exception as e:
            logger.error(
                f"Orphan blob left behind: {stored_name} could not be removed after "
                f"failed metadata insert: {e}"
            )

    def list_files(self) -> List[FileListing]:
        return self.file_repo.list_files()

    def _get_record(self, file_id: int) -> FileRecord:
        record = self.file_repo.get_file_record(file_id)
        if record is None:
            logger.warning(f"File record not found [file_id={file_id}]")
            raise FileRecordNotFoundError("File not found")
        return record

    def open_download(self, file_id: int) -> Tuple[FileRecord, BinaryIO]:
        """
        Resolve a file for download.

        Returns:
            The record and an open handle on its blob

        Raises:
            FileRecordNotFoundError: No record with that id
            BlobNotFoundError: Record exists but its blob is gone
        """
        record = self._get_record(file_id)

        if not self.blob_store.exists(record.filename):
            logger.error(
                f"Physical file missing for record [file_id={file_id}] "
                f"[filename={record.filename}]: metadata points at nothing"
            )
            raise BlobNotFoundError("Physical file not found")

        try:
            handle = self.blob_store.open_for_read(record.filename)
        except BlobNotFoundError:
            logger.error(f"Blob vanished before it could be opened [file_id={file_id}]")
            raise

        logger.info(f"Starting download [file_id={file_id}] '{record.original_name}'")
        return record, handle

    def delete_file(self, file_id: int, caller_id: Optional[int] = None) -> FileRecord:
        record = self._get_record(file_id)

        if self.enforce_delete_ownership:
            if caller_id is None:
                raise MissingIdentityError("Caller identity is required to delete files")
            if record.uploaded_by != caller_id:
                logger.warning(f"User {caller_id} attempted to delete file {file_id} owned by {record.uploaded_by}")
                raise UnauthorizedAccessError("You can only delete files you uploaded")

        try:
            self.blob_store.delete_blob(record.filename)
        except Exception as e:
            logger.error(
                f"Orphan blob left behind: failed to delete {record.filename} "
                f"[file_id={file_id}]: {e}"
            )

        self.file_repo.delete_file_record(file_id)
        logger.info(f"File deleted [file_id={file_id}] '{record.original_name}'")
        return record
