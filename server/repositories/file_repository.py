"""File metadata repository for database operations."""

import sqlite3
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Set

from common.logging_config import get_logger
from server.database import Database
from server.exceptions import QueryError, UnknownUploaderError
from server.utils import get_current_timestamp

logger = get_logger(__name__)

_FILE_COLUMNS = "id, filename, original_name, file_path, file_size, uploaded_by, upload_date"


@dataclass
class FileRecord:
    id: int
    filename: str
    original_name: str
    file_path: str
    file_size: int
    uploaded_by: Optional[int]
    upload_date: datetime


@dataclass
class FileListing:
    """A file record joined with its uploader's username."""
    record: FileRecord
    uploaded_by_name: Optional[str]


def _row_to_record(row: sqlite3.Row) -> FileRecord:
    return FileRecord(
        id=row["id"],
        filename=row["filename"],
        original_name=row["original_name"],
        file_path=row["file_path"],
        file_size=row["file_size"],
        uploaded_by=row["uploaded_by"],
        upload_date=datetime.fromisoformat(row["upload_date"]),
    )


class FileRepository:
    def __init__(self, db: Database):
        self.db = db

    def insert_file_record(
        self,
        filename: str,
        original_name: str,
        file_path: str,
        file_size: int,
        uploaded_by: int,
    ) -> FileRecord:
        upload_date = get_current_timestamp()

        try:
            with self.db.connection() as conn:
                cursor = conn.execute(
                    """
                    INSERT INTO files (filename, original_name, file_path, file_size, uploaded_by, upload_date)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (filename, original_name, file_path, file_size, uploaded_by, upload_date),
                )
                conn.commit()
                file_id = cursor.lastrowid
        except sqlite3.IntegrityError as e:
            if "FOREIGN KEY" in str(e):
                logger.warning(f"Upload references unknown user [uploaded_by={uploaded_by}]")
                raise UnknownUploaderError(f"User {uploaded_by} does not exist") from e
            logger.error(f"Integrity error saving file record {filename}: {e}")
            raise QueryError("Error saving file to database") from e
        except sqlite3.Error as e:
            logger.error(f"Failed to save file record {filename}: {e}", exc_info=True)
            raise QueryError("Error saving file to database") from e

        logger.info(f"File record created [file_id={file_id}] [filename={filename}]")
        return FileRecord(
            id=file_id,
            filename=filename,
            original_name=original_name,
            file_path=file_path,
            file_size=file_size,
            uploaded_by=uploaded_by,
            upload_date=datetime.fromisoformat(upload_date),
        )

    def list_files(self) -> List[FileListing]:
        """
        All files, newest first, with the uploader's username when it resolves.
        """
        try:
            with self.db.connection() as conn:
                rows = conn.execute(
                    """
                    SELECT f.id, f.filename, f.original_name, f.file_path, f.file_size,
                           f.uploaded_by, f.upload_date, u.username AS uploaded_by_name
                    FROM files f
                    LEFT JOIN users u ON f.uploaded_by = u.id
                    ORDER BY f.upload_date DESC, f.id DESC
                    """
                ).fetchall()
        except sqlite3.Error as e:
            logger.error(f"Failed to list files: {e}", exc_info=True)
            raise QueryError("Error fetching files") from e

        return [
            FileListing(record=_row_to_record(row), uploaded_by_name=row["uploaded_by_name"])
            for row in rows
        ]

    def get_file_record(self, file_id: int) -> Optional[FileRecord]:
        try:
            with self.db.connection() as conn:
                row = conn.execute(
                    f"SELECT {_FILE_COLUMNS} FROM files WHERE id = ?",
                    (file_id,),
                ).fetchone()
        except sqlite3.Error as e:
            logger.error(f"Failed to fetch file record [file_id={file_id}]: {e}", exc_info=True)
            raise QueryError("Error fetching file") from e

        return _row_to_record(row) if row is not None else None

    def delete_file_record(self, file_id: int) -> bool:
        """
        Delete a file record. Deleting a missing row is a no-op.

        Returns:
            True if a row was removed
        """
        logger.debug(f"Deleting file record [file_id={file_id}]")
        try:
            with self.db.connection() as conn:
                cursor = conn.execute("DELETE FROM files WHERE id = ?", (file_id,))
                conn.commit()
                deleted = cursor.rowcount > 0
        except sqlite3.Error as e:
            logger.error(f"Failed to delete file record [file_id={file_id}]: {e}", exc_info=True)
            raise QueryError("Error deleting file") from e

        if deleted:
            logger.info(f"File record deleted [file_id={file_id}]")
        else:
            logger.info(f"File record already gone [file_id={file_id}]")
        return deleted

    def list_stored_names(self) -> Set[str]:
        """
        Stored filenames referenced by any record.
        """
        try:
            with self.db.connection() as conn:
                rows = conn.execute("SELECT filename FROM files").fetchall()
        except sqlite3.Error as e:
            logger.error(f"Failed to list stored names: {e}", exc_info=True)
            raise QueryError("Error fetching files") from e

        return {row["filename"] for row in rows}
