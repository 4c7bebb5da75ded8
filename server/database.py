"""Database schema and connection management for SQLite."""

import sqlite3
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Generator, Optional

from common.logging_config import get_logger

logger = get_logger(__name__)

MEMORY_DATABASE = ":memory:"


def row_to_dict(row: Optional[sqlite3.Row]) -> Optional[Dict[str, Any]]:
    """
    Convert a sqlite3.Row to a plain dict.

    Args:
        row: Row returned by a cursor, or None

    Returns:
        Dictionary of column values, or None
    """
    if row is None:
        return None
    return {key: row[key] for key in row.keys()}


class Database:
    """
    Owns the location of the metadata store and hands out connections.

    A path of ``":memory:"`` creates a private shared-cache in-memory database
    that lives as long as this object, so every connection sees the same data.
    """

    def __init__(self, path: str):
        self.path = path
        self._anchor: Optional[sqlite3.Connection] = None

        if path == MEMORY_DATABASE:
            self._target = f"file:filesync-{uuid.uuid4().hex}?mode=memory&cache=shared"
            self._uri = True
            self._anchor = sqlite3.connect(self._target, uri=True, check_same_thread=False)
        else:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
            self._target = path
            self._uri = False

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._target, uri=self._uri, timeout=10.0)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def connection(self) -> Generator[sqlite3.Connection, None, None]:
        """
        Context manager for database connections.
        """
        conn = self._connect()
        try:
            yield conn
        finally:
            conn.close()

    def init_schema(self) -> None:
        """
        Create tables and indexes if they don't exist.
        """
        with self.connection() as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    username TEXT UNIQUE NOT NULL,
                    password_hash TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS files (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    filename TEXT UNIQUE NOT NULL,
                    original_name TEXT NOT NULL,
                    file_path TEXT NOT NULL,
                    file_size INTEGER NOT NULL,
                    uploaded_by INTEGER,
                    upload_date TEXT NOT NULL,
                    FOREIGN KEY(uploaded_by) REFERENCES users(id)
                )
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_files_upload_date ON files(upload_date)
            """)

            conn.commit()

        logger.info(f"Database schema ready [path={self.path}]")

    def seed_default_user(self, username: str, password_hash: str, created_at: str) -> bool:
        """
        Insert a user unless the username is already taken.

        Returns:
            True if the user was inserted
        """
        with self.connection() as conn:
            cursor = conn.execute(
                "INSERT OR IGNORE INTO users (username, password_hash, created_at) VALUES (?, ?, ?)",
                (username, password_hash, created_at),
            )
            conn.commit()
            inserted = cursor.rowcount == 1

        if inserted:
            logger.info(f"Seeded default user: {username}")
        return inserted

    def ping(self) -> bool:
        with self.connection() as conn:
            conn.execute("SELECT 1").fetchone()
        return True

    def close(self) -> None:
        """Release the in-memory anchor connection, if any."""
        if self._anchor is not None:
            self._anchor.close()
            self._anchor = None
