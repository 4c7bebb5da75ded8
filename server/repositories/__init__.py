"""Repository layer for data access."""

from server.repositories.user_repository import User, UserRepository
from server.repositories.file_repository import FileListing, FileRecord, FileRepository

__all__ = [
    "User",
    "UserRepository",
    "FileListing",
    "FileRecord",
    "FileRepository",
]
