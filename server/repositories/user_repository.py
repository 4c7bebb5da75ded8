"""User repository for database operations."""

import sqlite3
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from common.logging_config import get_logger
from server.database import Database
from server.exceptions import QueryError, UserAlreadyExistsError
from server.security import burn_verification, verify_password
from server.utils import get_current_timestamp

logger = get_logger(__name__)


@dataclass
class User:
    id: int
    username: str
    password_hash: str
    created_at: datetime


def _row_to_user(row: sqlite3.Row) -> User:
    return User(
        id=row["id"],
        username=row["username"],
        password_hash=row["password_hash"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )


class UserRepository:
    def __init__(self, db: Database):
        self.db = db

    def insert_user(self, username: str, password_hash: str) -> User:
        logger.debug(f"Creating user: {username}")
        created_at = get_current_timestamp()

        try:
            with self.db.connection() as conn:
                cursor = conn.execute(
                    "INSERT INTO users (username, password_hash, created_at) VALUES (?, ?, ?)",
                    (username, password_hash, created_at),
                )
                conn.commit()
                user_id = cursor.lastrowid
        except sqlite3.IntegrityError as e:
            logger.warning(f"Username already exists: {username}")
            raise UserAlreadyExistsError(f"Username '{username}' already exists") from e
        except sqlite3.Error as e:
            logger.error(f"Failed to create user {username}: {e}", exc_info=True)
            raise QueryError("Database error while creating user") from e

        logger.info(f"User created successfully: {username} [user_id={user_id}]")
        return User(
            id=user_id,
            username=username,
            password_hash=password_hash,
            created_at=datetime.fromisoformat(created_at),
        )

    def get_by_username(self, username: str) -> Optional[User]:
        logger.debug(f"Fetching user by username: {username}")
        try:
            with self.db.connection() as conn:
                row = conn.execute(
                    "SELECT id, username, password_hash, created_at FROM users WHERE username = ?",
                    (username,),
                ).fetchone()
        except sqlite3.Error as e:
            logger.error(f"Failed to fetch user {username}: {e}", exc_info=True)
            raise QueryError("Database error while fetching user") from e

        if row is None:
            logger.debug(f"User not found: {username}")
            return None
        return _row_to_user(row)

    def get_by_id(self, user_id: int) -> Optional[User]:
        try:
            with self.db.connection() as conn:
                row = conn.execute(
                    "SELECT id, username, password_hash, created_at FROM users WHERE id = ?",
                    (user_id,),
                ).fetchone()
        except sqlite3.Error as e:
            logger.error(f"Failed to fetch user [user_id={user_id}]: {e}", exc_info=True)
            raise QueryError("Database error while fetching user") from e

        return _row_to_user(row) if row is not None else None

    def find_by_credentials(self, username: str, password: str) -> Optional[User]:
        """
        Look up a user and verify the password against the stored hash.

        Returns:
            The user, or None when the username is unknown or the password is wrong
        """
        user = self.get_by_username(username)
        if user is None:
            burn_verification(password)
            return None

        if not verify_password(password, user.password_hash):
            return None
        return user
