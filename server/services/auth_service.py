"""Authentication service for business logic."""

from typing import Optional

from common.constants import MIN_PASSWORD_LENGTH, MIN_USERNAME_LENGTH
from common.logging_config import get_logger
from server.exceptions import InvalidCredentialsError, ValidationError
from server.repositories.user_repository import User, UserRepository
from server.security import MAX_PASSWORD_BYTES, hash_password

logger = get_logger(__name__)


class AuthService:
    def __init__(
        self,
        user_repo: UserRepository,
        min_username_length: int = MIN_USERNAME_LENGTH,
        min_password_length: int = MIN_PASSWORD_LENGTH,
    ):
        self.user_repo = user_repo
        self.min_username_length = min_username_length
        self.min_password_length = min_password_length

    def _require_credentials(self, username: Optional[str], password: Optional[str]) -> None:
        if not username or not password:
            raise ValidationError("Username and password are required")
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

    def register_user(self, username: Optional[str], password: Optional[str]) -> User:
        self._require_credentials(username, password)

        if len(username) < self.min_username_length:
            raise ValidationError(f"Username must be at least {self.min_username_length} characters")
        if len(password) < self.min_password_length:
            raise ValidationError(f"Password must be at least {self.min_password_length} characters")

        logger.info(f"Attempting to register user: {username}")
        user = self.user_repo.insert_user(username, hash_password(password))
        logger.info(f"Successfully registered user: {username} [user_id={user.id}]")
        return user

    def login_user(self, username: Optional[str], password: Optional[str]) -> User:
        self._require_credentials(username, password)

        logger.info(f"Login attempt for user: {username}")
        user = self.user_repo.find_by_credentials(username, password)
        if user is None:
            logger.warning(f"Login failed for username '{username}'")
            raise InvalidCredentialsError("Invalid username or password")

        logger.info(f"Successfully logged in user: {username} [user_id={user.id}]")
        return user
