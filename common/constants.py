"""Project-wide constants (size limits, defaults)."""

MAX_UPLOAD_SIZE_BYTES: int = 50 * 1024 * 1024  # 50 MiB ingress limit

READ_PIECE_SIZE_BYTES: int = 64 * 1024

DEFAULT_STORAGE_ROOT: str = "uploads"

DEFAULT_SERVER_PORT: int = 3001

MIN_USERNAME_LENGTH: int = 3
MIN_PASSWORD_LENGTH: int = 3

DEFAULT_ADMIN_USERNAME: str = "admin"

USER_ID_HEADER: str = "X-User-Id"
