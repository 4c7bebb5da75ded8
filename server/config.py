"""Configuration settings for the FileSync server."""

import os
from dataclasses import dataclass, field
from typing import List, Optional

from common.constants import DEFAULT_SERVER_PORT, DEFAULT_STORAGE_ROOT, MAX_UPLOAD_SIZE_BYTES

PRODUCTION_DATABASE_PATH = "/tmp/database.db"
DEVELOPMENT_DATABASE_PATH = "./database.db"

CLEANUP_INTERVAL_SECONDS = 6 * 3600
ORPHAN_GRACE_SECONDS = 3600


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: List[str]) -> List[str]:
    value = os.environ.get(name)
    if value is None:
        return default
    items = [item.strip() for item in value.split(",") if item.strip()]
    return items or default


def default_database_path(environment: str) -> str:
    """
    Pick the metadata-store location for a deployment mode.

    Args:
        environment: 'production' or anything else (development)

    Returns:
        SQLite database path
    """
    if environment == "production":
        return PRODUCTION_DATABASE_PATH
    return DEVELOPMENT_DATABASE_PATH


@dataclass
class Settings:
    """Server settings. Build with ``Settings.from_env()`` or directly in tests."""

    database_path: str = DEVELOPMENT_DATABASE_PATH
    storage_root: str = DEFAULT_STORAGE_ROOT
    host: str = "0.0.0.0"
    port: int = DEFAULT_SERVER_PORT
    environment: str = "development"
    max_upload_bytes: int = MAX_UPLOAD_SIZE_BYTES
    delete_requires_owner: bool = True
    cleanup_interval_seconds: int = CLEANUP_INTERVAL_SECONDS
    orphan_grace_seconds: int = ORPHAN_GRACE_SECONDS
    admin_password: Optional[str] = None
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> "Settings":
        environment = os.environ.get("FILESYNC_ENV", "development").strip().lower()
        port = os.environ.get("FILESYNC_PORT") or os.environ.get("PORT") or str(DEFAULT_SERVER_PORT)

        return cls(
            database_path=os.environ.get("FILESYNC_DATABASE_PATH", default_database_path(environment)),
            storage_root=os.environ.get("FILESYNC_STORAGE_ROOT", DEFAULT_STORAGE_ROOT),
            host=os.environ.get("FILESYNC_HOST", "0.0.0.0"),
            port=int(port),
            environment=environment,
            max_upload_bytes=int(os.environ.get("FILESYNC_MAX_UPLOAD_BYTES", str(MAX_UPLOAD_SIZE_BYTES))),
            delete_requires_owner=_env_bool("FILESYNC_DELETE_REQUIRES_OWNER", True),
            cleanup_interval_seconds=int(os.environ.get("FILESYNC_CLEANUP_INTERVAL", str(CLEANUP_INTERVAL_SECONDS))),
            orphan_grace_seconds=int(os.environ.get("FILESYNC_ORPHAN_GRACE", str(ORPHAN_GRACE_SECONDS))),
            admin_password=os.environ.get("FILESYNC_ADMIN_PASSWORD") or None,
            cors_origins=_env_list("FILESYNC_CORS_ORIGINS", ["*"]),
        )
