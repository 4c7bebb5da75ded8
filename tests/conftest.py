"""Shared pytest fixtures for all tests."""

from typing import Generator

import pytest
from fastapi.testclient import TestClient

from cli.config import Config
from server.blob_store import BlobStore
from server.config import Settings
from server.database import Database
from server.main import create_app
from server.repositories.file_repository import FileRepository
from server.repositories.user_repository import User, UserRepository
from server.security import hash_password


@pytest.fixture
def settings(tmp_path) -> Settings:
    """
    Server settings over a temporary database and blob root.

    The background cleaner is disabled; tests call ``run_once`` directly.
    """
    return Settings(
        database_path=str(tmp_path / "database.db"),
        storage_root=str(tmp_path / "uploads"),
        max_upload_bytes=1024 * 1024,
        cleanup_interval_seconds=0,
    )


@pytest.fixture
def app(settings):
    app = create_app(settings)
    yield app
    app.state.db.close()


@pytest.fixture
def client(app) -> TestClient:
    """Create FastAPI test client."""
    return TestClient(app)


@pytest.fixture
def db() -> Generator[Database, None, None]:
    """Fresh in-memory metadata store with the schema applied."""
    database = Database(":memory:")
    database.init_schema()
    yield database
    database.close()


@pytest.fixture
def blob_store(tmp_path) -> BlobStore:
    return BlobStore(str(tmp_path / "blobs"), piece_size=4)


@pytest.fixture
def user_repo(db) -> UserRepository:
    return UserRepository(db)


@pytest.fixture
def file_repo(db) -> FileRepository:
    return FileRepository(db)


@pytest.fixture
def alice(user_repo) -> User:
    return user_repo.insert_user("alice", hash_password("secret"))


@pytest.fixture
def bob(user_repo) -> User:
    return user_repo.insert_user("bob", hash_password("hunter2"))


@pytest.fixture
def temp_config_dir(tmp_path):
    """
    Create temporary config directory.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to temporary .filesync directory
    """
    config_dir = tmp_path / '.filesync'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir, monkeypatch):
    """
    Create temporary config instance pointing at the default server address.

    Args:
        temp_config_dir: Temporary config directory fixture

    Returns:
        Config instance with temp config file
    """
    monkeypatch.delenv("FILESYNC_SERVER_HOST", raising=False)
    monkeypatch.delenv("FILESYNC_SERVER_PORT", raising=False)
    return Config(temp_config_dir / 'config.json')


@pytest.fixture
def sample_file(tmp_path):
    """
    Create a sample file for testing file uploads.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to sample text file
    """
    file_path = tmp_path / 'a.txt'
    file_path.write_bytes(b'0123456789')
    return file_path
