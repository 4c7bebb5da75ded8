"""Configuration management for FileSync CLI."""

import json
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from common.constants import DEFAULT_SERVER_PORT
from common.logging_config import get_logger
from cli.constants import CONFIG_DIR_NAME, DEFAULT_DOWNLOAD_DIR

logger = get_logger(__name__)


def default_config() -> dict:
    """
    Build the default configuration, honoring FILESYNC_SERVER_HOST/PORT.

    Returns:
        Configuration dictionary
    """
    return {
        "server_host": os.environ.get("FILESYNC_SERVER_HOST", "localhost"),
        "server_port": int(os.environ.get("FILESYNC_SERVER_PORT", str(DEFAULT_SERVER_PORT))),
        "timeout": 30,
        "max_retries": 3,
        "retry_backoff_multiplier": 2,
        "download_dir": DEFAULT_DOWNLOAD_DIR,
        "current_user": None,
    }


def default_config_path() -> Path:
    return Path.home() / CONFIG_DIR_NAME / "config.json"


class Config:
    """Manages CLI configuration stored in JSON file."""

    def __init__(self, config_path: Path):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config JSON file (typically ~/.filesync/config.json)
        """
        self.config_path = config_path
        self.data = self._load()

    def _load(self) -> dict:
        """
        Load configuration from file, creating defaults if necessary.

        A corrupt file is copied aside to config.json.bak and defaults are used.

        Returns:
            Configuration dictionary
        """
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
        except PermissionError:
            self.config_path = Path(tempfile.gettempdir()) / CONFIG_DIR_NAME / 'config.json'
            self.config_path.parent.mkdir(parents=True, exist_ok=True)

        config = default_config()

        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    data = json.load(f)
                if not isinstance(data, dict):
                    raise ValueError("config root must be an object")
                config.update(data)
                return config
            except (ValueError, OSError) as e:
                logger.warning(f"Unreadable config {self.config_path}: {e}; using defaults")
                backup_path = self.config_path.with_suffix('.json.bak')
                try:
                    shutil.copy(self.config_path, backup_path)
                except OSError as copy_error:
                    logger.warning(f"Could not back up config: {copy_error}")
                return config

        self.data = config
        self.save()
        return config

    def save(self) -> None:
        """Save current configuration to file."""
        try:
            with open(self.config_path, 'w') as f:
                json.dump(self.data, f, indent=2)
        except OSError as e:
            logger.warning(f"Could not save config {self.config_path}: {e}")

    def get_current_user(self) -> Optional[dict]:
        """
        Get the logged-in user.

        Returns:
            Dictionary with 'id' and 'username', or None if nobody is logged in
        """
        user = self.data.get('current_user')
        if isinstance(user, dict) and 'id' in user and 'username' in user:
            return user
        return None

    def set_current_user(self, user_id: int, username: str) -> None:
        """
        Remember the logged-in user and save to file.

        Args:
            user_id: Server-assigned user id
            username: Username
        """
        self.data['current_user'] = {'id': user_id, 'username': username}
        self.save()

    def clear_current_user(self) -> None:
        """Forget the logged-in user and save to file."""
        self.data['current_user'] = None
        self.save()

    def get_base_url(self) -> str:
        """
        Get server base URL.

        Returns:
            Base URL string (e.g., "http://localhost:3001")
        """
        host = self.data.get('server_host', 'localhost')
        port = self.data.get('server_port', DEFAULT_SERVER_PORT)
        return f"http://{host}:{port}"

    def get_timeout(self) -> int:
        return self.data.get('timeout', 30)

    def get_download_dir(self) -> Path:
        return Path(self.data.get('download_dir', DEFAULT_DOWNLOAD_DIR)).expanduser()

    def get_retry_config(self) -> dict:
        """
        Get retry configuration.

        Returns:
            Dictionary with 'max_retries' and 'retry_backoff_multiplier'
        """
        return {
            'max_retries': self.data.get('max_retries', 3),
            'retry_backoff_multiplier': self.data.get('retry_backoff_multiplier', 2),
        }
