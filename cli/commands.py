"""Command handler functions for CLI operations."""

from typing import Optional

from common.logging_config import get_logger
from cli.api_client import ApiClient
from cli.config import Config, default_config_path
from cli.models import (
    DeleteCommand,
    DownloadCommand,
    ListCommand,
    LoginCommand,
    LogoutCommand,
    RegisterCommand,
    UploadCommand,
    WhoamiCommand,
)

logger = get_logger(__name__)


_client: Optional[ApiClient] = None


def get_client() -> ApiClient:
    """
    Get or create global ApiClient instance.

    Returns:
        ApiClient instance
    """
    global _client
    if _client is None:
        logger.debug("Creating new ApiClient instance")
        _client = ApiClient(Config(default_config_path()))
    return _client


def handle_register(cmd: RegisterCommand, client: Optional[ApiClient] = None) -> str:
    """
    Handle 'register' command.

    Args:
        cmd: RegisterCommand with username and password
        client: Optional ApiClient for dependency injection (testing)

    Returns:
        Success or error message
    """
    if client is None:
        client = get_client()
    return client.register(cmd.username, cmd.password)


def handle_login(cmd: LoginCommand, client: Optional[ApiClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.login(cmd.username, cmd.password)


def handle_logout(cmd: LogoutCommand, client: Optional[ApiClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.logout()


def handle_whoami(cmd: WhoamiCommand, client: Optional[ApiClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.whoami()


def handle_upload(cmd: UploadCommand, client: Optional[ApiClient] = None) -> str:
    """
    Handle 'upload' command.

    Args:
        cmd: UploadCommand with file_paths
        client: Optional ApiClient for dependency injection (testing)

    Returns:
        Success or error message with upload results
    """
    logger.info(f"Executing upload command: {len(cmd.file_paths)} files")
    if client is None:
        client = get_client()
    result = client.upload_files(list(cmd.file_paths))
    logger.debug("Upload command completed")
    return result


def handle_list(cmd: ListCommand, client: Optional[ApiClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.list_files()


def handle_download(cmd: DownloadCommand, client: Optional[ApiClient] = None) -> str:
    """
    Handle 'download' command.

    Args:
        cmd: DownloadCommand with file_id and optional output_path
        client: Optional ApiClient for dependency injection (testing)

    Returns:
        Success or error message with download results
    """
    logger.info(f"Executing download command: file_id={cmd.file_id} output_path={cmd.output_path}")
    if client is None:
        client = get_client()
    return client.download(cmd.file_id, cmd.output_path)


def handle_delete(cmd: DeleteCommand, client: Optional[ApiClient] = None) -> str:
    """
    Handle 'delete' command.

    Args:
        cmd: DeleteCommand with file_id
        client: Optional ApiClient for dependency injection (testing)

    Returns:
        Success or error message
    """
    logger.info(f"Executing delete command: file_id={cmd.file_id}")
    if client is None:
        client = get_client()
    return client.delete_file(cmd.file_id)


HANDLERS = {
    RegisterCommand: handle_register,
    LoginCommand: handle_login,
    LogoutCommand: handle_logout,
    WhoamiCommand: handle_whoami,
    UploadCommand: handle_upload,
    ListCommand: handle_list,
    DownloadCommand: handle_download,
    DeleteCommand: handle_delete,
}


def dispatch_command(cmd_obj, client: Optional[ApiClient] = None) -> str:
    """Dispatch parsed command to appropriate handler."""
    handler = HANDLERS.get(type(cmd_obj))
    if handler is None:
        return f"Unknown command type: {type(cmd_obj)}"
    return handler(cmd_obj, client)
