"""Tests for CLI command handlers."""

from unittest.mock import Mock

from cli.api_client import ApiClient
from cli.commands import (
    dispatch_command,
    handle_delete,
    handle_download,
    handle_list,
    handle_login,
    handle_logout,
    handle_register,
    handle_upload,
    handle_whoami,
)
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


def test_handle_register():
    """Test register command handler with mocked client."""
    mock_client = Mock(spec=ApiClient)
    mock_client.register.return_value = "Registration successful!"

    cmd = RegisterCommand(username='testuser', password='password123')
    result = handle_register(cmd, client=mock_client)

    assert 'Registration successful' in result
    mock_client.register.assert_called_once_with('testuser', 'password123')


def test_handle_login():
    """Test login command handler with mocked client."""
    mock_client = Mock(spec=ApiClient)
    mock_client.login.return_value = "Login successful!"

    result = handle_login(LoginCommand(username='testuser', password='password123'), client=mock_client)

    assert 'Login successful' in result
    mock_client.login.assert_called_once_with('testuser', 'password123')


def test_handle_logout_and_whoami():
    mock_client = Mock(spec=ApiClient)
    mock_client.logout.return_value = "Logged out alice."
    mock_client.whoami.return_value = "Logged in as alice (ID: 1)"

    assert handle_logout(LogoutCommand(), client=mock_client) == "Logged out alice."
    assert handle_whoami(WhoamiCommand(), client=mock_client).startswith("Logged in as alice")


def test_handle_upload():
    """Test upload command handler passes every path."""
    mock_client = Mock(spec=ApiClient)
    mock_client.upload_files.return_value = "Uploaded: a.txt (ID: 1, Size: 10 B)"

    result = handle_upload(UploadCommand(file_paths=('a.txt', 'b.txt')), client=mock_client)

    assert 'Uploaded' in result
    mock_client.upload_files.assert_called_once_with(['a.txt', 'b.txt'])


def test_handle_list():
    mock_client = Mock(spec=ApiClient)
    mock_client.list_files.return_value = "No files uploaded yet."

    assert handle_list(ListCommand(), client=mock_client) == "No files uploaded yet."
    mock_client.list_files.assert_called_once_with()


def test_handle_download():
    mock_client = Mock(spec=ApiClient)
    mock_client.download.return_value = "Downloaded: a.txt (10 B)"

    handle_download(DownloadCommand(file_id=4, output_path='out/'), client=mock_client)

    mock_client.download.assert_called_once_with(4, 'out/')


def test_handle_delete():
    mock_client = Mock(spec=ApiClient)
    mock_client.delete_file.return_value = "Deleted file 4."

    assert handle_delete(DeleteCommand(file_id=4), client=mock_client) == "Deleted file 4."
    mock_client.delete_file.assert_called_once_with(4)


def test_dispatch_routes_to_handler():
    mock_client = Mock(spec=ApiClient)
    mock_client.delete_file.return_value = "Deleted file 9."

    assert dispatch_command(DeleteCommand(file_id=9), client=mock_client) == "Deleted file 9."


def test_dispatch_unknown_object():
    assert dispatch_command(object(), client=Mock(spec=ApiClient)).startswith("Unknown command type")
