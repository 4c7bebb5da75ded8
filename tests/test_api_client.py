"""Unit tests for ApiClient."""

import json

import httpx
import pytest

from cli.api_client import ApiClient


def _json_error(status, message, code):
    return httpx.Response(status, json={'success': False, 'error': message, 'code': code})


@pytest.fixture
def no_sleep(monkeypatch):
    """Skip retry backoff delays."""
    monkeypatch.setattr('cli.api_client.time.sleep', lambda seconds: None)


@pytest.fixture
def recorded():
    return []


@pytest.fixture
def mock_transport_success(recorded):
    """Mock transport that returns successful responses."""
    def handler(request):
        recorded.append(request)
        path = request.url.path

        if path in ('/api/register', '/api/login'):
            body = json.loads(request.content)
            return httpx.Response(200, json={'success': True, 'user': {'id': 7, 'username': body['username']}})
        elif path == '/api/upload':
            request.read()
            return httpx.Response(200, json={
                'success': True,
                'file': {'id': 11, 'original_name': 'a.txt', 'file_size': 10, 'upload_date': '2024-01-01T00:00:00+00:00'},
            })
        elif path == '/api/files' and request.method == 'GET':
            return httpx.Response(200, json={
                'success': True,
                'files': [
                    {
                        'id': 11,
                        'filename': '1700000000000-1.txt',
                        'original_name': 'a.txt',
                        'file_path': '/srv/uploads/1700000000000-1.txt',
                        'file_size': 10,
                        'uploaded_by': 7,
                        'upload_date': '2024-01-01T00:00:00+00:00',
                        'uploaded_by_name': 'alice',
                    },
                    {
                        'id': 10,
                        'filename': '1600000000000-2.bin',
                        'original_name': 'old.bin',
                        'file_path': '/srv/uploads/1600000000000-2.bin',
                        'file_size': 2048,
                        'uploaded_by': 3,
                        'upload_date': '2023-01-01T00:00:00+00:00',
                        'uploaded_by_name': None,
                    },
                ],
            })
        elif path == '/api/download/11':
            return httpx.Response(
                200,
                content=b'0123456789',
                headers={'Content-Disposition': 'attachment; filename="a.txt"', 'Content-Length': '10'},
            )
        elif path == '/api/download/12':
            return httpx.Response(
                200,
                content=b'cv',
                headers={'Content-Disposition': "attachment; filename=\"rsum.pdf\"; filename*=UTF-8''r%C3%A9sum%C3%A9.pdf"},
            )
        elif path.startswith('/api/files/') and request.method == 'DELETE':
            return httpx.Response(200, json={'success': True, 'message': 'File deleted successfully'})

        return _json_error(404, 'Route not found', 'ROUTE_NOT_FOUND')

    return httpx.MockTransport(handler)


@pytest.fixture
def client_with_mock(temp_config, mock_transport_success):
    """Create ApiClient with mocked HTTP transport."""
    return ApiClient(temp_config, transport=mock_transport_success)


@pytest.fixture
def logged_in(temp_config):
    temp_config.set_current_user(7, 'alice')
    return temp_config


def test_register_success(client_with_mock, temp_config):
    """Test successful registration remembers the user."""
    result = client_with_mock.register('alice', 'secret')

    assert 'Registration successful' in result
    assert temp_config.get_current_user() == {'id': 7, 'username': 'alice'}


def test_register_duplicate(temp_config):
    transport = httpx.MockTransport(lambda request: _json_error(400, "Username 'alice' already exists", 'USER_ALREADY_EXISTS'))
    client = ApiClient(temp_config, transport=transport)

    result = client.register('alice', 'secret')

    assert 'Registration failed' in result
    assert 'Username already taken' in result
    assert temp_config.get_current_user() is None


def test_login_success(client_with_mock, temp_config):
    result = client_with_mock.login('alice', 'secret')

    assert 'Login successful' in result
    assert temp_config.get_current_user()['id'] == 7


def test_login_invalid_credentials(temp_config):
    transport = httpx.MockTransport(lambda request: _json_error(401, 'Invalid username or password', 'INVALID_CREDENTIALS'))
    client = ApiClient(temp_config, transport=transport)

    result = client.login('alice', 'wrong')

    assert result == 'Login failed: Invalid username or password.'


def test_logout_and_whoami(client_with_mock, logged_in):
    assert 'alice' in client_with_mock.whoami()

    assert client_with_mock.logout() == 'Logged out alice.'
    assert 'Not logged in' in client_with_mock.whoami()
    assert client_with_mock.logout() == 'Not logged in.'


def test_upload_requires_login(client_with_mock, sample_file, recorded):
    result = client_with_mock.upload_files([str(sample_file)])

    assert 'Not logged in' in result
    assert recorded == []


def test_upload_sends_file_and_uploader(client_with_mock, logged_in, sample_file, recorded):
    result = client_with_mock.upload_files([str(sample_file)])

    assert 'Uploaded: a.txt (ID: 11, Size: 10 B)' in result
    request = recorded[-1]
    assert request.method == 'POST'
    body = request.content
    assert b'name="uploadedBy"' in body
    assert b'\r\n\r\n7\r\n' in body
    assert b'filename="a.txt"' in body
    assert b'0123456789' in body


def test_upload_missing_local_file(client_with_mock, logged_in, tmp_path):
    result = client_with_mock.upload_files([str(tmp_path / 'missing.txt'), str(tmp_path)])

    assert 'File not found' in result
    assert 'Not a file' in result


def test_upload_server_error_is_reported(temp_config, logged_in, sample_file):
    transport = httpx.MockTransport(
        lambda request: _json_error(413, 'File exceeds the maximum upload size of 5 bytes', 'PAYLOAD_TOO_LARGE')
    )
    client = ApiClient(temp_config, transport=transport)

    result = client.upload_files([str(sample_file)])

    assert 'maximum upload size' in result


def test_list_files(client_with_mock):
    result = client_with_mock.list_files()

    assert 'Found 2 file(s)' in result
    assert '[11] a.txt' in result
    assert 'Uploaded by: alice' in result
    assert 'Uploaded by: user #3' in result
    assert '2.00 KiB' in result


def test_list_files_empty(temp_config):
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={'success': True, 'files': []}))
    client = ApiClient(temp_config, transport=transport)

    assert client.list_files() == 'No files uploaded yet.'


def test_download_to_default_dir(client_with_mock, temp_config, tmp_path):
    temp_config.data['download_dir'] = str(tmp_path / 'downloads')

    result = client_with_mock.download(11)

    saved = tmp_path / 'downloads' / 'a.txt'
    assert saved.read_bytes() == b'0123456789'
    assert 'Downloaded: a.txt' in result


def test_download_into_directory_uses_extended_filename(client_with_mock, tmp_path):
    out_dir = tmp_path / 'out'
    out_dir.mkdir()

    client_with_mock.download(12, str(out_dir))

    assert (out_dir / 'résumé.pdf').read_bytes() == b'cv'


def test_download_to_explicit_file(client_with_mock, tmp_path):
    target = tmp_path / 'renamed.txt'

    client_with_mock.download(11, str(target))

    assert target.read_bytes() == b'0123456789'


def test_download_missing_file(client_with_mock, tmp_path):
    result = client_with_mock.download(99, str(tmp_path / 'x'))

    assert result.startswith('Error')
    assert not (tmp_path / 'x').exists()


def test_download_missing_blob_message(temp_config):
    transport = httpx.MockTransport(lambda request: _json_error(404, 'Physical file not found', 'BLOB_NOT_FOUND'))
    client = ApiClient(temp_config, transport=transport)

    assert 'stored content is missing' in client.download(5)


def test_delete_sends_user_id(client_with_mock, logged_in, recorded):
    result = client_with_mock.delete_file(11)

    assert result == 'Deleted file 11.'
    assert recorded[-1].method == 'DELETE'
    assert recorded[-1].url.path == '/api/files/11'
    assert recorded[-1].headers['X-User-Id'] == '7'


def test_delete_when_not_owner(temp_config, logged_in):
    transport = httpx.MockTransport(
        lambda request: _json_error(403, 'You can only delete files you uploaded', 'UNAUTHORIZED_ACCESS')
    )
    client = ApiClient(temp_config, transport=transport)

    assert 'Only the user who uploaded' in client.delete_file(11)


def test_retries_server_errors(temp_config, no_sleep):
    calls = []

    def handler(request):
        calls.append(request)
        if len(calls) < 3:
            return _json_error(500, 'Error fetching files', 'QUERY_ERROR')
        return httpx.Response(200, json={'success': True, 'files': []})

    client = ApiClient(temp_config, transport=httpx.MockTransport(handler))

    assert client.list_files() == 'No files uploaded yet.'
    assert len(calls) == 3


def test_gives_up_after_max_retries(temp_config, no_sleep):
    calls = []

    def handler(request):
        calls.append(request)
        return _json_error(500, 'Error fetching files', 'QUERY_ERROR')

    client = ApiClient(temp_config, transport=httpx.MockTransport(handler))

    result = client.list_files()

    assert result == 'Error: Error fetching files (Code: QUERY_ERROR)'
    assert len(calls) == 4


def test_connection_failure(temp_config, no_sleep):
    def handler(request):
        raise httpx.ConnectError('connection refused', request=request)

    client = ApiClient(temp_config, transport=httpx.MockTransport(handler))

    assert 'Cannot connect' in client.list_files()


def test_client_errors_are_not_retried(temp_config, no_sleep):
    calls = []

    def handler(request):
        calls.append(request)
        return _json_error(400, 'Username and password are required', 'VALIDATION_ERROR')

    client = ApiClient(temp_config, transport=httpx.MockTransport(handler))
    client.login('alice', '')

    assert len(calls) == 1
