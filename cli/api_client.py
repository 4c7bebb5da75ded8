"""HTTP client for communicating with the FileSync server."""

import os
import time
import uuid
from pathlib import Path
from typing import Optional

import httpx

from common.constants import USER_ID_HEADER
from common.logging_config import get_logger
from cli.config import Config
from cli.utils import ProgressFileReader, TransferProgress, filename_from_disposition, format_file_size

logger = get_logger(__name__)

NOT_LOGGED_IN = "Not logged in. Please run: login <username> <password>"


class ApiClient:
    """HTTP client for the FileSync API with retry logic and error handling."""

    def __init__(self, config: Config, transport: Optional[httpx.BaseTransport] = None):
        """
        Initialize API client.

        Args:
            config: Configuration instance
            transport: Optional httpx transport (tests pass an httpx.MockTransport)
        """
        self.config = config
        self.session = httpx.Client(
            base_url=config.get_base_url(),
            timeout=config.get_timeout(),
            transport=transport,
        )
        self.request_id = None
        logger.info(f"Initialized ApiClient [base_url={config.get_base_url()}]")

    def _calculate_upload_timeout(self, file_size: int) -> float:
        """
        Calculate timeout for upload based on file size.

        Args:
            file_size: File size in bytes

        Returns:
            Timeout in seconds (30s base + 0.1s per MB)
        """
        size_mb = file_size / (1024 * 1024)
        return 30.0 + size_mb * 0.1

    def _new_request_headers(self, headers: Optional[dict] = None) -> dict:
        self.request_id = str(uuid.uuid4())
        merged = dict(headers or {})
        merged['X-Request-ID'] = self.request_id
        return merged

    def _request_with_retry(
        self,
        method: str,
        endpoint: str,
        max_retries: Optional[int] = None,
        **kwargs
    ) -> httpx.Response:
        """
        Make HTTP request with retry logic on 5xx errors and network failures.

        Args:
            method: HTTP method (GET, POST, DELETE, etc.)
            endpoint: API endpoint path
            max_retries: Max retry attempts (uses config default if None)
            **kwargs: Additional arguments to pass to httpx request

        Returns:
            HTTP response object

        Raises:
            ConnectionError: If max retries exceeded or connection fails
        """
        retry_config = self.config.get_retry_config()
        max_retries = max_retries if max_retries is not None else retry_config['max_retries']
        backoff = retry_config['retry_backoff_multiplier']

        kwargs['headers'] = self._new_request_headers(kwargs.get('headers'))
        last_exception = None

        logger.debug(f"Making request: {method} {endpoint} [request_id={self.request_id}]")

        for attempt in range(max_retries + 1):
            try:
                response = self.session.request(method, endpoint, **kwargs)

                logger.debug(
                    f"Response received: {method} {endpoint} status={response.status_code} "
                    f"[request_id={self.request_id}]"
                )

                if 400 <= response.status_code < 500:
                    logger.warning(
                        f"Client error: {method} {endpoint} status={response.status_code} "
                        f"[request_id={self.request_id}]"
                    )
                    return response

                if response.status_code >= 500 and attempt < max_retries:
                    delay = backoff ** attempt
                    logger.warning(
                        f"Server error (attempt {attempt + 1}/{max_retries + 1}): "
                        f"{method} {endpoint} status={response.status_code}, retrying in {delay}s "
                        f"[request_id={self.request_id}]"
                    )
                    time.sleep(delay)
                    continue

                return response

            except (httpx.ConnectError, httpx.TimeoutException) as e:
                last_exception = e
                if attempt < max_retries:
                    delay = backoff ** attempt
                    logger.warning(
                        f"Network error (attempt {attempt + 1}/{max_retries + 1}): "
                        f"{method} {endpoint} error={type(e).__name__}, retrying in {delay}s "
                        f"[request_id={self.request_id}]"
                    )
                    time.sleep(delay)
                else:
                    logger.error(
                        f"Network error (max retries exceeded): {method} {endpoint} error={e} "
                        f"[request_id={self.request_id}]"
                    )

        if isinstance(last_exception, httpx.TimeoutException):
            raise ConnectionError("Request timed out. Server may be overloaded.")
        raise ConnectionError("Cannot connect to FileSync server. Is it running?")

    def _format_error(self, response: httpx.Response) -> str:
        """
        Map HTTP errors to user-friendly messages.

        Args:
            response: HTTP response object

        Returns:
            User-friendly error message
        """
        try:
            error_data = response.json()
            detail = error_data.get('error') or 'Unknown error'
            code = error_data.get('code') or 'UNKNOWN'
        except ValueError:
            detail = response.text or 'Unknown error'
            code = 'UNKNOWN'

        error_messages = {
            'INVALID_CREDENTIALS': 'Invalid username or password.',
            'USER_ALREADY_EXISTS': 'Username already taken. Try logging in or choose a different username.',
            'IDENTITY_REQUIRED': NOT_LOGGED_IN,
            'UNAUTHORIZED_ACCESS': 'Only the user who uploaded this file can delete it.',
            'FILE_NOT_FOUND': 'File not found on server.',
            'BLOB_NOT_FOUND': 'The file record exists but its stored content is missing on the server.',
            'UNKNOWN_UPLOADER': 'The logged-in user no longer exists on the server. Please log in again.',
            'PAYLOAD_TOO_LARGE': detail,
        }

        if code in error_messages:
            return error_messages[code]

        if code != 'UNKNOWN':
            return f"{detail} (Code: {code})"

        status_messages = {
            400: 'Bad request',
            401: 'Not authenticated',
            403: 'Access forbidden',
            404: 'Not found',
            413: 'File too large',
            500: 'Server error',
            503: 'Service unavailable',
        }
        return status_messages.get(response.status_code, detail)

    def _authenticate(self, endpoint: str, username: str, password: str) -> dict:
        response = self._request_with_retry(
            'POST',
            endpoint,
            json={'username': username, 'password': password}
        )
        if response.status_code != 200:
            raise RuntimeError(self._format_error(response))

        user = response.json()['user']
        self.config.set_current_user(user['id'], user['username'])
        return user

    def register(self, username: str, password: str) -> str:
        """
        Register a new user account and log in as it.

        Args:
            username: Username for new account
            password: Password for new account

        Returns:
            Success message with registration details
        """
        logger.info(f"Attempting to register user: {username}")
        try:
            user = self._authenticate('/api/register', username, password)
        except RuntimeError as e:
            logger.warning(f"Registration failed for user: {username}: {e}")
            return f"Registration failed: {e}"
        except ConnectionError as e:
            logger.error(f"Connection error during registration: {e}")
            return f"Error: {e}"

        logger.info(f"Registration successful for user: {username} [user_id={user['id']}]")
        return f"Registration successful!\nUser ID: {user['id']}\nLogged in as {user['username']}."

    def login(self, username: str, password: str) -> str:
        """
        Log in and remember the user in the config file.

        Args:
            username: Username
            password: Password

        Returns:
            Success message with login details
        """
        logger.info(f"Attempting to login user: {username}")
        try:
            user = self._authenticate('/api/login', username, password)
        except RuntimeError as e:
            logger.warning(f"Login failed for user: {username}: {e}")
            return f"Login failed: {e}"
        except ConnectionError as e:
            logger.error(f"Connection error during login: {e}")
            return f"Error: {e}"

        logger.info(f"Login successful for user: {username}")
        return f"Login successful!\nLogged in as {user['username']} (ID: {user['id']})."

    def logout(self) -> str:
        user = self.config.get_current_user()
        if user is None:
            return "Not logged in."
        self.config.clear_current_user()
        return f"Logged out {user['username']}."

    def whoami(self) -> str:
        user = self.config.get_current_user()
        if user is None:
            return NOT_LOGGED_IN
        return f"Logged in as {user['username']} (ID: {user['id']}) on {self.config.get_base_url()}"

    def upload_files(self, file_paths: list[str]) -> str:
        """
        Upload local files as the logged-in user.

        Uploads are streamed and never retried: the file body cannot be replayed.

        Args:
            file_paths: Local file paths

        Returns:
            Formatted result message with upload status for each file
        """
        user = self.config.get_current_user()
        if user is None:
            return f"Error: {NOT_LOGGED_IN}"

        results = []
        for file_path in file_paths:
            path = Path(file_path).expanduser()

            if not path.exists():
                results.append(f"Error: File not found: {file_path}")
                continue
            if not path.is_file():
                results.append(f"Error: Not a file: {file_path}")
                continue

            file_size = path.stat().st_size
            upload_timeout = self._calculate_upload_timeout(file_size)
            progress = TransferProgress("Uploading", path.name, file_size)

            try:
                with open(path, 'rb') as handle:
                    response = self.session.post(
                        '/api/upload',
                        files={'file': (path.name, ProgressFileReader(handle, progress))},
                        data={'uploadedBy': str(user['id'])},
                        headers=self._new_request_headers(),
                        timeout=upload_timeout,
                    )
                progress.finish()

                if response.status_code == 200:
                    uploaded = response.json()['file']
                    logger.info(f"Uploaded {path} [file_id={uploaded['id']}]")
                    results.append(
                        f"Uploaded: {uploaded['original_name']} "
                        f"(ID: {uploaded['id']}, Size: {format_file_size(uploaded['file_size'])})"
                    )
                else:
                    results.append(f"Error uploading {file_path}: {self._format_error(response)}")

            except httpx.ConnectError:
                progress.abort()
                results.append(f"Error uploading {file_path}: Cannot connect to FileSync server")
            except httpx.TimeoutException:
                progress.abort()
                results.append(
                    f"Error uploading {file_path}: Upload timed out "
                    f"(file size: {format_file_size(file_size)}, timeout: {upload_timeout:.1f}s)"
                )
            except OSError as e:
                progress.abort()
                results.append(f"Error reading {file_path}: {e}")

        return '\n'.join(results) if results else "No files uploaded."

    def list_files(self) -> str:
        """
        List every file on the server.

        Returns:
            Formatted list of files
        """
        try:
            response = self._request_with_retry('GET', '/api/files')
        except ConnectionError as e:
            return f"Error: {e}"

        if response.status_code != 200:
            return f"Error: {self._format_error(response)}"

        files = response.json()['files']
        if not files:
            return "No files uploaded yet."

        output = [f"Found {len(files)} file(s):\n"]
        for file_meta in files:
            uploader = file_meta.get('uploaded_by_name') or f"user #{file_meta['uploaded_by']}"
            output.append(
                f"  [{file_meta['id']}] {file_meta['original_name']}\n"
                f"    Size: {format_file_size(file_meta['file_size'])}\n"
                f"    Uploaded by: {uploader}\n"
                f"    Uploaded at: {file_meta['upload_date']}"
            )
        return '\n'.join(output)

    def _resolve_output_path(self, output_path: Optional[str], filename: str) -> Path:
        if output_path:
            target = Path(output_path).expanduser()
            if target.is_dir() or output_path.endswith(('/', os.sep)):
                target = target / filename
        else:
            target = self.config.get_download_dir() / filename
        target.parent.mkdir(parents=True, exist_ok=True)
        return target

    def download(self, file_id: int, output_path: Optional[str] = None) -> str:
        """
        Download a file by id with progress feedback.

        Args:
            file_id: Server file id
            output_path: Optional output file or directory (defaults to the download dir)

        Returns:
            Success message with download details
        """
        try:
            with self.session.stream(
                'GET',
                f'/api/download/{file_id}',
                headers=self._new_request_headers(),
            ) as response:
                if response.status_code != 200:
                    response.read()
                    return f"Error: {self._format_error(response)}"

                filename = filename_from_disposition(response.headers.get('Content-Disposition')) or f"file-{file_id}"
                output_file = self._resolve_output_path(output_path, filename)
                total_size = int(response.headers.get('Content-Length', 0))
                progress = TransferProgress("Downloading", filename, total_size)

                with open(output_file, 'wb') as f:
                    for chunk in response.iter_bytes(chunk_size=64 * 1024):
                        f.write(chunk)
                        progress.advance(len(chunk))
                progress.finish()

                logger.info(f"Downloaded file {file_id} to {output_file}")
                return (
                    f"Downloaded: {filename} ({format_file_size(progress.transferred)})\n"
                    f"Saved to: {output_file.absolute()}"
                )

        except httpx.ConnectError:
            return "Error: Cannot connect to FileSync server. Is it running?"
        except httpx.TimeoutException:
            return "Error: Request timed out. Server may be overloaded."
        except OSError as e:
            return f"Error writing file: {e}"

    def delete_file(self, file_id: int) -> str:
        """
        Delete a file, identifying as the logged-in user.

        Args:
            file_id: Server file id

        Returns:
            Success or error message
        """
        headers = {}
        user = self.config.get_current_user()
        if user is not None:
            headers[USER_ID_HEADER] = str(user['id'])

        try:
            response = self._request_with_retry('DELETE', f'/api/files/{file_id}', headers=headers)
        except ConnectionError as e:
            return f"Error: {e}"

        if response.status_code == 200:
            logger.info(f"Deleted file {file_id}")
            return f"Deleted file {file_id}."
        return f"Error: {self._format_error(response)}"

    def close(self) -> None:
        """Close the HTTP session."""
        self.session.close()
