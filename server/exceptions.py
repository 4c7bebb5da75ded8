"""Custom exception classes for the FileSync server.

Every caller-facing error carries the HTTP status and the machine-readable
code used in the ``{"success": false, "error", "code"}`` response body.
"""


class FileSyncError(Exception):
    """
    Base exception class for all FileSync errors.
    """
    status_code = 500
    code = "INTERNAL_ERROR"


class ValidationError(FileSyncError):
    """
    Raised when request input is missing or malformed.
    """
    status_code = 400
    code = "VALIDATION_ERROR"


class UnknownUploaderError(ValidationError):
    """
    Raised when an upload names a user id that does not exist.
    """
    code = "UNKNOWN_UPLOADER"


class AuthError(FileSyncError):
    """
    Base class for authentication failures.
    """
    status_code = 401
    code = "AUTH_ERROR"


class InvalidCredentialsError(AuthError):
    """
    Raised when login credentials are invalid.
    """
    code = "INVALID_CREDENTIALS"


class MissingIdentityError(AuthError):
    """
    Raised when an owner-gated operation is called without a caller identity.
    """
    code = "IDENTITY_REQUIRED"


class UnauthorizedAccessError(FileSyncError):
    """
    Raised when a user attempts to delete a file they don't own.
    """
    status_code = 403
    code = "UNAUTHORIZED_ACCESS"


class DuplicateError(FileSyncError):
    """
    Raised on a unique-constraint violation.
    """
    status_code = 400
    code = "DUPLICATE"


class UserAlreadyExistsError(DuplicateError):
    """
    Raised when attempting to register a username that already exists.
    """
    code = "USER_ALREADY_EXISTS"


class NotFoundError(FileSyncError):
    """
    Base class for missing records and missing blobs.
    """
    status_code = 404
    code = "NOT_FOUND"


class FileRecordNotFoundError(NotFoundError):
    """
    Raised when no metadata record exists for a file id.
    """
    code = "FILE_NOT_FOUND"


class BlobNotFoundError(NotFoundError):
    """
    Raised when a record exists but its physical file is missing.
    """
    code = "BLOB_NOT_FOUND"


class StorageError(FileSyncError):
    """
    Raised on disk I/O failures in the blob store.
    """
    status_code = 500
    code = "STORAGE_ERROR"


class StorageWriteError(StorageError):
    """
    Raised when a blob cannot be written.
    """
    pass


class PayloadTooLargeError(StorageWriteError):
    """
    Raised when an upload exceeds the configured maximum size.
    """
    status_code = 413
    code = "PAYLOAD_TOO_LARGE"


class QueryError(FileSyncError):
    """
    Raised when the metadata store fails.
    """
    status_code = 500
    code = "QUERY_ERROR"
