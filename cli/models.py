"""Command request data types for CLI."""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class RegisterCommand:
    """Register a new user account."""

    username: str
    password: str
    command: Literal["register"] = "register"


@dataclass(frozen=True)
class LoginCommand:
    """Login with username and password."""

    username: str
    password: str
    command: Literal["login"] = "login"


@dataclass(frozen=True)
class LogoutCommand:
    """Forget the logged-in user."""

    command: Literal["logout"] = "logout"


@dataclass(frozen=True)
class WhoamiCommand:
    """Show the logged-in user."""

    command: Literal["whoami"] = "whoami"


@dataclass(frozen=True)
class UploadCommand:
    """Upload local files."""

    file_paths: tuple[str, ...]
    command: Literal["upload"] = "upload"


@dataclass(frozen=True)
class ListCommand:
    """List every uploaded file."""

    command: Literal["list"] = "list"


@dataclass(frozen=True)
class DownloadCommand:
    """Download file by id."""

    file_id: int
    output_path: str | None = None
    command: Literal["download"] = "download"


@dataclass(frozen=True)
class DeleteCommand:
    """Delete file by id."""

    file_id: int
    command: Literal["delete"] = "delete"


CommandRequest = (
    RegisterCommand
    | LoginCommand
    | LogoutCommand
    | WhoamiCommand
    | UploadCommand
    | ListCommand
    | DownloadCommand
    | DeleteCommand
)
