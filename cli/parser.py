"""Command parser for CLI input."""

import shlex

from cli.models import (
    CommandRequest,
    DeleteCommand,
    DownloadCommand,
    ListCommand,
    LoginCommand,
    LogoutCommand,
    RegisterCommand,
    UploadCommand,
    WhoamiCommand,
)


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


def parse_command(input_line: str) -> CommandRequest:
    """Parse user input into a CommandRequest object.

    Args:
        input_line: Raw user input from REPL

    Returns:
        CommandRequest object

    Raises:
        ParseError: If command syntax is invalid
    """
    if not input_line.strip():
        raise ParseError("Empty command")

    try:
        tokens = shlex.split(input_line)
    except ValueError as e:
        raise ParseError(f"Invalid syntax: {e}")

    if not tokens:
        raise ParseError("Empty command")

    command_name = tokens[0]
    args = tokens[1:]

    if command_name == "register":
        return _parse_register(args)
    elif command_name == "login":
        return _parse_login(args)
    elif command_name == "logout":
        _expect_no_args("logout", args)
        return LogoutCommand()
    elif command_name == "whoami":
        _expect_no_args("whoami", args)
        return WhoamiCommand()
    elif command_name == "upload":
        return _parse_upload(args)
    elif command_name == "list":
        _expect_no_args("list", args)
        return ListCommand()
    elif command_name == "download":
        return _parse_download(args)
    elif command_name == "delete":
        return _parse_delete(args)
    else:
        raise ParseError(f"Unknown command: {command_name}")


def _expect_no_args(command_name: str, args: list[str]) -> None:
    if args:
        raise ParseError(f"{command_name} takes no arguments")


def _parse_file_id(raw: str) -> int:
    try:
        file_id = int(raw)
    except ValueError:
        raise ParseError(f"Invalid file id: {raw!r} (expected a number, see 'list')")
    if file_id <= 0:
        raise ParseError(f"Invalid file id: {raw!r} (expected a positive number)")
    return file_id


def _parse_register(args: list[str]) -> RegisterCommand:
    """Parse 'register <username> <password>' command."""
    if len(args) != 2:
        raise ParseError("register requires exactly 2 arguments: <username> <password>")

    username, password = args
    return RegisterCommand(username=username, password=password)


def _parse_login(args: list[str]) -> LoginCommand:
    """Parse 'login <username> <password>' command."""
    if len(args) != 2:
        raise ParseError("login requires exactly 2 arguments: <username> <password>")

    username, password = args
    return LoginCommand(username=username, password=password)


def _parse_upload(args: list[str]) -> UploadCommand:
    """Parse 'upload <path> [<path> ...]' command."""
    if not args:
        raise ParseError("upload requires at least one file path")

    return UploadCommand(file_paths=tuple(args))


def _parse_download(args: list[str]) -> DownloadCommand:
    """Parse 'download <file_id> [output_path]' command."""
    if not 1 <= len(args) <= 2:
        raise ParseError("download requires 1 or 2 arguments: <file_id> [output_path]")

    output_path = args[1] if len(args) > 1 else None
    return DownloadCommand(file_id=_parse_file_id(args[0]), output_path=output_path)


def _parse_delete(args: list[str]) -> DeleteCommand:
    """Parse 'delete <file_id>' command."""
    if len(args) != 1:
        raise ParseError("delete requires exactly 1 argument: <file_id>")

    return DeleteCommand(file_id=_parse_file_id(args[0]))
