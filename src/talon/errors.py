"""Error types and formatting utilities for the talon registry.

Defines the exceptions raised by the registry core and the helpers that turn
them (and Pydantic validation errors) into clean, user-facing messages.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import yaml
from pydantic import ValidationError
from rich.markup import escape

from talon import cli_logger, exit_codes


class TalonError(Exception):
    """Base class for all talon registry errors."""


class ManifestError(TalonError):
    """Raised when TALON.md content does not have the required structure."""


class MissingFrontmatterError(ManifestError):
    """Raised when TALON.md has no frontmatter block, or it is blank."""

    def __init__(self, message: str = "Invalid TALON.md format: missing frontmatter") -> None:
        super().__init__(message)


class InvalidFrontmatterError(ManifestError):
    """Raised when the frontmatter block does not describe a valid manifest."""


class ManifestNotFoundError(TalonError):
    """Raised when a talon directory has no TALON.md at its root."""

    def __init__(self, path: Path) -> None:
        """Initialize with the directory that was checked."""
        self.path = path
        super().__init__(f"TALON.md not found in {path}")


class TalonNotFoundError(TalonError):
    """Raised when a talon name is not present in the index."""

    def __init__(self, name: str) -> None:
        """Initialize with the talon name that was not found."""
        self.name = name
        super().__init__(f"Talon '{name}' not found")


class RegistryIOError(TalonError):
    """Raised when a filesystem operation on the registry fails.

    The originating OSError is kept as ``cause`` and chained as ``__cause__``.
    """

    def __init__(self, path: Path, cause: OSError, action: str = "access") -> None:
        """Initialize with the path involved and the underlying OSError."""
        self.path = path
        self.cause = cause
        self.action = action
        reason = cause.strerror or str(cause)
        super().__init__(f"Failed to {action} '{path}': {reason}")


class IndexCorruptError(TalonError):
    """Raised when index.json exists but cannot be deserialized."""

    def __init__(self, path: Path, detail: str) -> None:
        """Initialize with the index path and a description of the problem."""
        self.path = path
        self.detail = detail
        super().__init__(f"Corrupt talon index '{path}': {detail}")


@contextmanager
def wrap_io_errors(path: Path, action: str = "access") -> Iterator[None]:
    """Re-raise any OSError from the managed block as RegistryIOError.

    Args:
        path: Path the block operates on, reported in the error.
        action: Verb describing the operation (e.g. "read", "copy").
    """
    try:
        yield
    except OSError as e:
        raise RegistryIOError(path, e, action) from e


def format_validation_errors(error: ValidationError) -> str:
    """Format Pydantic ValidationError into clean, user-friendly message.

    Removes Pydantic-specific URLs and technical jargon, producing a message
    suitable for CLI output.

    Args:
        error: The Pydantic ValidationError to format.

    Returns:
        A clean, human-readable error message.
    """
    messages = []

    for err in error.errors():
        # Field path, e.g. "commands.0.args.1.required"
        loc = ".".join(str(part) for part in err["loc"]) or "frontmatter"
        error_type = err["type"]

        if error_type == "missing":
            messages.append(f"'{loc}': field is required")
        elif error_type == "string_type":
            messages.append(f"'{loc}': expected string")
        elif error_type == "list_type":
            messages.append(f"'{loc}': expected list")
        elif error_type in ("dict_type", "model_type"):
            messages.append(f"'{loc}': expected mapping")
        elif error_type == "bool_type" or error_type == "bool_parsing":
            messages.append(f"'{loc}': expected boolean")
        else:
            messages.append(f"'{loc}': {err['msg'].lower()}")

    return "; ".join(messages)


def handle_cli_error(error: Exception) -> int:
    """Handle an unhandled exception at the CLI boundary.

    Formats the error into a clean user-friendly message and returns
    an appropriate exit code, so raw tracebacks never reach the user.

    Args:
        error: The exception to handle.

    Returns:
        An exit code from exit_codes.
    """
    if isinstance(error, TalonNotFoundError):
        cli_logger.error(escape(str(error)))
        return exit_codes.TALON_NOT_FOUND

    if isinstance(error, (ManifestError, ManifestNotFoundError)):
        cli_logger.error(f"Invalid talon: {escape(str(error))}")
        return exit_codes.TALON_INVALID

    if isinstance(error, IndexCorruptError):
        cli_logger.error(escape(str(error)))
        cli_logger.dim("  Fix or delete the index file, then run 'talon discover' to rebuild it.")
        return exit_codes.INDEX_CORRUPT

    if isinstance(error, RegistryIOError):
        cli_logger.error(escape(str(error)))
        return exit_codes.IO_ERROR

    if isinstance(error, ValidationError):
        cli_logger.error(f"Invalid data: {escape(format_validation_errors(error))}")
        return exit_codes.TALON_INVALID

    if isinstance(error, OSError):
        if error.filename:
            cli_logger.error(f"{escape(str(error.strerror))}: {escape(str(error.filename))}")
        else:
            cli_logger.error(escape(str(error)))
        return exit_codes.IO_ERROR

    if isinstance(error, yaml.YAMLError):
        cli_logger.error(f"Invalid YAML: {escape(str(error))}")
        return exit_codes.TALON_INVALID

    cli_logger.error(f"Unexpected error: {escape(str(error))}")
    return exit_codes.GENERAL_ERROR
