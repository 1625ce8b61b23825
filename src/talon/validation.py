"""Validation of talon directories before they are added.

Provides a simple result type carrying specific error messages and an
optional exit code, and a check that a directory is an installable talon.
"""

from dataclasses import dataclass, field
from pathlib import Path

from talon import exit_codes
from talon.errors import ManifestError, RegistryIOError
from talon.manifest import MANIFEST_FILE, TalonManifest, manifest_path, read_manifest


@dataclass
class ValidationResult:
    """Result of a validation operation.

    Attributes:
        is_valid: True if validation passed, False otherwise.
        errors: List of specific error messages if validation failed.
        error_code: Optional exit code when validation fails.
            The validation site knows best what error code to use.
        manifest: The parsed manifest when validation passed.
    """

    is_valid: bool
    errors: list[str] = field(default_factory=list)
    error_code: int | None = None
    manifest: TalonManifest | None = None


def validate_talon_dir(path: Path) -> ValidationResult:
    """Check that path is a directory holding a parsable TALON.md.

    Also flags commands declared more than once, since their capability
    names would collide.
    """
    if not path.exists():
        return ValidationResult(
            is_valid=False,
            errors=[f"Path does not exist: {path}"],
            error_code=exit_codes.TALON_NOT_FOUND,
        )

    if not path.is_dir():
        return ValidationResult(
            is_valid=False,
            errors=[f"Path is not a directory: {path}"],
            error_code=exit_codes.INVALID_ARGS,
        )

    if not manifest_path(path).is_file():
        return ValidationResult(
            is_valid=False,
            errors=[f"Missing {MANIFEST_FILE} file"],
            error_code=exit_codes.TALON_INVALID,
        )

    try:
        manifest = read_manifest(path)
    except ManifestError as e:
        return ValidationResult(is_valid=False, errors=[str(e)], error_code=exit_codes.TALON_INVALID)
    except RegistryIOError as e:
        return ValidationResult(is_valid=False, errors=[str(e)], error_code=exit_codes.IO_ERROR)

    seen: set[str] = set()
    duplicates: list[str] = []
    for command in manifest.commands:
        if command.name in seen and command.name not in duplicates:
            duplicates.append(command.name)
        seen.add(command.name)

    errors = [f"Command '{name}' is declared more than once" for name in duplicates]
    if errors:
        return ValidationResult(is_valid=False, errors=errors, error_code=exit_codes.TALON_INVALID)

    return ValidationResult(is_valid=True, manifest=manifest)
