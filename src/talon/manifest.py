"""TALON.md manifest model and parsing.

A talon is a directory whose root holds a TALON.md file. The file starts with
a YAML frontmatter block fenced by ``---`` lines, followed by free-form
Markdown documentation:

    ---
    name: github
    version: 1.0.0
    description: GitHub integration for issues, PRs, and workflows
    tags: [github, devtools]
    commands:
      - name: create-issue
        description: Open a new issue
        args:
          - name: title
            type: string
            required: true
    ---

    # GitHub Talon
    ...

Only the frontmatter is structured. The body is for humans and models and is
not kept on the parsed manifest.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from talon.errors import (
    InvalidFrontmatterError,
    MissingFrontmatterError,
    format_validation_errors,
    wrap_io_errors,
)

MANIFEST_FILE = "TALON.md"

# A delimiter is a line holding only "---" (trailing whitespace tolerated)
FRONTMATTER_DELIMITER = re.compile(r"^---[ \t]*\r?$", re.MULTILINE)


def _scalar_to_str(value: Any) -> Any:
    """Accept YAML numbers (``version: 1.0``) as their string form."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class TalonRuntime(BaseModel):
    """Runtime a talon's supporting files expect (e.g. python 3.12)."""

    kind: str = Field(description="Runtime kind, e.g. 'python' or 'node'")
    version: str | None = Field(default=None, description="Runtime version constraint")

    @field_validator("version", mode="before")
    @classmethod
    def coerce_version(cls, v: Any) -> Any:
        """Accept numeric YAML versions as strings."""
        return _scalar_to_str(v)


class EnvVar(BaseModel):
    """Environment variable a talon reads."""

    name: str = Field(description="Environment variable name")
    required: bool = Field(description="Whether the variable must be set")
    description: str | None = Field(default=None, description="Human-readable description")
    default: str | None = Field(default=None, description="Value used when not set")

    @field_validator("default", mode="before")
    @classmethod
    def coerce_default(cls, v: Any) -> Any:
        """Accept numeric YAML defaults as strings."""
        return _scalar_to_str(v)


class CommandArg(BaseModel):
    """Argument accepted by a talon command."""

    name: str = Field(description="Argument name")
    type: str = Field(description="Declared type tag, e.g. 'string' or 'integer'")
    required: bool = Field(description="Whether the argument must be supplied")
    description: str | None = Field(default=None, description="Human-readable description")


class TalonCommand(BaseModel):
    """Command a talon exposes to the host application."""

    name: str = Field(description="Command name, unique within the talon")
    description: str = Field(description="What the command does")
    args: list[CommandArg] = Field(default_factory=list, description="Command arguments")


class TalonManifest(BaseModel):
    """Frontmatter of a TALON.md file."""

    name: str = Field(description="Talon name, unique key in the registry")
    version: str = Field(description="Free-form version string")
    description: str = Field(description="One-line description")
    author: str | None = Field(default=None, description="Author name")
    license: str | None = Field(default=None, description="License identifier")
    tags: list[str] = Field(default_factory=list, description="Search tags")
    repository: str | None = Field(default=None, description="Source repository URL")
    homepage: str | None = Field(default=None, description="Homepage URL")
    runtime: TalonRuntime | None = Field(default=None, description="Runtime requirements")
    permissions: list[str] = Field(default_factory=list, description="Requested permissions")
    environment: list[EnvVar] = Field(default_factory=list, description="Environment variables")
    commands: list[TalonCommand] = Field(default_factory=list, description="Exposed commands")

    @field_validator("version", mode="before")
    @classmethod
    def coerce_version(cls, v: Any) -> Any:
        """Accept numeric YAML versions as strings."""
        return _scalar_to_str(v)


@dataclass
class TalonInfo:
    """A fully parsed talon together with where it lives on disk."""

    manifest: TalonManifest
    path: Path
    installed: bool = True


def split_frontmatter(content: str) -> tuple[str | None, str]:
    """Split TALON.md content into its frontmatter and body.

    The content is cut on delimiter lines into at most three parts. Anything
    before the first delimiter is ignored, the second part is the frontmatter
    and the third (if any) is the body.

    Returns:
        Tuple of (frontmatter or None when absent, body).
    """
    parts = FRONTMATTER_DELIMITER.split(content, maxsplit=2)
    if len(parts) < 2:
        return None, ""
    body = parts[2] if len(parts) == 3 else ""
    return parts[1], body.lstrip("\r\n")


def parse_manifest(content: str) -> TalonManifest:
    """Parse TALON.md content into a TalonManifest.

    Args:
        content: Full text of a TALON.md file.

    Returns:
        Validated TalonManifest.

    Raises:
        MissingFrontmatterError: If there is no frontmatter block or it is blank.
        InvalidFrontmatterError: If the frontmatter is not valid YAML or does
            not match the manifest schema.
    """
    frontmatter, _ = split_frontmatter(content)
    if frontmatter is None or not frontmatter.strip():
        raise MissingFrontmatterError()

    try:
        data = yaml.safe_load(frontmatter)
    except yaml.YAMLError as e:
        msg = f"Failed to parse manifest: invalid YAML: {e}"
        raise InvalidFrontmatterError(msg) from e

    if not isinstance(data, dict):
        msg = f"Failed to parse manifest: expected a mapping, got {type(data).__name__}"
        raise InvalidFrontmatterError(msg)

    try:
        return TalonManifest.model_validate(data)
    except ValidationError as e:
        msg = f"Failed to parse manifest: {format_validation_errors(e)}"
        raise InvalidFrontmatterError(msg) from e


def dump_manifest(manifest: TalonManifest, body: str = "") -> str:
    """Serialize a TalonManifest back into TALON.md text.

    Absent optional fields are left out, so parsing the result yields a
    manifest equal to the one given.
    """
    frontmatter = yaml.safe_dump(
        manifest.model_dump(exclude_none=True),
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )
    text = f"---\n{frontmatter}---\n"
    if body:
        text += f"\n{body}"
    return text


def manifest_path(talon_dir: Path) -> Path:
    """Path of the TALON.md file for a talon directory."""
    return talon_dir / MANIFEST_FILE


def read_manifest(talon_dir: Path) -> TalonManifest:
    """Read and parse TALON.md from a talon directory.

    Raises:
        RegistryIOError: If the file cannot be read.
        InvalidFrontmatterError: If the file is not UTF-8 or is invalid.
        MissingFrontmatterError: If the file has no frontmatter.
    """
    path = manifest_path(talon_dir)
    with wrap_io_errors(path, "read"):
        raw = path.read_bytes()
    try:
        content = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        msg = f"Failed to parse manifest: '{path}' is not valid UTF-8"
        raise InvalidFrontmatterError(msg) from e
    return parse_manifest(content)
