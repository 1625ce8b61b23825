"""Index schema and persistence for installed talons.

The index is a single index.json document in the registry directory. It maps
each talon name to a summary of its manifest plus the directory it lives in,
so listing and searching never have to re-parse every TALON.md.
"""

import json
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from talon.errors import IndexCorruptError, format_validation_errors, wrap_io_errors
from talon.manifest import TalonManifest

INDEX_FILE = "index.json"

# Format version written to fresh indexes
INDEX_VERSION = "1.0"


class TalonEntry(BaseModel):
    """Summary of an installed talon, copied from its manifest."""

    name: str = Field(description="Talon name (index key)")
    version: str = Field(description="Talon version")
    description: str = Field(description="One-line description")
    author: str | None = Field(default=None, description="Author name")
    license: str | None = Field(default=None, description="License identifier")
    path: Path = Field(description="Absolute path of the talon directory")
    tags: list[str] = Field(default_factory=list, description="Search tags")

    @classmethod
    def from_manifest(cls, manifest: TalonManifest, path: Path) -> "TalonEntry":
        """Build an entry from a parsed manifest and its directory."""
        return cls(
            name=manifest.name,
            version=manifest.version,
            description=manifest.description,
            author=manifest.author,
            license=manifest.license,
            path=path,
            tags=list(manifest.tags),
        )

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match on name, description, or any tag."""
        needle = query.lower()
        return (
            needle in self.name.lower()
            or needle in self.description.lower()
            or any(needle in tag.lower() for tag in self.tags)
        )


class TalonIndex(BaseModel):
    """Root schema for index.json."""

    talons: dict[str, TalonEntry] = Field(
        default_factory=dict,
        description="Installed talons keyed by name",
    )
    version: str = Field(description="Index format version")


def index_path(talons_dir: Path) -> Path:
    """Path of index.json within a registry directory."""
    return talons_dir / INDEX_FILE


def load_index(talons_dir: Path) -> TalonIndex:
    """Load index.json from a registry directory.

    Args:
        talons_dir: Registry directory.

    Returns:
        The stored TalonIndex, or an empty one at INDEX_VERSION when the
        directory has no index yet.

    Raises:
        RegistryIOError: If index.json exists but cannot be read.
        IndexCorruptError: If index.json is not valid JSON or does not match
            the index schema.
    """
    path = index_path(talons_dir)
    with wrap_io_errors(path, "read"):
        if not path.exists():
            return TalonIndex(talons={}, version=INDEX_VERSION)
        raw = path.read_bytes()

    try:
        content = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise IndexCorruptError(path, "not valid UTF-8") from e

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise IndexCorruptError(path, f"invalid JSON: {e}") from e

    try:
        return TalonIndex.model_validate(data)
    except ValidationError as e:
        raise IndexCorruptError(path, format_validation_errors(e)) from e


def save_index(index: TalonIndex, talons_dir: Path) -> None:
    """Write the whole index to index.json, replacing any previous content.

    Raises:
        RegistryIOError: If the file cannot be written.
    """
    path = index_path(talons_dir)
    content = json.dumps(index.model_dump(mode="json"), indent=2)
    with wrap_io_errors(path, "write"):
        path.write_text(content + "\n", encoding="utf-8")
