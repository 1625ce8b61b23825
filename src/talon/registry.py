"""Local talon registry.

A registry is bound to one directory. Each installed talon is a subdirectory
holding a TALON.md, and index.json beside them summarizes what is installed.
The index is loaded once when the registry is created and rewritten in full
after every change.

Concurrent use of one directory by several processes is not supported:
nothing is locked, and the last writer of index.json wins.
"""

import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path

from talon.errors import (
    InvalidFrontmatterError,
    ManifestError,
    ManifestNotFoundError,
    RegistryIOError,
    wrap_io_errors,
)
from talon.home import get_default_talons_dir
from talon.index import INDEX_FILE, TalonEntry, TalonIndex, load_index, save_index
from talon.manifest import TalonInfo, manifest_path, read_manifest


@dataclass
class SkippedTalon:
    """A directory that looked like a talon but could not be loaded."""

    path: Path
    reason: str


class TalonRegistry:
    """Registry of talons installed under a single directory."""

    def __init__(self, talons_dir: Path | str) -> None:
        """Bind to talons_dir, creating it if needed, and load its index.

        Raises:
            RegistryIOError: If the directory cannot be created or the index
                cannot be read.
            IndexCorruptError: If index.json exists but is malformed.
        """
        self.talons_dir = Path(talons_dir).expanduser().absolute()
        with wrap_io_errors(self.talons_dir, "create"):
            self.talons_dir.mkdir(parents=True, exist_ok=True)
        self._index = load_index(self.talons_dir)
        self.last_skipped: list[SkippedTalon] = []

    @classmethod
    def from_dir(cls, talons_dir: Path | str) -> "TalonRegistry":
        """Create a registry bound to an explicit directory."""
        return cls(talons_dir)

    @classmethod
    def default(cls) -> "TalonRegistry":
        """Create a registry bound to the default data location."""
        return cls(get_default_talons_dir())

    @property
    def index(self) -> TalonIndex:
        """The in-memory index."""
        return self._index

    def save_index(self) -> None:
        """Persist the in-memory index to index.json."""
        save_index(self._index, self.talons_dir)

    def discover_talons(self) -> list[TalonInfo]:
        """Scan the registry directory and index every talon found.

        Each immediate subdirectory with a TALON.md at its root is parsed and
        its entry replaces any existing entry with the same name. Directories
        whose manifest cannot be read or parsed are skipped and recorded in
        ``last_skipped``.

        Returns:
            The talons that were parsed successfully.

        Raises:
            RegistryIOError: If the directory cannot be listed or the index
                cannot be written.
        """
        discovered: list[TalonInfo] = []
        skipped: list[SkippedTalon] = []

        for talon_dir in self._child_paths():
            try:
                with wrap_io_errors(talon_dir, "inspect"):
                    if not (talon_dir.is_dir() and manifest_path(talon_dir).is_file()):
                        continue
                manifest = read_manifest(talon_dir)
            except (ManifestError, RegistryIOError) as e:
                skipped.append(SkippedTalon(path=talon_dir, reason=str(e)))
                continue

            self._index.talons[manifest.name] = TalonEntry.from_manifest(manifest, talon_dir)
            discovered.append(TalonInfo(manifest=manifest, path=talon_dir, installed=True))

        self.last_skipped = skipped
        self.save_index()
        return discovered

    def _child_paths(self) -> list[Path]:
        """Entries directly under the registry directory, sorted by name."""
        with wrap_io_errors(self.talons_dir, "list"):
            return sorted(self.talons_dir.iterdir())

    def list_talons(self) -> list[TalonEntry]:
        """All indexed talons, in no particular order."""
        return list(self._index.talons.values())

    def get_talon(self, name: str) -> TalonEntry | None:
        """Look up a talon by exact name. Returns None when not indexed."""
        return self._index.talons.get(name)

    def search_talons(self, query: str) -> list[TalonEntry]:
        """Find talons whose name, description, or any tag contains query.

        Matching is case-insensitive. Returns an empty list when nothing matches.
        """
        return [entry for entry in self._index.talons.values() if entry.matches(query)]

    def add_talon(self, source: Path | str) -> str:
        """Install a talon from a local directory.

        The source tree is copied into ``<registry>/<name>``. An existing
        directory of that name is deleted first, so reinstalling replaces the
        previous contents. If the copy fails after that, the talon is left
        uninstalled.

        Args:
            source: Directory with a TALON.md at its root.

        Returns:
            The talon name.

        Raises:
            ManifestNotFoundError: If source has no TALON.md.
            MissingFrontmatterError: If TALON.md has no frontmatter.
            InvalidFrontmatterError: If TALON.md is invalid, or its name cannot
                be used as a directory name.
            RegistryIOError: If reading, deleting, copying, or saving fails.
        """
        source = Path(source).expanduser()
        if not manifest_path(source).is_file():
            raise ManifestNotFoundError(source)

        manifest = read_manifest(source)
        destination = self._destination_for(manifest.name)

        source_resolved = source.resolve()
        destination_resolved = destination.resolve()

        if source_resolved == destination_resolved:
            # Already inside the registry under its own name; just index it
            pass
        elif source_resolved.is_relative_to(destination_resolved):
            # Source lives under the directory about to be replaced
            with tempfile.TemporaryDirectory() as tmp:
                staging = Path(tmp) / "staging"
                copy_tree(source, staging)
                _remove_existing(destination)
                copy_tree(staging, destination)
        else:
            _remove_existing(destination)
            copy_tree(source, destination)

        self._index.talons[manifest.name] = TalonEntry.from_manifest(manifest, destination)
        self.save_index()
        return manifest.name

    def _destination_for(self, name: str) -> Path:
        """Directory a talon named name is installed into."""
        if (
            not name.strip()
            or name in (".", "..", INDEX_FILE)
            or "/" in name
            or "\\" in name
            or Path(name).name != name
        ):
            msg = f"Talon name '{name}' cannot be used as a directory name"
            raise InvalidFrontmatterError(msg)
        return self.talons_dir / name

    def remove_talon(self, name: str) -> bool:
        """Uninstall a talon: delete its directory and drop it from the index.

        Removing a name that is not indexed is a no-op.

        Returns:
            True if the talon was removed, False if it was not indexed.

        Raises:
            RegistryIOError: If the directory cannot be deleted or the index
                cannot be saved. The index is left unchanged when deletion fails.
        """
        entry = self._index.talons.get(name)
        if entry is None:
            return False

        _remove_existing(entry.path)
        del self._index.talons[name]
        self.save_index()
        return True


def _remove_existing(path: Path) -> None:
    """Delete path (a directory tree or a single file) if it exists."""
    if not path.exists() and not path.is_symlink():
        return
    with wrap_io_errors(path, "remove"):
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()


def copy_tree(source: Path, destination: Path) -> None:
    """Recursively copy the contents of source into destination.

    Every file and directory below source is recreated at the same relative
    location under destination. The destination directory itself is never
    copied into itself when it lies inside source.

    Raises:
        RegistryIOError: If any file or directory cannot be copied.
    """
    destination_resolved = destination.resolve()

    def _skip_destination(directory: str, names: list[str]) -> list[str]:
        return [n for n in names if (Path(directory) / n).resolve() == destination_resolved]

    with wrap_io_errors(destination, "copy into"):
        try:
            shutil.copytree(source, destination, ignore=_skip_destination, dirs_exist_ok=True)
        except shutil.Error as e:
            # copytree collects per-file failures and raises them together
            failures = e.args[0] if e.args and isinstance(e.args[0], list) else []
            if not failures:
                raise
            first_src, _, reason = failures[0]
            raise OSError(f"{first_src}: {reason} ({len(failures)} file(s) failed)") from e
