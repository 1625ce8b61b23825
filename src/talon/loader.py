"""Talon loading for host applications.

Turns index entries into fully parsed manifests and derives the flat list of
capabilities (one per declared command) that a host application can offer,
plus a plain-text summary suitable for a system prompt.
"""

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from talon.errors import ManifestError, RegistryIOError, TalonNotFoundError
from talon.manifest import TalonInfo, read_manifest
from talon.registry import TalonRegistry

PROMPT_HEADER = "Available Talons:"


@dataclass
class CapabilityArg:
    """Argument of a capability."""

    name: str
    type: str
    required: bool
    description: str | None = None


@dataclass
class TalonCapability:
    """A single invokable command, named ``<talon>.<command>``."""

    name: str
    description: str
    args: list[CapabilityArg] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output, leaving out absent argument descriptions."""
        data = asdict(self)
        for arg in data["args"]:
            if arg["description"] is None:
                del arg["description"]
        return data


class TalonLoader:
    """Loads talons from a registry and derives their capabilities.

    Manifests are re-read from disk on every call; the index is only used
    to find where a talon lives.
    """

    def __init__(self, registry: TalonRegistry) -> None:
        self.registry = registry

    @classmethod
    def from_dir(cls, talons_dir: Path | str) -> "TalonLoader":
        """Create a loader over a registry bound to talons_dir."""
        return cls(TalonRegistry.from_dir(talons_dir))

    @classmethod
    def default(cls) -> "TalonLoader":
        """Create a loader over the registry at the default data location."""
        return cls(TalonRegistry.default())

    def discover_and_load(self) -> list[TalonInfo]:
        """Discover talons on disk and return everything that parsed."""
        return self.registry.discover_talons()

    def load_talon(self, name: str) -> TalonInfo:
        """Load the full manifest of an indexed talon.

        Raises:
            TalonNotFoundError: If name is not in the index.
            RegistryIOError: If TALON.md cannot be read.
            ManifestError: If TALON.md is missing its frontmatter or is invalid.
        """
        entry = self.registry.get_talon(name)
        if entry is None:
            raise TalonNotFoundError(name)

        manifest = read_manifest(entry.path)
        return TalonInfo(manifest=manifest, path=entry.path, installed=True)

    def get_capabilities(self, name: str) -> list[TalonCapability]:
        """Flatten a talon's commands into capabilities, in declaration order.

        Raises:
            TalonNotFoundError: If name is not in the index.
            RegistryIOError: If TALON.md cannot be read.
            ManifestError: If TALON.md is invalid.
        """
        talon = self.load_talon(name)
        return [
            TalonCapability(
                name=f"{name}.{command.name}",
                description=command.description,
                args=[
                    CapabilityArg(
                        name=arg.name,
                        type=arg.type,
                        required=arg.required,
                        description=arg.description,
                    )
                    for arg in command.args
                ],
            )
            for command in talon.manifest.commands
        ]

    def generate_system_prompt(self, names: list[str]) -> str:
        """Describe the given talons as a text block for a system prompt.

        Each talon gets a heading with its name and version, its description,
        and its commands when it declares any. Talons that cannot be loaded
        are left out.
        """
        sections = [f"{PROMPT_HEADER}\n\n"]

        for talon in self._load_many(names):
            manifest = talon.manifest
            section = f"## {manifest.name} (v{manifest.version})\n{manifest.description}\n\n"
            if manifest.commands:
                section += "Commands:\n"
                section += "".join(f"- {cmd.name}: {cmd.description}\n" for cmd in manifest.commands)
                section += "\n"
            sections.append(section)

        return "".join(sections)

    def _load_many(self, names: list[str]) -> list[TalonInfo]:
        """Load each name in order, dropping the ones that fail."""
        loaded = []
        for name in names:
            try:
                loaded.append(self.load_talon(name))
            except (TalonNotFoundError, ManifestError, RegistryIOError):
                continue
        return loaded
