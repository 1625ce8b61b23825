"""Shared test fixtures for talon tests."""

from collections.abc import Callable
from pathlib import Path

import pytest
from typer.testing import CliRunner

from talon.manifest import (
    MANIFEST_FILE,
    CommandArg,
    TalonCommand,
    TalonManifest,
    dump_manifest,
)
from talon.registry import TalonRegistry

DEFAULT_BODY = "# Test Talon\n\nDocumentation for humans and models.\n"


def make_manifest(name: str = "sample", **overrides: object) -> TalonManifest:
    """Build a valid TalonManifest with sensible test defaults."""
    data: dict[str, object] = {
        "name": name,
        "version": "1.0.0",
        "description": f"Test talon {name}",
    }
    data.update(overrides)
    return TalonManifest.model_validate(data)


def write_talon(
    talon_dir: Path,
    manifest: TalonManifest,
    body: str = DEFAULT_BODY,
) -> Path:
    """Write a TALON.md for manifest into talon_dir, creating the directory.

    Returns:
        The talon directory.
    """
    talon_dir.mkdir(parents=True, exist_ok=True)
    (talon_dir / MANIFEST_FILE).write_text(dump_manifest(manifest, body))
    return talon_dir


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def talons_dir(tmp_path: Path) -> Path:
    """Registry directory path (not created; the registry creates it)."""
    return tmp_path / "talons"


@pytest.fixture
def registry(talons_dir: Path) -> TalonRegistry:
    """A registry bound to an empty temporary directory."""
    return TalonRegistry.from_dir(talons_dir)


# Type alias for the source talon factory function
TalonFactory = Callable[..., Path]


@pytest.fixture
def create_source_talon(tmp_path: Path) -> TalonFactory:
    """Factory fixture that creates talon directories outside the registry.

    Usage:
        source = create_source_talon("github", tags=["devtools"])
        source = create_source_talon(manifest=my_manifest, directory="src-dir")
        source = create_source_talon("github", files={"scripts/run.sh": "echo hi"})
    """

    def _create(
        name: str = "sample",
        *,
        manifest: TalonManifest | None = None,
        directory: str | None = None,
        files: dict[str, str] | None = None,
        body: str = DEFAULT_BODY,
        **overrides: object,
    ) -> Path:
        final_manifest = manifest if manifest is not None else make_manifest(name, **overrides)
        source_dir = tmp_path / "sources" / (directory or final_manifest.name)
        write_talon(source_dir, final_manifest, body)

        for relative, content in (files or {}).items():
            file_path = source_dir / relative
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_text(content)

        return source_dir

    return _create


def build_command(name: str, *args: tuple[str, str, bool]) -> TalonCommand:
    """Build a TalonCommand from (name, type, required) argument tuples."""
    return TalonCommand(
        name=name,
        description=f"Run {name}",
        args=[CommandArg(name=a, type=t, required=r) for a, t, r in args],
    )
