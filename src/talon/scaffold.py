"""Example talon scaffolding.

Writes a small, valid talon into a registry directory so new users have a
working TALON.md to copy from.
"""

from dataclasses import dataclass
from pathlib import Path

from talon.errors import wrap_io_errors
from talon.manifest import (
    CommandArg,
    TalonCommand,
    TalonManifest,
    dump_manifest,
    manifest_path,
)

EXAMPLE_DIR = "example-talon"

EXAMPLE_BODY = """\
# Example Talon

This is an example talon that demonstrates the TALON.md format.

## Commands

### greet
Greets the user with a custom message.

## Requirements
- None

## Usage
This talon can be used to greet users.
"""


@dataclass
class ScaffoldResult:
    """Result of scaffolding the example talon."""

    path: Path
    created: bool


def _example_manifest() -> TalonManifest:
    """Build the example manifest from the model so it always parses."""
    return TalonManifest(
        name="example",
        version="1.0.0",
        description="An example talon demonstrating the format",
        author="Your Name",
        license="MIT",
        tags=["example", "demo"],
        commands=[
            TalonCommand(
                name="greet",
                description="Greet the user with a custom message",
                args=[
                    CommandArg(
                        name="message",
                        type="string",
                        required=False,
                        description="Greeting to use",
                    ),
                ],
            ),
        ],
    )


def init_example_talon(talons_dir: Path) -> ScaffoldResult:
    """Create <talons_dir>/example-talon/TALON.md if it does not exist.

    Existing files are never overwritten, so running this twice is a no-op.

    Raises:
        RegistryIOError: If the directory or file cannot be created.
    """
    example = manifest_path(talons_dir / EXAMPLE_DIR)
    if example.exists():
        return ScaffoldResult(path=example, created=False)

    with wrap_io_errors(example, "create"):
        example.parent.mkdir(parents=True, exist_ok=True)
        example.write_text(dump_manifest(_example_manifest(), EXAMPLE_BODY), encoding="utf-8")

    return ScaffoldResult(path=example, created=True)
