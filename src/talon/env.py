"""Environment variable status for talons.

A talon declares the environment variables it reads in its manifest. Values
come from a ``.env`` file in the talon directory first, then from the
process environment, then from the declared default.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import dotenv_values

from talon.errors import wrap_io_errors
from talon.manifest import TalonManifest

ENV_FILE = ".env"


@dataclass
class EnvVarStatus:
    """Resolved state of one declared environment variable."""

    name: str
    required: bool
    is_set: bool
    value: str | None
    uses_default: bool = False

    @property
    def missing(self) -> bool:
        """True when a required variable has no value from any source."""
        return self.required and self.value is None


def load_env_file(path: Path) -> dict[str, str]:
    """Load environment variables from a .env file.

    Returns an empty dict if the file doesn't exist.
    """
    if not path.exists():
        return {}

    with wrap_io_errors(path, "read"):
        raw_values = dotenv_values(path)
    return {k: v for k, v in raw_values.items() if v is not None}


def get_env_status(manifest: TalonManifest, talon_dir: Path) -> list[EnvVarStatus]:
    """Get the status of every environment variable a talon declares.

    Args:
        manifest: The talon manifest.
        talon_dir: The talon directory (where an optional .env lives).

    Returns:
        One EnvVarStatus per declared variable, in declaration order.
    """
    if not manifest.environment:
        return []

    file_vars = load_env_file(talon_dir / ENV_FILE)
    result: list[EnvVarStatus] = []

    for env_var in manifest.environment:
        value = file_vars.get(env_var.name, os.environ.get(env_var.name))
        is_set = value is not None
        uses_default = not is_set and env_var.default is not None

        result.append(
            EnvVarStatus(
                name=env_var.name,
                required=env_var.required,
                is_set=is_set,
                value=value if is_set else env_var.default,
                uses_default=uses_default,
            )
        )

    return result
