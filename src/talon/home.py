"""Default registry location resolution.

The default registry lives in the platform's application data directory.
Callers resolve it here and hand the path to TalonRegistry explicitly.
"""

import os
import sys
from pathlib import Path

# Environment variable for a custom default registry location
TALON_HOME_ENV_VAR = "TALON_HOME"

# Location of the registry below the platform data directory
DATA_SUBPATH = Path("femtoclaw") / "talons"

# Default registry directory for the CLI, relative to the working directory
DEFAULT_CLI_DIR = Path("./talons")


def get_data_dir() -> Path:
    """Get the platform's per-user application data directory.

    - Windows: %APPDATA%
    - macOS: ~/Library/Application Support
    - Others: $XDG_DATA_HOME, falling back to ~/.local/share
    """
    if sys.platform == "win32":
        appdata = os.environ.get("APPDATA")
        if appdata:
            return Path(appdata)
        return Path.home() / "AppData" / "Roaming"

    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support"

    xdg_data_home = os.environ.get("XDG_DATA_HOME")
    if xdg_data_home and Path(xdg_data_home).is_absolute():
        return Path(xdg_data_home)
    return Path.home() / ".local" / "share"


def get_default_talons_dir() -> Path:
    """Get the default registry directory.

    Resolution order:
    1. TALON_HOME environment variable (if set)
    2. <platform data dir>/femtoclaw/talons

    Returns:
        Path to the default registry directory.
    """
    env_value = os.environ.get(TALON_HOME_ENV_VAR)
    if env_value:
        return Path(env_value).expanduser()
    return get_data_dir() / DATA_SUBPATH
