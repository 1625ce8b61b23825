"""FemtoClaw talon registry: local management of capability packages."""

__version__ = "0.1.0"
