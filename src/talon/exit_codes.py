"""Exit codes for talon CLI commands.

All commands use consistent exit codes so scripts can tell failures apart.
"""

# Success
SUCCESS = 0

# Errors
GENERAL_ERROR = 1
INVALID_ARGS = 2
TALON_NOT_FOUND = 4
TALON_INVALID = 5
INDEX_CORRUPT = 6
IO_ERROR = 7
