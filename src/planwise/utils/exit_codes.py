"""
Exit codes for the planwise CLI.

Semantic exit codes let scripts tell what went wrong without parsing output.
"""

# Success
SUCCESS = 0

# General error (unspecified)
ERROR_GENERAL = 1

# Invalid arguments, validation or configuration error
ERROR_INVALID_ARGS = 2

# Resource not found
ERROR_NOT_FOUND = 5

# Requested state change is not allowed (e.g. resolving a resolved occurrence)
ERROR_CONFLICT = 6

_CODE_NAMES = {
    SUCCESS: "SUCCESS",
    ERROR_GENERAL: "ERROR_GENERAL",
    ERROR_INVALID_ARGS: "ERROR_INVALID_ARGS",
    ERROR_NOT_FOUND: "ERROR_NOT_FOUND",
    ERROR_CONFLICT: "ERROR_CONFLICT",
}


def get_exit_code_name(code: int) -> str:
    """Get the name of an exit code for display purposes."""
    return _CODE_NAMES.get(code, f"UNKNOWN({code})")
