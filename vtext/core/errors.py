"""Exit codes for the vtext CLI.

The numeric values are process exit codes and should remain stable:
- 0: Success (including skipped runs)
- 1: User error (bad arguments, invalid config, malformed VERSION.txt)
- 2: Environment error (git missing, not a repository)
- 4: Network error (tag refresh failed)
- 5: I/O error (replacement document could not be written)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands."""

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK
