"""Error codes for CLI exit status.

Every command maps its failure class onto one of these codes so that shell
callers (CI jobs, wrapper scripts) can tell a typo from a broken host.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    These values are used as process exit codes and should remain stable:
    - 0: Success
    - 1: User error (bad option value)
    - 2: Environment error (missing tool, file, or configuration)
    - 3: Command error (an orchestrated warden/composer/magento call failed)
    - 5: I/O error (file could not be read or written)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    COMMAND_ERROR = 3
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK
