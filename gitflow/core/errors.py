"""Exit codes for the CLI.

Every fatal workflow failure maps to one of these codes. The values are the
process exit status seen by the CI runner and must remain stable:

- 0: Success
- 1: User error (branch does not follow the naming convention, no workflow)
- 2: Environment error (bad configuration, gh CLI missing)
- 3: Build error (install or build failed, artifact missing)
- 4: Network error (hosting API call failed)
- 5: I/O error (file, event payload or pull request not found)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands."""

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    BUILD_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
