"""Exit codes for distui commands."""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Process exit codes.

    - 0: Success
    - 1: User error (bad input, nothing to do, declined confirmation)
    - 2: Environment error (missing git/gh/npm/brew, project not detected)
    - 3: Git error (staging, commit or push failed)
    - 4: Network error (registry or hosting provider unreachable)
    - 5: I/O error (config file unreadable, write failed)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    GIT_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
