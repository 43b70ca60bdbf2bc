"""Error codes for CLI exit status.

Each matrix branch failure class maps to one exit code so the hosting CI
system can tell a malformed tag apart from a failed smoke test.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    These values are used as process exit codes and should remain stable:
    - 0: Success (every branch built, tested and, if pushing, deployed)
    - 1: User error (bad arguments)
    - 2: Configuration error (malformed version, unreadable config file)
    - 3: Build error (image build or builder setup failed)
    - 4: Test failure (reachability or identity check failed)
    - 5: Deploy error (registry login or push failed)
    """

    OK = 0
    USER_ERROR = 1
    CONFIG_ERROR = 2
    BUILD_ERROR = 3
    TEST_FAILURE = 4
    DEPLOY_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK
