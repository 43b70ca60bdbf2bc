"""Tests for tika_ci.core.errors module."""

from tika_ci.core.errors import ErrorCode


class TestErrorCode:
    def test_values_are_stable(self) -> None:
        assert [int(c) for c in ErrorCode] == [0, 1, 2, 3, 4, 5]

    def test_str(self) -> None:
        assert str(ErrorCode.TEST_FAILURE) == "test failure"

    def test_success_flags(self) -> None:
        assert ErrorCode.OK.is_success
        assert not ErrorCode.OK.is_error
        assert ErrorCode.DEPLOY_ERROR.is_error
