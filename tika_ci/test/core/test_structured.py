"""Tests for tika_ci.core.structured module."""

from tika_ci.core.structured import (
    as_obj_list,
    as_str_dict,
    get_bool,
    get_float,
    get_int,
    get_str,
    get_str_list,
    get_table,
    is_str_dict,
)


class TestDicts:
    def test_is_str_dict(self) -> None:
        assert is_str_dict({"a": 1})
        assert not is_str_dict({1: "a"})
        assert not is_str_dict(["a"])

    def test_as_str_dict(self) -> None:
        assert as_str_dict({"a": 1}) == {"a": 1}
        assert as_str_dict("nope") is None

    def test_as_obj_list(self) -> None:
        assert as_obj_list([1, "a"]) == [1, "a"]
        assert as_obj_list({"a": 1}) is None

    def test_get_table(self) -> None:
        assert get_table({"build": {"context": "."}}, "build") == {"context": "."}
        assert get_table({"build": "x"}, "build") is None


class TestScalars:
    def test_get_str_strips_and_rejects_empty(self) -> None:
        assert get_str({"k": "  tika "}, "k") == "tika"
        assert get_str({"k": "   "}, "k") is None
        assert get_str({"k": 3}, "k") is None
        assert get_str({}, "k") is None

    def test_get_int_rejects_bool(self) -> None:
        assert get_int({"k": 9998}, "k") == 9998
        assert get_int({"k": True}, "k") is None
        assert get_int({"k": "9998"}, "k") is None

    def test_get_float_accepts_int(self) -> None:
        assert get_float({"k": 10}, "k") == 10.0
        assert get_float({"k": 2.5}, "k") == 2.5
        assert get_float({"k": False}, "k") is None

    def test_get_bool_accepts_workflow_strings(self) -> None:
        assert get_bool({"k": True}, "k") is True
        assert get_bool({"k": "false"}, "k") is False
        assert get_bool({"k": " TRUE "}, "k") is True
        assert get_bool({"k": "yes"}, "k") is None
        assert get_bool({}, "k") is None


class TestStrList:
    def test_valid(self) -> None:
        assert get_str_list({"k": [" linux/amd64 ", "linux/arm64/v8"]}, "k") == [
            "linux/amd64",
            "linux/arm64/v8",
        ]

    def test_invalid_entry_rejects_whole_list(self) -> None:
        assert get_str_list({"k": ["linux/amd64", 3]}, "k") is None
        assert get_str_list({"k": ["linux/amd64", ""]}, "k") is None

    def test_missing(self) -> None:
        assert get_str_list({}, "k") is None
