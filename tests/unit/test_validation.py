"""Tests for invocation argument checks."""

import pytest

from marbles_engine.assets.validation import parse_int, require_arg_count, sanitize_arguments
from marbles_engine.common.exceptions import ValidationError


class TestSanitizeArguments:
    def test_accepts_bounded_strings(self):
        sanitize_arguments(["a", "x" * 32, "company"])

    def test_empty_argument_rejected_with_index(self):
        with pytest.raises(ValidationError) as exc:
            sanitize_arguments(["m1", "", "acme"])
        assert exc.value.index == 1
        assert "Argument 1 must be a non-empty string" in exc.value.message
        assert exc.value.code == "INVALID_ARGUMENT"

    def test_oversized_argument_rejected_with_index(self):
        with pytest.raises(ValidationError) as exc:
            sanitize_arguments(["ok", "ok", "x" * 33])
        assert exc.value.index == 2
        assert "<= 32 characters" in exc.value.message

    def test_custom_max_length(self):
        with pytest.raises(ValidationError):
            sanitize_arguments(["abcdef"], max_length=5)

    def test_optional_position_may_be_empty(self):
        sanitize_arguments(["m1", "o1", "1", "2", "", "ok"], optional=(4,))

    def test_optional_position_still_length_bounded(self):
        with pytest.raises(ValidationError) as exc:
            sanitize_arguments(["m1", "y" * 40], optional=(1,))
        assert exc.value.index == 1

    def test_empty_list_is_valid(self):
        sanitize_arguments([])


class TestArgCount:
    def test_matching_count(self):
        require_arg_count(["a", "b"], 2)

    def test_one_of_several_counts(self):
        require_arg_count(["a", "b", "c"], 1, 3)

    def test_wrong_count(self):
        with pytest.raises(ValidationError, match="Expecting 2"):
            require_arg_count(["a"], 2)


class TestParseInt:
    def test_numeric(self):
        assert parse_int("35", 2) == 35

    def test_non_numeric(self):
        with pytest.raises(ValidationError) as exc:
            parse_int("lots", 2, "3rd argument must be a numeric string")
        assert exc.value.index == 2
        assert exc.value.message == "3rd argument must be a numeric string"

    def test_signed(self):
        assert parse_int("-7", 0) == -7
        assert parse_int("+7", 0) == 7

    @pytest.mark.parametrize("value", ["1_000", " 35", "35 ", "٣", "3.5", "", "+"])
    def test_rejects_non_ascii_digits(self, value):
        with pytest.raises(ValidationError):
            parse_int(value, 2)

    def test_int64_bounds(self):
        assert parse_int("9223372036854775807", 2) == 2 ** 63 - 1
        assert parse_int("-9223372036854775808", 2) == -(2 ** 63)
        with pytest.raises(ValidationError, match="out of range"):
            parse_int("9223372036854775808", 2)
