"""Tests for key and input helpers."""

from __future__ import annotations

import pytest

from cachetier.exceptions import KeyValidationError
from cachetier.utils import (
    MAX_KEY_LENGTH,
    check_key,
    get_input_as_array,
    get_input_as_int,
    is_exact_key_match,
)


class TestExactKeyMatch:
    def test_identical(self) -> None:
        assert is_exact_key_match("linux-deps-1", "linux-deps-1") is True

    def test_case_insensitive(self) -> None:
        assert is_exact_key_match("Linux-Deps", "linux-deps") is True

    def test_accent_sensitive(self) -> None:
        assert is_exact_key_match("cafe", "café") is False

    def test_accented_case_insensitive(self) -> None:
        assert is_exact_key_match("CAFÉ", "café") is True

    def test_missing_cache_key(self) -> None:
        assert is_exact_key_match("k", None) is False
        assert is_exact_key_match("k", "") is False

    def test_prefix_is_not_exact(self) -> None:
        assert is_exact_key_match("deps-abc", "deps-") is False


class TestCheckKey:
    def test_accepts_normal_key(self) -> None:
        check_key("npm-linux-0f3a")  # Should not raise

    def test_rejects_comma(self) -> None:
        with pytest.raises(KeyValidationError, match="cannot contain commas"):
            check_key("a,b")

    def test_rejects_long_key(self) -> None:
        with pytest.raises(KeyValidationError, match="cannot be larger"):
            check_key("k" * (MAX_KEY_LENGTH + 1))


class TestInputParsing:
    def test_array_splits_and_trims(self) -> None:
        assert get_input_as_array("  a \n\n b\n") == ["a", "b"]

    def test_array_normalises_negation(self) -> None:
        assert get_input_as_array("dist\n!  dist/tmp") == ["dist", "!dist/tmp"]

    def test_array_empty(self) -> None:
        assert get_input_as_array("") == []

    def test_int_parses_leading_digits(self) -> None:
        assert get_input_as_int("33554432") == 33554432
        assert get_input_as_int("12MB") == 12

    def test_int_rejects_negative_and_garbage(self) -> None:
        assert get_input_as_int("-1") is None
        assert get_input_as_int("abc") is None
        assert get_input_as_int("") is None
