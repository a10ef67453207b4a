"""
Tests for regular expression and format operators.
"""

from __future__ import annotations

import re

import pytest

from ruleweave.operators.pattern import compile_pattern, is_valid_url, strip_delimiters


class TestPatternHelpers:
    """Test pattern helpers."""

    def test_strip_delimiters(self):
        assert strip_delimiters("/^a+$/") == "^a+$"
        assert strip_delimiters("^a+$") == "^a+$"
        assert strip_delimiters("/") == "/"

    def test_compile_pattern_raises_on_invalid(self):
        with pytest.raises(re.error):
            compile_pattern("[unclosed")

    @pytest.mark.parametrize(
        "url,expected",
        [
            ("https://example.com", True),
            ("http://localhost:8080/path?q=1", True),
            ("example.com", False),
            ("not a url", False),
        ],
    )
    def test_is_valid_url(self, url, expected):
        assert is_valid_url(url) is expected


class TestMatches:
    """Test matches / not-matches."""

    def test_search_semantics(self, evaluate_op):
        """Unanchored patterns match anywhere."""
        assert evaluate_op("matches", "order-1234", r"\d+") is True
        assert evaluate_op("matches", "order", r"\d+") is False
        assert evaluate_op("not-matches", "order", r"\d+") is True

    def test_delimited_pattern(self, evaluate_op):
        assert evaluate_op("matches", "abc", "/^[a-c]+$/") is True

    def test_invalid_regex_fails_validation(self, validate_op):
        result = validate_op("matches", "abc", "[unclosed")
        assert result.is_valid is False
        assert result.error.startswith("Invalid regular expression:")

    def test_invalid_regex_evaluates_false(self, evaluate_op):
        """Neither side passes when the pattern cannot compile."""
        assert evaluate_op("matches", "abc", "[unclosed") is False
        assert evaluate_op("not-matches", "abc", "[unclosed") is False

    def test_empty_pattern_invalid(self, validate_op):
        assert validate_op("matches", "abc", "").error == "Pattern cannot be empty"


class TestFormats:
    """Test fixed-format operators."""

    def test_format_hook_is_abstract(self):
        from ruleweave.operators.pattern import _FormatOperator

        with pytest.raises(TypeError):
            _FormatOperator()

        class Upper(_FormatOperator):
            def check_upper(self, value):
                return value.isupper()

        with pytest.raises(TypeError):
            Upper()

    @pytest.mark.parametrize(
        "op,value,expected",
        [
            ("email", "jane.doe+tag@example.co.uk", True),
            ("email", "jane@", False),
            ("email", "no-at-sign.com", False),
            ("url", "https://example.com/a", True),
            ("url", "ftp//broken", False),
            ("uuid", "123e4567-e89b-12d3-a456-426614174000", True),
            ("uuid", "123e4567-e89b-62d3-a456-426614174000", False),
            ("alpha", "Hello", True),
            ("alpha", "Hello1", False),
            ("alpha", "héllo", False),
            ("alpha-numeric", "abc123", True),
            ("alpha-numeric", "abc 123", False),
            ("lower-case", "hello world", True),
            ("lower-case", "Hello", False),
            ("lower-case", "123", False),
            ("upper-case", "HELLO 1", True),
            ("upper-case", "HeLLO", False),
        ],
    )
    def test_format(self, evaluate_op, op, value, expected):
        assert evaluate_op(op, value) is expected

    @pytest.mark.parametrize(
        "op,value",
        [
            ("not-email", "jane@"),
            ("not-url", "nope"),
            ("not-uuid", "1234"),
            ("not-alpha", "a1"),
            ("not-alpha-numeric", "a-1"),
            ("not-lower-case", "ABC"),
            ("not-upper-case", "abc"),
        ],
    )
    def test_negated_format(self, evaluate_op, op, value):
        assert evaluate_op(op, value) is True

    def test_non_string_field(self, evaluate_op, validate_op):
        assert evaluate_op("email", 42) is False
        assert evaluate_op("not-email", 42) is False
        assert validate_op("email", 42).is_valid is False

    def test_takes_no_value(self, validate_op):
        assert validate_op("uuid", "123e4567-e89b-12d3-a456-426614174000").is_valid is True


class TestPersian:
    """Test Persian script operators."""

    def test_persian_alpha(self, evaluate_op):
        assert evaluate_op("persian-alpha", "سلام") is True
        assert evaluate_op("persian-alpha", "سلام دوست") is True
        assert evaluate_op("persian-alpha", "salam") is False
        assert evaluate_op("not-persian-alpha", "salam") is True

    def test_persian_alpha_numeric(self, evaluate_op):
        assert evaluate_op("persian-alpha-numeric", "سلام ۱۲۳") is True
        assert evaluate_op("persian-alpha-numeric", "سلام 123") is True
        assert evaluate_op("persian-alpha-numeric", "hello") is False

    def test_category(self, registry):
        assert set(registry.get_by_category("persian")) == {
            "persian-alpha",
            "not-persian-alpha",
            "persian-alpha-numeric",
            "not-persian-alpha-numeric",
        }
