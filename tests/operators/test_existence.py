"""
Tests for existence operators.
"""

from __future__ import annotations

import pytest

from ruleweave.core.constants import MISSING


class TestExists:
    """Test exists / not-exists."""

    def test_missing_vs_null(self, evaluate_op):
        """An explicit null exists; an absent path does not."""
        assert evaluate_op("exists", None) is True
        assert evaluate_op("exists", MISSING) is False
        assert evaluate_op("not-exists", MISSING) is True
        assert evaluate_op("not-exists", 0) is False

    def test_takes_no_value(self, validate_op):
        assert validate_op("exists", MISSING).is_valid is True


class TestNullOrUndefined:
    """Test null-or-undefined / not-null-or-undefined."""

    @pytest.mark.parametrize("value,expected", [(None, True), (MISSING, True), (0, False), ("", False)])
    def test_values(self, evaluate_op, value, expected):
        assert evaluate_op("null-or-undefined", value) is expected
        assert evaluate_op("not-null-or-undefined", value) is not expected


class TestEmpty:
    """Test empty / not-empty."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("", True),
            ([], True),
            ({}, True),
            (None, True),
            (MISSING, True),
            ("a", False),
            ([0], False),
            ({"a": None}, False),
            (0, False),
        ],
    )
    def test_values(self, evaluate_op, value, expected):
        assert evaluate_op("empty", value) is expected


class TestNullOrWhiteSpace:
    """Test null-or-white-space / not-null-or-white-space."""

    @pytest.mark.parametrize(
        "value,expected",
        [(None, True), (MISSING, True), ("", True), ("  \t\n", True), (" a ", False)],
    )
    def test_values(self, evaluate_op, value, expected):
        assert evaluate_op("null-or-white-space", value) is expected
        assert evaluate_op("not-null-or-white-space", value) is not expected
