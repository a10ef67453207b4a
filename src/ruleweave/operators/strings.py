"""
String operators: SQL-style like, affixes, lengths and the self-contains family.
"""

from __future__ import annotations

import re
from typing import Any

from .base import (
    BaseOperator,
    NegatedOperator,
    OperatorCategory,
    OperatorContext,
    OperatorMetadata,
    is_array,
    is_number,
    is_number_pair,
    is_string,
    negated_metadata,
)


def like_to_regex(pattern: str) -> re.Pattern[str]:
    """
    Compile a SQL LIKE pattern into an anchored regex.

    `%` matches any run of characters and `_` exactly one. A backslash makes
    the next character literal, so `\\%` matches a percent sign.
    """
    parts: list[str] = []
    i = 0
    while i < len(pattern):
        char = pattern[i]
        if char == "\\" and i + 1 < len(pattern):
            parts.append(re.escape(pattern[i + 1]))
            i += 2
            continue
        if char == "%":
            parts.append(".*")
        elif char == "_":
            parts.append(".")
        else:
            parts.append(re.escape(char))
        i += 1
    return re.compile("".join(parts), re.DOTALL)


def to_text(value: Any) -> str:
    """Render a scalar the way it reads in JSON (true, null, 3)."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class _StringOperator(BaseOperator):
    """String field, string constraint."""

    def is_valid_field_type(self, value: Any) -> bool:
        return is_string(value)

    def is_valid_constraint_type(self, value: Any) -> bool:
        return is_string(value)


def _string_metadata(
    name: str,
    display: str,
    description: str,
    example: str,
    expected: str = "string",
) -> OperatorMetadata:
    return OperatorMetadata(
        name=name,
        display_name=display,
        category=OperatorCategory.STRING,
        description=description,
        accepted_field_types=("string",),
        expected_value_type=expected,
        requires_value=True,
        is_negatable=True,
        example=example,
    )


# =============================================================================
# Pattern And Affix Matching
# =============================================================================


class LikeOperator(_StringOperator):
    metadata = _string_metadata(
        "like",
        "Like",
        "Performs SQL-like pattern matching with % and _ wildcards",
        '{"field": "email", "operator": "like", "value": "%@gmail.com"}',
    )

    def check(self, context: OperatorContext) -> bool:
        text, pattern = context.field_value, context.constraint_value
        if not is_string(text) or not is_string(pattern):
            return False
        return like_to_regex(pattern).fullmatch(text) is not None


class NotLikeOperator(NegatedOperator):
    positive = LikeOperator
    metadata = negated_metadata(
        LikeOperator,
        "not-like",
        "Not Like",
        "Performs negated SQL-like pattern matching",
        '{"field": "filename", "operator": "not-like", "value": "%.tmp"}',
    )


class StartsWithOperator(_StringOperator):
    metadata = _string_metadata(
        "starts-with",
        "Starts With",
        "Checks if the field value starts with the provided string",
        '{"field": "name", "operator": "starts-with", "value": "John"}',
    )

    def check(self, context: OperatorContext) -> bool:
        text, prefix = context.field_value, context.constraint_value
        return is_string(text) and is_string(prefix) and text.startswith(prefix)


class EndsWithOperator(_StringOperator):
    metadata = _string_metadata(
        "ends-with",
        "Ends With",
        "Checks if the field value ends with the provided string",
        '{"field": "email", "operator": "ends-with", "value": "@example.com"}',
    )

    def check(self, context: OperatorContext) -> bool:
        text, suffix = context.field_value, context.constraint_value
        return is_string(text) and is_string(suffix) and text.endswith(suffix)


class ContainsStringOperator(_StringOperator):
    metadata = _string_metadata(
        "contains-string",
        "Contains String",
        "Checks if the field value contains the provided substring",
        '{"field": "description", "operator": "contains-string", "value": "urgent"}',
    )

    def check(self, context: OperatorContext) -> bool:
        text, part = context.field_value, context.constraint_value
        return is_string(text) and is_string(part) and part in text


# =============================================================================
# Length
# =============================================================================


class _LengthOperator(BaseOperator):
    """String field, numeric constraint."""

    def is_valid_field_type(self, value: Any) -> bool:
        return is_string(value)

    def is_valid_constraint_type(self, value: Any) -> bool:
        return is_number(value)

    def _length(self, context: OperatorContext) -> tuple[int, Any] | None:
        text, expected = context.field_value, context.constraint_value
        if not is_string(text) or not is_number(expected):
            return None
        return len(text), expected


class StringLengthOperator(_LengthOperator):
    metadata = _string_metadata(
        "string-length",
        "String Length",
        "Checks if the string length equals the specified value",
        '{"field": "code", "operator": "string-length", "value": 6}',
        expected="number",
    )

    def check(self, context: OperatorContext) -> bool:
        pair = self._length(context)
        return pair is not None and pair[0] == pair[1]


class NotStringLengthOperator(NegatedOperator):
    positive = StringLengthOperator
    metadata = negated_metadata(
        StringLengthOperator,
        "not-string-length",
        "Not String Length",
        "Checks if the string length is not equal to the specified value",
        '{"field": "postal_code", "operator": "not-string-length", "value": 5}',
    )


class MinLengthOperator(_LengthOperator):
    metadata = _string_metadata(
        "min-length",
        "Minimum Length",
        "Checks if the string length is at least the specified value",
        '{"field": "password", "operator": "min-length", "value": 8}',
        expected="number",
    )

    def check(self, context: OperatorContext) -> bool:
        pair = self._length(context)
        return pair is not None and pair[0] >= pair[1]


class MaxLengthOperator(_LengthOperator):
    metadata = _string_metadata(
        "max-length",
        "Maximum Length",
        "Checks if the string length is at most the specified value",
        '{"field": "username", "operator": "max-length", "value": 20}',
        expected="number",
    )

    def check(self, context: OperatorContext) -> bool:
        pair = self._length(context)
        return pair is not None and pair[0] <= pair[1]


class LengthBetweenOperator(BaseOperator):
    metadata = _string_metadata(
        "length-between",
        "Length Between",
        "Checks if the string length is between two values (inclusive)",
        '{"field": "title", "operator": "length-between", "value": [10, 100]}',
        expected="range",
    )

    def is_valid_field_type(self, value: Any) -> bool:
        return is_string(value)

    def is_valid_constraint_type(self, value: Any) -> bool:
        return is_number_pair(value)

    def validate_value(self, context: OperatorContext) -> str | None:
        bounds = context.constraint_value
        if not is_number_pair(bounds):
            return None
        if bounds[0] > bounds[1]:
            return "Minimum length cannot be greater than maximum length"
        if bounds[0] < 0:
            return "Minimum length cannot be negative"
        return None

    def check(self, context: OperatorContext) -> bool:
        text, bounds = context.field_value, context.constraint_value
        if not is_string(text) or not is_number_pair(bounds):
            return False
        return bounds[0] <= len(text) <= bounds[1]


class NotLengthBetweenOperator(NegatedOperator):
    positive = LengthBetweenOperator
    metadata = negated_metadata(
        LengthBetweenOperator,
        "not-length-between",
        "Not Length Between",
        "Checks if the string length is not between two values",
        '{"field": "code", "operator": "not-length-between", "value": [5, 10]}',
    )


# =============================================================================
# Self Contains
# =============================================================================
#
# These test a string field against an array of needles by substring, the
# reverse of the array family where the field is the array.


class _SelfContainsOperator(BaseOperator):
    def is_valid_field_type(self, value: Any) -> bool:
        return is_string(value)

    def is_valid_constraint_type(self, value: Any) -> bool:
        return is_array(value)

    def _needles(self, context: OperatorContext) -> tuple[str, list[str]] | None:
        text, needles = context.field_value, context.constraint_value
        if not is_string(text) or not is_array(needles):
            return None
        return text, [to_text(n) for n in needles]


class SelfContainsAnyOperator(_SelfContainsOperator):
    metadata = _string_metadata(
        "self-contains-any",
        "Self Contains Any",
        "Checks if the string field contains any of the values in the constraint array",
        '{"field": "password", "operator": "self-contains-any", "value": ["admin", "user"]}',
        expected="array",
    )

    def check(self, context: OperatorContext) -> bool:
        found = self._needles(context)
        return found is not None and any(n in found[0] for n in found[1])


class SelfContainsAllOperator(_SelfContainsOperator):
    metadata = _string_metadata(
        "self-contains-all",
        "Self Contains All",
        "Checks if the string field contains all of the values in the constraint array",
        '{"field": "address", "operator": "self-contains-all", "value": ["street", "city"]}',
        expected="array",
    )

    def check(self, context: OperatorContext) -> bool:
        found = self._needles(context)
        return found is not None and all(n in found[0] for n in found[1])


class SelfNotContainsAnyOperator(NegatedOperator):
    positive = SelfContainsAnyOperator
    metadata = negated_metadata(
        SelfContainsAnyOperator,
        "self-not-contains-any",
        "Self Not Contains Any",
        "Checks if the string field contains none of the values in the constraint array",
        '{"field": "username", "operator": "self-not-contains-any", "value": ["admin", "root"]}',
    )


class SelfNotContainsAllOperator(NegatedOperator):
    positive = SelfContainsAllOperator
    metadata = negated_metadata(
        SelfContainsAllOperator,
        "self-not-contains-all",
        "Self Not Contains All",
        "Checks if the string field is missing at least one value in the constraint array",
        '{"field": "bio", "operator": "self-not-contains-all", "value": ["spam", "ads"]}',
    )


class SelfContainsNoneOperator(SelfNotContainsAnyOperator):
    """Alias of self-not-contains-any under its own name."""

    metadata = negated_metadata(
        SelfContainsAnyOperator,
        "self-contains-none",
        "Self Contains None",
        "Checks if the string field contains none of the values in the constraint array",
        '{"field": "password", "operator": "self-contains-none", "value": ["admin", "test"]}',
        is_negatable=False,
    )


STRING_OPERATORS: list[type[BaseOperator]] = [
    LikeOperator,
    NotLikeOperator,
    StartsWithOperator,
    EndsWithOperator,
    ContainsStringOperator,
    StringLengthOperator,
    NotStringLengthOperator,
    MinLengthOperator,
    MaxLengthOperator,
    LengthBetweenOperator,
    NotLengthBetweenOperator,
    SelfContainsAnyOperator,
    SelfContainsAllOperator,
    SelfNotContainsAnyOperator,
    SelfNotContainsAllOperator,
    SelfContainsNoneOperator,
]
