"""
Array operators. The field is the array; membership uses strict equality.
"""

from __future__ import annotations

from typing import Any

from .base import (
    BaseOperator,
    NegatedOperator,
    OperatorCategory,
    OperatorContext,
    OperatorMetadata,
    is_array,
    is_number,
    negated_metadata,
)
from .comparison import values_equal


def _includes(items: Any, value: Any) -> bool:
    return any(values_equal(item, value) for item in items)


def _array_metadata(name: str, display: str, description: str, expected: str, example: str) -> OperatorMetadata:
    return OperatorMetadata(
        name=name,
        display_name=display,
        category=OperatorCategory.ARRAY,
        description=description,
        accepted_field_types=("array",),
        expected_value_type=expected,
        requires_value=True,
        is_negatable=True,
        example=example,
    )


class ContainsOperator(BaseOperator):
    metadata = _array_metadata(
        "contains",
        "Contains",
        "Checks if the array contains the specified value",
        "any",
        '{"field": "tags", "operator": "contains", "value": "featured"}',
    )

    def is_valid_field_type(self, value: Any) -> bool:
        return is_array(value)

    def check(self, context: OperatorContext) -> bool:
        items = context.field_value
        return is_array(items) and _includes(items, context.constraint_value)


class NotContainsOperator(NegatedOperator):
    positive = ContainsOperator
    metadata = negated_metadata(
        ContainsOperator,
        "not-contains",
        "Not Contains",
        "Checks if the array does not contain the specified value",
        '{"field": "tags", "operator": "not-contains", "value": "archived"}',
    )


class _SetOperator(BaseOperator):
    """Array field compared against an array constraint."""

    def is_valid_field_type(self, value: Any) -> bool:
        return is_array(value)

    def is_valid_constraint_type(self, value: Any) -> bool:
        return is_array(value)


class ContainsAnyOperator(_SetOperator):
    metadata = _array_metadata(
        "contains-any",
        "Contains Any",
        "Checks if the array contains any of the specified values",
        "array",
        '{"field": "skills", "operator": "contains-any", "value": ["python", "go"]}',
    )

    def check(self, context: OperatorContext) -> bool:
        items, wanted = context.field_value, context.constraint_value
        if not is_array(items) or not is_array(wanted):
            return False
        return any(_includes(wanted, item) for item in items)


class NotContainsAnyOperator(NegatedOperator):
    positive = ContainsAnyOperator
    metadata = negated_metadata(
        ContainsAnyOperator,
        "not-contains-any",
        "Not Contains Any",
        "Checks if the array contains none of the specified values",
        '{"field": "flags", "operator": "not-contains-any", "value": ["spam", "abuse"]}',
    )


class ContainsAllOperator(_SetOperator):
    metadata = _array_metadata(
        "contains-all",
        "Contains All",
        "Checks if the array contains all of the specified values",
        "array",
        '{"field": "permissions", "operator": "contains-all", "value": ["read", "write"]}',
    )

    def check(self, context: OperatorContext) -> bool:
        items, wanted = context.field_value, context.constraint_value
        if not is_array(items) or not is_array(wanted):
            return False
        return all(_includes(items, value) for value in wanted)


class NotContainsAllOperator(NegatedOperator):
    positive = ContainsAllOperator
    metadata = negated_metadata(
        ContainsAllOperator,
        "not-contains-all",
        "Not Contains All",
        "Checks if the array is missing at least one of the specified values",
        '{"field": "documents", "operator": "not-contains-all", "value": ["id", "proof"]}',
    )


class _ArrayLengthOperator(BaseOperator):
    def is_valid_field_type(self, value: Any) -> bool:
        return is_array(value)

    def is_valid_constraint_type(self, value: Any) -> bool:
        return is_number(value)

    def _length(self, context: OperatorContext) -> tuple[int, Any] | None:
        items, expected = context.field_value, context.constraint_value
        if not is_array(items) or not is_number(expected):
            return None
        return len(items), expected


class ArrayLengthOperator(_ArrayLengthOperator):
    metadata = _array_metadata(
        "array-length",
        "Array Length",
        "Checks if the array length equals the specified value",
        "number",
        '{"field": "items", "operator": "array-length", "value": 5}',
    )

    def check(self, context: OperatorContext) -> bool:
        pair = self._length(context)
        return pair is not None and pair[0] == pair[1]


class ArrayMinLengthOperator(_ArrayLengthOperator):
    metadata = _array_metadata(
        "array-min-length",
        "Array Minimum Length",
        "Checks if the array has at least the specified number of items",
        "number",
        '{"field": "attendees", "operator": "array-min-length", "value": 2}',
    )

    def check(self, context: OperatorContext) -> bool:
        pair = self._length(context)
        return pair is not None and pair[0] >= pair[1]


class ArrayMaxLengthOperator(_ArrayLengthOperator):
    metadata = _array_metadata(
        "array-max-length",
        "Array Maximum Length",
        "Checks if the array has at most the specified number of items",
        "number",
        '{"field": "cart", "operator": "array-max-length", "value": 10}',
    )

    def check(self, context: OperatorContext) -> bool:
        pair = self._length(context)
        return pair is not None and pair[0] <= pair[1]


ARRAY_OPERATORS: list[type[BaseOperator]] = [
    ContainsOperator,
    NotContainsOperator,
    ContainsAnyOperator,
    NotContainsAnyOperator,
    ContainsAllOperator,
    NotContainsAllOperator,
    ArrayLengthOperator,
    ArrayMinLengthOperator,
    ArrayMaxLengthOperator,
]
