"""
Existence operators.

These are the operators that look at missing and null fields instead of
failing on them: `exists` is False only when the path did not resolve,
`null-or-undefined` also accepts an explicit null.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..core.constants import MISSING
from .base import (
    BaseOperator,
    NegatedOperator,
    OperatorCategory,
    OperatorContext,
    OperatorMetadata,
    negated_metadata,
)


def _absent(value: Any) -> bool:
    return value is None or value is MISSING


def is_empty(value: Any) -> bool:
    """Null, missing, or a string, array or object with nothing in it."""
    if _absent(value):
        return True
    if isinstance(value, (str, list, tuple, Mapping)):
        return len(value) == 0
    return False


def is_null_or_whitespace(value: Any) -> bool:
    if _absent(value):
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def _metadata(
    name: str,
    display: str,
    description: str,
    field: str,
    accepted: tuple[str, ...] = ("any",),
) -> OperatorMetadata:
    return OperatorMetadata(
        name=name,
        display_name=display,
        category=OperatorCategory.EXISTENCE,
        description=description,
        accepted_field_types=accepted,
        expected_value_type="void",
        requires_value=False,
        is_negatable=False,
        example=f'{{"field": "{field}", "operator": "{name}"}}',
    )


class ExistsOperator(BaseOperator):
    metadata = _metadata("exists", "Exists", "Checks if the field exists", "email")

    def check(self, context: OperatorContext) -> bool:
        return context.field_value is not MISSING


class NotExistsOperator(NegatedOperator):
    positive = ExistsOperator
    metadata = negated_metadata(
        ExistsOperator,
        "not-exists",
        "Not Exists",
        "Checks if the field does not exist",
        '{"field": "deletedAt", "operator": "not-exists"}',
    )


class NullOrUndefinedOperator(BaseOperator):
    metadata = _metadata(
        "null-or-undefined",
        "Null Or Undefined",
        "Checks if the field is null or missing",
        "middleName",
    )

    def check(self, context: OperatorContext) -> bool:
        return _absent(context.field_value)


class NotNullOrUndefinedOperator(NegatedOperator):
    positive = NullOrUndefinedOperator
    metadata = negated_metadata(
        NullOrUndefinedOperator,
        "not-null-or-undefined",
        "Not Null Or Undefined",
        "Checks if the field is present and not null",
        '{"field": "userId", "operator": "not-null-or-undefined"}',
    )


class EmptyOperator(BaseOperator):
    metadata = _metadata(
        "empty",
        "Is Empty",
        "Checks if the field is empty (empty string, array, object, null or missing)",
        "description",
        accepted=("string", "array", "object"),
    )

    def check(self, context: OperatorContext) -> bool:
        return is_empty(context.field_value)


class NotEmptyOperator(NegatedOperator):
    positive = EmptyOperator
    metadata = negated_metadata(
        EmptyOperator,
        "not-empty",
        "Is Not Empty",
        "Checks if the field has content",
        '{"field": "tags", "operator": "not-empty"}',
    )


class NullOrWhiteSpaceOperator(BaseOperator):
    metadata = _metadata(
        "null-or-white-space",
        "Null Or White Space",
        "Checks if the field is null, missing, or only whitespace",
        "comment",
        accepted=("string", "any"),
    )

    def check(self, context: OperatorContext) -> bool:
        return is_null_or_whitespace(context.field_value)


class NotNullOrWhiteSpaceOperator(NegatedOperator):
    positive = NullOrWhiteSpaceOperator
    metadata = negated_metadata(
        NullOrWhiteSpaceOperator,
        "not-null-or-white-space",
        "Not Null Or White Space",
        "Checks if the field has non-whitespace content",
        '{"field": "name", "operator": "not-null-or-white-space"}',
    )


EXISTENCE_OPERATORS: list[type[BaseOperator]] = [
    ExistsOperator,
    NotExistsOperator,
    NullOrUndefinedOperator,
    NotNullOrUndefinedOperator,
    EmptyOperator,
    NotEmptyOperator,
    NullOrWhiteSpaceOperator,
    NotNullOrWhiteSpaceOperator,
]
