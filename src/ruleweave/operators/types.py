"""
Type guard operators for strings, objects and arrays.
"""

from __future__ import annotations

from .base import (
    BaseOperator,
    NegatedOperator,
    OperatorCategory,
    OperatorContext,
    OperatorMetadata,
    is_array,
    is_object,
    is_string,
    negated_metadata,
)


def _metadata(name: str, display: str, description: str, field: str) -> OperatorMetadata:
    return OperatorMetadata(
        name=name,
        display_name=display,
        category=OperatorCategory.TYPE,
        description=description,
        accepted_field_types=("any",),
        expected_value_type="void",
        requires_value=False,
        is_negatable=False,
        example=f'{{"field": "{field}", "operator": "{name}"}}',
    )


class StringOperator(BaseOperator):
    metadata = _metadata("string", "Is String", "Checks if the field value is a string", "name")

    def check(self, context: OperatorContext) -> bool:
        return is_string(context.field_value)


class NotStringOperator(NegatedOperator):
    positive = StringOperator
    metadata = negated_metadata(
        StringOperator,
        "not-string",
        "Is Not String",
        "Checks if the field value is not a string",
        '{"field": "age", "operator": "not-string"}',
    )


class ObjectOperator(BaseOperator):
    metadata = _metadata("object", "Is Object", "Checks if the field value is an object", "address")

    def check(self, context: OperatorContext) -> bool:
        return is_object(context.field_value)


class NotObjectOperator(NegatedOperator):
    positive = ObjectOperator
    metadata = negated_metadata(
        ObjectOperator,
        "not-object",
        "Is Not Object",
        "Checks if the field value is not an object",
        '{"field": "tags", "operator": "not-object"}',
    )


class ArrayOperator(BaseOperator):
    metadata = _metadata("array", "Is Array", "Checks if the field value is an array", "items")

    def check(self, context: OperatorContext) -> bool:
        return is_array(context.field_value)


class NotArrayOperator(NegatedOperator):
    positive = ArrayOperator
    metadata = negated_metadata(
        ArrayOperator,
        "not-array",
        "Is Not Array",
        "Checks if the field value is not an array",
        '{"field": "profile", "operator": "not-array"}',
    )


TYPE_OPERATORS: list[type[BaseOperator]] = [
    StringOperator,
    NotStringOperator,
    ObjectOperator,
    NotObjectOperator,
    ArrayOperator,
    NotArrayOperator,
]
