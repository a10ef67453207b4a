"""
Rule Builders.

Two ways to assemble rules in code, both producing the plain JSON shape the
engine evaluates:

    Builder       fluent node factory; you compose conditions yourself
    RuleBuilder   chained field -> operator -> value construction, checking
                  operator names against the registry as you go

Usage:
    builder = Builder()
    rule = (
        builder.add(builder.condition("and", [builder.constraint("age", "min", 18)]))
        .default("minor")
        .build(validate=True)
    )

    rule = (
        RuleBuilder()
        .field("age").operator("min").value(18)
        .and_()
        .field("country").operator("in").value(["US", "CA"])
        .result("adult")
    )
"""

from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .core.constants import CONDITION_KEYS, MISSING, ConditionType
from .errors import RuleError, RuleTypeError, UnknownOperatorError
from .models import Constraint
from .operators.base import OperatorMetadata
from .operators.registry import OperatorRegistry, get_operator_registry

if TYPE_CHECKING:
    from .engine.validator import RuleValidator


# =============================================================================
# Fluent Builder
# =============================================================================


class Builder:
    """Fluent factory for rule nodes."""

    def __init__(self, validator: RuleValidator | None = None) -> None:
        self._validator = validator
        self._rule: dict[str, Any] = {"conditions": []}

    @property
    def validator(self) -> RuleValidator:
        if self._validator is None:
            # Import here to avoid circular imports
            from .engine.validator import RuleValidator

            self._validator = RuleValidator()
        return self._validator

    def add(self, node: Mapping[str, Any]) -> Builder:
        """Append a top-level condition."""
        self._rule["conditions"].append(dict(node))
        return self

    def default(self, value: Any) -> Builder:
        """Set the rule default, used when no condition passes."""
        self._rule["default"] = value
        return self

    def build(self, validate: bool = False) -> dict[str, Any]:
        """
        Return the rule assembled so far.

        Raises:
            RuleError: If validate is set and the rule is invalid
        """
        rule = copy.deepcopy(self._rule)
        if validate:
            result = self.validator.validate(rule)
            if not result.is_valid:
                raise RuleError.from_result(result)
        return rule

    def condition(
        self,
        type: ConditionType | str,
        nodes: Iterable[Mapping[str, Any]] = (),
        result: Any = None,
    ) -> dict[str, Any]:
        """Create a condition node; `result` makes it granular."""
        node: dict[str, Any] = {ConditionType(type).value: list(nodes)}
        if result is not None:
            node["result"] = result
        return node

    def constraint(
        self,
        field: str,
        operator: str,
        value: Any = MISSING,
        message: str | None = None,
    ) -> dict[str, Any]:
        """Create a constraint node. Omit `value` for operators that take none."""
        return Constraint(field=field, operator=operator, value=value, message=message).to_dict()


# =============================================================================
# Chained Builder
# =============================================================================


@dataclass
class FieldInfo:
    """A field the rule author can pick from."""

    name: str
    type: str = "any"
    description: str | None = None

    @classmethod
    def from_value(cls, value: FieldInfo | Mapping[str, Any] | str) -> FieldInfo:
        if isinstance(value, FieldInfo):
            return value
        if isinstance(value, str):
            return cls(name=value)
        return cls(
            name=value["name"],
            type=value.get("type", "any"),
            description=value.get("description"),
        )


@dataclass
class BuilderContext:
    """What a chained builder knows while a rule is being written."""

    available_fields: list[FieldInfo] = field(default_factory=list)
    operator_metadata: dict[str, OperatorMetadata] = field(default_factory=dict)
    current_field: str | None = None
    current_operator: str | None = None
    current_value: Any = MISSING

    @property
    def suggested_operators(self) -> list[str]:
        return list(self.operator_metadata)

    def field_type(self, name: str) -> str:
        for info in self.available_fields:
            if info.name == name:
                return info.type
        return "any"


class RuleBuilder:
    """
    Chained rule construction.

    `field()` starts a constraint, `operator()` picks a registered operator,
    `value()` / `no_value()` completes it. The completed constraint is then
    joined with `and_()` / `or_()`, or closed with `result()` / `build()`.
    Switching from `and_()` to `or_()` mid-chain groups everything before the
    switch as the first child of the new condition.
    """

    def __init__(
        self,
        fields: Iterable[FieldInfo | Mapping[str, Any] | str] = (),
        registry: OperatorRegistry | None = None,
    ) -> None:
        self._registry = registry
        self._conditions: list[dict[str, Any]] = []
        self._default: Any = None
        self.context = BuilderContext(
            available_fields=[FieldInfo.from_value(f) for f in fields],
            operator_metadata=self.registry.get_all(),
        )

    @property
    def registry(self) -> OperatorRegistry:
        if self._registry is not None:
            return self._registry
        return get_operator_registry()

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    def field(self, name: str) -> OperatorSelector:
        """Start a new top-level constraint on `name`."""
        self.context.current_field = name
        return OperatorSelector(self, name)

    def add_condition(self, condition: Mapping[str, Any]) -> RuleBuilder:
        """Append a ready-made condition."""
        self._conditions.append(dict(condition))
        return self

    def default(self, value: Any, message: str | None = None) -> RuleBuilder:
        self._default = _payload(value, message)
        return self

    def build(self) -> dict[str, Any]:
        """
        Return the rule. A single condition is not wrapped in a list.

        Raises:
            RuleTypeError: If no condition was added
        """
        if not self._conditions:
            raise RuleTypeError("Cannot build rule with no conditions")

        conditions: Any = self._conditions[0] if len(self._conditions) == 1 else self._conditions
        rule: dict[str, Any] = {"conditions": copy.deepcopy(conditions)}
        if self._default is not None:
            rule["default"] = self._default
        return rule

    def with_fields(self, fields: Iterable[FieldInfo | Mapping[str, Any] | str]) -> RuleBuilder:
        """A fresh builder that knows about `fields`."""
        return RuleBuilder(fields=fields, registry=self._registry)

    @classmethod
    def from_conditions(
        cls,
        conditions: Iterable[Mapping[str, Any]],
        fields: Iterable[FieldInfo | Mapping[str, Any] | str] = (),
        registry: OperatorRegistry | None = None,
    ) -> RuleBuilder:
        """A builder pre-loaded with existing conditions."""
        builder = cls(fields=fields, registry=registry)
        for condition in conditions:
            builder.add_condition(condition)
        return builder

    def get_context(self) -> BuilderContext:
        return copy.copy(self.context)

    def operators_for(self, field_name: str) -> list[str]:
        """Operators accepting the declared type of a known field."""
        field_type = self.context.field_type(field_name)
        return [
            name
            for name, meta in self.context.operator_metadata.items()
            if field_type == "any"
            or field_type in meta.accepted_field_types
            or "any" in meta.accepted_field_types
        ]

    # -------------------------------------------------------------------------
    # Chain internals
    # -------------------------------------------------------------------------

    def _check_operator(self, name: str) -> None:
        if not self.registry.has(name):
            raise UnknownOperatorError(name)
        self.context.current_operator = name

    def _open(self, node: dict[str, Any], ctype: ConditionType) -> dict[str, Any]:
        """Start a new top-level condition holding `node`."""
        group = {ctype.value: [node]}
        self._conditions.append(group)
        return group

    def _regroup(self, group: dict[str, Any], ctype: ConditionType) -> dict[str, Any]:
        """Continue `group` as a `ctype` condition."""
        if ctype.value in group:
            return group

        # The current condition becomes the first child of a new one
        index = next(i for i, c in enumerate(self._conditions) if c is group)
        regrouped = {ctype.value: [group]}
        self._conditions[index] = regrouped
        return regrouped


def _payload(value: Any, message: str | None) -> dict[str, Any]:
    payload: dict[str, Any] = {"value": value}
    if message is not None:
        payload["message"] = message
    return payload


class OperatorSelector:
    """Second link of the chain: pick the operator."""

    def __init__(self, builder: RuleBuilder, field: str, group: dict[str, Any] | None = None) -> None:
        self._builder = builder
        self._field = field
        self._group = group

    def operator(self, name: str) -> ValueSelector:
        """
        Raises:
            UnknownOperatorError: If the operator is not registered
        """
        self._builder._check_operator(name)
        return ValueSelector(self._builder, self._field, name, self._group)


class ValueSelector:
    """Third link of the chain: supply the comparison value, if any."""

    def __init__(
        self, builder: RuleBuilder, field: str, operator: str, group: dict[str, Any] | None
    ) -> None:
        self._builder = builder
        self._field = field
        self._operator = operator
        self._group = group

    def value(self, value: Any, message: str | None = None) -> ConstraintChain:
        self._builder.context.current_value = value
        return self._finish(Constraint(self._field, self._operator, value, message))

    def no_value(self, message: str | None = None) -> ConstraintChain:
        return self._finish(Constraint(self._field, self._operator, message=message))

    def _finish(self, constraint: Constraint) -> ConstraintChain:
        node = constraint.to_dict()
        if self._group is not None:
            key = next(k for k in CONDITION_KEYS if k in self._group)
            self._group[key].append(node)
            return ConstraintChain(self._builder, None, self._group)
        return ConstraintChain(self._builder, node, None)


class ConstraintChain:
    """A completed constraint, waiting to be joined or closed."""

    def __init__(
        self,
        builder: RuleBuilder,
        pending: dict[str, Any] | None,
        group: dict[str, Any] | None,
    ) -> None:
        self._builder = builder
        self._pending = pending
        self._group = group

    def and_(self) -> ConditionChain:
        return self._chain(ConditionType.AND)

    def or_(self) -> ConditionChain:
        return self._chain(ConditionType.OR)

    def result(self, value: Any, message: str | None = None) -> dict[str, Any]:
        """Close the condition with a result payload and build the rule."""
        group = self._close()
        group["result"] = _payload(value, message)
        return self._builder.build()

    def build(self) -> dict[str, Any]:
        self._close()
        return self._builder.build()

    def _chain(self, ctype: ConditionType) -> ConditionChain:
        if self._pending is not None:
            group = self._builder._open(self._pending, ctype)
        else:
            group = self._builder._regroup(self._group, ctype)
        return ConditionChain(self._builder, group)

    def _close(self) -> dict[str, Any]:
        if self._pending is not None:
            return self._builder._open(self._pending, ConditionType.AND)
        return self._group


class ConditionChain:
    """An open condition accepting further constraints."""

    def __init__(self, builder: RuleBuilder, group: dict[str, Any]) -> None:
        self._builder = builder
        self._group = group

    def field(self, name: str) -> OperatorSelector:
        self._builder.context.current_field = name
        return OperatorSelector(self._builder, name, self._group)
