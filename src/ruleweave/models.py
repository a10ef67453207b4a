"""
Ruleweave Data Models.

Rule trees are plain JSON on the wire. These dataclasses give them a typed
shape inside the engine and convert back and forth with from_dict/to_dict.

A rule holds one condition or a list of conditions. A condition holds exactly
one of and/or/none with an ordered list of child constraints and conditions,
plus an optional result payload. A constraint is a leaf testing one field with
one operator.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from .core.constants import CONDITION_KEYS, MISSING, ConditionType
from .errors import RuleTypeError

Node = Union["Constraint", "Condition"]


# =============================================================================
# Shape Helpers (raw dicts and dataclasses)
# =============================================================================


def condition_type(obj: Any) -> ConditionType | None:
    """
    Return the combinator of a condition, or None if obj is not a condition.

    When several keys are present the first of or/and/none wins; the validator
    reports such conditions as invalid before evaluation.
    """
    if isinstance(obj, Condition):
        return obj.type
    if not isinstance(obj, Mapping):
        return None
    for ctype in (ConditionType.OR, ConditionType.AND, ConditionType.NONE):
        if ctype.value in obj:
            return ctype
    return None


def is_condition(obj: Any) -> bool:
    """Check whether obj is a condition node."""
    return condition_type(obj) is not None


def is_constraint(obj: Any) -> bool:
    """Check whether obj is a constraint leaf."""
    if isinstance(obj, Constraint):
        return True
    return isinstance(obj, Mapping) and "field" in obj and "operator" in obj


def get_conditions(rule: Rule | Mapping[str, Any]) -> list[Any]:
    """Return the top-level conditions of a rule as a list."""
    conditions = rule.conditions if isinstance(rule, Rule) else rule.get("conditions")
    if conditions is None:
        return []
    if isinstance(conditions, list):
        return conditions
    return [conditions]


def is_granular(rule: Rule | Mapping[str, Any]) -> bool:
    """Check that every top-level condition carries a result payload."""
    conditions = get_conditions(rule)
    if not conditions:
        return False
    for condition in conditions:
        if not is_condition(condition):
            return False
        result = condition.result if isinstance(condition, Condition) else condition.get("result")
        if result is None:
            return False
    return True


# =============================================================================
# Rule Tree
# =============================================================================


@dataclass
class ResultPayload:
    """Value (and optional message) produced when a condition matches."""

    value: Any = None
    message: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> ResultPayload:
        """Parse a payload; bare values are wrapped."""
        if isinstance(data, ResultPayload):
            return data
        if isinstance(data, Mapping) and set(data) <= {"value", "message"} and data:
            return cls(value=data.get("value"), message=data.get("message"))
        return cls(value=data)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        result: dict[str, Any] = {"value": self.value}
        if self.message is not None:
            result["message"] = self.message
        return result


@dataclass
class Constraint:
    """Leaf node: one field tested with one operator."""

    field: str
    operator: str
    value: Any = MISSING
    message: str | None = None

    @property
    def has_value(self) -> bool:
        """Check whether a comparison value was given."""
        return self.value is not MISSING

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Constraint:
        """Parse a constraint from its JSON shape."""
        return cls(
            field=data["field"],
            operator=data["operator"],
            value=data.get("value", MISSING),
            message=data.get("message"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        result: dict[str, Any] = {"field": self.field, "operator": self.operator}
        if self.has_value:
            result["value"] = self.value
        if self.message is not None:
            result["message"] = self.message
        return result


@dataclass
class Condition:
    """Internal node combining children with and/or/none semantics."""

    type: ConditionType
    nodes: list[Node] = field(default_factory=list)
    result: ResultPayload | None = None

    def __post_init__(self) -> None:
        self.type = ConditionType(self.type)

    @property
    def constraints(self) -> list[Constraint]:
        """Direct constraint children."""
        return [n for n in self.nodes if isinstance(n, Constraint)]

    @property
    def conditions(self) -> list[Condition]:
        """Direct condition children."""
        return [n for n in self.nodes if isinstance(n, Condition)]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Condition:
        """
        Parse a condition from its JSON shape.

        Raises:
            RuleTypeError: If the node does not hold exactly one list of children
        """
        keys = [k for k in CONDITION_KEYS if k in data]
        if len(keys) != 1:
            raise RuleTypeError(
                'A condition must have exactly one "and", "or", or "none" property.'
            )
        ctype = ConditionType(keys[0])
        children = data[ctype.value]
        if not isinstance(children, list):
            raise RuleTypeError(f"The condition '{ctype.value}' should be iterable.")

        result = data.get("result")
        return cls(
            type=ctype,
            nodes=[parse_node(child) for child in children],
            result=ResultPayload.from_dict(result) if result is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        result: dict[str, Any] = {self.type.value: [n.to_dict() for n in self.nodes]}
        if self.result is not None:
            result["result"] = self.result.to_dict()
        return result


def parse_node(data: Any) -> Node:
    """
    Parse a child node, which may already be a dataclass.

    Raises:
        RuleTypeError: If the node is neither a condition nor a constraint
    """
    if isinstance(data, (Constraint, Condition)):
        return data
    if is_condition(data):
        return Condition.from_dict(data)
    if is_constraint(data):
        return Constraint.from_dict(data)
    raise RuleTypeError("Each node should be a condition or constraint.")


@dataclass
class Rule:
    """
    Top-level rule container.

    `conditions` keeps the shape it was given: a single condition evaluates to
    a single result, a list evaluates to one result per condition.
    """

    conditions: Condition | list[Condition]
    default: ResultPayload | None = None

    @property
    def condition_list(self) -> list[Condition]:
        """Top-level conditions as a list."""
        if isinstance(self.conditions, list):
            return self.conditions
        return [self.conditions]

    @property
    def is_granular(self) -> bool:
        """Every top-level condition carries a result payload."""
        return is_granular(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | Rule) -> Rule:
        """
        Parse a rule from its JSON shape.

        Raises:
            RuleTypeError: If the rule or one of its nodes is malformed
        """
        if isinstance(data, Rule):
            return data
        if not isinstance(data, Mapping):
            raise RuleTypeError("The rule must be a valid JSON object.")

        raw = data.get("conditions")
        if isinstance(raw, list):
            conditions: Condition | list[Condition] = [_parse_condition(c) for c in raw]
        elif raw is not None:
            conditions = _parse_condition(raw)
        else:
            raise RuleTypeError("The conditions property must contain at least one condition.")

        default = data.get("default")
        return cls(
            conditions=conditions,
            default=ResultPayload.from_dict(default) if default is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        if isinstance(self.conditions, list):
            conditions: Any = [c.to_dict() for c in self.conditions]
        else:
            conditions = self.conditions.to_dict()
        result: dict[str, Any] = {"conditions": conditions}
        if self.default is not None:
            result["default"] = self.default.to_dict()
        return result


def _parse_condition(data: Any) -> Condition:
    node = parse_node(data)
    if not isinstance(node, Condition):
        raise RuleTypeError("Top-level nodes must be conditions.")
    return node


# =============================================================================
# Results
# =============================================================================


@dataclass
class EvaluationResult:
    """
    Outcome of evaluating a constraint, condition or whole rule.

    `error` is set only when the node could not be evaluated at all
    (unknown operator, invalid operator input); a plain false leaves it None.
    """

    is_passed: bool
    value: Any = None
    message: str | None = None
    error: str | None = None

    def __bool__(self) -> bool:
        return self.is_passed

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> EvaluationResult:
        """Parse a result; accepts isPassed or is_passed."""
        passed = data.get("is_passed", data.get("isPassed", False))
        return cls(
            is_passed=bool(passed),
            value=data.get("value"),
            message=data.get("message"),
            error=data.get("error"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        result: dict[str, Any] = {"is_passed": self.is_passed, "value": self.value}
        if self.message is not None:
            result["message"] = self.message
        if self.error is not None:
            result["error"] = self.error
        return result


@dataclass
class RuleValidationResult:
    """Structural validation result for a whole rule."""

    is_valid: bool
    message: str | None = None
    element: Any = None

    @classmethod
    def ok(cls) -> RuleValidationResult:
        return cls(is_valid=True)

    @classmethod
    def fail(cls, message: str, element: Any = None) -> RuleValidationResult:
        return cls(is_valid=False, message=message, element=element)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        result: dict[str, Any] = {"is_valid": self.is_valid}
        if not self.is_valid:
            result["error"] = {"message": self.message, "element": self.element}
        return result


@dataclass
class CriteriaRange:
    """Input shapes that lead a granular rule to one result."""

    result: ResultPayload
    options: list[list[dict[str, Any]]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"result": self.result.to_dict(), "options": self.options}


@dataclass
class IntrospectionResult:
    """All criteria ranges of a granular rule plus its default."""

    results: list[CriteriaRange] = field(default_factory=list)
    default: ResultPayload | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"results": [r.to_dict() for r in self.results]}
        if self.default is not None:
            result["default"] = self.default.to_dict()
        return result
