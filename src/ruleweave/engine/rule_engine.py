"""
Rule Engine.

Front door to the library: validates rules, applies criteria mutations,
evaluates, introspects and hands out builders. Each service is a plain
object the engine owns; pass a registry to isolate an engine from the
global operator set.

Usage:
    from ruleweave import get_rule_engine

    engine = get_rule_engine()
    if engine.check_is_passed(rule, {"age": 30}):
        ...
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from ..builder import Builder, RuleBuilder
from ..core.config import RuleweaveSettings, get_settings
from ..core.logging import get_logger
from ..errors import RuleError
from ..models import EvaluationResult, IntrospectionResult, Rule, RuleValidationResult
from ..operators.registry import OperatorRegistry, get_operator_registry
from .evaluator import Evaluator
from .introspector import Introspector
from .mutator import MutationFn, Mutator
from .validator import RuleValidator

logger = get_logger(__name__)

RuleInput = Rule | Mapping[str, Any]


class RuleEngine:
    """Validate, mutate and evaluate rules against data."""

    def __init__(
        self,
        registry: OperatorRegistry | None = None,
        settings: RuleweaveSettings | None = None,
    ) -> None:
        self._registry = registry
        self._settings = settings
        self.validator = RuleValidator(registry)
        self.evaluator = Evaluator(registry)
        self.introspector = Introspector()
        self.mutator = Mutator(use_cache=settings.mutation_cache if settings else None)

    @property
    def registry(self) -> OperatorRegistry:
        if self._registry is not None:
            return self._registry
        return get_operator_registry()

    @property
    def settings(self) -> RuleweaveSettings:
        return self._settings or get_settings()

    # =========================================================================
    # Evaluation
    # =========================================================================

    def evaluate(
        self, rule: RuleInput, data: Any, trust_rule: bool | None = None
    ) -> EvaluationResult | list[Any]:
        """
        Evaluate a rule against data, or against each item of a list of data.

        Args:
            rule: Rule dataclass or its JSON shape
            data: Criteria object, or a list of them
            trust_rule: Skip structural validation; defaults to settings.trust_rules

        Raises:
            RuleError: If the rule is invalid and not trusted
        """
        self._check(rule, trust_rule)
        return self.evaluator.evaluate(rule, self.mutator.mutate(data))

    def check_is_passed(self, rule: RuleInput, data: Any, trust_rule: bool | None = None) -> bool:
        """True when every result passes."""
        result = self.evaluate(rule, data, trust_rule)
        return all(r.is_passed for r in _flatten(result))

    def get_evaluate_result(self, rule: RuleInput, data: Any, trust_rule: bool | None = None) -> Any:
        """The result value(s) rather than full result objects."""
        return _values(self.evaluate(rule, data, trust_rule))

    def evaluate_multiple(
        self, rules: Iterable[RuleInput], data: Any, trust_rule: bool | None = None
    ) -> list[EvaluationResult | list[Any]]:
        """Evaluate several rules against the same data, in order."""
        return [self.evaluate(rule, data, trust_rule) for rule in rules]

    def evaluate_first(
        self, rule: RuleInput, data: Any, trust_rule: bool | None = None
    ) -> EvaluationResult | list[EvaluationResult]:
        """Decision-table evaluation: the first passing top-level condition wins."""
        self._check(rule, trust_rule)
        return self.evaluator.evaluate_first(rule, self.mutator.mutate(data))

    def _check(self, rule: RuleInput, trust_rule: bool | None) -> None:
        if trust_rule is None:
            trust_rule = self.settings.trust_rules
        if trust_rule:
            return
        result = self.validate(rule)
        if not result.is_valid:
            logger.debug(f"Rejected invalid rule: {result.message}")
            raise RuleError.from_result(result)

    # =========================================================================
    # Validation and Introspection
    # =========================================================================

    def validate(self, rule: Any) -> RuleValidationResult:
        return self.validator.validate(rule)

    def introspect(self, rule: RuleInput) -> IntrospectionResult:
        """
        Criteria ranges of a granular rule.

        Raises:
            RuleError: If the rule is invalid
            RuleTypeError: If the rule is not granular
        """
        result = self.validate(rule)
        if not result.is_valid:
            raise RuleError.from_result(result)
        return self.introspector.introspect(rule)

    # =========================================================================
    # Builders
    # =========================================================================

    def builder(self) -> Builder:
        return Builder(self.validator)

    def type_safe_builder(self, fields: Iterable[Any] = ()) -> RuleBuilder:
        return RuleBuilder(fields=fields, registry=self._registry)

    # =========================================================================
    # Mutations
    # =========================================================================

    def add_mutation(self, name: str, mutation: MutationFn) -> RuleEngine:
        """Register a mutation applied to the `name` property before evaluation."""
        self.mutator.add(name, mutation)
        return self

    def remove_mutation(self, name: str) -> RuleEngine:
        self.mutator.remove(name)
        return self

    def clear_mutation_cache(self, name: str | None = None) -> RuleEngine:
        self.mutator.clear_cache(name)
        return self


def _flatten(result: Any) -> list[EvaluationResult]:
    if isinstance(result, list):
        return [r for item in result for r in _flatten(item)]
    return [result]


def _values(result: Any) -> Any:
    if isinstance(result, list):
        return [_values(item) for item in result]
    return result.value


# =============================================================================
# Global Engine
# =============================================================================

_global_engine: RuleEngine | None = None


def get_rule_engine() -> RuleEngine:
    """Get the shared engine bound to the global registry and settings."""
    global _global_engine
    if _global_engine is None:
        _global_engine = RuleEngine()
    return _global_engine


def reset_rule_engine() -> None:
    """
    Reset the shared engine.

    Useful for testing to ensure clean state.
    """
    global _global_engine
    _global_engine = None
