"""
Operator Registry.

Maps operator names to factories. Operators are registered once, usually at
startup, and looked up by name for every constraint evaluated. Lookups
return a fresh instance so callers never share operator state.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, Union

from ..core.logging import get_logger
from ..errors import OperatorRegistrationError, UnknownOperatorError
from .base import OperatorCategory, OperatorMetadata, OperatorStrategy

logger = get_logger(__name__)

OperatorFactory = Callable[[], OperatorStrategy]
OperatorSource = Union[type, OperatorFactory]

# Counterparts used by get_negated_operator and rule introspection. An operator
# missing here has no negation, whatever its is_negatable flag says.
NEGATIONS: dict[str, str] = {
    "equals": "not-equals",
    "not-equals": "equals",
    "like": "not-like",
    "not-like": "like",
    "greater-than": "less-than-or-equals",
    "less-than": "greater-than-or-equals",
    "greater-than-or-equals": "less-than",
    "less-than-or-equals": "greater-than",
    "in": "not-in",
    "not-in": "in",
    "contains": "not-contains",
    "not-contains": "contains",
    "contains-any": "not-contains-any",
    "not-contains-any": "contains-any",
    "contains-all": "not-contains-all",
    "not-contains-all": "contains-all",
    "matches": "not-matches",
    "not-matches": "matches",
    "exists": "not-exists",
    "not-exists": "exists",
    "empty": "not-empty",
    "not-empty": "empty",
    "null-or-undefined": "not-null-or-undefined",
    "not-null-or-undefined": "null-or-undefined",
    "date-after": "date-before-or-equals",
    "date-before": "date-after-or-equals",
    "date-after-or-equals": "date-before",
    "date-before-or-equals": "date-after",
    "date-equals": "date-not-equals",
    "date-not-equals": "date-equals",
    "date-between": "date-not-between",
    "date-not-between": "date-between",
    "boolean": "not-boolean",
    "not-boolean": "boolean",
    "string": "not-string",
    "not-string": "string",
    "number": "not-number",
    "not-number": "number",
    "array": "not-array",
    "not-array": "array",
    "object": "not-object",
    "not-object": "object",
}


class OperatorRegistry:
    """
    Name-keyed catalog of operator factories.

    Usage:
        registry = OperatorRegistry()
        registry.register(EqualsOperator)
        op = registry.get("equals")
    """

    def __init__(self) -> None:
        self._factories: dict[str, OperatorFactory] = {}
        self._metadata: dict[str, OperatorMetadata] = {}

    # =========================================================================
    # Registration
    # =========================================================================

    def register(self, operator: OperatorSource, override: bool = False) -> str:
        """
        Register an operator class or zero-argument factory.

        The factory is called once here to read the operator's name.

        Args:
            operator: Operator class or factory returning an operator
            override: Replace an existing registration with the same name

        Returns:
            The registered operator name

        Raises:
            OperatorRegistrationError: If the name is taken and override is False
            TypeError: If the factory does not produce an operator
        """
        factory: OperatorFactory = operator
        instance = factory()
        if not isinstance(instance, OperatorStrategy):
            raise TypeError(f"{operator!r} does not produce an operator")

        meta = instance.metadata
        name = meta.name
        if name in self._factories and not override:
            raise OperatorRegistrationError(name)

        self._factories[name] = factory
        self._metadata[name] = meta
        logger.debug(f"Registered operator: {name}")
        return name

    def register_many(self, operators: Iterable[OperatorSource], override: bool = False) -> list[str]:
        """Register several operators; stops at the first conflict."""
        return [self.register(op, override=override) for op in operators]

    def unregister(self, name: str) -> bool:
        """Remove an operator. Returns False if it was not registered."""
        if name not in self._factories:
            return False
        del self._factories[name]
        del self._metadata[name]
        logger.debug(f"Unregistered operator: {name}")
        return True

    def clear(self) -> None:
        """Remove every registration."""
        self._factories.clear()
        self._metadata.clear()

    # =========================================================================
    # Lookup
    # =========================================================================

    def get(self, name: str) -> OperatorStrategy | None:
        """
        Get a fresh operator instance.

        Returns:
            The operator, or None if the name is unknown or its factory fails
        """
        factory = self._factories.get(name)
        if factory is None:
            return None
        try:
            return factory()
        except Exception as e:
            logger.error(f"Failed to instantiate operator {name}: {e}")
            return None

    def require(self, name: str) -> OperatorStrategy:
        """
        Get an operator that must exist.

        Raises:
            UnknownOperatorError: If the name is not registered
        """
        operator = self.get(name)
        if operator is None:
            raise UnknownOperatorError(name)
        return operator

    def has(self, name: str) -> bool:
        return name in self._factories

    def __contains__(self, name: object) -> bool:
        return name in self._factories

    def __len__(self) -> int:
        return len(self._factories)

    def get_operator_names(self) -> list[str]:
        """Registered names in registration order."""
        return list(self._factories)

    def get_metadata(self, name: str) -> OperatorMetadata | None:
        return self._metadata.get(name)

    def get_all(self) -> dict[str, OperatorMetadata]:
        """Metadata for every registered operator."""
        return dict(self._metadata)

    def get_by_category(self, category: OperatorCategory | str) -> list[str]:
        """Names of operators in a category."""
        category = OperatorCategory(category)
        return [name for name, meta in self._metadata.items() if meta.category == category]

    def get_by_field_type(self, field_type: str) -> list[str]:
        """Names of operators that list `field_type` among their accepted field types."""
        return [
            name for name, meta in self._metadata.items() if field_type in meta.accepted_field_types
        ]

    def get_negated_operator(self, name: str) -> str | None:
        """Counterpart from the negation table, if it is registered."""
        negated = NEGATIONS.get(name)
        if negated is None or negated not in self._factories:
            return None
        return negated

    # =========================================================================
    # Export
    # =========================================================================

    def export_metadata(self) -> dict[str, dict[str, Any]]:
        """JSON-serializable metadata keyed by operator name."""
        return {name: meta.to_dict() for name, meta in self._metadata.items()}

    def get_stats(self) -> dict[str, Any]:
        """Get registry statistics."""
        by_category: dict[str, int] = {}
        for meta in self._metadata.values():
            by_category[meta.category.value] = by_category.get(meta.category.value, 0) + 1
        return {
            "registered": len(self._factories),
            "categories": by_category,
            "negatable": sum(1 for name in self._factories if self.get_negated_operator(name)),
        }


# =============================================================================
# Global Registry
# =============================================================================

_global_registry: OperatorRegistry | None = None


def get_operator_registry() -> OperatorRegistry:
    """
    Get the global operator registry.

    Returns a lazily-initialized registry with built-in operators registered.
    """
    global _global_registry
    if _global_registry is None:
        _global_registry = OperatorRegistry()
        register_builtin_operators(_global_registry)
    return _global_registry


def initialize_operators() -> OperatorRegistry:
    """Make sure the global registry exists with its built-ins."""
    return get_operator_registry()


def register_builtin_operators(registry: OperatorRegistry, override: bool = False) -> None:
    """
    Register all built-in operators.

    Called once when the global registry is created.
    """
    # Import here to avoid circular imports
    from .array import ARRAY_OPERATORS
    from .boolean import BOOLEAN_OPERATORS
    from .comparison import COMPARISON_OPERATORS
    from .date_time import DATE_TIME_OPERATORS
    from .existence import EXISTENCE_OPERATORS
    from .numeric import NUMERIC_OPERATORS
    from .pattern import PATTERN_OPERATORS
    from .strings import STRING_OPERATORS
    from .types import TYPE_OPERATORS

    for family in (
        COMPARISON_OPERATORS,
        STRING_OPERATORS,
        PATTERN_OPERATORS,
        ARRAY_OPERATORS,
        EXISTENCE_OPERATORS,
        BOOLEAN_OPERATORS,
        TYPE_OPERATORS,
        NUMERIC_OPERATORS,
        DATE_TIME_OPERATORS,
    ):
        registry.register_many(family, override=override)

    logger.debug(f"Registered {len(registry)} built-in operators")


def register_custom_operator(operator: OperatorSource, override: bool = False) -> str:
    """Register an operator in the global registry."""
    return get_operator_registry().register(operator, override=override)


def register_custom_operators(
    operators: Iterable[OperatorSource], override: bool = False
) -> list[str]:
    """Register several operators in the global registry."""
    return get_operator_registry().register_many(operators, override=override)


def reset_registry() -> None:
    """
    Reset the global registry.

    Useful for testing to ensure clean state.
    """
    global _global_registry
    _global_registry = None
