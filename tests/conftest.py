"""
Ruleweave Test Suite - Shared Fixtures and Configuration
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest


@pytest.fixture(autouse=True)
def reset_all_singletons():
    """
    Reset all module-level singletons between tests.

    Runs before and after each test so no test sees another's settings,
    logger state, registered operators or engine mutations.
    """

    def do_reset():
        # Settings cache (MUST be first - other modules read from settings)
        from ruleweave.core.config import reset_settings

        reset_settings()

        # Logging state (reset early - affects propagation for caplog)
        from ruleweave.core.logging import reset_logging

        reset_logging()

        from ruleweave.operators.registry import reset_registry

        reset_registry()

        from ruleweave.engine.rule_engine import reset_rule_engine

        reset_rule_engine()

    do_reset()
    yield
    do_reset()


@pytest.fixture
def registry():
    """A private registry with the built-in operators."""
    from ruleweave.operators.registry import OperatorRegistry, register_builtin_operators

    registry = OperatorRegistry()
    register_builtin_operators(registry)
    return registry


@pytest.fixture
def engine(registry):
    """A RuleEngine bound to a private registry."""
    from ruleweave.engine import RuleEngine

    return RuleEngine(registry=registry)


@pytest.fixture
def evaluate_op(registry):
    """
    Evaluate one operator against a field value and optional constraint value.

    Example:
        assert evaluate_op("equals", 5, 5)
    """
    from ruleweave.core.constants import MISSING
    from ruleweave.operators.base import OperatorContext

    def _evaluate(name, field_value, constraint_value=MISSING):
        operator = registry.require(name)
        return operator.evaluate(OperatorContext(field_value, constraint_value))

    return _evaluate


@pytest.fixture
def validate_op(registry):
    """Validate one operator context, returning the ValidationResult."""
    from ruleweave.core.constants import MISSING
    from ruleweave.operators.base import OperatorContext

    def _validate(name, field_value, constraint_value=MISSING):
        operator = registry.require(name)
        return operator.validate(OperatorContext(field_value, constraint_value))

    return _validate


@pytest.fixture
def frozen_now(monkeypatch):
    """Pin the clock used by the *-now date operators to 2024-06-15 12:00 UTC."""
    now = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)
    monkeypatch.setattr("ruleweave.operators.date_time._utcnow", lambda: now)
    return now


@pytest.fixture
def person():
    """Sample criteria object."""
    return {
        "name": "Jane Doe",
        "age": 30,
        "email": "jane@gmail.com",
        "country": "US",
        "role": "user",
        "tags": ["admin", "beta"],
        "address": {"city": "Boston", "zip": "02118"},
    }
