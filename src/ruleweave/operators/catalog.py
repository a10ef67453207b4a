"""
Operator catalog export and discovery.

Produces machine-readable operator metadata for editors and other tooling,
plus name suggestions and type-compatibility lookups for rule authoring.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Literal

from .base import OperatorMetadata, value_kind
from .registry import OperatorRegistry, get_operator_registry

Compatibility = Literal["exact", "compatible"]


@dataclass
class OperatorSuggestion:
    """A ranked completion candidate."""

    name: str
    metadata: OperatorMetadata
    score: int

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "score": self.score, "metadata": self.metadata.to_dict()}


@dataclass
class CompatibleOperator:
    """An operator usable with a given field value."""

    name: str
    metadata: OperatorMetadata
    compatibility: Compatibility

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "compatibility": self.compatibility,
            "metadata": self.metadata.to_dict(),
        }


def export_catalog(registry: OperatorRegistry | None = None) -> dict[str, Any]:
    """
    Export every registered operator as plain data.

    Returns:
        Dict with the operators, their names grouped by category, and the
        negation pairs that are registered
    """
    if registry is None:
        registry = get_operator_registry()
    metadata = registry.get_all()

    categories: dict[str, list[str]] = {}
    for name, meta in metadata.items():
        categories.setdefault(meta.category.value, []).append(name)

    negations = {}
    for name in metadata:
        negated = registry.get_negated_operator(name)
        if negated:
            negations[name] = negated

    return {
        "count": len(metadata),
        "operators": [meta.to_dict() for meta in metadata.values()],
        "categories": categories,
        "negations": negations,
    }


def export_catalog_json(registry: OperatorRegistry | None = None, indent: int = 2) -> str:
    """Export the catalog as a JSON document."""
    return json.dumps(export_catalog(registry), indent=indent, ensure_ascii=False)


def get_suggestions(
    partial: str,
    field_type: str | None = None,
    limit: int = 10,
    registry: OperatorRegistry | None = None,
) -> list[OperatorSuggestion]:
    """
    Rank operator names for a partially typed input.

    Scoring: name prefix +100, else name substring +50, else display name or
    description substring +25; +20 more when `field_type` is accepted.
    Zero scores are dropped.
    """
    if registry is None:
        registry = get_operator_registry()
    needle = partial.lower()

    suggestions = []
    for name, meta in registry.get_all().items():
        score = 0
        lowered = name.lower()
        if lowered.startswith(needle):
            score += 100
        elif needle in lowered:
            score += 50
        elif needle in meta.display_name.lower() or needle in meta.description.lower():
            score += 25

        if field_type and field_type in meta.accepted_field_types:
            score += 20

        if score > 0:
            suggestions.append(OperatorSuggestion(name=name, metadata=meta, score=score))

    suggestions.sort(key=lambda s: s.score, reverse=True)
    return suggestions[:limit]


def get_compatible_operators(
    sample: Any, registry: OperatorRegistry | None = None
) -> list[CompatibleOperator]:
    """
    Operators that accept a field holding `sample`.

    Operators listing the sample's type are "exact"; those accepting any
    type are "compatible". Exact matches come first, then by name.
    """
    if registry is None:
        registry = get_operator_registry()
    field_type = value_kind(sample)

    matches = []
    for name, meta in registry.get_all().items():
        if field_type in meta.accepted_field_types and field_type != "any":
            matches.append(CompatibleOperator(name, meta, "exact"))
        elif "any" in meta.accepted_field_types:
            matches.append(CompatibleOperator(name, meta, "compatible"))

    matches.sort(key=lambda m: (m.compatibility != "exact", m.name))
    return matches
