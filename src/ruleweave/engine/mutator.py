"""
Criteria Mutations.

A mutation is a function registered under a property path. Before a rule is
evaluated, every mutation whose path resolves in the data replaces that
property with `fn(value, data)` on a deep copy; the caller's data is never
modified. Results are cached per mutation name and input value, so a cached
mutation must depend on the value alone; one that reads the rest of the data
needs the cache turned off. The cache keeps the most recently used entries
up to the mutation_cache_size setting and hands out copies of them.

Usage:
    mutator = Mutator()
    mutator.add("country", lambda value, data: value.upper())
    mutator.mutate({"country": "us"})  # {"country": "US"}
"""

from __future__ import annotations

import copy
from collections import OrderedDict
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from ..core.config import get_settings
from ..core.constants import MISSING
from ..core.logging import get_logger
from ..operators.base import canonical_json
from ..paths import resolve_property, update_property

logger = get_logger(__name__)

MutationFn = Callable[[Any, Any], Any]


class Mutator:
    """Registry of criteria mutations with a per-value result cache."""

    def __init__(self, use_cache: bool | None = None, cache_size: int | None = None) -> None:
        self._mutations: dict[str, MutationFn] = {}
        self._cache: OrderedDict[tuple[str, str], Any] = OrderedDict()
        self._use_cache = use_cache
        self._cache_size = cache_size

    @property
    def use_cache(self) -> bool:
        if self._use_cache is not None:
            return self._use_cache
        return get_settings().mutation_cache

    @property
    def cache_size(self) -> int:
        if self._cache_size is not None:
            return self._cache_size
        return get_settings().mutation_cache_size

    # =========================================================================
    # Registration
    # =========================================================================

    def add(self, name: str, mutation: MutationFn) -> None:
        """Register a mutation for the property at `name`, replacing any existing one."""
        self._mutations[name] = mutation
        self.clear_cache(name)

    def add_many(self, mutations: Mapping[str, MutationFn] | Iterable[tuple[str, MutationFn]]) -> None:
        """Register several mutations from a mapping or (name, fn) pairs."""
        items = mutations.items() if isinstance(mutations, Mapping) else mutations
        for name, mutation in items:
            self.add(name, mutation)

    def remove(self, names: str | Iterable[str]) -> None:
        """Remove one or more mutations and purge their cached results."""
        if isinstance(names, str):
            names = [names]
        for name in names:
            self.clear_cache(name)
            self._mutations.pop(name, None)

    def remove_all(self) -> None:
        self._mutations.clear()
        self._cache.clear()

    def clear_cache(self, name: str | None = None) -> None:
        """Clear the whole cache, or only the entries of one mutation."""
        if name is None:
            self._cache.clear()
            return
        for key in [k for k in self._cache if k[0] == name]:
            del self._cache[key]

    @property
    def names(self) -> list[str]:
        return list(self._mutations)

    def __len__(self) -> int:
        return len(self._mutations)

    # =========================================================================
    # Mutation
    # =========================================================================

    def mutate(self, data: Any) -> Any:
        """
        Apply every matching mutation to a copy of the data.

        Lists are mutated item by item. Data without any matching property is
        returned as is.
        """
        if isinstance(data, list):
            return [self._mutate_one(item) for item in data]
        return self._mutate_one(data)

    def has_mutations(self, data: Any) -> bool:
        """Check whether any registered mutation path resolves in the data."""
        return any(resolve_property(name, data) is not MISSING for name in self._mutations)

    def _mutate_one(self, data: Any) -> Any:
        if not self._mutations or not isinstance(data, Mapping) or not self.has_mutations(data):
            return data

        mutated = copy.deepcopy(dict(data))
        for name in list(self._mutations):
            value = resolve_property(name, mutated)
            if value is MISSING:
                continue
            update_property(name, mutated, self._execute(name, value, mutated))
        return mutated

    def _execute(self, name: str, value: Any, data: Any) -> Any:
        mutation = self._mutations[name]
        if not self.use_cache:
            logger.debug(f'Running mutation "{name}" with param "{value}"')
            return mutation(value, data)

        key = (name, canonical_json(value))
        if key in self._cache:
            logger.debug(f'Cache hit on "{name}" with param "{value}"')
            self._cache.move_to_end(key)
            return copy.deepcopy(self._cache[key])

        logger.debug(f'Running mutation "{name}" with param "{value}"')
        result = mutation(value, data)
        self._cache[key] = copy.deepcopy(result)
        while len(self._cache) > self.cache_size:
            self._cache.popitem(last=False)
        return result
