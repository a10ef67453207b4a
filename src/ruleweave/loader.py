"""
Rule File Loader.

Reads rules stored as YAML or JSON files. Each file holds one rule; its name
is the file's top-level `name` key when present, else the file stem. Files
are discovered lazily from the configured directories and cached.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import yaml

from .core.config import get_settings
from .core.logging import get_logger
from .errors import RuleLoadError

logger = get_logger(__name__)

RULE_SUFFIXES = (".yaml", ".yml", ".json")


# =============================================================================
# File Loading
# =============================================================================


def load_rule_file(path: Path | str) -> dict[str, Any]:
    """
    Load a rule file.

    Args:
        path: Path to a .yaml, .yml or .json file

    Returns:
        The rule as a dict, with any `name` key left in place

    Raises:
        RuleLoadError: If the file is missing, unparseable or not a mapping
    """
    path = Path(path)
    if not path.exists():
        raise RuleLoadError(path, "file not found")
    if path.suffix.lower() not in RULE_SUFFIXES:
        raise RuleLoadError(path, f"unsupported file type {path.suffix!r}")

    try:
        with open(path, encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise RuleLoadError(path, str(e)) from e

    if not isinstance(data, dict):
        raise RuleLoadError(path, "expected a mapping at the top level")
    if "conditions" not in data:
        raise RuleLoadError(path, "missing 'conditions'")
    return data


def rule_name(path: Path, data: dict[str, Any]) -> str:
    """Name a loaded rule: its `name` key, else the file stem."""
    name = data.get("name")
    return name if isinstance(name, str) and name else path.stem


def iter_rule_files(directories: Iterable[Path | str]) -> list[Path]:
    """Rule files in the given directories, sorted per directory."""
    files: list[Path] = []
    for directory in directories:
        directory = Path(directory)
        if not directory.is_dir():
            logger.warning(f"Rule directory not found: {directory}")
            continue
        files.extend(
            sorted(p for p in directory.iterdir() if p.is_file() and p.suffix.lower() in RULE_SUFFIXES)
        )
    return files


# =============================================================================
# Loader
# =============================================================================


class RuleLoader:
    """
    Rule loader with caching.

    Usage:
        loader = RuleLoader(["rules/"])
        rule = loader.get_rule("adult-check")
    """

    def __init__(self, rule_dirs: Iterable[Path | str] | None = None):
        if rule_dirs is None:
            rule_dirs = get_settings().rule_paths
        self.rule_dirs = [Path(d) for d in rule_dirs]
        self._rules: dict[str, dict[str, Any]] | None = None
        self._sources: dict[str, Path] = {}

    def _discover(self) -> dict[str, dict[str, Any]]:
        if self._rules is not None:
            return self._rules

        rules: dict[str, dict[str, Any]] = {}
        for path in iter_rule_files(self.rule_dirs):
            try:
                data = load_rule_file(path)
            except RuleLoadError as e:
                logger.warning(f"Skipping rule file: {e}")
                continue

            name = rule_name(path, data)
            if name in rules:
                logger.warning(f"Duplicate rule name {name!r} in {path}, keeping {self._sources[name]}")
                continue
            rules[name] = _strip_name(data)
            self._sources[name] = path

        logger.debug(f"Loaded {len(rules)} rules from {len(self.rule_dirs)} directories")
        self._rules = rules
        return rules

    def get_rule(self, name: str) -> dict[str, Any] | None:
        """Get a rule by name, or None if no file defines it."""
        return self._discover().get(name)

    def list_rules(self) -> list[str]:
        """Names of all loadable rules, sorted."""
        return sorted(self._discover())

    def get_source(self, name: str) -> Path | None:
        """File a rule was loaded from."""
        self._discover()
        return self._sources.get(name)

    def load_file(self, path: Path | str) -> dict[str, Any]:
        """
        Load one file and add it to the cache.

        Raises:
            RuleLoadError: If the file cannot be loaded
        """
        path = Path(path)
        data = load_rule_file(path)
        name = rule_name(path, data)
        rules = self._discover()
        rules[name] = _strip_name(data)
        self._sources[name] = path
        return rules[name]

    def clear_cache(self) -> None:
        """Forget loaded rules; the next lookup rescans the directories."""
        self._rules = None
        self._sources.clear()


def _strip_name(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if k != "name"}
