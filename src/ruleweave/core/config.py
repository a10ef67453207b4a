"""
Ruleweave Settings

Engine, logging and rule-file options read from RULEWEAVE_* environment
variables (and an optional .env file) through Pydantic Settings.

Usage:
    from ruleweave.core.config import get_settings

    if get_settings().trust_rules:
        ...

Environment Variables:
    RULEWEAVE_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR or CRITICAL
    RULEWEAVE_LOG_JSON: Emit log records as JSON lines
    RULEWEAVE_TRUST_RULES: Skip structural validation before evaluation
    RULEWEAVE_MAX_PATH_DEPTH: Depth limit for field path discovery
    RULEWEAVE_MUTATION_CACHE: Cache mutation results per input value
    RULEWEAVE_MUTATION_CACHE_SIZE: Entries kept in the mutation cache
    RULEWEAVE_RULE_PATHS: JSON list of directories holding rule files
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_ROOT_MARKERS = ("pyproject.toml", "setup.cfg", ".git")


def _locate_env_file(start: Path | None = None) -> Path | None:
    """
    Look for a .env file from the working directory upward.

    The walk stops at the first directory that looks like a project root,
    so a stray .env higher up the tree is never read.
    """
    directory = (start or Path.cwd()).resolve()
    for candidate in (directory, *directory.parents):
        env_file = candidate / ".env"
        if env_file.is_file():
            return env_file
        if any((candidate / marker).exists() for marker in _ROOT_MARKERS):
            return None
    return None


class RuleweaveSettings(BaseSettings):
    """Validated ruleweave configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RULEWEAVE_",
        env_file=_locate_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # =========================================================================
    # Logging
    # =========================================================================

    log_level: LogLevel = Field(
        default="WARNING",
        description="Level applied to every ruleweave.* logger",
    )
    log_json: bool = Field(
        default=False,
        description="Format log records as one JSON object per line",
    )

    # =========================================================================
    # Evaluation
    # =========================================================================

    trust_rules: bool = Field(
        default=False,
        description="Evaluate rules without validating their structure first",
    )
    mutation_cache: bool = Field(
        default=True,
        description="Reuse mutation results for identical input values",
    )
    mutation_cache_size: int = Field(
        default=1024,
        ge=1,
        description="Most mutation results kept before the least recently used is dropped",
    )
    max_path_depth: int = Field(
        default=10,
        ge=1,
        description="How deep get_all_paths descends into sample data",
    )

    # =========================================================================
    # Rule files
    # =========================================================================

    rule_paths: list[Path] = Field(
        default_factory=list,
        description="Directories searched for *.yaml, *.yml and *.json rules",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value

    @property
    def log_level_int(self) -> int:
        """The configured level as a logging module constant."""
        return logging.getLevelName(self.log_level)


@lru_cache(maxsize=1)
def get_settings() -> RuleweaveSettings:
    """Load settings once and reuse them."""
    return RuleweaveSettings()


def reset_settings() -> None:
    """Drop cached settings so the environment is read again (for testing)."""
    get_settings.cache_clear()


def is_debug_enabled() -> bool:
    return get_settings().log_level == "DEBUG"


def is_json_logging() -> bool:
    return get_settings().log_json
