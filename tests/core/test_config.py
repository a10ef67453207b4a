"""
Tests for centralized configuration module.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from unittest import mock

import pytest
from pydantic import ValidationError

from ruleweave.core.config import (
    RuleweaveSettings,
    _locate_env_file,
    get_settings,
    is_debug_enabled,
    is_json_logging,
    reset_settings,
)


class TestRuleweaveSettings:
    """Test RuleweaveSettings class."""

    def test_default_values(self):
        """Test that default values are correct."""
        with mock.patch.dict(os.environ, {}, clear=True):
            settings = RuleweaveSettings()

            assert settings.log_level == "WARNING"
            assert settings.log_json is False
            assert settings.trust_rules is False
            assert settings.max_path_depth == 10
            assert settings.mutation_cache is True
            assert settings.mutation_cache_size == 1024
            assert settings.rule_paths == []

    def test_log_level_from_env(self):
        """Test log level parsing from environment."""
        with mock.patch.dict(os.environ, {"RULEWEAVE_LOG_LEVEL": "DEBUG"}, clear=True):
            settings = RuleweaveSettings()
            assert settings.log_level == "DEBUG"

    def test_log_level_case_insensitive(self):
        """Test log level is case-insensitive."""
        with mock.patch.dict(os.environ, {"RULEWEAVE_LOG_LEVEL": "info"}, clear=True):
            settings = RuleweaveSettings()
            assert settings.log_level == "INFO"
            assert settings.log_level_int == logging.INFO

    def test_invalid_log_level_rejected(self):
        """Unknown log levels fail validation."""
        with mock.patch.dict(os.environ, {"RULEWEAVE_LOG_LEVEL": "LOUD"}, clear=True):
            with pytest.raises(ValidationError):
                RuleweaveSettings()

    def test_debug_level_int(self):
        """DEBUG maps onto the logging constant."""
        with mock.patch.dict(os.environ, {"RULEWEAVE_LOG_LEVEL": "debug"}, clear=True):
            assert RuleweaveSettings().log_level_int == logging.DEBUG

    def test_engine_flags(self):
        """Test engine behaviour flags."""
        env = {
            "RULEWEAVE_TRUST_RULES": "true",
            "RULEWEAVE_MUTATION_CACHE": "0",
            "RULEWEAVE_LOG_JSON": "1",
            "RULEWEAVE_MAX_PATH_DEPTH": "3",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            settings = RuleweaveSettings()
            assert settings.trust_rules is True
            assert settings.mutation_cache is False
            assert settings.log_json is True
            assert settings.max_path_depth == 3

    def test_max_path_depth_must_be_positive(self):
        """Depth limits below one are rejected."""
        with mock.patch.dict(os.environ, {"RULEWEAVE_MAX_PATH_DEPTH": "0"}, clear=True):
            with pytest.raises(ValidationError):
                RuleweaveSettings()

    def test_rule_paths_from_json(self):
        """Rule directories are parsed as Path objects."""
        env = {"RULEWEAVE_RULE_PATHS": '["/etc/rules", "rules"]'}
        with mock.patch.dict(os.environ, env, clear=True):
            settings = RuleweaveSettings()
            assert settings.rule_paths == [Path("/etc/rules"), Path("rules")]


class TestSettingsSingleton:
    """Test get_settings / reset_settings."""

    def test_get_settings_is_cached(self):
        """Repeated calls return the same instance."""
        assert get_settings() is get_settings()

    def test_reset_reloads_environment(self):
        """reset_settings picks up environment changes."""
        with mock.patch.dict(os.environ, {"RULEWEAVE_LOG_JSON": "0"}, clear=True):
            assert is_json_logging() is False
            os.environ["RULEWEAVE_LOG_JSON"] = "1"
            assert is_json_logging() is False
            reset_settings()
            assert is_json_logging() is True

    def test_is_debug_enabled(self):
        """is_debug_enabled follows the configured level."""
        with mock.patch.dict(os.environ, {"RULEWEAVE_LOG_LEVEL": "DEBUG"}, clear=True):
            reset_settings()
            assert is_debug_enabled() is True


class TestLocateEnvFile:
    """Test .env discovery."""

    def test_found_in_start_directory(self, tmp_path):
        (tmp_path / ".env").write_text("RULEWEAVE_LOG_JSON=1\n")
        assert _locate_env_file(tmp_path) == (tmp_path / ".env").resolve()

    def test_found_in_parent(self, tmp_path):
        (tmp_path / ".env").write_text("")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert _locate_env_file(nested) == (tmp_path / ".env").resolve()

    def test_stops_at_project_root(self, tmp_path):
        (tmp_path / ".env").write_text("")
        project = tmp_path / "project"
        project.mkdir()
        (project / "pyproject.toml").write_text("")
        assert _locate_env_file(project) is None
