"""
Tests for YAML / JSON rule file loading.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from ruleweave.engine import RuleEngine
from ruleweave.errors import RuleLoadError
from ruleweave.loader import RuleLoader, iter_rule_files, load_rule_file, rule_name


RULES_DIR = Path(__file__).parent / "fixtures" / "rules"


class TestLoadRuleFile:
    """Test single-file loading."""

    def test_yaml(self):
        data = load_rule_file(RULES_DIR / "adult.yaml")
        assert data["name"] == "adult-check"
        assert data["conditions"]["and"][0]["operator"] == "greater-than-or-equals"

    def test_json(self):
        data = load_rule_file(RULES_DIR / "email-domain.json")
        assert data["conditions"]["and"][0]["value"] == "%@gmail.com"

    def test_missing_file(self, tmp_path):
        with pytest.raises(RuleLoadError, match="file not found"):
            load_rule_file(tmp_path / "nope.yaml")

    def test_unsupported_suffix(self):
        with pytest.raises(RuleLoadError, match="unsupported file type"):
            load_rule_file(RULES_DIR / "notes.txt")

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("conditions: [unclosed\n")
        with pytest.raises(RuleLoadError) as exc_info:
            load_rule_file(path)
        assert exc_info.value.path == path

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{")
        with pytest.raises(RuleLoadError):
            load_rule_file(path)

    def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(RuleLoadError, match="expected a mapping"):
            load_rule_file(path)

    def test_conditions_required(self, tmp_path):
        path = tmp_path / "empty.json"
        path.write_text('{"default": 1}')
        with pytest.raises(RuleLoadError, match="missing 'conditions'"):
            load_rule_file(path)

    def test_error_message(self, tmp_path):
        error = RuleLoadError(tmp_path / "x.yaml", "boom")
        assert str(error) == f"Failed to load rule file {tmp_path / 'x.yaml'}: boom"


class TestNaming:
    """Test rule naming and discovery."""

    def test_rule_name(self):
        assert rule_name(RULES_DIR / "adult.yaml", {"name": "adult-check"}) == "adult-check"
        assert rule_name(RULES_DIR / "shipping.yml", {}) == "shipping"
        assert rule_name(RULES_DIR / "shipping.yml", {"name": ""}) == "shipping"

    def test_iter_rule_files(self):
        names = [p.name for p in iter_rule_files([RULES_DIR])]
        assert names == ["adult.yaml", "email-domain.json", "shipping.yml"]

    def test_missing_directory_warns(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING):
            assert iter_rule_files([tmp_path / "absent"]) == []
        assert "Rule directory not found" in caplog.text


class TestRuleLoader:
    """Test the caching loader."""

    def test_list_rules(self):
        loader = RuleLoader([RULES_DIR])
        assert loader.list_rules() == ["adult-check", "email-domain", "shipping"]

    def test_get_rule_strips_name(self):
        rule = RuleLoader([RULES_DIR]).get_rule("adult-check")
        assert "name" not in rule
        assert rule["default"] == {"value": "minor"}

    def test_unknown_rule(self):
        assert RuleLoader([RULES_DIR]).get_rule("nope") is None

    def test_get_source(self):
        loader = RuleLoader([RULES_DIR])
        assert loader.get_source("shipping") == RULES_DIR / "shipping.yml"

    def test_bad_files_skipped(self, tmp_path, caplog):
        (tmp_path / "good.json").write_text('{"conditions": {"and": []}}')
        (tmp_path / "bad.json").write_text("{")
        with caplog.at_level(logging.WARNING):
            assert RuleLoader([tmp_path]).list_rules() == ["good"]
        assert "Skipping rule file" in caplog.text

    def test_duplicate_names_keep_first(self, tmp_path, caplog):
        (tmp_path / "a.json").write_text('{"name": "dup", "conditions": {"and": []}, "default": 1}')
        (tmp_path / "b.json").write_text('{"name": "dup", "conditions": {"and": []}, "default": 2}')
        loader = RuleLoader([tmp_path])
        with caplog.at_level(logging.WARNING):
            assert loader.get_rule("dup")["default"] == 1
        assert "Duplicate rule name" in caplog.text

    def test_cache_and_clear(self, tmp_path):
        loader = RuleLoader([tmp_path])
        assert loader.list_rules() == []
        (tmp_path / "late.yaml").write_text("conditions:\n  and: []\n")
        assert loader.list_rules() == []
        loader.clear_cache()
        assert loader.list_rules() == ["late"]

    def test_load_file(self, tmp_path):
        path = tmp_path / "extra.yaml"
        path.write_text("name: extra\nconditions:\n  or: []\n")
        loader = RuleLoader([RULES_DIR])
        assert loader.load_file(path) == {"conditions": {"or": []}}
        assert "extra" in loader.list_rules()

    def test_dirs_from_settings(self, monkeypatch):
        from ruleweave.core.config import reset_settings

        monkeypatch.setenv("RULEWEAVE_RULE_PATHS", f'["{RULES_DIR.as_posix()}"]')
        reset_settings()
        assert RuleLoader().rule_dirs == [RULES_DIR]


class TestLoadedRulesEvaluate:
    """Test that loaded rules run on the engine."""

    def test_adult_rule(self, engine):
        rule = RuleLoader([RULES_DIR]).get_rule("adult-check")
        assert engine.get_evaluate_result(rule, {"age": 40}) == "adult"
        assert engine.get_evaluate_result(rule, {"age": 4}) == "minor"

    def test_shipping_rule(self, registry):
        rule = RuleLoader([RULES_DIR]).get_rule("shipping")
        results = RuleEngine(registry=registry).evaluate(rule, {"country": "CA", "order": {"total": 20}})
        assert results[0].value == "free"
        assert results[0].message == "Free shipping to CA"
