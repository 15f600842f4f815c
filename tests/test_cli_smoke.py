#!/usr/bin/env python3
"""CLI Smoke Tests - "Does it still work?" tests

These tests detect when the app is fundamentally broken:
- Import errors
- Config file corruption
- Basic CLI functionality

NOT testing edge cases or complex logic - just "can the app start?"
"""

import json

import pytest
from click.testing import CliRunner

from matilda_rules.cli import main


@pytest.fixture
def runner():
    return CliRunner()


def invoke(runner, *args, input=None):
    return runner.invoke(main, list(args), input=input, catch_exceptions=False)


class TestCLIImports:
    """Test that core CLI components can be imported without crashing."""

    def test_app_hooks_import(self):
        """Can we import app hooks without explosions?"""
        from matilda_rules.app_hooks import on_apply, on_list, on_preview, on_status

        assert callable(on_apply)
        assert callable(on_preview)
        assert callable(on_list)
        assert callable(on_status)

    def test_lazy_package_exports(self):
        import matilda_rules

        assert matilda_rules.TextTransformService is not None
        assert matilda_rules.MatchMode.REGEX.value == "Regex"
        with pytest.raises(AttributeError):
            matilda_rules.does_not_exist


class TestCLICommands:
    def test_help(self, runner):
        result = invoke(runner, "--help")
        assert result.exit_code == 0
        assert "apply" in result.output

    def test_add_then_apply(self, runner):
        assert invoke(runner, "add", "...", "").exit_code == 0
        result = invoke(runner, "apply", "wait... really...")
        assert result.exit_code == 0
        assert result.output == "wait really\n"

    def test_apply_reads_stdin(self, runner):
        invoke(runner, "add", "um", "", "--mode", "Whole Word")
        result = invoke(runner, "apply", input="um, well umbrella\n")
        assert result.output == ", well umbrella\n"

    def test_list_json(self, runner):
        invoke(runner, "add", "a", "b")
        invoke(runner, "add", r"\s{2,}", " ", "--mode", "regex")
        result = invoke(runner, "list", "--json")
        data = json.loads(result.output)
        assert [rule["pattern"] for rule in data["rules"]] == ["a", r"\s{2,}"]
        assert data["rules"][1]["match_mode"] == "Regex"

    def test_preview_json(self, runner):
        invoke(runner, "add", "a", "b")
        invoke(runner, "add", "b", "c")
        result = invoke(runner, "preview", "a", "--json")
        data = json.loads(result.output)
        assert [step["output"] for step in data["steps"]] == ["b", "c"]
        assert data["final"] == "c"

    def test_preview_table(self, runner):
        invoke(runner, "add", "a", "b")
        result = invoke(runner, "preview", "a")
        assert result.exit_code == 0
        assert "Result" in result.output

    def test_invalid_rule_exits_non_zero(self, runner):
        result = invoke(runner, "add", "(", "x", "--mode", "Regex")
        assert result.exit_code == 1
        assert "Invalid regex pattern" in result.output

    def test_disable_and_remove(self, runner):
        invoke(runner, "add", "a", "b")
        rule_id = json.loads(invoke(runner, "list", "--json").output)["rules"][0]["id"]

        assert invoke(runner, "disable", rule_id[:8]).exit_code == 0
        assert invoke(runner, "apply", "a").output == "a\n"

        assert invoke(runner, "remove", rule_id).exit_code == 0
        assert json.loads(invoke(runner, "list", "--json").output)["rules"] == []

    def test_unknown_rule_id(self, runner):
        result = invoke(runner, "enable", "ffffffff")
        assert result.exit_code == 1

    def test_rules_file_option(self, runner, tmp_path):
        other = tmp_path / "other.json"
        invoke(runner, "--rules-file", str(other), "add", "x", "y")
        assert other.exists()
        assert invoke(runner, "apply", "x").output == "x\n"
        assert invoke(runner, "--rules-file", str(other), "apply", "x").output == "y\n"

    def test_validate(self, runner):
        assert invoke(runner, "validate", r"\d+", "--mode", "Regex").exit_code == 0
        assert invoke(runner, "validate", "[", "--mode", "Regex").exit_code == 1
        assert invoke(runner, "validate", r"(\d+)", r"\1", "--mode", "Regex").exit_code == 1
        assert invoke(runner, "validate", r"(\d+)", "$1", "--mode", "Regex").exit_code == 0

    def test_status_json(self, runner):
        result = invoke(runner, "status", "--json")
        data = json.loads(result.output)
        assert data["status"] == "success"
        assert data["total_rules"] == 0

    def test_config_option(self, runner, tmp_path):
        config_path = tmp_path / "custom.toml"
        config_path.write_text('[rules]\nmatch_modes = ["Literal"]\n', encoding="utf-8")
        result = invoke(runner, "--config", str(config_path), "add", "um", "--mode", "Whole Word")
        assert result.exit_code == 1
        assert "not enabled" in result.output
