"""
Pytest configuration shared by all tests.

Points config, rules file and logs at a temporary directory so tests never
touch ~/.matilda.
"""

import pytest

from matilda_rules.core import config as config_module
from matilda_rules.rules.matcher import clear_pattern_cache
from matilda_rules.rules.models import MatchMode, TextRule


@pytest.fixture(autouse=True)
def isolated_matilda_home(tmp_path, monkeypatch):
    monkeypatch.setenv("MATILDA_CONFIG", str(tmp_path / "config.toml"))
    monkeypatch.setenv("MATILDA_RULES_FILE", str(tmp_path / "rules.json"))
    monkeypatch.setenv("MATILDA_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("MATILDA_RULES_FILE_LOGS", "0")
    monkeypatch.delenv("MATILDA_RULES_ENABLED", raising=False)
    monkeypatch.delenv("MATILDA_RULES_ORDERING", raising=False)
    monkeypatch.setattr(config_module, "_config_loader", None)
    clear_pattern_cache()
    yield tmp_path


@pytest.fixture
def make_rule():
    """Build a TextRule with short keyword names."""

    def _make(pattern, replacement="", mode=MatchMode.LITERAL, enabled=True, priority=0, **kwargs):
        return TextRule(
            pattern=pattern,
            replacement=replacement,
            match_mode=mode,
            enabled=enabled,
            priority=priority,
            **kwargs,
        )

    return _make
