#!/usr/bin/env python3
"""Configuration loader that reads the [rules] section from the Matilda config file."""
import logging
import os
from pathlib import Path
from typing import Any

import tomllib

DEFAULT_CONFIG: dict[str, Any] = {
    "enabled": True,
    "rules_file": "~/.matilda/rules.json",
    # "priority" follows the explicit priority attribute, "created" follows insertion time.
    "ordering": "priority",
    "match_modes": ["Literal", "Whole Word", "Regex"],
    "logging": {"level": "INFO"},
}

logger = logging.getLogger(__name__)


class ConfigLoader:
    """Load configuration from config files."""

    def __init__(self, config_path: str | Path | None = None) -> None:
        if config_path is None:
            config_path = self._default_config_path()

        self.config_file = str(config_path)
        config_path = Path(config_path).expanduser()
        if config_path.exists():
            with open(config_path, "rb") as f:
                full_config = tomllib.load(f)
            rules_config = full_config.get("rules", {})
        else:
            rules_config = {}

        self._config = self._merge_dicts(DEFAULT_CONFIG, rules_config)

    def _default_config_path(self) -> Path:
        env_path = os.environ.get("MATILDA_CONFIG")
        if env_path:
            return Path(env_path)
        return Path.home() / ".matilda" / "config.toml"

    def _merge_dicts(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        merged = base.copy()
        for key, value in override.items():
            if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
                merged[key] = self._merge_dicts(merged[key], value)
            else:
                merged[key] = value
        return merged

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get a value using dot notation (e.g., 'logging.level')"""
        keys = key_path.split(".")
        value = self._config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    @property
    def rules_enabled(self) -> bool:
        """Whether rule post-processing runs at all"""
        env_enabled = os.environ.get("MATILDA_RULES_ENABLED")
        if env_enabled is not None:
            return env_enabled.strip().lower() in {"1", "true", "yes"}
        return bool(self.get("enabled", True))

    @property
    def rules_file(self) -> Path:
        env_file = os.environ.get("MATILDA_RULES_FILE")
        if env_file:
            return Path(env_file).expanduser()
        return Path(str(self.get("rules_file", "~/.matilda/rules.json"))).expanduser()

    @property
    def ordering(self) -> str:
        """Rule ordering policy: 'priority' or 'created'"""
        env_ordering = os.environ.get("MATILDA_RULES_ORDERING")
        if env_ordering:
            return env_ordering.strip().lower()
        return str(self.get("ordering", "priority")).lower()

    @property
    def match_modes(self) -> list[str]:
        """Match modes this deployment accepts"""
        modes = self.get("match_modes", DEFAULT_CONFIG["match_modes"])
        if isinstance(modes, str):
            return [modes]
        return [str(mode) for mode in modes]

    @property
    def log_level(self) -> str:
        return str(self.get("logging.level", "INFO")).upper()


# Global singleton instance
_config_loader: ConfigLoader | None = None


def get_config() -> ConfigLoader:
    """Get the global config loader instance"""
    global _config_loader
    if _config_loader is None:
        _config_loader = ConfigLoader()
    return _config_loader


def reset_config(config_path: str | Path | None = None) -> ConfigLoader:
    """Replace the global config loader, e.g. when --config is given"""
    global _config_loader
    _config_loader = ConfigLoader(config_path)
    logger.debug("Loaded config from %s", _config_loader.config_file)
    return _config_loader


# Re-export logging functions
from .logging import get_logger, setup_logging  # noqa: E402, F401
