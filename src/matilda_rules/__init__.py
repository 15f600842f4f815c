"""GOOBITS Matilda Rules - post-transcription text transform rules."""

from importlib import metadata
from importlib import import_module
from pathlib import Path
import tomllib
from typing import TYPE_CHECKING


def _get_version() -> str:
    try:
        return metadata.version("goobits-matilda-rules")
    except metadata.PackageNotFoundError:
        pass

    try:
        pyproject_path = Path(__file__).resolve().parents[2] / "pyproject.toml"
        with open(pyproject_path, "rb") as f:
            data = tomllib.load(f)
        return str(data["project"]["version"])
    except (OSError, KeyError, tomllib.TOMLDecodeError):
        return "unknown"


__version__ = _get_version()

if TYPE_CHECKING:
    from .core.config import ConfigLoader, get_config
    from .rules import (
        InMemoryRuleStore,
        JsonFileRuleStore,
        MatchMode,
        PreviewResult,
        RuleOrdering,
        TextRule,
        TextTransformService,
    )

_LAZY_EXPORTS = {
    "ConfigLoader": (".core.config", "ConfigLoader"),
    "get_config": (".core.config", "get_config"),
    "MatchMode": (".rules", "MatchMode"),
    "RuleOrdering": (".rules", "RuleOrdering"),
    "TextRule": (".rules", "TextRule"),
    "TextTransformService": (".rules", "TextTransformService"),
    "PreviewResult": (".rules", "PreviewResult"),
    "InMemoryRuleStore": (".rules", "InMemoryRuleStore"),
    "JsonFileRuleStore": (".rules", "JsonFileRuleStore"),
}


def __getattr__(name):
    if name in {"core", "rules"}:
        module = import_module(f".{name}", __name__)
        globals()[name] = module
        return module

    if name not in _LAZY_EXPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module_name, attr_name = _LAZY_EXPORTS[name]
    module = import_module(module_name, __name__)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value


__all__ = [
    "ConfigLoader",
    "get_config",
    "MatchMode",
    "RuleOrdering",
    "TextRule",
    "TextTransformService",
    "PreviewResult",
    "InMemoryRuleStore",
    "JsonFileRuleStore",
]
