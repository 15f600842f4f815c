"""Hook implementations for Matilda Rules.

Each ``on_<command>`` hook backs the CLI command of the same name and returns
a result dictionary with a ``status`` of ``"success"`` or ``"error"``. Hooks
accept an explicit store/service so callers and tests can inject their own;
otherwise both are built from the loaded config.
"""

from __future__ import annotations

import logging
from typing import Any

from .core.config import ConfigLoader, get_config
from .rules import (
    JsonFileRuleStore,
    MatchMode,
    RuleError,
    RuleOrdering,
    RuleValidationError,
    TextTransformService,
    check_rule_fields,
)
from .rules.store import RuleStore

logger = logging.getLogger(__name__)


def allowed_modes_from_config(config: ConfigLoader) -> frozenset[MatchMode]:
    modes = set()
    for name in config.match_modes:
        try:
            modes.add(MatchMode.parse(name))
        except ValueError:
            logger.warning("Ignoring unknown match mode in config: %r", name)
    return frozenset(modes)


def ordering_from_config(config: ConfigLoader) -> RuleOrdering:
    try:
        return RuleOrdering(config.ordering)
    except ValueError:
        logger.warning("Unknown rule ordering %r, using priority order", config.ordering)
        return RuleOrdering.PRIORITY


def open_rule_store(config: ConfigLoader | None = None, rules_file: str | None = None) -> JsonFileRuleStore:
    config = config or get_config()
    return JsonFileRuleStore(
        rules_file or config.rules_file,
        ordering=ordering_from_config(config),
        allowed_modes=allowed_modes_from_config(config),
    )


def build_transform_service(config: ConfigLoader | None = None) -> TextTransformService:
    config = config or get_config()
    return TextTransformService(allowed_modes=allowed_modes_from_config(config))


def _error(exc: Exception) -> dict[str, Any]:
    result: dict[str, Any] = {"status": "error", "message": str(exc)}
    if isinstance(exc, RuleValidationError):
        result["field"] = exc.field
    return result


def _rule_dict(rule) -> dict[str, Any]:
    return rule.model_dump(mode="json")


def on_apply(
    text: str,
    store: RuleStore | None = None,
    service: TextTransformService | None = None,
    **kwargs,
) -> dict[str, Any]:
    """Handle apply command."""
    try:
        if store is None:
            store = open_rule_store()
    except RuleError as exc:
        return _error(exc)
    if service is None:
        service = build_transform_service()
    result = service.apply_rules(text, store)
    return {"status": "success", "text": result, "changed": result != text}


def on_preview(
    text: str,
    store: RuleStore | None = None,
    service: TextTransformService | None = None,
    **kwargs,
) -> dict[str, Any]:
    """Handle preview command."""
    try:
        if store is None:
            store = open_rule_store()
    except RuleError as exc:
        return _error(exc)
    if service is None:
        service = build_transform_service()
    preview = service.preview(text, store.fetch_ordered_rules())
    return {"status": "success", "input": text, **preview.to_dict()}


def on_list(enabled_only: bool = False, store: RuleStore | None = None, **kwargs) -> dict[str, Any]:
    """Handle list command."""
    try:
        if store is None:
            store = open_rule_store()
    except RuleError as exc:
        return _error(exc)
    rules = store.fetch_enabled_rules() if enabled_only else store.fetch_ordered_rules()
    return {"status": "success", "rules": [_rule_dict(rule) for rule in rules]}


def on_add(
    pattern: str,
    replacement: str = "",
    mode: str = "Literal",
    priority: int | None = None,
    enabled: bool = True,
    store: RuleStore | None = None,
    **kwargs,
) -> dict[str, Any]:
    """Handle add command."""
    try:
        if store is None:
            store = open_rule_store()
        rule = store.add(
            pattern,
            replacement=replacement,
            match_mode=MatchMode.parse(mode),
            enabled=enabled,
            priority=priority,
        )
    except (RuleError, ValueError) as exc:
        return _error(exc)
    return {"status": "success", "rule": _rule_dict(rule)}


def on_update(
    rule_ref: str,
    pattern: str | None = None,
    replacement: str | None = None,
    mode: str | None = None,
    priority: int | None = None,
    store: RuleStore | None = None,
    **kwargs,
) -> dict[str, Any]:
    """Handle edit command."""
    try:
        if store is None:
            store = open_rule_store()
        rule = store.update(
            store.resolve_id(rule_ref),
            pattern=pattern,
            replacement=replacement,
            match_mode=MatchMode.parse(mode) if mode is not None else None,
            priority=priority,
        )
    except (RuleError, ValueError) as exc:
        return _error(exc)
    return {"status": "success", "rule": _rule_dict(rule)}


def on_remove(rule_ref: str, store: RuleStore | None = None, **kwargs) -> dict[str, Any]:
    """Handle remove command."""
    try:
        if store is None:
            store = open_rule_store()
        rule_id = store.resolve_id(rule_ref)
        store.delete(rule_id)
    except RuleError as exc:
        return _error(exc)
    return {"status": "success", "rule_id": str(rule_id)}


def _set_enabled(rule_ref: str, enabled: bool, store: RuleStore | None) -> dict[str, Any]:
    try:
        if store is None:
            store = open_rule_store()
        rule = store.set_enabled(store.resolve_id(rule_ref), enabled)
    except RuleError as exc:
        return _error(exc)
    return {"status": "success", "rule": _rule_dict(rule)}


def on_enable(rule_ref: str, store: RuleStore | None = None, **kwargs) -> dict[str, Any]:
    """Handle enable command."""
    return _set_enabled(rule_ref, True, store)


def on_disable(rule_ref: str, store: RuleStore | None = None, **kwargs) -> dict[str, Any]:
    """Handle disable command."""
    return _set_enabled(rule_ref, False, store)


def on_move(rule_ref: str, index: int, store: RuleStore | None = None, **kwargs) -> dict[str, Any]:
    """Handle move command."""
    try:
        if store is None:
            store = open_rule_store()
        rules = store.move(store.resolve_id(rule_ref), index)
    except RuleError as exc:
        return _error(exc)
    return {"status": "success", "rules": [_rule_dict(rule) for rule in rules]}


def on_validate(pattern: str, mode: str = "Literal", replacement: str = "", **kwargs) -> dict[str, Any]:
    """Handle validate command."""
    try:
        match_mode = MatchMode.parse(mode)
    except ValueError as exc:
        return _error(exc)
    message = check_rule_fields(pattern, match_mode, allowed_modes_from_config(get_config()), replacement)
    if message is not None:
        return {"status": "error", "valid": False, "message": message}
    return {"status": "success", "valid": True, "message": "Rule is valid"}


def on_status(store: RuleStore | None = None, **kwargs) -> dict[str, Any]:
    """Handle status command."""
    config = get_config()
    try:
        if store is None:
            store = open_rule_store(config)
    except RuleError as exc:
        return _error(exc)
    rules = store.fetch_ordered_rules()
    return {
        "status": "success",
        "enabled": config.rules_enabled,
        "rules_file": str(store.path if isinstance(store, JsonFileRuleStore) else config.rules_file),
        "ordering": ordering_from_config(config).value,
        "match_modes": sorted(mode.value for mode in allowed_modes_from_config(config)),
        "total_rules": len(rules),
        "enabled_rules": sum(1 for rule in rules if rule.enabled),
    }


def postprocess_transcription(
    text: str,
    store: RuleStore | None = None,
    service: TextTransformService | None = None,
) -> str:
    """Run the configured rules over a finished transcription.

    Returns ``text`` untouched when rule processing is turned off or the rules
    file cannot be read.
    """
    config = get_config()
    if not config.rules_enabled or not text:
        return text
    try:
        if store is None:
            store = open_rule_store(config)
    except RuleError as exc:
        logger.error("Rule post-processing skipped: %s", exc)
        return text
    if service is None:
        service = build_transform_service(config)
    return service.apply_rules(text, store)


__all__ = [
    "on_apply",
    "on_preview",
    "on_list",
    "on_add",
    "on_update",
    "on_remove",
    "on_enable",
    "on_disable",
    "on_move",
    "on_validate",
    "on_status",
    "postprocess_transcription",
    "open_rule_store",
    "build_transform_service",
]
