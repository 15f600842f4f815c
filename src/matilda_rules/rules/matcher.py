"""Pattern matching for a single rule.

Each match mode maps to an applier in a small registry, so a deployment can
run with any subset of modes and new modes can be added without touching the
pipeline. Appliers may raise; ``apply_rule`` turns every failure into a no-op.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from functools import lru_cache

from .models import MatchMode, TextRule
from .template import compile_template

logger = logging.getLogger(__name__)

Applier = Callable[[TextRule, str], str]

_APPLIERS: dict[MatchMode, Applier] = {}

# Errors re.compile can raise for a pattern it cannot build.
_COMPILE_ERRORS = (re.error, OverflowError, RecursionError)


def register_match_mode(mode: MatchMode, applier: Applier | None = None):
    """Register the applier for ``mode``. Usable as a decorator."""

    def decorator(func: Applier) -> Applier:
        _APPLIERS[mode] = func
        return func

    if applier is not None:
        return decorator(applier)
    return decorator


def registered_match_modes() -> frozenset[MatchMode]:
    return frozenset(_APPLIERS)


@lru_cache(maxsize=256)
def _whole_word_regex(pattern: str) -> re.Pattern[str]:
    return re.compile(rf"\b{re.escape(pattern)}\b", re.IGNORECASE)


@lru_cache(maxsize=256)
def _regex_with_template(pattern: str, replacement: str):
    compiled = re.compile(pattern)
    return compiled, compile_template(replacement, compiled.groups)


@register_match_mode(MatchMode.LITERAL)
def apply_literal(rule: TextRule, text: str) -> str:
    """Replace every exact, case-sensitive occurrence of the pattern."""
    return text.replace(rule.pattern, rule.replacement)


@register_match_mode(MatchMode.WHOLE_WORD)
def apply_whole_word(rule: TextRule, text: str) -> str:
    """Replace the pattern as a whole word, ignoring case.

    The replacement is inserted verbatim; ``$1`` or ``\\1`` are not expanded.
    """
    regex = _whole_word_regex(rule.pattern)
    replacement = rule.replacement
    return regex.sub(lambda _match: replacement, text)


@register_match_mode(MatchMode.REGEX)
def apply_regex(rule: TextRule, text: str) -> str:
    """Replace every match of the pattern, expanding ``$N`` group references."""
    regex, expand = _regex_with_template(rule.pattern, rule.replacement)
    return regex.sub(expand, text)


def apply_rule(rule: TextRule, text: str) -> str:
    """Apply one rule to ``text``.

    Returns ``text`` unchanged when the pattern is empty, when the mode has no
    registered applier, or when the pattern cannot be compiled.
    """
    if not rule.pattern:
        return text

    applier = _APPLIERS.get(rule.match_mode)
    if applier is None:
        logger.debug("Skipping rule %s: no applier for mode %s", rule.short_id, rule.match_mode.value)
        return text

    try:
        return applier(rule, text)
    except _COMPILE_ERRORS as exc:
        logger.debug("Skipping rule %s: invalid pattern %r (%s)", rule.short_id, rule.pattern, exc)
        return text
    except Exception:
        logger.exception("Skipping rule %s: unexpected error applying pattern %r", rule.short_id, rule.pattern)
        return text


def clear_pattern_cache() -> None:
    """Drop compiled patterns (used by tests and after bulk rule edits)."""
    _whole_word_regex.cache_clear()
    _regex_with_template.cache_clear()


__all__ = [
    "Applier",
    "apply_rule",
    "apply_literal",
    "apply_whole_word",
    "apply_regex",
    "register_match_mode",
    "registered_match_modes",
    "clear_pattern_cache",
]
