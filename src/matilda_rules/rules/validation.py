"""Authoring-time checks, run before a rule is saved."""

from __future__ import annotations

import re
from collections.abc import Iterable

from .exceptions import RuleValidationError
from .models import MatchMode

# An odd run of backslashes before a digit, i.e. a Python-style group reference.
_BACKSLASH_GROUP = re.compile(r"(?<!\\)(?:\\\\)*\\\d")


def normalize_pattern(pattern: str) -> str:
    return pattern.strip()


def _find_problem(
    pattern: str,
    match_mode: MatchMode,
    allowed_modes: Iterable[MatchMode] | None,
    replacement: str,
) -> tuple[str, str] | None:
    if allowed_modes is not None and match_mode not in frozenset(allowed_modes):
        return "match_mode", f"Match mode '{match_mode.value}' is not enabled"

    normalized = normalize_pattern(pattern)
    if not normalized:
        return "pattern", "Pattern cannot be empty"

    if match_mode is MatchMode.REGEX:
        try:
            re.compile(normalized)
        except (re.error, OverflowError, RecursionError) as exc:
            return "pattern", f"Invalid regex pattern: {exc}"
        if _BACKSLASH_GROUP.search(replacement):
            return "replacement", "Use $1 instead of \\1 to insert a capture group"

    return None


def check_rule_fields(
    pattern: str,
    match_mode: MatchMode,
    allowed_modes: Iterable[MatchMode] | None = None,
    replacement: str = "",
) -> str | None:
    """Return an error message for the given fields, or None when they are valid."""
    problem = _find_problem(pattern, match_mode, allowed_modes, replacement)
    return problem[1] if problem else None


def validate_rule_fields(
    pattern: str,
    match_mode: MatchMode,
    allowed_modes: Iterable[MatchMode] | None = None,
    replacement: str = "",
) -> str:
    """Validate and return the pattern as it should be stored.

    Raises:
        RuleValidationError: if the rule must not be saved

    """
    problem = _find_problem(pattern, match_mode, allowed_modes, replacement)
    if problem is not None:
        field, message = problem
        raise RuleValidationError(message, field=field)
    return normalize_pattern(pattern)


__all__ = ["check_rule_fields", "validate_rule_fields", "normalize_pattern"]
