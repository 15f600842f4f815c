#!/usr/bin/env python3
"""Rule pipeline: apply an ordered rule sequence to text.

Rules compose sequentially. Each enabled rule sees the output of the rule
before it, never the original input. The pipeline does not sort; the order
of the sequence it is given is the order rules run in.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .matcher import apply_rule
from .models import MatchMode, TextRule

if TYPE_CHECKING:
    from .store import RuleStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RulePreviewStep:
    """Output of the pipeline right after one rule ran."""

    rule: TextRule
    output: str
    changed: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "rule_id": str(self.rule.id),
            "pattern": self.rule.pattern,
            "match_mode": self.rule.match_mode.value,
            "output": self.output,
            "changed": self.changed,
        }


@dataclass(frozen=True)
class PreviewResult:
    """Step trace of a pipeline run plus its final text."""

    steps: tuple[RulePreviewStep, ...]
    final: str

    @property
    def changed_steps(self) -> tuple[RulePreviewStep, ...]:
        return tuple(step for step in self.steps if step.changed)

    def to_dict(self) -> dict[str, Any]:
        return {"steps": [step.to_dict() for step in self.steps], "final": self.final}


class TextTransformService:
    """Runs rule pipelines.

    The service holds no rules of its own; every call receives a snapshot.
    ``allowed_modes`` restricts which match modes this deployment runs, rules
    in any other mode are skipped.
    """

    def __init__(self, allowed_modes: Iterable[MatchMode] | None = None):
        self.allowed_modes = frozenset(allowed_modes) if allowed_modes is not None else None

    def _active_rules(self, rules: Iterable[TextRule]) -> list[TextRule]:
        active = []
        for rule in rules:
            if not rule.enabled:
                continue
            if self.allowed_modes is not None and rule.match_mode not in self.allowed_modes:
                logger.debug("Skipping rule %s: mode %s not allowed", rule.short_id, rule.match_mode.value)
                continue
            active.append(rule)
        return active

    def transform(self, text: str, rules: Sequence[TextRule]) -> str:
        """Apply every enabled rule, in order, to ``text``."""
        if not text:
            return text

        active = self._active_rules(rules)
        if not active:
            return text

        result = text
        for rule in active:
            result = apply_rule(rule, result)
        return result

    def preview(self, text: str, rules: Sequence[TextRule]) -> PreviewResult:
        """Like ``transform`` but also record the text after each rule."""
        if not text:
            return PreviewResult(steps=(), final=text)

        steps = []
        current = text
        for rule in self._active_rules(rules):
            output = apply_rule(rule, current)
            steps.append(RulePreviewStep(rule=rule, output=output, changed=output != current))
            current = output

        return PreviewResult(steps=tuple(steps), final=current)

    def apply_rules(self, text: str, store: RuleStore) -> str:
        """Transform ``text`` with the store's current rule snapshot."""
        if not text:
            return text
        return self.transform(text, store.fetch_ordered_rules())


def transform_text(text: str, rules: Sequence[TextRule]) -> str:
    """Convenience wrapper around ``TextTransformService().transform``."""
    return TextTransformService().transform(text, rules)


def preview_text(text: str, rules: Sequence[TextRule]) -> PreviewResult:
    """Convenience wrapper around ``TextTransformService().preview``."""
    return TextTransformService().preview(text, rules)


__all__ = [
    "RulePreviewStep",
    "PreviewResult",
    "TextTransformService",
    "transform_text",
    "preview_text",
]
