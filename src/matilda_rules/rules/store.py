"""Rule stores: where rules live between pipeline runs.

A store owns rule ordering and validation. It hands out tuples of frozen
rules, so a snapshot stays valid while the store keeps changing.
"""

from __future__ import annotations

import logging
import os
import tempfile
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Protocol, runtime_checkable
from uuid import UUID

from pydantic import BaseModel, ValidationError

from .exceptions import RuleNotFoundError, RuleStoreError
from .models import MatchMode, RuleOrdering, TextRule
from .validation import validate_rule_fields

logger = logging.getLogger(__name__)

RULE_FILE_VERSION = 1


@runtime_checkable
class RuleStore(Protocol):
    """Rule storage as seen by the transform service and the app hooks."""

    def fetch_ordered_rules(self) -> tuple[TextRule, ...]: ...

    def fetch_enabled_rules(self) -> tuple[TextRule, ...]: ...

    def get(self, rule_id: UUID) -> TextRule: ...

    def resolve_id(self, reference: str) -> UUID: ...

    def add(
        self,
        pattern: str,
        replacement: str = "",
        match_mode: MatchMode = MatchMode.LITERAL,
        enabled: bool = True,
        priority: int | None = None,
    ) -> TextRule: ...

    def update(
        self,
        rule_id: UUID,
        *,
        pattern: str | None = None,
        replacement: str | None = None,
        match_mode: MatchMode | None = None,
        priority: int | None = None,
    ) -> TextRule: ...

    def set_enabled(self, rule_id: UUID, enabled: bool) -> TextRule: ...

    def delete(self, rule_id: UUID) -> None: ...

    def move(self, rule_id: UUID, new_index: int) -> tuple[TextRule, ...]: ...


def _sort_key(ordering: RuleOrdering):
    if ordering is RuleOrdering.CREATED:
        return lambda rule: rule.created_at
    return lambda rule: (rule.priority, rule.created_at)


class InMemoryRuleStore:
    """Thread-safe rule store kept in memory."""

    def __init__(
        self,
        rules: Iterable[TextRule] = (),
        ordering: RuleOrdering = RuleOrdering.PRIORITY,
        allowed_modes: Iterable[MatchMode] | None = None,
    ):
        self.ordering = ordering
        self.allowed_modes = frozenset(allowed_modes) if allowed_modes is not None else None
        self._lock = threading.RLock()
        self._rules: dict[UUID, TextRule] = {rule.id: rule for rule in rules}

    def _persist(self) -> None:
        """Hook for subclasses that keep rules somewhere durable."""

    @contextmanager
    def _changing(self) -> Iterator[None]:
        """Hold the lock for a change and persist it.

        If persisting fails the rules are put back as they were, so the
        store never serves a change that was reported as not saved.
        """
        with self._lock:
            previous = dict(self._rules)
            yield
            try:
                self._persist()
            except RuleStoreError:
                self._rules = previous
                raise

    def _ordered(self) -> tuple[TextRule, ...]:
        return tuple(sorted(self._rules.values(), key=_sort_key(self.ordering)))

    def fetch_ordered_rules(self) -> tuple[TextRule, ...]:
        with self._lock:
            return self._ordered()

    def fetch_enabled_rules(self) -> tuple[TextRule, ...]:
        return tuple(rule for rule in self.fetch_ordered_rules() if rule.enabled)

    def __len__(self) -> int:
        with self._lock:
            return len(self._rules)

    def get(self, rule_id: UUID) -> TextRule:
        with self._lock:
            try:
                return self._rules[rule_id]
            except KeyError:
                raise RuleNotFoundError(f"No rule with id {rule_id}") from None

    def resolve_id(self, reference: str) -> UUID:
        """Find a rule id from its full form or a unique hex prefix."""
        ref = reference.strip().lower().replace("-", "")
        if not ref:
            raise RuleNotFoundError("Empty rule id")
        with self._lock:
            matches = [rule_id for rule_id in self._rules if rule_id.hex.startswith(ref)]
        if not matches:
            raise RuleNotFoundError(f"No rule matching '{reference}'")
        if len(matches) > 1:
            raise RuleNotFoundError(f"Rule id '{reference}' is ambiguous ({len(matches)} matches)")
        return matches[0]

    def add(
        self,
        pattern: str,
        replacement: str = "",
        match_mode: MatchMode = MatchMode.LITERAL,
        enabled: bool = True,
        priority: int | None = None,
    ) -> TextRule:
        """Validate and store a new rule.

        Without an explicit priority the rule goes after every existing one.
        """
        pattern = validate_rule_fields(pattern, match_mode, self.allowed_modes, replacement=replacement)
        with self._changing():
            if priority is None:
                priority = max((rule.priority for rule in self._rules.values()), default=-1) + 1
            rule = TextRule(
                pattern=pattern,
                replacement=replacement,
                match_mode=match_mode,
                enabled=enabled,
                priority=priority,
            )
            self._rules[rule.id] = rule
        logger.info("Added rule %s (%s)", rule.short_id, match_mode.value)
        return rule

    def update(
        self,
        rule_id: UUID,
        *,
        pattern: str | None = None,
        replacement: str | None = None,
        match_mode: MatchMode | None = None,
        priority: int | None = None,
    ) -> TextRule:
        with self._changing():
            current = self.get(rule_id)
            new_mode = match_mode if match_mode is not None else current.match_mode
            new_pattern = validate_rule_fields(
                pattern if pattern is not None else current.pattern,
                new_mode,
                self.allowed_modes,
                replacement=replacement if replacement is not None else current.replacement,
            )
            changes: dict[str, object] = {"pattern": new_pattern, "match_mode": new_mode}
            if replacement is not None:
                changes["replacement"] = replacement
            if priority is not None:
                changes["priority"] = priority
            updated = current.model_copy(update=changes)
            self._rules[rule_id] = updated
        logger.info("Updated rule %s", updated.short_id)
        return updated

    def set_enabled(self, rule_id: UUID, enabled: bool) -> TextRule:
        with self._changing():
            updated = self.get(rule_id).model_copy(update={"enabled": enabled})
            self._rules[rule_id] = updated
        logger.info("%s rule %s", "Enabled" if enabled else "Disabled", updated.short_id)
        return updated

    def delete(self, rule_id: UUID) -> None:
        with self._changing():
            if rule_id not in self._rules:
                raise RuleNotFoundError(f"No rule with id {rule_id}")
            del self._rules[rule_id]
        logger.info("Deleted rule %s", rule_id.hex[:8])

    def move(self, rule_id: UUID, new_index: int) -> tuple[TextRule, ...]:
        """Move a rule to ``new_index`` in the pipeline, renumbering priorities."""
        if self.ordering is not RuleOrdering.PRIORITY:
            raise RuleStoreError("Rules can only be reordered when ordering by priority")
        with self._changing():
            ordered = list(self._ordered())
            rule = self.get(rule_id)
            ordered.remove(rule)
            new_index = max(0, min(new_index, len(ordered)))
            ordered.insert(new_index, rule)
            for index, item in enumerate(ordered):
                if item.priority != index:
                    self._rules[item.id] = item.model_copy(update={"priority": index})
            return self._ordered()


class RuleFile(BaseModel):
    """On-disk layout of a rules file."""

    version: int = RULE_FILE_VERSION
    rules: list[TextRule] = []


class JsonFileRuleStore(InMemoryRuleStore):
    """Rule store persisted as a JSON file, rewritten atomically on each change."""

    def __init__(
        self,
        path: str | Path,
        ordering: RuleOrdering = RuleOrdering.PRIORITY,
        allowed_modes: Iterable[MatchMode] | None = None,
    ):
        self.path = Path(path).expanduser()
        super().__init__(self._load(), ordering=ordering, allowed_modes=allowed_modes)

    def _load(self) -> list[TextRule]:
        if not self.path.exists():
            return []
        try:
            data = RuleFile.model_validate_json(self.path.read_bytes())
        except (OSError, ValidationError) as exc:
            raise RuleStoreError(f"Could not read rules from {self.path}: {exc}") from exc
        if data.version > RULE_FILE_VERSION:
            raise RuleStoreError(f"Rules file {self.path} has unsupported version {data.version}")
        logger.debug("Loaded %d rules from %s", len(data.rules), self.path)
        return data.rules

    def _persist(self) -> None:
        payload = RuleFile(rules=list(self._ordered())).model_dump_json(indent=2)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=".rules-", suffix=".json", dir=self.path.parent)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp_name, self.path)
            except OSError:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise RuleStoreError(f"Could not write rules to {self.path}: {exc}") from exc

    def reload(self) -> None:
        """Re-read the file, dropping in-memory state."""
        rules = self._load()
        with self._lock:
            self._rules = {rule.id: rule for rule in rules}


__all__ = [
    "RuleStore",
    "InMemoryRuleStore",
    "JsonFileRuleStore",
    "RuleFile",
]
