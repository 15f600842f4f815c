from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


class MatchMode(Enum):
    """How a rule's pattern is matched against text."""

    LITERAL = "Literal"
    WHOLE_WORD = "Whole Word"
    REGEX = "Regex"

    @classmethod
    def parse(cls, value: str | MatchMode) -> MatchMode:
        """Accept the display value, the member name, or a loose spelling."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace("-", "").replace("_", "").replace(" ", "")
        for mode in cls:
            if key in (mode.value.lower().replace(" ", ""), mode.name.lower().replace("_", "")):
                return mode
        if key == "word":
            return cls.WHOLE_WORD
        raise ValueError(f"Unknown match mode: {value!r} (expected one of: {', '.join(m.value for m in cls)})")


class RuleOrdering(Enum):
    """Store-side ordering policy for the rule pipeline."""

    PRIORITY = "priority"
    CREATED = "created"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TextRule(BaseModel):
    """A single pattern -> replacement transformation.

    Instances are immutable snapshots; edits go through ``model_copy(update=...)``.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    pattern: str
    replacement: str = ""
    match_mode: MatchMode = MatchMode.LITERAL
    enabled: bool = True
    priority: int = 0
    created_at: datetime = Field(default_factory=_utcnow)

    @property
    def short_id(self) -> str:
        return self.id.hex[:8]


__all__ = ["MatchMode", "RuleOrdering", "TextRule"]
