"""Text transform rules: models, matching, pipeline and storage."""

from .exceptions import RuleError, RuleNotFoundError, RuleStoreError, RuleValidationError
from .matcher import apply_rule, register_match_mode, registered_match_modes
from .models import MatchMode, RuleOrdering, TextRule
from .pipeline import PreviewResult, RulePreviewStep, TextTransformService, preview_text, transform_text
from .store import InMemoryRuleStore, JsonFileRuleStore, RuleStore
from .validation import check_rule_fields, validate_rule_fields

__all__ = [
    "MatchMode",
    "RuleOrdering",
    "TextRule",
    "apply_rule",
    "register_match_mode",
    "registered_match_modes",
    "TextTransformService",
    "PreviewResult",
    "RulePreviewStep",
    "transform_text",
    "preview_text",
    "RuleStore",
    "InMemoryRuleStore",
    "JsonFileRuleStore",
    "check_rule_fields",
    "validate_rule_fields",
    "RuleError",
    "RuleValidationError",
    "RuleNotFoundError",
    "RuleStoreError",
]
