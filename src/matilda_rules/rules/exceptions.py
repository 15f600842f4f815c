"""Exceptions raised at the rule store boundary.

The transform engine itself never raises these; see matcher.apply_rule.
"""


class RuleError(Exception):
    """Base class for rule errors."""


class RuleValidationError(RuleError):
    """A rule was rejected before being saved."""

    def __init__(self, message: str, field: str = "pattern"):
        super().__init__(message)
        self.message = message
        self.field = field


class RuleNotFoundError(RuleError, KeyError):
    """No rule with the requested id exists in the store."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "Rule not found"


class RuleStoreError(RuleError):
    """The rule store could not be read or written."""
