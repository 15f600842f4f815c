import pytest

from matilda_rules.rules.exceptions import RuleValidationError
from matilda_rules.rules.models import MatchMode
from matilda_rules.rules.validation import check_rule_fields, validate_rule_fields


@pytest.mark.parametrize("pattern", ["", "   ", "\n\t"])
@pytest.mark.parametrize("mode", list(MatchMode))
def test_empty_pattern_rejected(pattern, mode):
    with pytest.raises(RuleValidationError) as exc_info:
        validate_rule_fields(pattern, mode)
    assert exc_info.value.field == "pattern"
    assert "empty" in exc_info.value.message


def test_pattern_is_trimmed():
    assert validate_rule_fields("  um  ", MatchMode.WHOLE_WORD) == "um"


def test_invalid_regex_rejected():
    with pytest.raises(RuleValidationError, match="Invalid regex pattern"):
        validate_rule_fields("(unclosed", MatchMode.REGEX)


def test_regex_characters_fine_for_literal_modes():
    assert validate_rule_fields("(unclosed", MatchMode.LITERAL) == "(unclosed"
    assert validate_rule_fields("(unclosed", MatchMode.WHOLE_WORD) == "(unclosed"


def test_valid_regex_accepted():
    assert validate_rule_fields(r"\s{2,}", MatchMode.REGEX) == r"\s{2,}"


def test_mode_outside_deployment_rejected():
    allowed = {MatchMode.LITERAL, MatchMode.REGEX}
    with pytest.raises(RuleValidationError) as exc_info:
        validate_rule_fields("um", MatchMode.WHOLE_WORD, allowed)
    assert exc_info.value.field == "match_mode"


def test_check_rule_fields_returns_message():
    assert check_rule_fields("ok", MatchMode.LITERAL) is None
    assert check_rule_fields("", MatchMode.LITERAL) == "Pattern cannot be empty"
    assert check_rule_fields("[", MatchMode.REGEX).startswith("Invalid regex pattern")


@pytest.mark.parametrize("replacement", [r"\1", r"x\2y", "\\\\\\1"])
def test_backslash_group_reference_rejected_for_regex(replacement):
    with pytest.raises(RuleValidationError) as exc_info:
        validate_rule_fields(r"(\w+)", MatchMode.REGEX, replacement=replacement)
    assert exc_info.value.field == "replacement"
    assert "$1" in exc_info.value.message


@pytest.mark.parametrize("replacement", ["$1", r"\$1", "\\\\1", r"\d"])
def test_dollar_templates_and_escaped_backslashes_accepted(replacement):
    assert check_rule_fields(r"(\w+)", MatchMode.REGEX, replacement=replacement) is None


def test_backslash_digit_is_plain_text_outside_regex_mode():
    assert check_rule_fields("one", MatchMode.LITERAL, replacement=r"\1") is None
