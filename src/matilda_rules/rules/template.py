"""Replacement templates for Regex rules.

Templates use ``$N`` for capture groups (``$0`` is the whole match) and a
backslash to take the next character literally, so ``\\$5`` renders ``$5``.
Multi-digit references are read greedily while the number still names an
existing group: with two groups, ``$12`` is group 1 followed by ``2``.
A ``$`` that does not start a valid reference is kept as-is.
"""

from __future__ import annotations

import re
from collections.abc import Callable

_DIGITS = "0123456789"

TemplatePart = str | int


def parse_template(template: str, group_count: int) -> list[TemplatePart]:
    """Split a template into literal strings and group numbers."""
    parts: list[TemplatePart] = []
    literal: list[str] = []
    i = 0
    length = len(template)

    while i < length:
        char = template[i]

        if char == "\\" and i + 1 < length:
            literal.append(template[i + 1])
            i += 2
            continue

        if char == "$" and i + 1 < length and template[i + 1] in _DIGITS:
            number = int(template[i + 1])
            if number <= group_count:
                j = i + 2
                while j < length and template[j] in _DIGITS:
                    candidate = number * 10 + int(template[j])
                    if candidate > group_count:
                        break
                    number = candidate
                    j += 1
                if literal:
                    parts.append("".join(literal))
                    literal = []
                parts.append(number)
                i = j
                continue

        literal.append(char)
        i += 1

    if literal:
        parts.append("".join(literal))
    return parts


def compile_template(template: str, group_count: int) -> Callable[[re.Match[str]], str]:
    """Build a ``re.sub`` replacement function for ``template``."""
    parts = parse_template(template, group_count)

    if all(isinstance(part, str) for part in parts):
        rendered = "".join(parts)  # type: ignore[arg-type]
        return lambda _match: rendered

    def expand(match: re.Match[str]) -> str:
        pieces = []
        for part in parts:
            if isinstance(part, int):
                pieces.append(match.group(part) or "")
            else:
                pieces.append(part)
        return "".join(pieces)

    return expand


__all__ = ["parse_template", "compile_template"]
