# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Translate Vim-style ``errorformat`` patterns into regular expressions.

Each pattern becomes one :class:`Rule`: an optional line-kind prefix
(``%E``, ``%C``, ``%-G`` ...) plus a regular expression that must match the
whole output line. Conversions such as ``%f`` or ``%l`` become named groups.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Final


class ErrorformatError(ValueError):
    """Raised when an errorformat pattern cannot be compiled."""

    def __init__(self, pattern: str, index: int, reason: str) -> None:
        """Initialise the error with the failing pattern and its position.

        Args:
            pattern: Pattern text that failed to compile.
            index: Zero-based position of ``pattern`` in its errorformat list.
            reason: Description of the problem.
        """

        super().__init__(f"errorformat[{index}] {pattern!r}: {reason}")
        self.pattern = pattern
        self.index = index
        self.reason = reason


class RuleKind(str, Enum):
    """How a matching line contributes to the entry being built."""

    SINGLE = ""
    START = "A"
    START_ERROR = "E"
    START_WARNING = "W"
    START_INFO = "I"
    START_NOTE = "N"
    CONTINUE = "C"
    END = "Z"
    GENERAL = "G"
    OVERREAD = "O"
    PUSH_FILE = "P"
    POP_FILE = "Q"

    @property
    def starts_entry(self) -> bool:
        """Return ``True`` for prefixes that open a multi-line entry."""

        return self in _START_KINDS

    @property
    def implied_type(self) -> str | None:
        """Return the type character implied by ``%E``/``%W``/``%I``/``%N``."""

        return _IMPLIED_TYPES.get(self)


_START_KINDS: Final[frozenset[RuleKind]] = frozenset(
    {
        RuleKind.START,
        RuleKind.START_ERROR,
        RuleKind.START_WARNING,
        RuleKind.START_INFO,
        RuleKind.START_NOTE,
    }
)
_IMPLIED_TYPES: Final[dict[RuleKind, str]] = {
    RuleKind.START_ERROR: "e",
    RuleKind.START_WARNING: "w",
    RuleKind.START_INFO: "i",
    RuleKind.START_NOTE: "n",
}
_PREFIX_CHARS: Final[frozenset[str]] = frozenset(kind.value for kind in RuleKind if kind.value)

_DIGITS: Final[str] = r"\d+"
_CONVERSIONS: Final[dict[str, str]] = {
    "f": r"(?:[A-Za-z]:)?.+?",
    "l": _DIGITS,
    "e": _DIGITS,
    "c": _DIGITS,
    "k": _DIGITS,
    "v": _DIGITS,
    "n": _DIGITS,
    "t": r".",
    "m": r".+",
    "r": r".*",
    "p": r"[-\t .]*",
    "s": r".+",
}
_ATOMS: Final[dict[str, str]] = {
    "%": "%",
    ".": ".",
    "#": "*",
    "^": "^",
    "$": "$",
    "\\": r"\\",
}


@dataclass(frozen=True, slots=True)
class Rule:
    """A compiled errorformat pattern.

    Attributes:
        pattern: Original pattern text.
        kind: Line-kind prefix controlling multi-line assembly.
        ignore: ``%-`` modifier; the line is consumed without output.
        whole_line: ``%+`` modifier; the full line becomes the message.
        regex: Compiled regular expression matched against whole lines.
        fields: Conversion letters captured by ``regex``.
    """

    pattern: str
    kind: RuleKind
    ignore: bool
    whole_line: bool
    regex: re.Pattern[str]
    fields: frozenset[str]

    def match(self, line: str) -> re.Match[str] | None:
        """Return the match of ``line`` against the rule, if any."""

        return self.regex.fullmatch(line)


def _class_end(pattern: str, start: int) -> int:
    """Return the index just past the ``]`` closing a class opened at ``start``."""

    cursor = start + 1
    if cursor < len(pattern) and pattern[cursor] == "^":
        cursor += 1
    if cursor < len(pattern) and pattern[cursor] == "]":
        cursor += 1
    closing = pattern.find("]", cursor)
    if closing < 0:
        raise ValueError("unterminated character class")
    return closing + 1


def _split_prefix(pattern: str) -> tuple[RuleKind, bool, bool, int]:
    """Parse the optional ``%-``/``%+`` modifier and kind prefix."""

    cursor = 0
    ignore = whole_line = False
    if pattern.startswith(("%-", "%+")):
        ignore = pattern[1] == "-"
        whole_line = pattern[1] == "+"
        cursor = 2
        if cursor < len(pattern) and pattern[cursor] in _PREFIX_CHARS:
            return RuleKind(pattern[cursor]), ignore, whole_line, cursor + 1
        return RuleKind.SINGLE, ignore, whole_line, cursor
    if len(pattern) >= 2 and pattern[0] == "%" and pattern[1] in _PREFIX_CHARS:
        return RuleKind(pattern[1]), ignore, whole_line, 2
    return RuleKind.SINGLE, ignore, whole_line, cursor


def _translate(pattern: str, start: int) -> tuple[str, frozenset[str]]:
    """Translate the body of ``pattern`` beginning at ``start`` into a regex."""

    parts: list[str] = []
    fields: set[str] = set()
    cursor = start
    length = len(pattern)
    while cursor < length:
        char = pattern[cursor]
        if char == "\\" and cursor + 1 < length:
            # Bare backslash escapes are regex atoms such as ``\s`` or ``\(``.
            parts.append(pattern[cursor : cursor + 2])
            cursor += 2
            continue
        if char != "%":
            parts.append(re.escape(char))
            cursor += 1
            continue
        if cursor + 1 >= length:
            raise ValueError("pattern ends with a lone '%'")
        directive = pattern[cursor + 1]
        if directive in _CONVERSIONS:
            if directive in fields:
                raise ValueError(f"duplicate conversion %{directive}")
            fields.add(directive)
            parts.append(f"(?P<{directive}>{_CONVERSIONS[directive]})")
            cursor += 2
        elif directive in _ATOMS:
            parts.append(_ATOMS[directive])
            cursor += 2
        elif directive == "[":
            end = _class_end(pattern, cursor + 1)
            parts.append(pattern[cursor + 1 : end])
            cursor = end
        elif directive == "*":
            cursor += 2
            if cursor >= length:
                raise ValueError("'%*' must be followed by a class")
            if pattern[cursor] == "[":
                end = _class_end(pattern, cursor)
                parts.append(f"{pattern[cursor:end]}*")
                cursor = end
            elif pattern[cursor] == "\\" and cursor + 1 < length:
                parts.append(f"{pattern[cursor : cursor + 2]}*")
                cursor += 2
            else:
                parts.append(f"{re.escape(pattern[cursor])}*")
                cursor += 1
        else:
            raise ValueError(f"unknown directive %{directive}")
    return "".join(parts), frozenset(fields)


def compile_rule(pattern: str, index: int = 0) -> Rule:
    """Compile one errorformat ``pattern`` into a :class:`Rule`.

    Args:
        pattern: Errorformat pattern text.
        index: Position of the pattern within its list, used in errors.

    Returns:
        Rule: Compiled rule.

    Raises:
        ErrorformatError: If the pattern is empty, uses an unknown directive
            or produces an invalid regular expression.
    """

    if not pattern:
        raise ErrorformatError(pattern, index, "empty pattern")
    try:
        kind, ignore, whole_line, body_start = _split_prefix(pattern)
        expression, fields = _translate(pattern, body_start)
        regex = re.compile(expression)
    except (ValueError, re.error) as exc:
        raise ErrorformatError(pattern, index, str(exc)) from exc
    return Rule(
        pattern=pattern,
        kind=kind,
        ignore=ignore,
        whole_line=whole_line,
        regex=regex,
        fields=fields,
    )


def compile_rules(patterns: Sequence[str]) -> tuple[Rule, ...]:
    """Compile every pattern in order, failing on the first invalid one.

    Raises:
        ErrorformatError: If ``patterns`` is empty or any pattern is invalid.
    """

    if not patterns:
        raise ErrorformatError("", 0, "at least one pattern is required")
    return tuple(compile_rule(pattern, index) for index, pattern in enumerate(patterns))


__all__ = ["ErrorformatError", "Rule", "RuleKind", "compile_rule", "compile_rules"]
