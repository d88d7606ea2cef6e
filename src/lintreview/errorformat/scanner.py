# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Scan linter output with compiled errorformat rules."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field

from ..models import Diagnostic
from ..severity import Severity, severity_from_type
from .compiler import Rule, RuleKind, compile_rules

LOGGER = logging.getLogger(__name__)

_NON_ENTRY_KINDS = frozenset({RuleKind.GENERAL, RuleKind.OVERREAD, RuleKind.PUSH_FILE, RuleKind.POP_FILE})


@dataclass(slots=True)
class Entry:
    """One error entry assembled from one or more output lines."""

    filename: str | None = None
    lnum: int | None = None
    end_lnum: int | None = None
    col: int | None = None
    end_col: int | None = None
    type: str | None = None
    nr: str | None = None
    text: str = ""
    lines: list[str] = field(default_factory=list)

    def to_diagnostic(self, tool: str, *, default_severity: Severity | None = None) -> Diagnostic:
        """Convert the entry into a :class:`Diagnostic` for ``tool``.

        Args:
            tool: Name of the runner that produced the output.
            default_severity: Severity used when the entry carries no type.

        Returns:
            Diagnostic: Immutable diagnostic model.
        """

        code: str | None = None
        if self.nr is not None:
            prefix = self.type if self.type and self.type.isalpha() else ""
            code = f"{prefix.upper()}{self.nr}"
        return Diagnostic(
            file=self.filename,
            line=self.lnum,
            column=self.col,
            end_line=self.end_lnum,
            end_column=self.end_col,
            severity=severity_from_type(self.type, default_severity),
            message=self.text,
            code=code,
            tool=tool,
            raw_lines=tuple(self.lines),
        )


def _optional_int(match: re.Match[str], name: str) -> int | None:
    value = match.groupdict().get(name)
    return int(value) if value else None


def _entry_from_match(rule: Rule, match: re.Match[str], line: str) -> Entry:
    """Build a fresh entry from the groups captured by ``match``."""

    groups = match.groupdict()
    entry = Entry(
        filename=groups.get("f") or None,
        lnum=_optional_int(match, "l"),
        end_lnum=_optional_int(match, "e"),
        col=_optional_int(match, "c") or _optional_int(match, "v"),
        end_col=_optional_int(match, "k"),
        type=groups.get("t") or rule.kind.implied_type,
        nr=groups.get("n") or None,
        lines=[line],
    )
    if "p" in groups and groups["p"] is not None:
        entry.col = len(groups["p"]) + 1
    if rule.whole_line:
        entry.text = line
    else:
        entry.text = groups.get("m") or groups.get("r") or groups.get("s") or ""
    return entry


def _merge_continuation(entry: Entry, rule: Rule, match: re.Match[str], line: str) -> None:
    """Fold a ``%C``/``%Z`` line into the pending ``entry``."""

    update = _entry_from_match(rule, match, line)
    entry.lines.append(line)
    entry.filename = entry.filename or update.filename
    entry.lnum = entry.lnum if entry.lnum is not None else update.lnum
    entry.end_lnum = entry.end_lnum if entry.end_lnum is not None else update.end_lnum
    entry.col = entry.col if entry.col is not None else update.col
    entry.end_col = entry.end_col if entry.end_col is not None else update.end_col
    entry.type = entry.type or update.type
    entry.nr = entry.nr if entry.nr is not None else update.nr
    if update.text:
        entry.text = f"{entry.text}\n{update.text}" if entry.text else update.text


@dataclass(slots=True)
class _ScanState:
    """Mutable state carried across lines of one output stream."""

    pending: Entry | None = None
    files: list[str] = field(default_factory=list)

    def finish(self, entry: Entry) -> Entry:
        if entry.filename is None and self.files:
            entry.filename = self.files[-1]
        return entry

    def flush(self) -> Entry | None:
        pending, self.pending = self.pending, None
        return self.finish(pending) if pending is not None else None


class Errorformat:
    """A reusable matcher compiled from an ordered list of patterns.

    Instances are immutable and may be shared between threads; every call to
    :meth:`scan` keeps its multi-line state locally.
    """

    __slots__ = ("_rules", "patterns")

    def __init__(self, rules: Sequence[Rule]) -> None:
        self._rules = tuple(rules)
        self.patterns = tuple(rule.pattern for rule in self._rules)

    @classmethod
    def from_patterns(cls, patterns: Sequence[str]) -> Errorformat:
        """Compile ``patterns`` into a matcher.

        Raises:
            ErrorformatError: If any pattern is invalid.
        """

        return cls(compile_rules(patterns))

    def scan(self, lines: Iterable[str]) -> Iterator[Entry]:
        """Yield entries parsed from ``lines`` in output order.

        A line that raises while being matched is skipped and scanning
        continues with the next line.

        Args:
            lines: Output lines; trailing newlines are stripped.

        Yields:
            Entry: Completed entries.
        """

        state = _ScanState()
        for raw_line in lines:
            line = raw_line.rstrip("\r\n")
            try:
                emitted = self._feed(state, line)
            except (ValueError, OverflowError) as exc:
                LOGGER.debug("skipping unparsable line %r: %s", line, exc)
                continue
            yield from emitted
        final = state.flush()
        if final is not None:
            yield final

    def match(self, line: str) -> Entry | None:
        """Return the entry produced by a single ``line``, if any."""

        for entry in self.scan((line,)):
            return entry
        return None

    def _feed(self, state: _ScanState, line: str) -> list[Entry]:
        emitted: list[Entry] = []
        for rule in self._rules:
            match = rule.match(line)
            if match is None:
                continue
            self._apply(rule, match, line, state, emitted)
            break
        return emitted

    @staticmethod
    def _apply(rule: Rule, match: re.Match[str], line: str, state: _ScanState, emitted: list[Entry]) -> None:
        kind = rule.kind
        if kind in (RuleKind.CONTINUE, RuleKind.END):
            if state.pending is not None and not rule.ignore:
                _merge_continuation(state.pending, rule, match, line)
            if kind is RuleKind.END:
                flushed = state.flush()
                if flushed is not None:
                    emitted.append(flushed)
            return
        creates_entry = kind not in _NON_ENTRY_KINDS and not rule.ignore
        entry = _entry_from_match(rule, match, line) if creates_entry else None
        flushed = state.flush()
        if flushed is not None:
            emitted.append(flushed)
        if kind is RuleKind.PUSH_FILE:
            filename = match.groupdict().get("f")
            if filename:
                state.files.append(filename)
            return
        if kind is RuleKind.POP_FILE:
            if state.files:
                state.files.pop()
            return
        if entry is None:
            return
        if kind.starts_entry:
            state.pending = entry
        else:
            emitted.append(state.finish(entry))


__all__ = ["Entry", "Errorformat"]
