# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Parse unified diffs into files, hunks and new-side line numbers.

Raw diff content is parsed once at the boundary; the filter only consults the
resulting :class:`FileDiff` objects.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Final

DEV_NULL: Final[str] = "/dev/null"
_HUNK_HEADER: Final[re.Pattern[str]] = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")
_GIT_HEADER: Final[re.Pattern[str]] = re.compile(r'^diff --git "?(?P<old>.+?)"? "?(?P<new>[^"]+?)"?$')


class LineKind(str, Enum):
    """Role of a line inside a hunk body."""

    ADDED = "+"
    DELETED = "-"
    CONTEXT = " "


@dataclass(frozen=True, slots=True)
class DiffLine:
    """One line of a hunk body with its old and new side line numbers."""

    kind: LineKind
    content: str
    old_lnum: int | None
    new_lnum: int | None


@dataclass(slots=True)
class Hunk:
    """A contiguous section of changes introduced by an ``@@`` header."""

    old_start: int
    old_length: int
    new_start: int
    new_length: int
    lines: list[DiffLine] = field(default_factory=list)

    @property
    def new_end(self) -> int:
        """Return the last new-side line number covered by the hunk."""

        return self.new_start + max(self.new_length, 1) - 1

    def covers(self, lnum: int) -> bool:
        """Return ``True`` when ``lnum`` falls inside the new-side range."""

        return self.new_length > 0 and self.new_start <= lnum <= self.new_end


@dataclass(slots=True)
class FileDiff:
    """Changes to one file. Paths are as written in the diff, unstripped."""

    old_path: str | None = None
    new_path: str | None = None
    hunks: list[Hunk] = field(default_factory=list)

    @property
    def path(self) -> str | None:
        """Return the post-change path, or the old path for deletions."""

        return self.new_path or self.old_path

    def added_lines(self) -> Iterator[DiffLine]:
        """Yield every added line across all hunks."""

        for hunk in self.hunks:
            for line in hunk.lines:
                if line.kind is LineKind.ADDED:
                    yield line


def strip_path(path: str | None, strip: int) -> str | None:
    """Remove ``strip`` leading components from ``path``.

    Args:
        path: Path as written in the diff header.
        strip: Number of leading components to drop (as ``patch -p``).

    Returns:
        str | None: Stripped path, or ``None`` for ``/dev/null`` and paths
        with too few components.
    """

    if path is None or path == DEV_NULL:
        return None
    if strip <= 0:
        return path
    parts = path.split("/")
    if len(parts) <= strip:
        return None
    return "/".join(parts[strip:])


def _header_path(line: str) -> str:
    value = line[4:]
    # Timestamps follow a tab in non-git diffs.
    value = value.split("\t", 1)[0].rstrip()
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        value = value[1:-1]
    return value


def _decode(raw: bytes | str) -> str:
    if isinstance(raw, bytes):
        return raw.decode("utf-8", errors="replace")
    return raw


def parse_unified_diff(raw: bytes | str) -> list[FileDiff]:
    """Parse ``raw`` unified diff text into per-file changes.

    Both ``git diff`` output and plain ``diff -u`` output are accepted. Lines
    outside any file section are ignored.

    Args:
        raw: Diff bytes or text.

    Returns:
        list[FileDiff]: Files in diff order.
    """

    files: list[FileDiff] = []
    current: FileDiff | None = None
    hunk: Hunk | None = None
    old_lnum = new_lnum = 0
    old_left = new_left = 0

    for line in _decode(raw).splitlines():
        if hunk is not None and (old_left > 0 or new_left > 0):
            marker = line[:1]
            if marker == "+":
                hunk.lines.append(DiffLine(LineKind.ADDED, line[1:], None, new_lnum))
                new_lnum += 1
                new_left -= 1
                continue
            if marker == "-":
                hunk.lines.append(DiffLine(LineKind.DELETED, line[1:], old_lnum, None))
                old_lnum += 1
                old_left -= 1
                continue
            if marker == " " or line == "":
                hunk.lines.append(DiffLine(LineKind.CONTEXT, line[1:], old_lnum, new_lnum))
                old_lnum += 1
                new_lnum += 1
                old_left -= 1
                new_left -= 1
                continue
            if marker == "\\":
                continue
            hunk = None
        elif line.startswith("\\"):
            continue

        if line.startswith("diff --git "):
            match = _GIT_HEADER.match(line)
            current = FileDiff()
            if match:
                current.old_path = match.group("old")
                current.new_path = match.group("new")
            files.append(current)
            hunk = None
            continue
        if line.startswith("--- "):
            if current is None or current.hunks:
                current = FileDiff()
                files.append(current)
            current.old_path = _header_path(line)
            hunk = None
            continue
        if line.startswith("+++ ") and current is not None:
            current.new_path = _header_path(line)
            continue
        if line.startswith("rename from ") and current is not None:
            current.old_path = f"a/{line[len('rename from '):]}"
            continue
        if line.startswith("rename to ") and current is not None:
            current.new_path = f"b/{line[len('rename to '):]}"
            continue
        match = _HUNK_HEADER.match(line)
        if match and current is not None:
            old_start = int(match.group(1))
            new_start = int(match.group(3))
            old_left = int(match.group(2)) if match.group(2) is not None else 1
            new_left = int(match.group(4)) if match.group(4) is not None else 1
            hunk = Hunk(old_start, old_left, new_start, new_left)
            current.hunks.append(hunk)
            old_lnum, new_lnum = old_start, new_start
    return files


__all__ = [
    "DEV_NULL",
    "DiffLine",
    "FileDiff",
    "Hunk",
    "LineKind",
    "parse_unified_diff",
    "strip_path",
]
