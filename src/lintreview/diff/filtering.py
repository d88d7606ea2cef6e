# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Decide which diagnostics fall inside the reviewed diff."""

from __future__ import annotations

import posixpath
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from ..config import FilterMode, Runner
from ..models import Diagnostic, FetchedDiff, FilteredDiagnostic
from .parser import FileDiff, LineKind, parse_unified_diff, strip_path


@dataclass(frozen=True, slots=True)
class _FileIndex:
    """New-side line lookup for one changed file."""

    added: frozenset[int]
    context: frozenset[int]


def normalize_path(
    path: str,
    *,
    root: Path,
    prefix: str | None = None,
    workdir: Path | None = None,
) -> str:
    """Return ``path`` as a POSIX path relative to ``root``.

    Args:
        path: Path reported by a linter.
        root: Directory the diff paths are relative to.
        prefix: Leading text removed from ``path`` before normalisation.
        workdir: Directory relative paths were reported from, if not ``root``.

    Returns:
        str: Normalised relative path, or the normalised absolute path when
        it lies outside ``root``.
    """

    candidate = path.replace("\\", "/")
    if prefix:
        clean_prefix = prefix.replace("\\", "/")
        if candidate.startswith(clean_prefix):
            candidate = candidate[len(clean_prefix) :].lstrip("/")
    pure = PurePosixPath(candidate)
    if not pure.is_absolute() and workdir is not None:
        pure = PurePosixPath((root / workdir).resolve().as_posix()) / pure
    if pure.is_absolute():
        try:
            pure = pure.relative_to(PurePosixPath(root.resolve().as_posix()))
        except ValueError:
            return posixpath.normpath(pure.as_posix())
    return posixpath.normpath(pure.as_posix())


@dataclass(slots=True)
class DiffFilter:
    """Correlate diagnostics with the files and lines of a parsed diff.

    Attributes:
        files: Parsed diff files.
        strip: Leading path components removed from diff paths.
        mode: Run-level review scope; runners may override it.
        root: Directory diagnostic paths are made relative to.
    """

    files: Sequence[FileDiff]
    strip: int = 0
    mode: FilterMode = FilterMode.ADDED
    root: Path = field(default_factory=Path.cwd)
    _index: dict[str, _FileIndex] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._index = {}
        for file_diff in self.files:
            path = strip_path(file_diff.new_path, self.strip)
            if path is None:
                continue
            added: set[int] = set()
            context: set[int] = set()
            for hunk in file_diff.hunks:
                for line in hunk.lines:
                    if line.new_lnum is None:
                        continue
                    context.add(line.new_lnum)
                    if line.kind is LineKind.ADDED:
                        added.add(line.new_lnum)
            self._index[posixpath.normpath(path)] = _FileIndex(frozenset(added), frozenset(context))

    @classmethod
    def from_diff(
        cls,
        diff: FetchedDiff,
        *,
        mode: FilterMode = FilterMode.ADDED,
        root: Path | None = None,
    ) -> DiffFilter:
        """Build a filter from a fetched diff."""

        return cls(
            files=parse_unified_diff(diff.raw),
            strip=diff.strip,
            mode=mode,
            root=root if root is not None else Path.cwd(),
        )

    @property
    def paths(self) -> frozenset[str]:
        """Return the normalised post-change paths present in the diff."""

        return frozenset(self._index)

    def check(self, diagnostic: Diagnostic, *, runner: Runner) -> FilteredDiagnostic:
        """Return ``diagnostic`` annotated with its relationship to the diff."""

        if not diagnostic.file:
            return FilteredDiagnostic(diagnostic=diagnostic)
        source_path = normalize_path(
            diagnostic.file,
            root=self.root,
            prefix=runner.path_prefix,
            workdir=runner.workdir,
        )
        index = self._index.get(source_path)
        if index is None:
            return FilteredDiagnostic(diagnostic=diagnostic, source_path=source_path)
        line = diagnostic.line
        return FilteredDiagnostic(
            diagnostic=diagnostic,
            source_path=source_path,
            in_diff=line is not None and line in index.added,
            in_diff_file=True,
            diff_line=line if line is not None and line in index.context else None,
        )

    def in_scope(self, filtered: FilteredDiagnostic, *, runner: Runner) -> bool:
        """Return ``True`` when ``filtered`` falls inside the review scope."""

        mode = runner.filter_mode or self.mode
        if mode is FilterMode.NOFILTER:
            return True
        if mode is FilterMode.FILE:
            return filtered.in_diff_file
        if mode is FilterMode.DIFF_CONTEXT:
            return filtered.diff_line is not None
        return filtered.in_diff


__all__ = ["DiffFilter", "normalize_path"]
