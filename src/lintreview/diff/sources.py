# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Diff sources: local commands, diff files and GitHub pull requests."""

from __future__ import annotations

import shlex
import sys
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

from ..context import RunContext
from ..errors import DiffFetchError
from ..execution.process import CommandOptions, SubprocessExecutionError, run_command
from ..github_api import DIFF_MEDIA_TYPE, GitHubAPIError, GitHubClient
from ..models import FetchedDiff

GIT_DIFF_STRIP: Final[int] = 1
STDIN_MARKER: Final[str] = "-"


@dataclass(slots=True)
class CommandDiffSource:
    """Run a command and use its standard output as the diff."""

    args: Sequence[str]
    strip: int = GIT_DIFF_STRIP
    cwd: Path | None = None

    @classmethod
    def from_command_line(cls, cmd: str, *, strip: int = GIT_DIFF_STRIP, cwd: Path | None = None) -> CommandDiffSource:
        """Build a source from a shell-style command line."""

        return cls(args=tuple(shlex.split(cmd)), strip=strip, cwd=cwd)

    def fetch(self, ctx: RunContext) -> FetchedDiff:
        """Run the command and return its output.

        Raises:
            DiffFetchError: If the command cannot run or exits non-zero.
        """

        ctx.check()
        options = CommandOptions(cwd=self.cwd, timeout=ctx.remaining())
        try:
            completed = run_command(list(self.args), options=options)
        except (OSError, ValueError, SubprocessExecutionError) as exc:
            raise DiffFetchError(f"diff command {shlex.join(self.args)!r} failed: {exc}") from exc
        return FetchedDiff(raw=completed.stdout.encode("utf-8"), strip=self.strip)


@dataclass(slots=True)
class GitDiffSource(CommandDiffSource):
    """``git diff`` against a base revision (working tree when unset)."""

    args: Sequence[str] = field(default=("git", "diff"))

    @classmethod
    def against(cls, base: str | None = None, *, cwd: Path | None = None) -> GitDiffSource:
        """Return a source diffing the working tree against ``base``."""

        args = ("git", "diff", base) if base else ("git", "diff")
        return cls(args=args, cwd=cwd)


@dataclass(slots=True)
class FileDiffSource:
    """Read a diff from a file, or from standard input for ``-``."""

    path: Path | str = STDIN_MARKER
    strip: int = GIT_DIFF_STRIP

    def fetch(self, ctx: RunContext) -> FetchedDiff:
        """Read the diff.

        Raises:
            DiffFetchError: If the file cannot be read.
        """

        ctx.check()
        if str(self.path) == STDIN_MARKER:
            return FetchedDiff(raw=sys.stdin.buffer.read(), strip=self.strip)
        try:
            raw = Path(self.path).read_bytes()
        except OSError as exc:
            raise DiffFetchError(f"cannot read diff file {self.path}: {exc}") from exc
        return FetchedDiff(raw=raw, strip=self.strip)


@dataclass(slots=True)
class GitHubPullRequestDiffSource:
    """Download the unified diff of a pull request from the GitHub API."""

    client: GitHubClient
    number: int
    strip: int = GIT_DIFF_STRIP

    def fetch(self, ctx: RunContext) -> FetchedDiff:
        """Fetch the pull request diff.

        Raises:
            DiffFetchError: If the request fails.
        """

        try:
            response = self.client.request(ctx, "GET", f"pulls/{self.number}", accept=DIFF_MEDIA_TYPE)
        except GitHubAPIError as exc:
            raise DiffFetchError(f"cannot fetch diff of pull request #{self.number}: {exc}") from exc
        return FetchedDiff(raw=response.content, strip=self.strip)


__all__ = [
    "CommandDiffSource",
    "FileDiffSource",
    "GitDiffSource",
    "GitHubPullRequestDiffSource",
]
