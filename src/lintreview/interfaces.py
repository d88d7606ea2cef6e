# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Collaborator contracts consumed by the review orchestrator."""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Callable, Iterable, Iterator, Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .config import Runner
    from .context import RunContext
    from .errorformat import Entry
    from .models import Diagnostic, ExecutionOutcome, FetchedDiff, FilteredDiagnostic

DiagnosticHandler = Callable[["Diagnostic"], None]


@runtime_checkable
class Matcher(Protocol):
    """Scan output lines and produce errorformat entries."""

    @abstractmethod
    def scan(self, lines: Iterable[str]) -> Iterator[Entry]:
        """Yield entries parsed from ``lines`` in order.

        Args:
            lines: Output lines of one stream.
        """
        raise NotImplementedError

    @abstractmethod
    def match(self, line: str) -> Entry | None:
        """Return the entry produced by a single ``line``, if any.

        Args:
            line: One output line.
        """
        raise NotImplementedError


@runtime_checkable
class FormatCompiler(Protocol):
    """Compile a list of errorformat patterns into a :class:`Matcher`."""

    def __call__(self, patterns: Sequence[str]) -> Matcher:
        """Return a matcher or raise ``ErrorformatError``.

        Args:
            patterns: Ordered errorformat patterns.
        """
        raise NotImplementedError


@runtime_checkable
class DiffSource(Protocol):
    """Retrieve the unified diff under review."""

    @abstractmethod
    def fetch(self, ctx: RunContext) -> FetchedDiff:
        """Return the raw diff and its path strip level.

        Args:
            ctx: Run context bounding the retrieval.
        """
        raise NotImplementedError


@runtime_checkable
class CommentSink(Protocol):
    """Post diagnostics as review comments. Must tolerate concurrent calls."""

    @abstractmethod
    def post(self, ctx: RunContext, diagnostic: FilteredDiagnostic) -> None:
        """Post ``diagnostic`` or raise ``PostError``.

        Args:
            ctx: Run context bounding the post.
            diagnostic: In-scope diagnostic to publish.
        """
        raise NotImplementedError


@runtime_checkable
class FlushableSink(Protocol):
    """Comment sink that batches posts until :meth:`flush` is called."""

    @abstractmethod
    def flush(self, ctx: RunContext) -> None:
        """Publish buffered comments.

        Args:
            ctx: Run context bounding the flush.
        """
        raise NotImplementedError


@runtime_checkable
class DiagnosticFilter(Protocol):
    """Correlate a diagnostic with the reviewed diff."""

    @abstractmethod
    def check(self, diagnostic: Diagnostic, *, runner: Runner) -> FilteredDiagnostic:
        """Return ``diagnostic`` annotated with its diff relationship.

        Args:
            diagnostic: Diagnostic produced by ``runner``.
            runner: Runner whose path and scope settings apply.
        """
        raise NotImplementedError

    @abstractmethod
    def in_scope(self, filtered: FilteredDiagnostic, *, runner: Runner) -> bool:
        """Return ``True`` when ``filtered`` should be posted.

        Args:
            filtered: Result of :meth:`check`.
            runner: Runner whose scope override applies.
        """
        raise NotImplementedError


@runtime_checkable
class RunnerExecutor(Protocol):
    """Execute one runner and stream its diagnostics to a handler."""

    @abstractmethod
    def execute(
        self,
        ctx: RunContext,
        runner: Runner,
        matcher: Matcher,
        env: Sequence[str],
        handler: DiagnosticHandler,
    ) -> ExecutionOutcome:
        """Run ``runner`` and return its tagged outcome.

        Args:
            ctx: Run context; cancellation terminates the process.
            runner: Runner definition to execute.
            matcher: Compiled errorformat for the runner's output.
            env: Sanitized ``KEY=VALUE`` environment entries.
            handler: Callback receiving diagnostics in parse order.
        """
        raise NotImplementedError


__all__ = [
    "CommentSink",
    "DiagnosticFilter",
    "DiagnosticHandler",
    "DiffSource",
    "FlushableSink",
    "FormatCompiler",
    "Matcher",
    "RunnerExecutor",
]
