# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Per-runner handling of diagnostics: level gate, diff filter, posting."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from threading import Lock

from ..config import Runner
from ..context import RunContext
from ..errors import PostError, RunCancelledError
from ..interfaces import CommentSink, DiagnosticFilter
from ..models import Diagnostic, ExecutionOutcome, RunnerReport
from ..severity import Severity


@dataclass(slots=True)
class PostFailureLog:
    """Thread-safe record of every failed post across runners."""

    _messages: list[str] = field(default_factory=list)
    _lock: Lock = field(default_factory=Lock)

    def record(self, message: str) -> None:
        with self._lock:
            self._messages.append(message)

    def snapshot(self) -> list[str]:
        with self._lock:
            return list(self._messages)


@dataclass(slots=True)
class RunnerPipeline:
    """Route one runner's diagnostics to the comment sink in parse order.

    A pipeline is owned by a single worker thread; only the failure log is
    shared between runners.
    """

    ctx: RunContext
    runner: Runner
    diff_filter: DiagnosticFilter
    sink: CommentSink
    failures: PostFailureLog
    debug: Callable[[str], None]
    posted: int = 0
    filtered_out: int = 0
    below_level: int = 0
    post_errors: int = 0
    worst_posted: Severity | None = None

    def __call__(self, diagnostic: Diagnostic) -> None:
        """Handle one diagnostic produced by the runner."""

        self.ctx.check()
        minimum = self.runner.min_level
        if minimum is not None and diagnostic.severity is not None and not diagnostic.severity.at_least(minimum):
            self.below_level += 1
            return
        filtered = self.diff_filter.check(diagnostic, runner=self.runner)
        if not self.diff_filter.in_scope(filtered, runner=self.runner):
            self.filtered_out += 1
            return
        try:
            self.sink.post(self.ctx, filtered)
        except RunCancelledError:
            raise
        except PostError as exc:
            self._record_failure(diagnostic, str(exc))
            return
        except Exception as exc:  # sinks may raise transport errors directly
            self._record_failure(diagnostic, f"{exc.__class__.__name__}: {exc}")
            return
        self.posted += 1
        effective = diagnostic.severity or Severity.ERROR
        if self.worst_posted is None or effective.rank > self.worst_posted.rank:
            self.worst_posted = effective

    @property
    def handled(self) -> int:
        """Return how many diagnostics the pipeline has received."""

        return self.posted + self.filtered_out + self.below_level + self.post_errors

    def _record_failure(self, diagnostic: Diagnostic, reason: str) -> None:
        self.post_errors += 1
        message = f"{self.runner.name}: {diagnostic.location()}: {reason}"
        self.debug(f"post failed {message}")
        self.failures.record(message)

    def report(self, outcome: ExecutionOutcome) -> RunnerReport:
        """Return the runner's report for ``outcome``."""

        return RunnerReport(
            runner=self.runner.name,
            outcome=outcome,
            posted=self.posted,
            filtered_out=self.filtered_out,
            below_level=self.below_level,
            post_errors=self.post_errors,
            worst_posted=self.worst_posted,
        )


__all__ = ["PostFailureLog", "RunnerPipeline"]
