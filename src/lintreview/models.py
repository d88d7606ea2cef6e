# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Core data models shared across the lintreview package."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from .severity import FailLevel, Severity


class Diagnostic(BaseModel):
    """Structured finding extracted from a runner's raw output."""

    model_config = ConfigDict(frozen=True)

    file: str | None = None
    line: int | None = None
    column: int | None = None
    end_line: int | None = None
    end_column: int | None = None
    severity: Severity | None = None
    message: str
    code: str | None = None
    tool: str
    raw_lines: tuple[str, ...] = Field(default_factory=tuple)

    def location(self) -> str:
        """Return a ``file:line:column`` representation of the position."""

        parts = [self.file or "<unknown>"]
        if self.line is not None:
            parts.append(str(self.line))
            if self.column is not None:
                parts.append(str(self.column))
        return ":".join(parts)


class FilteredDiagnostic(BaseModel):
    """Diagnostic annotated with its relationship to the reviewed diff."""

    model_config = ConfigDict(frozen=True)

    diagnostic: Diagnostic
    source_path: str | None = None
    in_diff: bool = False
    in_diff_file: bool = False
    diff_line: int | None = None


class FetchedDiff(BaseModel):
    """Raw unified diff plus the number of path components to strip."""

    model_config = ConfigDict(frozen=True)

    raw: bytes = b""
    strip: int = 0


class ExecutionStatus(str, Enum):
    """Tag describing how a runner's process execution ended."""

    OK = "ok"
    FAILED = "failed"


class ExecutionOutcome(BaseModel):
    """Tagged result produced by a runner executor.

    ``FAILED`` outcomes are recorded and logged but never fail the run; the
    orchestrator inspects :attr:`status` instead of catching exceptions.
    """

    model_config = ConfigDict(frozen=True)

    runner: str
    status: ExecutionStatus
    returncode: int | None = None
    diagnostics: int = 0
    reason: str | None = None

    @classmethod
    def succeeded(cls, runner: str, *, returncode: int, diagnostics: int) -> ExecutionOutcome:
        """Build an ``OK`` outcome for ``runner``."""

        return cls(runner=runner, status=ExecutionStatus.OK, returncode=returncode, diagnostics=diagnostics)

    @classmethod
    def failed(
        cls,
        runner: str,
        reason: str,
        *,
        returncode: int | None = None,
        diagnostics: int = 0,
    ) -> ExecutionOutcome:
        """Build a ``FAILED`` outcome for ``runner`` carrying ``reason``."""

        return cls(
            runner=runner,
            status=ExecutionStatus.FAILED,
            returncode=returncode,
            diagnostics=diagnostics,
            reason=reason,
        )

    @property
    def ok(self) -> bool:
        """Return ``True`` when the process ran to completion."""

        return self.status is ExecutionStatus.OK


class RunnerReport(BaseModel):
    """Per-runner summary of execution, filtering and posting."""

    model_config = ConfigDict(validate_assignment=True)

    runner: str
    outcome: ExecutionOutcome
    posted: int = 0
    filtered_out: int = 0
    below_level: int = 0
    post_errors: int = 0
    worst_posted: Severity | None = None


class RunReport(BaseModel):
    """Aggregate result for a full review run."""

    model_config = ConfigDict(validate_assignment=True)

    runners: list[RunnerReport] = Field(default_factory=list)
    post_failures: list[str] = Field(default_factory=list)
    diff_fetched: bool = False

    @property
    def posted(self) -> int:
        """Return the number of diagnostics posted across all runners."""

        return sum(report.posted for report in self.runners)

    @property
    def failed_runners(self) -> list[str]:
        """Return names of runners whose process could not be executed."""

        return [report.runner for report in self.runners if not report.outcome.ok]

    def has_findings(self, level: FailLevel) -> bool:
        """Return ``True`` when a posted diagnostic meets ``level``.

        Diagnostics without a severity count as errors, matching how most
        linters treat untyped output.

        Args:
            level: Fail level requested by the caller.

        Returns:
            bool: ``True`` when the run should be reported as failing.
        """

        threshold = level.threshold()
        if threshold is None:
            return False
        for report in self.runners:
            if report.posted and (report.worst_posted or Severity.ERROR).at_least(threshold):
                return True
        return False


__all__ = [
    "Diagnostic",
    "ExecutionOutcome",
    "ExecutionStatus",
    "FetchedDiff",
    "FilteredDiagnostic",
    "RunReport",
    "RunnerReport",
]
