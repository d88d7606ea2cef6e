# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Exception hierarchy shared by the review orchestrator."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import RunReport


class LintReviewError(RuntimeError):
    """Base class for failures that abort a review run."""


class ConfigError(LintReviewError):
    """Raised when configuration input is invalid."""


class ConfigurationError(LintReviewError):
    """Raised when a runner's output format cannot be compiled."""

    def __init__(self, runner: str, message: str, *, pattern: str | None = None) -> None:
        """Initialise the error with the offending runner and pattern.

        Args:
            runner: Name of the runner whose format failed to compile.
            message: Human-readable reason.
            pattern: Errorformat pattern that failed, when known.
        """

        detail = f"runner '{runner}': {message}"
        if pattern is not None:
            detail = f"{detail} (pattern {pattern!r})"
        super().__init__(detail)
        self.runner = runner
        self.pattern = pattern


class DiffFetchError(LintReviewError):
    """Raised when the diff under review cannot be retrieved."""


class PostError(LintReviewError):
    """Raised by comment sinks when a diagnostic cannot be posted."""


class PostFailedError(LintReviewError):
    """Aggregate of every post failure recorded during a run."""

    def __init__(self, failures: Sequence[str], report: RunReport) -> None:
        """Initialise the aggregate with the recorded failure messages.

        Args:
            failures: Messages describing each failed post.
            report: Report describing everything that did succeed.
        """

        count = len(failures)
        noun = "comment" if count == 1 else "comments"
        lines = [f"failed to post {count} {noun}"]
        lines.extend(f"  {failure}" for failure in failures)
        super().__init__("\n".join(lines))
        self.failures = tuple(failures)
        self.report = report


class RunCancelledError(LintReviewError):
    """Raised when the run context is cancelled or its deadline expires."""


__all__ = [
    "ConfigError",
    "ConfigurationError",
    "DiffFetchError",
    "LintReviewError",
    "PostError",
    "PostFailedError",
    "RunCancelledError",
]
