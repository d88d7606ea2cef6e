# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Publish diagnostics as a single GitHub pull request review."""

from __future__ import annotations

from threading import Lock
from typing import Any, Final

from ..context import RunContext
from ..errors import PostError
from ..github_api import GitHubAPIError, GitHubClient
from ..models import FilteredDiagnostic
from .formatting import display_location, markdown_body

REVIEW_EVENT: Final[str] = "COMMENT"
REVIEW_HEADER: Final[str] = "lintreview"


class GitHubReviewSink:
    """Buffer inline comments and submit them as one review on :meth:`flush`.

    Diagnostics without a diff line (for example under the ``file`` or
    ``nofilter`` scopes) cannot be anchored inline and are listed in the
    review body instead.
    """

    def __init__(self, client: GitHubClient, number: int, *, commit_id: str | None = None) -> None:
        """Initialise the sink for pull request ``number``.

        Args:
            client: Repository client used for the review request.
            number: Pull request number.
            commit_id: Head commit the review applies to; GitHub uses the
                latest commit when omitted.
        """

        self._client = client
        self._number = number
        self._commit_id = commit_id
        self._lock = Lock()
        self._comments: list[dict[str, Any]] = []
        self._summary: list[str] = []

    @property
    def pending(self) -> int:
        """Return the number of buffered comments."""

        with self._lock:
            return len(self._comments) + len(self._summary)

    def post(self, ctx: RunContext, diagnostic: FilteredDiagnostic) -> None:
        ctx.check()
        if diagnostic.source_path is None:
            raise PostError(f"{diagnostic.diagnostic.location()}: diagnostic has no file to comment on")
        body = markdown_body(diagnostic.diagnostic)
        with self._lock:
            if diagnostic.diff_line is None:
                flat = " ".join(body.split())
                self._summary.append(f"- `{display_location(diagnostic)}` {flat}")
                return
            self._comments.append(
                {"path": diagnostic.source_path, "line": diagnostic.diff_line, "side": "RIGHT", "body": body},
            )

    def flush(self, ctx: RunContext) -> None:
        """Submit the buffered comments as one review.

        Raises:
            PostError: If GitHub rejects the review.
        """

        with self._lock:
            comments, self._comments = self._comments, []
            summary, self._summary = self._summary, []
        if not comments and not summary:
            return
        body_lines = [f"**{REVIEW_HEADER}** found {len(comments) + len(summary)} issue(s)."]
        if summary:
            body_lines.extend(["", *summary])
        payload: dict[str, Any] = {"event": REVIEW_EVENT, "body": "\n".join(body_lines), "comments": comments}
        if self._commit_id:
            payload["commit_id"] = self._commit_id
        try:
            self._client.request(ctx, "POST", f"pulls/{self._number}/reviews", json=payload)
        except GitHubAPIError as exc:
            raise PostError(f"cannot submit review for pull request #{self._number}: {exc}") from exc


__all__ = ["GitHubReviewSink"]
