# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Comment sinks that publish in-scope diagnostics."""

from __future__ import annotations

from .formatting import display_location, markdown_body, severity_color
from .github import GitHubReviewSink
from .local import LocalCommentSink

__all__ = [
    "GitHubReviewSink",
    "LocalCommentSink",
    "display_location",
    "markdown_body",
    "severity_color",
]
