# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Unified diff parsing, diff sources and diff-based filtering."""

from __future__ import annotations

from .filtering import DiffFilter, normalize_path
from .parser import DiffLine, FileDiff, Hunk, LineKind, parse_unified_diff, strip_path
from .sources import CommandDiffSource, FileDiffSource, GitDiffSource, GitHubPullRequestDiffSource

__all__ = [
    "CommandDiffSource",
    "DiffFilter",
    "DiffLine",
    "FileDiff",
    "FileDiffSource",
    "GitDiffSource",
    "GitHubPullRequestDiffSource",
    "Hunk",
    "LineKind",
    "normalize_path",
    "parse_unified_diff",
    "strip_path",
]
