# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the diff sources."""

from __future__ import annotations

from pathlib import Path

import pytest

from lintreview.context import RunContext
from lintreview.diff import CommandDiffSource, FileDiffSource, GitDiffSource, GitHubPullRequestDiffSource
from lintreview.errors import DiffFetchError
from lintreview.github_api import DIFF_MEDIA_TYPE, GitHubClient
from tests.helpers.fakes import SIMPLE_DIFF, FakeSession


def test_file_source_reads_bytes(ctx: RunContext, tmp_path: Path) -> None:
    path = tmp_path / "change.diff"
    path.write_bytes(SIMPLE_DIFF)

    fetched = FileDiffSource(path, strip=2).fetch(ctx)

    assert fetched.raw == SIMPLE_DIFF
    assert fetched.strip == 2


def test_file_source_missing_file(ctx: RunContext, tmp_path: Path) -> None:
    with pytest.raises(DiffFetchError, match="cannot read diff file"):
        FileDiffSource(tmp_path / "absent.diff").fetch(ctx)


def test_command_source_uses_stdout(ctx: RunContext, tmp_path: Path) -> None:
    (tmp_path / "change.diff").write_bytes(SIMPLE_DIFF)

    fetched = CommandDiffSource.from_command_line("cat change.diff", cwd=tmp_path).fetch(ctx)

    assert fetched.raw == SIMPLE_DIFF
    assert fetched.strip == 1


@pytest.mark.parametrize("cmd", ["false", "lintreview-no-such-diff-tool", "cat /nonexistent/lintreview.diff"])
def test_command_source_failures(ctx: RunContext, cmd: str) -> None:
    with pytest.raises(DiffFetchError, match="diff command"):
        CommandDiffSource.from_command_line(cmd).fetch(ctx)


def test_git_source_arguments() -> None:
    assert tuple(GitDiffSource().args) == ("git", "diff")
    assert tuple(GitDiffSource.against("origin/main").args) == ("git", "diff", "origin/main")
    assert GitDiffSource.against().strip == 1


def test_pull_request_source_requests_the_diff_media_type(ctx: RunContext) -> None:
    session = FakeSession(content=SIMPLE_DIFF)
    client = GitHubClient(repository="octo/demo", token="t", session=session)

    fetched = GitHubPullRequestDiffSource(client, 12).fetch(ctx)

    assert fetched.raw == SIMPLE_DIFF
    call = session.calls[0]
    assert call["method"] == "GET"
    assert call["url"] == "https://api.github.com/repos/octo/demo/pulls/12"
    assert call["headers"]["Accept"] == DIFF_MEDIA_TYPE


def test_pull_request_source_wraps_http_errors(ctx: RunContext) -> None:
    client = GitHubClient(repository="octo/demo", session=FakeSession(status=404))

    with pytest.raises(DiffFetchError, match="#12"):
        GitHubPullRequestDiffSource(client, 12).fetch(ctx)
